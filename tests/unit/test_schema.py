"""Unit tests for the metric descriptor registry."""

import dataclasses

import pytest

from marathon_exporter.metrics.schema import SCHEMA, MetricDescriptor, MetricKind


class TestSchema:
    def test_names_are_unique_and_namespaced(self):
        names = [d.name for d in SCHEMA.values()]
        assert len(names) == len(set(names))
        assert all(name.startswith("marathon_") for name in names)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            SCHEMA["new"] = MetricDescriptor("marathon_new", "new")  # type: ignore[index]

    def test_descriptor_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SCHEMA["app_cpus"].name = "other"  # type: ignore[misc]

    def test_counter_descriptors_do_not_carry_total_suffix(self):
        for descriptor in SCHEMA.values():
            if descriptor.kind is MetricKind.COUNTER:
                assert not descriptor.name.endswith("_total")


class TestMetricDescriptor:
    def test_add_orders_label_values_by_declaration(self):
        descriptor = MetricDescriptor("marathon_x", "x", label_keys=("app", "task", "state"))
        family = descriptor.family()
        descriptor.add(family, {"state": "TASK_RUNNING", "task": "t1", "app": "/a"}, 1)
        sample = family.samples[0]
        assert sample.labels == {"app": "/a", "task": "t1", "state": "TASK_RUNNING"}
        assert sample.value == 1

    def test_gauge_family(self):
        family = SCHEMA["app_instances"].family()
        assert family.type == "gauge"
        assert family.name == "marathon_app_instances"

    def test_counter_family_exposes_total_sample(self):
        descriptor = SCHEMA["queue_processed_offers"]
        family = descriptor.family()
        descriptor.add(family, {"app": "/a"}, 12)
        assert family.type == "counter"
        assert [s.name for s in family.samples] == ["marathon_queue_processed_offers_total"]

    @pytest.mark.parametrize(
        "labels",
        [{}, {"app": "/a", "extra": "x"}, {"application": "/a"}],
    )
    def test_rejects_labels_not_matching_declaration(self, labels):
        descriptor = SCHEMA["app_cpus"]
        with pytest.raises(ValueError, match="do not match"):
            descriptor.add(descriptor.family(), labels, 1)

    def test_rejects_empty_identifying_label(self):
        descriptor = SCHEMA["task_info"]
        with pytest.raises(ValueError, match="'task'"):
            descriptor.add(descriptor.family(), {"app": "/a", "task": "", "state": "TASK_RUNNING"}, 1)

    def test_allows_empty_descriptive_label(self):
        descriptor = SCHEMA["info"]
        family = descriptor.family()
        descriptor.add(family, {"name": "marathon", "version": ""}, 1)
        assert family.samples[0].labels["version"] == ""
