"""Registry of every metric the exporter publishes.

Each exported fact is one ``MetricDescriptor``: name, help text, kind and the
exact label keys its samples carry. The registry is built at import time and
exposed read-only, so scrapes running in parallel share it without locking.
Exporting a new fact means adding a descriptor here and emitting it from the
collector.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric

NAMESPACE = "marathon"

# Labels that name an entity; an empty value would collapse distinct series
IDENTIFYING_LABELS = frozenset({"app", "task", "deployment"})


class MetricKind(str, Enum):
    """Prometheus metric types used by the exporter."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Immutable schema for one metric family."""

    name: str
    help: str
    kind: MetricKind = MetricKind.GAUGE
    label_keys: tuple[str, ...] = ()

    def family(self) -> Metric:
        """Return an empty metric family ready for samples."""
        if self.kind is MetricKind.COUNTER:
            return CounterMetricFamily(self.name, self.help, labels=list(self.label_keys))
        return GaugeMetricFamily(self.name, self.help, labels=list(self.label_keys))

    def add(self, family: Metric, labels: Mapping[str, str], value: float) -> None:
        """Append one sample to ``family`` after checking its labels against the schema.

        Raises ValueError when the label keys differ from ``label_keys`` or an
        identifying label is empty.
        """
        if set(labels) != set(self.label_keys) or len(labels) != len(self.label_keys):
            raise ValueError(
                f"{self.name}: labels {sorted(labels)} do not match declared {list(self.label_keys)}"
            )
        for key in self.label_keys:
            if key in IDENTIFYING_LABELS and not labels[key]:
                raise ValueError(f"{self.name}: identifying label {key!r} is empty")
        family.add_metric([labels[key] for key in self.label_keys], value)


def _gauge(suffix: str, help_text: str, *label_keys: str) -> MetricDescriptor:
    return MetricDescriptor(f"{NAMESPACE}_{suffix}", help_text, MetricKind.GAUGE, label_keys)


def _counter(suffix: str, help_text: str, *label_keys: str) -> MetricDescriptor:
    return MetricDescriptor(f"{NAMESPACE}_{suffix}", help_text, MetricKind.COUNTER, label_keys)


SCHEMA: Mapping[str, MetricDescriptor] = MappingProxyType(
    {
        # Framework / cluster info
        "info": _gauge("info", "Marathon framework name and version, always 1", "name", "version"),
        "leader_elected": _gauge("leader_elected", "1 if the queried Marathon instance reports an elected leader"),
        # Applications
        "app_instances": _gauge("app_instances", "Number of instances the app is configured to run", "app"),
        "app_tasks_running": _gauge("app_tasks_running", "Number of running tasks of the app", "app"),
        "app_tasks_staged": _gauge("app_tasks_staged", "Number of staged tasks of the app", "app"),
        "app_tasks_healthy": _gauge("app_tasks_healthy", "Number of tasks passing health checks", "app"),
        "app_tasks_unhealthy": _gauge("app_tasks_unhealthy", "Number of tasks failing health checks", "app"),
        "app_cpus": _gauge("app_cpus", "CPU shares requested per instance", "app"),
        "app_memory": _gauge("app_memory_megabytes", "Memory requested per instance in MB", "app"),
        "app_disk": _gauge("app_disk_megabytes", "Disk requested per instance in MB", "app"),
        # Tasks
        "task_info": _gauge("task_info", "Task known to Marathon, always 1", "app", "task", "state"),
        # Deployments
        "deployment_info": _gauge("deployment_info", "Active deployment, always 1", "deployment"),
        "deployment_current_step": _gauge(
            "deployment_current_step", "Step the deployment is currently executing", "deployment"
        ),
        "deployment_total_steps": _gauge("deployment_total_steps", "Total steps of the deployment plan", "deployment"),
        # Launch queue
        "queue_instances": _gauge("queue_instances", "Instances of the app waiting in the launch queue", "app"),
        "queue_delay_overdue": _gauge(
            "queue_delay_overdue", "1 if the app's launch backoff delay is overdue", "app"
        ),
        "queue_processed_offers": _counter(
            "queue_processed_offers", "Mesos offers processed for the queued app", "app"
        ),
        "queue_size": _gauge("queue_size", "Total instances waiting in the launch queue"),
        # Scrape bookkeeping
        "scrape_error": _gauge(
            "scrape_error", "1 if fetching the state category failed during the last scrape", "category"
        ),
        "last_scrape_success": _gauge(
            "last_scrape_success", "1 if every state category was fetched during the last scrape"
        ),
        "last_scrape_duration": _gauge(
            "last_scrape_duration_seconds", "Wall-clock duration of the last scrape in seconds"
        ),
    }
)
