"""Prometheus collector that turns a fresh Marathon snapshot into metric families."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any

from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from marathon_exporter.errors import MarathonError
from marathon_exporter.marathon.client import MarathonClient
from marathon_exporter.marathon.models import App, Deployment, MarathonInfo, QueueItem, Task
from marathon_exporter.metrics.schema import SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 15.0


class Category(str, Enum):
    """Independently fetched slices of Marathon state."""

    INFO = "info"
    APPS = "apps"
    TASKS = "tasks"
    DEPLOYMENTS = "deployments"
    QUEUE = "queue"


@dataclass(frozen=True)
class CategoryResult:
    """Outcome of fetching one category: its entities, or the reason it failed."""

    category: Category
    items: Sequence[Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, category: Category, error: str) -> CategoryResult:
        return cls(category=category, items=None, error=error)


def _families(*keys: str) -> dict[str, Metric]:
    return {key: SCHEMA[key].family() for key in keys}


def _info_metrics(infos: Iterable[MarathonInfo]) -> list[Metric]:
    families = _families("info", "leader_elected")
    for info in infos:
        SCHEMA["info"].add(families["info"], {"name": info.name, "version": info.version}, 1)
        SCHEMA["leader_elected"].add(families["leader_elected"], {}, 1 if info.elected else 0)
    return list(families.values())


def _app_metrics(apps: Iterable[App]) -> list[Metric]:
    families = _families(
        "app_instances",
        "app_tasks_running",
        "app_tasks_staged",
        "app_tasks_healthy",
        "app_tasks_unhealthy",
        "app_cpus",
        "app_memory",
        "app_disk",
    )
    for app in apps:
        if not app.id:
            logger.debug("Skipping app without id")
            continue
        labels = {"app": app.id}
        values = {
            "app_instances": app.instances,
            "app_tasks_running": app.tasks_running,
            "app_tasks_staged": app.tasks_staged,
            "app_tasks_healthy": app.tasks_healthy,
            "app_tasks_unhealthy": app.tasks_unhealthy,
            "app_cpus": app.cpus,
            "app_memory": app.mem,
            "app_disk": app.disk,
        }
        for key, value in values.items():
            SCHEMA[key].add(families[key], labels, value)
    return list(families.values())


def _task_metrics(tasks: Iterable[Task]) -> list[Metric]:
    families = _families("task_info")
    for task in tasks:
        if not task.id or not task.app_id:
            logger.debug("Skipping task with missing id or app id: %r", task.id)
            continue
        labels = {"app": task.app_id, "task": task.id, "state": task.resolved_state}
        SCHEMA["task_info"].add(families["task_info"], labels, 1)
    return list(families.values())


def _deployment_metrics(deployments: Iterable[Deployment]) -> list[Metric]:
    families = _families("deployment_info", "deployment_current_step", "deployment_total_steps")
    for d in deployments:
        if not d.id:
            logger.debug("Skipping deployment without id")
            continue
        labels = {"deployment": d.id}
        SCHEMA["deployment_info"].add(families["deployment_info"], labels, 1)
        SCHEMA["deployment_current_step"].add(families["deployment_current_step"], labels, d.current_step)
        SCHEMA["deployment_total_steps"].add(families["deployment_total_steps"], labels, d.total_steps)
    return list(families.values())


def _queue_metrics(queue: Iterable[QueueItem]) -> list[Metric]:
    families = _families("queue_instances", "queue_delay_overdue", "queue_processed_offers", "queue_size")
    total = 0
    for item in queue:
        run_spec_id = item.run_spec_id
        if not run_spec_id:
            logger.debug("Skipping queue entry without app or pod id")
            continue
        labels = {"app": run_spec_id}
        total += item.count
        SCHEMA["queue_instances"].add(families["queue_instances"], labels, item.count)
        SCHEMA["queue_delay_overdue"].add(families["queue_delay_overdue"], labels, 1 if item.delay.overdue else 0)
        SCHEMA["queue_processed_offers"].add(
            families["queue_processed_offers"], labels, item.processed_offers_summary.processed_offers_count
        )
    SCHEMA["queue_size"].add(families["queue_size"], {}, total)
    return list(families.values())


_BUILDERS: dict[Category, Callable[[Any], list[Metric]]] = {
    Category.INFO: _info_metrics,
    Category.APPS: _app_metrics,
    Category.TASKS: _task_metrics,
    Category.DEPLOYMENTS: _deployment_metrics,
    Category.QUEUE: _queue_metrics,
}


class MarathonCollector(Collector):
    """Fetches Marathon state on every scrape and yields it as metric families.

    Holds no state between scrapes besides the client, so overlapping scrapes
    each work on their own snapshot. A category that fails to load is reported
    through ``marathon_scrape_error`` and its families are left out; the rest of
    the scrape is unaffected.
    """

    def __init__(self, client: MarathonClient, fetch_timeout: float = DEFAULT_FETCH_TIMEOUT) -> None:
        self._client = client
        self.fetch_timeout = fetch_timeout

    def _fetchers(self) -> dict[Category, Callable[[], Sequence[Any]]]:
        return {
            Category.INFO: lambda: [self._client.info()],
            Category.APPS: self._client.list_applications,
            Category.TASKS: self._client.list_tasks,
            Category.DEPLOYMENTS: self._client.list_deployments,
            Category.QUEUE: self._client.list_queue,
        }

    def fetch_all(self) -> list[CategoryResult]:
        """Fetch every category in parallel; never raises.

        Fetches still running when ``fetch_timeout`` expires are abandoned and
        reported as failed. Results come back in ``Category`` order.
        """
        fetchers = self._fetchers()
        executor = ThreadPoolExecutor(max_workers=len(fetchers), thread_name_prefix="marathon-fetch")
        try:
            futures = {category: executor.submit(fetch) for category, fetch in fetchers.items()}
            done, _ = wait(futures.values(), timeout=self.fetch_timeout)
            results: list[CategoryResult] = []
            for category, future in futures.items():
                if future not in done:
                    future.cancel()
                    results.append(CategoryResult.failed(category, f"timed out after {self.fetch_timeout}s"))
                    continue
                try:
                    results.append(CategoryResult(category=category, items=future.result()))
                except MarathonError as e:
                    results.append(CategoryResult.failed(category, str(e)))
                except Exception as e:
                    logger.exception("Unexpected error fetching %s", category.value)
                    results.append(CategoryResult.failed(category, repr(e)))
        finally:
            # Do not block the scrape on abandoned requests; the client timeout ends them
            executor.shutdown(wait=False, cancel_futures=True)

        for result in results:
            if not result.ok:
                logger.warning("Failed to fetch Marathon %s: %s", result.category.value, result.error)
        return results

    def collect(self) -> Iterator[Metric]:
        """Collect metrics for one Prometheus scrape."""
        start = time.monotonic()
        results = self.fetch_all()

        for result in results:
            if result.ok:
                yield from _BUILDERS[result.category](result.items or [])

        scrape_error = SCHEMA["scrape_error"].family()
        for result in results:
            SCHEMA["scrape_error"].add(scrape_error, {"category": result.category.value}, 0 if result.ok else 1)
        yield scrape_error

        success = SCHEMA["last_scrape_success"].family()
        SCHEMA["last_scrape_success"].add(success, {}, 1 if all(r.ok for r in results) else 0)
        yield success

        duration = SCHEMA["last_scrape_duration"].family()
        SCHEMA["last_scrape_duration"].add(duration, {}, time.monotonic() - start)
        yield duration

    def describe(self) -> list[Metric]:
        # Registration must not trigger a Marathon round-trip
        return []
