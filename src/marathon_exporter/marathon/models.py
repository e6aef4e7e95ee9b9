"""Structured models for Marathon state returned by the REST v2 API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MarathonModel(BaseModel):
    """Base model: accept Marathon's camelCase keys and ignore fields we do not export."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MarathonInfo(MarathonModel):
    """Cluster identity from /v2/info."""

    name: str = ""
    version: str = ""
    framework_id: str | None = Field(default=None, alias="frameworkId")
    leader: str | None = None
    elected: bool = False


class App(MarathonModel):
    """Application definition with task counts (embed=apps.counts)."""

    id: str
    version: str | None = None
    instances: int = 0
    cpus: float = 0.0
    mem: float = 0.0
    disk: float = 0.0
    tasks_running: int = Field(default=0, alias="tasksRunning")
    tasks_staged: int = Field(default=0, alias="tasksStaged")
    tasks_healthy: int = Field(default=0, alias="tasksHealthy")
    tasks_unhealthy: int = Field(default=0, alias="tasksUnhealthy")


class Task(MarathonModel):
    """A launched task of an application."""

    id: str
    app_id: str = Field(default="", alias="appId")
    host: str | None = None
    state: str | None = None
    staged_at: datetime | None = Field(default=None, alias="stagedAt")
    started_at: datetime | None = Field(default=None, alias="startedAt")

    @property
    def resolved_state(self) -> str:
        """Mesos task state; inferred from timestamps when Marathon omits it (pre 1.4)."""
        if self.state:
            return self.state
        if self.started_at is not None:
            return "TASK_RUNNING"
        if self.staged_at is not None:
            return "TASK_STAGING"
        return "TASK_UNKNOWN"


class Deployment(MarathonModel):
    """An in-flight deployment plan."""

    id: str
    version: str | None = None
    affected_apps: list[str] = Field(default_factory=list, alias="affectedApps")
    current_step: int = Field(default=0, alias="currentStep")
    total_steps: int = Field(default=0, alias="totalSteps")


class QueueRunSpec(MarathonModel):
    """The app (or pod) a queue entry is waiting to launch."""

    id: str = ""


class QueueDelay(MarathonModel):
    """Launch backoff state of a queue entry."""

    overdue: bool = False
    time_left_seconds: float = Field(default=0.0, alias="timeLeftSeconds")


class ProcessedOffersSummary(MarathonModel):
    """Offer matching statistics for a queue entry (Marathon 1.5+)."""

    processed_offers_count: int = Field(default=0, alias="processedOffersCount")
    unused_offers_count: int = Field(default=0, alias="unusedOffersCount")


class QueueItem(MarathonModel):
    """One entry of the launch queue: instances of a run spec waiting for offers."""

    count: int = 0
    app: QueueRunSpec | None = None
    pod: QueueRunSpec | None = None
    delay: QueueDelay = Field(default_factory=QueueDelay)
    processed_offers_summary: ProcessedOffersSummary = Field(
        default_factory=ProcessedOffersSummary,
        alias="processedOffersSummary",
    )

    @property
    def run_spec_id(self) -> str:
        """Id of the queued app or pod; empty if Marathon sent neither."""
        if self.app is not None and self.app.id:
            return self.app.id
        if self.pod is not None:
            return self.pod.id
        return ""
