"""Marathon API access: client and typed state models."""

from marathon_exporter.marathon.client import MarathonClient
from marathon_exporter.marathon.models import (
    App,
    Deployment,
    MarathonInfo,
    QueueItem,
    Task,
)

__all__ = [
    "App",
    "Deployment",
    "MarathonClient",
    "MarathonInfo",
    "QueueItem",
    "Task",
]
