"""Exception types raised by the exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter errors."""


class StartupConfigError(ExporterError):
    """Flags, environment or URI could not be turned into valid settings."""


class ListenerBindError(ExporterError):
    """The HTTP listener could not bind to its address."""


class MarathonError(ExporterError):
    """A request to the Marathon API failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MarathonConnectionError(MarathonError):
    """Transport failure: refused connection, DNS, TLS or timeout."""


class MarathonAPIError(MarathonError):
    """Marathon answered with a non-2xx status."""

    def __init__(self, message: str, path: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, path)
        self.status_code = status_code


class MarathonDecodeError(MarathonError):
    """Response body was not the JSON shape we expected."""
