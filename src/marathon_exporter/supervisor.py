"""Block startup until Marathon answers."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from marathon_exporter.errors import MarathonError
from marathon_exporter.marathon.client import MarathonClient
from marathon_exporter.marathon.models import MarathonInfo

logger = logging.getLogger(__name__)

DEFAULT_RETRY_INTERVAL = 10.0


@dataclass
class ReachabilityResult:
    """Outcome of the startup connection loop."""

    info: MarathonInfo | None
    attempts: int
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.info is not None


def ensure_reachable(
    client: MarathonClient,
    retry_interval: float = DEFAULT_RETRY_INTERVAL,
    max_attempts: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ReachabilityResult:
    """
    Call /v2/info until it succeeds, sleeping a fixed interval between attempts.
    With max_attempts unset this retries forever; otherwise gives up after that many tries.
    No jitter is applied between attempts.
    """
    attempts = 0

    def _before(retry_state: RetryCallState) -> None:
        nonlocal attempts
        attempts = retry_state.attempt_number
        logger.debug("Connecting to Marathon at %s (attempt %d)", client.base_url, retry_state.attempt_number)

    def _before_sleep(retry_state: RetryCallState) -> None:
        logger.debug("Problem connecting to Marathon: %s", retry_state.outcome.exception())
        logger.info("Couldn't connect to Marathon! Trying again in %ss", retry_interval)

    retrying = Retrying(
        stop=stop_never if max_attempts is None else stop_after_attempt(max_attempts),
        wait=wait_fixed(retry_interval),
        retry=retry_if_exception_type(MarathonError),
        before=_before,
        before_sleep=_before_sleep,
        sleep=sleep,
    )
    try:
        info = retrying(client.info)
    except RetryError as e:
        last = e.last_attempt
        logger.debug("Problem connecting to Marathon: %s", last.exception())
        return ReachabilityResult(info=None, attempts=last.attempt_number, error=str(last.exception()))

    logger.info("Connected to Marathon! Name=%s, Version=%s", info.name, info.version)
    return ReachabilityResult(info=info, attempts=attempts)
