"""Cancellation tokens and fixed-interval retry for background pipelines."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from listdetail.config import REFRESH_RETRY_INTERVAL_SEC

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class CancelledError(Exception):
    """Raised inside a pipeline whose token was cancelled."""


class CancellationToken:
    """One-shot cancellation flag shared by a pipeline and its owner."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Suspend for *timeout* seconds; return ``True`` if cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError()


def _wait_on_token(token: CancellationToken, seconds: float) -> bool:
    return token.wait(seconds)


@dataclass(frozen=True)
class RetryPolicy:
    """Re-run an operation after a fixed delay until it succeeds.

    ``max_attempts=None`` retries forever. ``waiter`` performs the delay and
    reports whether the token was cancelled during it; tests substitute one
    that records the delay instead of sleeping.
    """

    interval: float = REFRESH_RETRY_INTERVAL_SEC
    max_attempts: Optional[int] = None
    waiter: Callable[[CancellationToken, float], bool] = _wait_on_token

    def run(
        self,
        operation: Callable[[], T],
        token: CancellationToken,
        *,
        on_failure: Optional[Callable[[int, Exception], None]] = None,
    ) -> T:
        attempt = 0
        while True:
            token.raise_if_cancelled()
            attempt += 1
            try:
                return operation()
            except CancelledError:
                raise
            except Exception as exc:
                if on_failure is not None:
                    on_failure(attempt, exc)
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    raise
                LOGGER.debug("Attempt %d failed, retrying in %.2fs", attempt, self.interval)
                if self.waiter(token, self.interval):
                    raise CancelledError() from exc
