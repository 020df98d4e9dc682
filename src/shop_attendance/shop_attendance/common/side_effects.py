from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BestEffortRunner:
    """Fire-and-forget runner for writes that must never fail the primary action.

    Audit notifications and place-name lookups go through here. Each task is
    retried a bounded number of times; the final failure is logged and dropped.
    Without an executor tasks run inline (used by tests and scripts).
    """

    def __init__(self, executor: Optional[Executor] = None, *, retries: int = 1):
        self._executor = executor
        self._retries = max(int(retries), 0)

    def submit(self, fn: Callable[..., Any], *args: Any, description: str = "side effect", **kwargs: Any) -> None:
        if self._executor is None:
            self._run(fn, args, kwargs, description)
            return
        try:
            self._executor.submit(self._run, fn, args, kwargs, description)
        except RuntimeError:
            # executor already shut down (app teardown)
            logger.warning("Dropped %s: executor is shut down", description)

    def _run(self, fn: Callable[..., Any], args: tuple, kwargs: dict, description: str) -> None:
        for attempt in range(1, self._retries + 2):
            try:
                fn(*args, **kwargs)
                return
            except Exception:
                logger.warning("%s failed (attempt %d)", description, attempt, exc_info=True)
        logger.error("Giving up on %s after %d attempts", description, self._retries + 1)


def run_with_timeout(fn: Callable[[], T], timeout_seconds: float, *, default: T) -> T:
    """Run ``fn`` in a worker thread and return ``default`` if it is too slow or fails."""

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        logger.warning("Timed out after %.1fs waiting for %s", timeout_seconds, getattr(fn, "__name__", fn))
        return default
    except Exception:
        logger.warning("Call to %s failed", getattr(fn, "__name__", fn), exc_info=True)
        return default
    finally:
        executor.shutdown(wait=False)
