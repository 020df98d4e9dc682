from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import MAX_PIN_ATTEMPTS, PIN_LOCKOUT
from .attempt_store import PinAttemptState, PinAttemptStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PinAttemptOutcome:
    success: bool
    locked_out: bool = False
    remaining_attempts: int = MAX_PIN_ATTEMPTS
    lockout_minutes: Optional[int] = None
    just_locked: bool = False


class PinSecurityGuard:
    """Counts failed PIN attempts per identifier and locks the identifier out.

    The fifth consecutive failure starts a 15 minute lockout. Expired lockouts
    are evicted lazily on the next read. A success resets the counter.
    """

    def __init__(
        self,
        store: PinAttemptStore,
        *,
        clock: Callable[[], datetime] = now_local,
        max_attempts: int = MAX_PIN_ATTEMPTS,
        lockout: timedelta = PIN_LOCKOUT,
    ):
        self._store = store
        self._clock = clock
        self._max_attempts = int(max_attempts)
        self._lockout = lockout

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _active_state(self, identifier: str) -> Optional[PinAttemptState]:
        state = self._store.get(identifier)
        if state and state.lockout_until and self._clock() >= state.lockout_until:
            self._store.clear(identifier)
            return None
        return state

    def is_locked_out(self, identifier: str) -> bool:
        state = self._active_state(identifier)
        return bool(state and state.lockout_until)

    def lockout_minutes_remaining(self, identifier: str) -> Optional[int]:
        state = self._active_state(identifier)
        if not state or not state.lockout_until:
            return None
        remaining = (state.lockout_until - self._clock()).total_seconds()
        return max(1, math.ceil(remaining / 60))

    def remaining_attempts(self, identifier: str) -> int:
        state = self._active_state(identifier)
        if not state:
            return self._max_attempts
        if state.lockout_until:
            return 0
        return max(self._max_attempts - state.attempts, 0)

    def record_failed_attempt(self, identifier: str) -> int:
        """Count a failure and return the attempts left (0 once locked out)."""

        self._active_state(identifier)
        state = self._store.increment(identifier)
        if state.attempts >= self._max_attempts:
            self._store.set_lockout(identifier, self._clock() + self._lockout)
            logger.warning("PIN identifier %s locked out after %d failed attempts", identifier, state.attempts)
            return 0
        return self._max_attempts - state.attempts

    def record_successful_attempt(self, identifier: str) -> None:
        self._store.clear(identifier)

    def attempt(self, identifier: str, verifier: Callable[[], bool]) -> PinAttemptOutcome:
        """Run ``verifier`` unless locked out and account for the result."""

        if self.is_locked_out(identifier):
            return PinAttemptOutcome(
                success=False,
                locked_out=True,
                remaining_attempts=0,
                lockout_minutes=self.lockout_minutes_remaining(identifier),
            )

        if verifier():
            self.record_successful_attempt(identifier)
            return PinAttemptOutcome(success=True)

        remaining = self.record_failed_attempt(identifier)
        if remaining == 0:
            return PinAttemptOutcome(
                success=False,
                locked_out=True,
                remaining_attempts=0,
                lockout_minutes=self.lockout_minutes_remaining(identifier),
                just_locked=True,
            )
        return PinAttemptOutcome(success=False, remaining_attempts=remaining)
