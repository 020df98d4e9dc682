from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Protocol


@dataclass(frozen=True)
class PinAttemptState:
    identifier: str
    attempts: int = 0
    lockout_until: Optional[datetime] = None


class PinAttemptStore(Protocol):
    """Keyed failure counters behind the PIN guard.

    ``increment`` must be atomic per identifier so concurrent failures are
    all counted.
    """

    def get(self, identifier: str) -> Optional[PinAttemptState]:
        raise NotImplementedError

    def increment(self, identifier: str) -> PinAttemptState:
        raise NotImplementedError

    def set_lockout(self, identifier: str, lockout_until: datetime) -> None:
        raise NotImplementedError

    def clear(self, identifier: str) -> None:
        raise NotImplementedError


class InMemoryPinAttemptStore(PinAttemptStore):
    """Process-local store.

    Counters are lost on restart and not shared between worker processes;
    use ``MySQLPinAttemptStore`` when running more than one instance.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._states: Dict[str, PinAttemptState] = {}

    def get(self, identifier: str) -> Optional[PinAttemptState]:
        with self._lock:
            return self._states.get(identifier)

    def increment(self, identifier: str) -> PinAttemptState:
        with self._lock:
            current = self._states.get(identifier) or PinAttemptState(identifier)
            updated = PinAttemptState(identifier, current.attempts + 1, current.lockout_until)
            self._states[identifier] = updated
            return updated

    def set_lockout(self, identifier: str, lockout_until: datetime) -> None:
        with self._lock:
            current = self._states.get(identifier) or PinAttemptState(identifier)
            self._states[identifier] = PinAttemptState(identifier, current.attempts, lockout_until)

    def clear(self, identifier: str) -> None:
        with self._lock:
            self._states.pop(identifier, None)
