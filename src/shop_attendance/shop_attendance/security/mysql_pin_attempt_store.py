from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .attempt_store import PinAttemptState, PinAttemptStore


class MySQLPinAttemptStore(PinAttemptStore):
    """Shared store; counters survive restarts and are seen by every instance."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, identifier: str) -> Optional[PinAttemptState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT identifier, attempts, lockout_until FROM pin_attempts WHERE identifier=%s",
                (identifier,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PinAttemptState(r["identifier"], int(r["attempts"]), r.get("lockout_until"))

    def increment(self, identifier: str) -> PinAttemptState:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pin_attempts(identifier, attempts)
                VALUES(%s, 1)
                ON DUPLICATE KEY UPDATE attempts = attempts + 1
                """,
                (identifier,),
            )
            cur.execute(
                "SELECT identifier, attempts, lockout_until FROM pin_attempts WHERE identifier=%s",
                (identifier,),
            )
            r = fetchone(cur)
            return PinAttemptState(r["identifier"], int(r["attempts"]), r.get("lockout_until"))

    def set_lockout(self, identifier: str, lockout_until: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pin_attempts(identifier, attempts, lockout_until)
                VALUES(%s, 0, %s)
                ON DUPLICATE KEY UPDATE lockout_until = VALUES(lockout_until)
                """,
                (identifier, lockout_until),
            )

    def clear(self, identifier: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pin_attempts WHERE identifier=%s", (identifier,))
