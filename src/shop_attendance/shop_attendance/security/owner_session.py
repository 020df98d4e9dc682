from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, MutableMapping

from ..common.datetime_utils import now_local
from ..core.constants import OWNER_UNLOCK_DURATION


class OwnerSession:
    """Per-shop "owner console unlocked" flag kept in a session mapping.

    In the web app the mapping is ``flask.session``. The unlock expires after
    30 minutes and must then be re-earned with the owner PIN.
    """

    def __init__(
        self,
        session: MutableMapping,
        *,
        clock: Callable[[], datetime] = now_local,
        duration: timedelta = OWNER_UNLOCK_DURATION,
    ):
        self._session = session
        self._clock = clock
        self._duration = duration

    @staticmethod
    def _keys(shop_id: int) -> tuple[str, str]:
        return f"owner_unlocked_{shop_id}", f"owner_unlock_time_{shop_id}"

    def unlock(self, shop_id: int, *, at: datetime | None = None) -> None:
        flag_key, time_key = self._keys(shop_id)
        self._session[flag_key] = True
        self._session[time_key] = (at or self._clock()).isoformat()

    def lock(self, shop_id: int) -> None:
        flag_key, time_key = self._keys(shop_id)
        self._session.pop(flag_key, None)
        self._session.pop(time_key, None)

    def is_unlocked(self, shop_id: int) -> bool:
        flag_key, time_key = self._keys(shop_id)
        if not self._session.get(flag_key) or not self._session.get(time_key):
            return False
        try:
            unlocked_at = datetime.fromisoformat(self._session[time_key])
        except (TypeError, ValueError):
            self.lock(shop_id)
            return False
        if self._clock() - unlocked_at < self._duration:
            return True
        self.lock(shop_id)
        return False
