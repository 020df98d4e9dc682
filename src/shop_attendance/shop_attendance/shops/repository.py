from __future__ import annotations

from typing import Optional, Protocol

from .model import ShopLocationConfig


class ShopRepository(Protocol):
    def get_location_config(self, shop_id: int) -> Optional[ShopLocationConfig]:
        raise NotImplementedError

    def update_owner_pin_hash(self, shop_id: int, owner_pin_hash: str) -> bool:
        raise NotImplementedError
