from __future__ import annotations

from ...core.enums import AdmissionDecision, LocationConsent
from ...shops.model import ShopLocationConfig
from .base import AdmissionStrategy


class StrictRadiusStrategy(AdmissionStrategy):
    """Tag, code and terminal channels: hard geofence at the shop radius."""

    def allowed_radius(self, shop: ShopLocationConfig) -> float:
        return shop.effective_radius

    def evaluate(self, *, distance: float, consent: LocationConsent, shop: ShopLocationConfig) -> AdmissionDecision:
        if consent is not LocationConsent.GRANTED:
            return AdmissionDecision.DENY
        if distance > self.allowed_radius(shop):
            return AdmissionDecision.DENY
        return AdmissionDecision.ALLOW
