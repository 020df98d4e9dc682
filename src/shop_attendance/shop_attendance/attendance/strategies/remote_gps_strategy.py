from __future__ import annotations

from ...core.constants import GPS_MIN_RADIUS_METERS, REMOTE_REVIEW_THRESHOLD_METERS
from ...core.enums import AdmissionDecision, LocationConsent
from ...shops.model import ShopLocationConfig
from .base import AdmissionStrategy


class RemoteGpsStrategy(AdmissionStrategy):
    """Personal-device GPS: never blocks, flags far-away clock-ins for review.

    Standing approvals are matched by the service, which turns a flag back
    into an allow when one covers today.
    """

    def __init__(
        self,
        *,
        min_radius_meters: float = GPS_MIN_RADIUS_METERS,
        review_threshold_meters: float = REMOTE_REVIEW_THRESHOLD_METERS,
    ):
        self._min_radius = float(min_radius_meters)
        self._review_threshold = float(review_threshold_meters)

    def allowed_radius(self, shop: ShopLocationConfig) -> float:
        return max(shop.effective_radius, self._min_radius)

    def evaluate(self, *, distance: float, consent: LocationConsent, shop: ShopLocationConfig) -> AdmissionDecision:
        if distance > self._review_threshold:
            return AdmissionDecision.FLAG_FOR_REVIEW
        return AdmissionDecision.ALLOW
