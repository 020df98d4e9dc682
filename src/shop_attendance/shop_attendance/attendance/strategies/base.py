from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import AdmissionDecision, LocationConsent
from ...shops.model import ShopLocationConfig


class AdmissionStrategy(ABC):
    """Strategy Pattern: decide whether a clock-in at a given distance is admitted."""

    @abstractmethod
    def allowed_radius(self, shop: ShopLocationConfig) -> float:
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, *, distance: float, consent: LocationConsent, shop: ShopLocationConfig) -> AdmissionDecision:
        raise NotImplementedError
