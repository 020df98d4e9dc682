from __future__ import annotations

from enum import Enum


class Channel(str, Enum):
    """How a clock action was initiated."""

    TAG = "nfc"
    CODE = "qr_code"
    TERMINAL = "shop_tablet"
    GPS = "gps"


class ClockAction(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


class LocationConsent(str, Enum):
    """Tri-state location-tracking consent stored per employee."""

    UNSET = "UNSET"
    GRANTED = "GRANTED"
    DENIED = "DENIED"

    @classmethod
    def from_flag(cls, value: bool | None) -> "LocationConsent":
        if value is None:
            return cls.UNSET
        return cls.GRANTED if value else cls.DENIED

    def as_flag(self) -> bool | None:
        if self is LocationConsent.UNSET:
            return None
        return self is LocationConsent.GRANTED


class AdmissionDecision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"
    FLAG_FOR_REVIEW = "FLAG_FOR_REVIEW"


class ApprovalStatus(str, Enum):
    """Status of a remote clock-in review request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    LOGIN_ATTEMPT = "login_attempt"
    CLOCK_IN_ATTEMPT = "clock_in_attempt"
    REMOTE_ACCESS = "remote_access"
