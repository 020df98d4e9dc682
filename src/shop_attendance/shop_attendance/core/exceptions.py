from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a PIN matches no active employee or a record is missing."""


class PolicyViolation(DomainError):
    """Raised when a premises-bound channel is used outside the shop radius."""

    def __init__(self, radius_meters: float, distance_meters: float):
        self.radius_meters = radius_meters
        self.distance_meters = distance_meters
        super().__init__(
            f"You must be within {round(radius_meters)}m of the shop to clock in. "
            f"You are {round(distance_meters)}m away."
        )


class ExternalServiceFailure(DomainError):
    """Raised when the store, location provider or geocoder fails."""


class StoreUnavailableError(ExternalServiceFailure):
    """The backing store could not be reached; the action can be retried."""


class RaceConditionError(DomainError):
    """A concurrent writer changed the record between read and write."""


class AlreadyClockedInError(RaceConditionError):
    def __init__(self, message: str = "You are already clocked in. Please clock out first."):
        super().__init__(message)


class ConsentRequiredError(DomainError):
    """Location consent has never been answered; prompt before retrying."""

    def __init__(self, employee_id: int, message: str = "Location consent is required before clocking in or out."):
        self.employee_id = employee_id
        super().__init__(message)


class ConsentDeniedError(DomainError):
    def __init__(
        self,
        message: str = (
            "GPS location consent is required to use the clock in/out feature. "
            "Please contact your manager."
        ),
    ):
        super().__init__(message)


class IncorrectPinError(DomainError):
    def __init__(self, remaining_attempts: int):
        self.remaining_attempts = remaining_attempts
        plural = "" if remaining_attempts == 1 else "s"
        super().__init__(f"Incorrect PIN. {remaining_attempts} attempt{plural} remaining.")


class LockedOutError(DomainError):
    def __init__(self, minutes_remaining: Optional[int], *, just_locked: bool = False):
        self.minutes_remaining = minutes_remaining or 0
        plural = "" if self.minutes_remaining == 1 else "s"
        if just_locked:
            message = f"Too many failed attempts. Locked out for {self.minutes_remaining} minute{plural}."
        else:
            message = f"Too many failed attempts. Try again in {self.minutes_remaining} minute{plural}."
        super().__init__(message)
