from datetime import datetime, timedelta

from src.shop_attendance.shop_attendance.security.attempt_store import InMemoryPinAttemptStore
from src.shop_attendance.shop_attendance.security.guard import PinSecurityGuard


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _guard():
    clock = FakeClock(datetime(2026, 3, 4, 9, 0))
    return PinSecurityGuard(InMemoryPinAttemptStore(), clock=clock), clock


def test_remaining_attempts_count_down():
    guard, _ = _guard()

    assert guard.remaining_attempts("owner-pin-1") == 5
    assert guard.record_failed_attempt("owner-pin-1") == 4
    assert guard.record_failed_attempt("owner-pin-1") == 3
    assert guard.remaining_attempts("owner-pin-1") == 3
    assert not guard.is_locked_out("owner-pin-1")


def test_fifth_failure_locks_for_fifteen_minutes():
    guard, clock = _guard()

    for _ in range(4):
        guard.record_failed_attempt("owner-pin-1")
    assert guard.record_failed_attempt("owner-pin-1") == 0

    assert guard.is_locked_out("owner-pin-1")
    assert guard.remaining_attempts("owner-pin-1") == 0
    assert guard.lockout_minutes_remaining("owner-pin-1") == 15

    clock.advance(minutes=14, seconds=1)
    assert guard.lockout_minutes_remaining("owner-pin-1") == 1

    clock.advance(seconds=59)
    assert not guard.is_locked_out("owner-pin-1")
    assert guard.remaining_attempts("owner-pin-1") == 5


def test_minutes_remaining_rounds_up():
    guard, clock = _guard()
    for _ in range(5):
        guard.record_failed_attempt("owner-pin-1")

    clock.advance(minutes=3, seconds=30)
    assert guard.lockout_minutes_remaining("owner-pin-1") == 12


def test_success_resets_counter():
    guard, _ = _guard()
    guard.record_failed_attempt("owner-pin-1")
    guard.record_failed_attempt("owner-pin-1")

    outcome = guard.attempt("owner-pin-1", lambda: True)

    assert outcome.success
    assert guard.remaining_attempts("owner-pin-1") == 5


def test_identifiers_are_independent():
    guard, _ = _guard()
    for _ in range(5):
        guard.record_failed_attempt("owner-pin-1")

    assert guard.is_locked_out("owner-pin-1")
    assert not guard.is_locked_out("owner-pin-2")


def test_attempt_skips_verifier_while_locked():
    guard, _ = _guard()
    calls = []

    def verifier():
        calls.append(1)
        return False

    outcomes = [guard.attempt("owner-pin-1", verifier) for _ in range(6)]

    assert len(calls) == 5
    assert outcomes[3].remaining_attempts == 1
    assert outcomes[4].just_locked and outcomes[4].locked_out
    assert outcomes[5].locked_out and not outcomes[5].just_locked
    assert outcomes[5].lockout_minutes == 15
