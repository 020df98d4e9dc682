from dataclasses import replace

import pytest

from src.shop_attendance.shop_attendance.core.enums import Channel, LocationConsent
from src.shop_attendance.shop_attendance.core.exceptions import ConsentDeniedError, ConsentRequiredError, NotFoundError
from src.shop_attendance.shop_attendance.employees.consent import ConsentGate


def test_granted_consent_passes(env):
    env.consent.check(env.employees.get_by_id(1), Channel.TERMINAL)


def test_unset_consent_requires_prompt(env):
    employee = env.employees.get_by_id(2)

    assert env.consent.needs_prompt(employee)
    with pytest.raises(ConsentRequiredError) as exc:
        env.consent.check(employee, Channel.TAG)
    assert exc.value.employee_id == 2


def test_unset_consent_has_no_prompt_on_personal_gps(env):
    env.consent.check(env.employees.get_by_id(2), Channel.GPS)


def test_denied_consent_blocks(env):
    for channel in Channel:
        with pytest.raises(ConsentDeniedError):
            env.consent.check(env.employees.get_by_id(3), channel)


def test_record_consent_stores_version_and_time(env, fixed_now):
    assert env.consent.record_consent(2, granted=True, now=fixed_now) == LocationConsent.GRANTED

    employee = env.employees.get_by_id(2)
    assert employee.location_consent == LocationConsent.GRANTED
    assert employee.consent_given_at == fixed_now
    assert employee.consent_version == "1.0"


def test_declining_blocks_later_clock_actions(env, fixed_now):
    env.consent.record_consent(1, granted=False, now=fixed_now)

    with pytest.raises(ConsentDeniedError):
        env.consent.check(env.employees.get_by_id(1), Channel.GPS)


def test_new_policy_version_asks_again(env):
    gate = ConsentGate(env.employees, policy_version="2.0")
    employee = env.employees.get_by_id(1)

    assert gate.needs_prompt(employee)
    assert not gate.needs_prompt(replace(employee, consent_version="2.0"))


def test_record_consent_for_unknown_employee(env):
    with pytest.raises(NotFoundError):
        env.consent.record_consent(99, granted=True)
