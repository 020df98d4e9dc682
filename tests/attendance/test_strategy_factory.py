import pytest

from src.shop_attendance.shop_attendance.attendance.factory import AdmissionPolicyFactory
from src.shop_attendance.shop_attendance.attendance.strategies.remote_gps_strategy import RemoteGpsStrategy
from src.shop_attendance.shop_attendance.attendance.strategies.strict_radius_strategy import StrictRadiusStrategy
from src.shop_attendance.shop_attendance.core.enums import AdmissionDecision, Channel, LocationConsent
from src.shop_attendance.shop_attendance.shops.model import ShopLocationConfig


def _shop(radius=50):
    return ShopLocationConfig(shop_id=1, shop_name="Corner Shop", latitude=53.4, longitude=-2.99, radius_meters=radius)


def test_factory_maps_premises_channels_to_strict_radius():
    factory = AdmissionPolicyFactory()

    for channel in (Channel.TAG, Channel.CODE, Channel.TERMINAL):
        assert isinstance(factory.for_channel(channel), StrictRadiusStrategy)
    assert isinstance(factory.for_channel(Channel.GPS), RemoteGpsStrategy)


def test_factory_rejects_unregistered_channel():
    factory = AdmissionPolicyFactory(strategies={Channel.GPS: RemoteGpsStrategy()})

    with pytest.raises(LookupError):
        factory.for_channel(Channel.TAG)

    factory.register(Channel.TAG, StrictRadiusStrategy())
    assert isinstance(factory.for_channel(Channel.TAG), StrictRadiusStrategy)


def test_strict_radius_boundary_is_inclusive():
    strategy = StrictRadiusStrategy()
    shop = _shop()

    assert strategy.evaluate(distance=50.0, consent=LocationConsent.GRANTED, shop=shop) == AdmissionDecision.ALLOW
    assert strategy.evaluate(distance=50.1, consent=LocationConsent.GRANTED, shop=shop) == AdmissionDecision.DENY


def test_strict_radius_denies_without_consent():
    strategy = StrictRadiusStrategy()

    decision = strategy.evaluate(distance=5.0, consent=LocationConsent.DENIED, shop=_shop())
    assert decision == AdmissionDecision.DENY


def test_missing_radius_falls_back_to_default():
    strategy = StrictRadiusStrategy()

    assert strategy.allowed_radius(_shop(radius=0)) == 50.0
    assert strategy.allowed_radius(_shop(radius=200)) == 200.0


def test_remote_gps_never_denies():
    strategy = RemoteGpsStrategy()
    shop = _shop()

    assert strategy.evaluate(distance=80, consent=LocationConsent.GRANTED, shop=shop) == AdmissionDecision.ALLOW
    assert strategy.evaluate(distance=100, consent=LocationConsent.GRANTED, shop=shop) == AdmissionDecision.ALLOW
    for far in (101, 5_000, 250_000):
        decision = strategy.evaluate(distance=far, consent=LocationConsent.GRANTED, shop=shop)
        assert decision == AdmissionDecision.FLAG_FOR_REVIEW


def test_remote_gps_radius_is_at_least_ten_km():
    strategy = RemoteGpsStrategy()

    assert strategy.allowed_radius(_shop(radius=50)) == 10_000
    assert strategy.allowed_radius(_shop(radius=25_000)) == 25_000
