import requests

from src.shop_attendance.shop_attendance.geo.geocoder import NominatimGeocoder, build_place_name, fallback_place_name


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_build_place_name_joins_road_area_city():
    address = {"house_number": "12", "road": "Bold Street", "suburb": "Ropewalks", "city": "Liverpool"}

    assert build_place_name(address) == "12 Bold Street, Ropewalks, Liverpool"


def test_build_place_name_skips_overlapping_parts():
    address = {"road": "Hackney Road", "borough": "Hackney", "city": "London"}

    assert build_place_name(address) == "Hackney Road, London"


def test_build_place_name_empty_address():
    assert build_place_name({}) == ""


def test_fallback_place_name():
    assert fallback_place_name(None, None) == "Location unavailable"
    assert fallback_place_name(123.0, 0.0) == "Location unavailable"
    assert fallback_place_name(53.4084, -2.9916) == "53.408400, -2.991600"


def test_nominatim_lookup_sends_user_agent():
    session = FakeSession(FakeResponse({"address": {"road": "Bold Street", "city": "Liverpool"}}))
    geocoder = NominatimGeocoder(session=session, user_agent="shop-attendance-tests")

    assert geocoder.place_name(53.4084, -2.9916) == "Bold Street, Liverpool"

    [(url, kwargs)] = session.calls
    assert url == "https://nominatim.openstreetmap.org/reverse"
    assert kwargs["headers"]["User-Agent"] == "shop-attendance-tests"
    assert kwargs["params"]["lat"] == 53.4084


def test_nominatim_failures_fall_back_to_coordinates():
    failures = [
        FakeSession(requests.ConnectionError("offline")),
        FakeSession(requests.Timeout("slow")),
        FakeSession(FakeResponse({}, status_code=503)),
        FakeSession(FakeResponse(ValueError("not json"))),
        FakeSession(FakeResponse({"error": "Unable to geocode"})),
    ]

    for session in failures:
        assert NominatimGeocoder(session=session).place_name(53.4084, -2.9916) == "53.408400, -2.991600"
