import pytest

from nursecalc.geo import distance
from nursecalc.geo.distance import (
    GeocodingError, calculate_distance, geocode_address, haversine_miles, qualification, simulated_distance,
)


class _Resp:
    def __init__(self, data, status=200):
        self._data = data
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")

    def json(self):
        return self._data


@pytest.fixture(autouse=True)
def _clear_cache():
    distance.clear_geocode_cache()
    yield
    distance.clear_geocode_cache()


def test_haversine():
    assert haversine_miles(35.0, -90.0, 35.0, -90.0) == 0.0
    assert haversine_miles(0, 0, 0, 1) == 69.1


def test_geocode_uses_nominatim_and_caches(monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, params, headers))
        return _Resp([{"lat": "35.1495", "lon": "-90.0490"}])

    monkeypatch.setattr(distance.requests, "get", fake_get)
    assert geocode_address("Memphis, TN") == (35.1495, -90.0490)
    assert geocode_address("Memphis, TN") == (35.1495, -90.0490)
    assert len(calls) == 1
    assert calls[0][1]["q"] == "Memphis, TN"
    assert "User-Agent" in calls[0][2]


def test_geocode_errors(monkeypatch):
    monkeypatch.setattr(distance.requests, "get", lambda *a, **k: _Resp([]))
    with pytest.raises(GeocodingError):
        geocode_address("Atlantis")

    monkeypatch.setattr(distance.requests, "get", lambda *a, **k: _Resp([], status=503))
    with pytest.raises(GeocodingError):
        geocode_address("Memphis, TN")


def test_calculate_distance(monkeypatch):
    coords = {"A": [{"lat": "0", "lon": "0"}], "B": [{"lat": "0", "lon": "1"}]}
    monkeypatch.setattr(distance.requests, "get",
                        lambda url, params=None, **k: _Resp(coords[params["q"]]))
    assert calculate_distance("A", "B") == 69.1


def test_simulated_distance_is_deterministic():
    d = simulated_distance("123 Main St, Memphis, TN", "Nashville, TN")
    assert d == simulated_distance("123 Main St, Memphis, TN", "Nashville, TN")
    assert 30 <= d <= 59
    assert simulated_distance("", "") == 30


def test_qualification_bands():
    assert qualification(40).status == "red"
    assert qualification(40).qualifies is False
    q = qualification(45)
    assert q.status == "yellow"
    assert q.qualifies is True
    assert qualification(44).status == "yellow"
    assert qualification(44).qualifies is False
    g = qualification(60)
    assert g.status == "green"
    assert g.position == pytest.approx(88.89, abs=0.01)
    assert qualification(500).position == 100
    assert qualification(-5).position == 0
