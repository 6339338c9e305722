# nursecalc/geo/distance.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

import requests

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "TravelNurseContractCalculator/1.0"
EARTH_RADIUS_MILES = 3958.8
DEFAULT_MIN_DISTANCE = 45.0

# ---- in-memory state (process-local) ----
_geocode_cache: Dict[str, Tuple[float, float]] = {}


class GeocodingError(RuntimeError):
    pass


@dataclass
class Qualification:
    status: str        # red | yellow | green
    message: str
    position: float    # indicator position on the spectrum, 0–100
    qualifies: bool


def clear_geocode_cache() -> None:
    _geocode_cache.clear()


def geocode_address(address: str, timeout: float = 10) -> Tuple[float, float]:
    """Resolve an address to (lat, lon) via OpenStreetMap Nominatim; cached per process."""
    if address in _geocode_cache:
        return _geocode_cache[address]
    try:
        resp = requests.get(
            NOMINATIM_URL,
            params={"q": address, "format": "json", "limit": 1},
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except Exception as e:
        print("[GEO] geocoding failed:", repr(e))
        raise GeocodingError("Failed to geocode address") from e

    if not data:
        raise GeocodingError(f"Address not found: {address}")
    try:
        coords = (float(data[0]["lat"]), float(data[0]["lon"]))
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError("Unexpected geocoder response") from e
    _geocode_cache[address] = coords
    return coords


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles, rounded to 0.1."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_MILES * c, 1)


def calculate_distance(address1: str, address2: str) -> float:
    lat1, lon1 = geocode_address(address1)
    lat2, lon2 = geocode_address(address2)
    return haversine_miles(lat1, lon1, lat2, lon2)


def _hash32(s: str) -> int:
    # Java-style string hash wrapped to a signed 32-bit int
    h = 0
    for ch in s:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def simulated_distance(address1: str, address2: str) -> float:
    """Deterministic stand-in distance (30–59 miles) for when geocoding is unavailable."""
    h = _hash32(address1 + address2)
    return float(30 + abs(h) % 30)


def qualification(distance: float, min_distance: float = DEFAULT_MIN_DISTANCE) -> Qualification:
    """Where a home-to-assignment distance sits against the tax-home minimum."""
    if distance < min_distance * 0.95:
        status, message = "red", "Does not qualify - Below minimum distance"
    elif distance < min_distance * 1.05:
        status, message = "yellow", "Borderline qualification - Very close to minimum"
    else:
        status, message = "green", "Qualifies - Above minimum distance"

    max_display = min_distance * 1.5
    position = min(max(distance / max_display, 0.0), 1.0) * 100 if max_display else 100.0
    return Qualification(status=status, message=message, position=position,
                         qualifies=distance >= min_distance)
