# nursecalc/market/housing.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

NATIONAL_AVERAGE_RENT = 1500


@dataclass
class HousingData:
    median_rent: int
    cost_index: int


# "city, ST": (median monthly rent, cost-of-living index; 100 = national average)
_CITY_TABLE: Dict[str, Tuple[int, int]] = {
    # high cost of living
    "san francisco, CA": (3100, 207),
    "new york, NY": (3000, 200),
    "boston, MA": (2800, 187),
    "los angeles, CA": (2700, 180),
    "san diego, CA": (2500, 167),
    "washington, DC": (2400, 160),
    "seattle, WA": (2300, 153),
    "miami, FL": (2200, 147),
    "oakland, CA": (2600, 173),
    "san jose, CA": (2900, 193),
    # medium
    "chicago, IL": (1800, 120),
    "portland, OR": (1750, 117),
    "denver, CO": (1900, 127),
    "austin, TX": (1750, 117),
    "phoenix, AZ": (1600, 107),
    "philadelphia, PA": (1650, 110),
    "nashville, TN": (1700, 113),
    "minneapolis, MN": (1600, 107),
    "atlanta, GA": (1700, 113),
    "dallas, TX": (1550, 103),
    "houston, TX": (1500, 100),
    "sacramento, CA": (1800, 120),
    # lower
    "memphis, TN": (1200, 80),
    "tulsa, OK": (1100, 73),
    "oklahoma city, OK": (1150, 77),
    "kansas city, MO": (1250, 83),
    "indianapolis, IN": (1200, 80),
    "columbus, OH": (1300, 87),
    "las vegas, NV": (1400, 93),
    "louisville, KY": (1100, 73),
    "cleveland, OH": (1050, 70),
    "detroit, MI": (1100, 73),
    "birmingham, AL": (1050, 70),
    "new orleans, LA": (1300, 87),
    # healthcare hubs
    "rochester, MN": (1400, 93),     # Mayo Clinic
    "pittsburgh, PA": (1350, 90),    # UPMC
    "baltimore, MD": (1600, 107),    # Hopkins
    "durham, NC": (1450, 97),        # Duke
}

_DEFAULT = HousingData(median_rent=NATIONAL_AVERAGE_RENT, cost_index=100)


def cost_index(rent: float) -> int:
    return round(rent / NATIONAL_AVERAGE_RENT * 100)


def get_housing_data(city: str, state: str) -> HousingData:
    """Exact city match, else the average of that state's cities, else the national default."""
    st = (state or "").strip().upper()
    key = f"{(city or '').strip().lower()}, {st}"
    if key in _CITY_TABLE:
        rent, idx = _CITY_TABLE[key]
        return HousingData(rent, idx)

    matches = [v for k, v in _CITY_TABLE.items() if st and k.endswith(f", {st}")]
    if matches:
        return HousingData(
            median_rent=round(sum(r for r, _ in matches) / len(matches)),
            cost_index=round(sum(i for _, i in matches) / len(matches)),
        )
    return HousingData(_DEFAULT.median_rent, _DEFAULT.cost_index)


def split_location(location: str) -> Tuple[str, str]:
    """'Memphis, TN' -> ('Memphis', 'TN'). Missing parts come back empty."""
    parts = [p.strip() for p in (location or "").split(",")]
    city = parts[0] if parts else ""
    state = parts[1].upper() if len(parts) > 1 else ""
    return city, state
