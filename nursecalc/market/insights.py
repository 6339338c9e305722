# nursecalc/market/insights.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, List, Optional

import numpy as np

from nursecalc.market.housing import get_housing_data, split_location
from nursecalc.market.tax_rates import TaxData, TaxBracket, Deduction, STANDARD_DEDUCTIONS, get_state_tax_rates
from nursecalc.valuation.contracts import parse_number

MONTH_NAMES = ["January", "February", "March", "April", "May", "June",
               "July", "August", "September", "October", "November", "December"]

# month index 0..11 -> level
_DEMAND = {
    "ICU": ["Medium", "Medium", "Medium", "High", "High", "High",
            "Medium", "Medium", "Low", "Low", "Medium", "Medium"],
    "ER": ["High", "High", "Medium", "Medium", "Low", "Low",
           "Medium", "Medium", "High", "High", "High", "High"],
    "default": ["Medium", "Medium", "Medium", "Medium", "Medium", "High",
                "High", "High", "Medium", "Medium", "Medium", "Medium"],
}

_TREND = {
    "ICU": ["Stable", "Increasing", "Increasing", "Stable", "Stable", "Decreasing",
            "Decreasing", "Decreasing", "Stable", "Increasing", "Increasing", "Stable"],
    "ER": ["Stable", "Decreasing", "Decreasing", "Decreasing", "Stable", "Increasing",
           "Increasing", "Increasing", "Stable", "Stable", "Decreasing", "Decreasing"],
    "default": ["Stable", "Increasing", "Increasing", "Stable", "Stable", "Decreasing",
                "Decreasing", "Stable", "Increasing", "Increasing", "Stable", "Stable"],
}

_PEAK_MONTHS = {
    "ICU": [3, 4, 5],
    "ER": [0, 1, 8, 9, 10, 11],
    "default": [5, 6, 7],
}

_SPECIALTY_RATES = {"ICU": 55, "ER": 52, "Med-Surg": 48, "PICU": 58, "NICU": 56, "OR": 53, "L&D": 51}

_STATE_MULTIPLIERS = {"CA": 1.4, "NY": 1.3, "TX": 0.9, "FL": 0.95, "OH": 0.85,
                      "WA": 1.2, "OR": 1.15, "CO": 1.1, "AZ": 0.9, "NC": 0.9}

# 1 = highest paying state for travel nurses
_STATE_RANKS = {"CA": 1, "AK": 2, "NY": 3, "MA": 4, "NJ": 5, "WA": 6, "HI": 7, "OR": 8,
                "DC": 9, "NV": 10, "CO": 11, "CT": 12, "IL": 13, "MD": 14, "RI": 15,
                "PA": 18, "FL": 22, "TX": 23, "AZ": 25, "GA": 27, "MI": 29, "NC": 30,
                "MT": 32, "OH": 33, "MO": 35, "ID": 36, "AL": 38, "ND": 40, "MS": 42, "SD": 44}

# (25th, median, 75th) percentile hourly rates
_SPECIALTY_RANGES = {
    "ICU": (45, 55, 65), "ER": (42, 52, 62), "Med-Surg": (38, 48, 58), "PICU": (48, 58, 68),
    "NICU": (46, 56, 66), "OR": (43, 53, 63), "L&D": (41, 51, 61),
}

_DEMAND_SCORE = {"high": 1.1, "medium": 1.0, "low": 0.9}

FUEL_PRICES = {"regular": 3.50, "midgrade": 3.80, "premium": 4.10, "diesel": 3.90}


@dataclass
class Recommendation:
    type: str      # rate | timing | location | tax
    message: str


@dataclass
class MarketInsight:
    location: str
    specialty: str
    average_rate: float
    seasonal_demand: Dict[str, str]
    cost_of_living: Dict[str, float]
    tax_info: TaxData
    salary_comparison: Dict[str, float]
    recommendations: List[Recommendation] = field(default_factory=list)
    contract_rating: float = 3.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def determine_demand(specialty: str, today: date) -> str:
    return _DEMAND.get(specialty, _DEMAND["default"])[today.month - 1]


def determine_trend(specialty: str, today: date) -> str:
    return _TREND.get(specialty, _TREND["default"])[today.month - 1]


def determine_next_peak(specialty: str, today: date) -> str:
    """Name of the next peak month after this one; wraps to next year's first peak."""
    peaks = _PEAK_MONTHS.get(specialty, _PEAK_MONTHS["default"])
    upcoming = [m for m in peaks if m > today.month - 1]
    return MONTH_NAMES[upcoming[0] if upcoming else peaks[0]]


def average_rate(specialty: str, state: str) -> int:
    base = _SPECIALTY_RATES.get(specialty, 50)
    return round(base * _STATE_MULTIPLIERS.get(state, 1))


def state_rank(state: str) -> int:
    return _STATE_RANKS.get(state, 25)


def adjusted_rate(rate: float, cost_index: float) -> int:
    """Rate re-expressed at a national-average cost of living (index 100)."""
    if not cost_index:
        return round(rate)
    return round(rate * (100 / cost_index))


def national_percentile(specialty: str, rate: float) -> int:
    low, median, high = _SPECIALTY_RANGES.get(specialty, (40, 50, 60))
    # linear between anchors, saturating at 20% above the 75th percentile rate
    pct = np.interp(rate, [0, low, median, high, high * 1.2], [0, 25, 50, 75, 100])
    return int(round(float(pct)))


def recommended_stipend(median_rent: float) -> int:
    # housing plus a 30% buffer for utilities and incidentals
    return round(median_rent * 1.3)


def demand_score(level: str) -> float:
    return _DEMAND_SCORE.get((level or "").lower(), 1.0)


def generate_recommendations(location: str, specialty: str, avg_rate: float, current_rate: float,
                             tax_info: TaxData, cost_of_living_index: float) -> List[Recommendation]:
    recs: List[Recommendation] = []

    if current_rate and current_rate < avg_rate * 0.9:
        recs.append(Recommendation("rate", f"Consider negotiating for a higher rate. Market average is ${avg_rate}/hr."))
    elif current_rate and current_rate > avg_rate * 1.1:
        recs.append(Recommendation("rate", "Your rate is above market average. This is an excellent contract financially."))

    if tax_info.state_tax_rate > 7:
        recs.append(Recommendation(
            "tax",
            f"This state has high income tax ({tax_info.state_tax_rate}%). "
            "Consider tax-advantaged retirement contributions."))
    elif tax_info.state_tax_rate == 0:
        recs.append(Recommendation("tax", "This state has no income tax, which maximizes your take-home pay."))

    if cost_of_living_index > 120:
        recs.append(Recommendation(
            "location", "This area has a high cost of living. Ensure your stipends cover expenses adequately."))

    if not recs:
        recs.append(Recommendation(
            "timing",
            f"Market conditions for {specialty} in {location} are currently average. "
            "Consider timing contracts with peak seasons."))
    return recs


def fallback_insight(location: str, specialty: str) -> MarketInsight:
    return MarketInsight(
        location=location,
        specialty=specialty,
        average_rate=50,
        seasonal_demand={"current": "Medium", "trend": "Stable", "next_peak": "June"},
        cost_of_living={"index": 100, "median_rent": 1500, "median_stipend": 1950},
        tax_info=TaxData(
            state_tax_rate=5,
            tax_brackets=[TaxBracket(0, None, 5)],
            effective_tax_rate=5,
            estimated_annual_tax=5200,
            federal_tax_rate=12,
            special_notes="Using estimated tax rates - could not fetch live data",
            deductions=[Deduction(t, a) for t, a in STANDARD_DEDUCTIONS],
        ),
        salary_comparison={"state_rank": 25, "adjusted_rate": 50, "national_percentile": 50},
        recommendations=[Recommendation(
            "rate", f"Market data unavailable. Consider researching {specialty} rates in {location} before negotiating.")],
        contract_rating=3,
    )


def fetch_market_insights(location: str, specialty: str, hourly_rate: str = "",
                          today: Optional[date] = None) -> MarketInsight:
    """
    Assemble the market panel for a "City, ST" location and a specialty.
    Missing inputs raise ValueError; any lookup failure yields the fallback insight.
    """
    if not location or not specialty:
        raise ValueError("Location and specialty are required")
    today = today or date.today()
    city, state = split_location(location)

    try:
        avg = average_rate(specialty, state)
        tax_info = get_state_tax_rates(state, avg * 40 * 52)
        housing = get_housing_data(city, state)
        current = determine_demand(specialty, today)

        current_rate = parse_number(hourly_rate)
        rate_ratio = current_rate / avg if current_rate else 1.0
        raw = (rate_ratio * 0.4
               + (housing.cost_index / 100) * 0.2
               + demand_score(current) * 0.2
               + (1 - tax_info.effective_tax_rate / 100) * 0.2)

        return MarketInsight(
            location=location,
            specialty=specialty,
            average_rate=avg,
            seasonal_demand={
                "current": current,
                "trend": determine_trend(specialty, today),
                "next_peak": determine_next_peak(specialty, today),
            },
            cost_of_living={
                "index": housing.cost_index,
                "median_rent": housing.median_rent,
                "median_stipend": recommended_stipend(housing.median_rent),
            },
            tax_info=tax_info,
            salary_comparison={
                "state_rank": state_rank(state),
                "adjusted_rate": adjusted_rate(avg, housing.cost_index),
                "national_percentile": national_percentile(specialty, avg),
            },
            recommendations=generate_recommendations(location, specialty, avg, current_rate,
                                                     tax_info, housing.cost_index),
            contract_rating=min(5.0, max(1.0, raw * 3)),
        )
    except Exception as e:
        print("[MARKET] insight assembly failed, using fallback:", repr(e))
        return fallback_insight(location, specialty)


def fuel_prices(state: str) -> Dict[str, float]:
    """Per-gallon prices used to pre-fill fuelCostPerGallon. Static for every state."""
    return dict(FUEL_PRICES)
