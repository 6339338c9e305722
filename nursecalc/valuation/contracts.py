# nursecalc/valuation/contracts.py
from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field, fields, asdict
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional

# Leading decimal literal, same acceptance as a browser's parseFloat
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

TRANSPORTATION_TYPES = ("public", "rideshare", "personal")


def parse_number(value: Any, default: float = 0.0) -> float:
    """Total numeric parse: blank, None or non-numeric text gives `default`."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else default
    m = _LEADING_NUMBER.match(str(value))
    if not m:
        return default
    try:
        v = float(m.group(1))
    except (ValueError, OverflowError):
        return default
    return v if math.isfinite(v) else default


def number_or(value: Any, fallback: float) -> float:
    """parse_number, but a zero/unparsable result falls back (parseFloat(x) || fallback)."""
    v = parse_number(value, 0.0)
    return v if v else fallback


def parse_flag(value: Any) -> bool:
    """Checkbox value from a bool or its text form ('true', 'on', '1', 'yes')."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def round2(value: float) -> float:
    """Round half-up to cents on the exact binary value (matches toFixed(2)). inf and NaN pass through."""
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        # a float can carry ~309 integer digits; quantize needs room for all of them
        ctx.prec = 400
        return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(value: float) -> str:
    return f"{round2(value):.2f}"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


@dataclass
class ContractInput:
    id: str
    # compensation (weekly)
    hourly_rate: str = ""
    weekly_hours: str = ""
    housing_stipend: str = ""
    meal_stipend: str = ""
    transportation_stipend: str = ""
    other_stipend: str = ""
    # one-time bonuses
    sign_on_bonus: str = ""
    completion_bonus: str = ""
    referral_bonus: str = ""
    other_bonus: str = ""
    # out-of-pocket expenses
    housing_cost: str = ""
    food_cost: str = ""
    other_cost: str = ""
    transportation_cost: str = ""       # public / rideshare only
    # personal vehicle only
    commute_distance: str = ""          # one-way miles
    vehicle_mpg: str = ""
    fuel_cost_per_gallon: str = ""
    use_current_gas_price: bool = False
    parking_cost: str = ""
    contract_length: str = ""           # weeks
    transportation_type: str = "public"
    # descriptive only (chat, export, market lookups)
    facility_name: str = ""
    location: str = ""                  # "City, ST"
    specialty: str = ""
    shift_type: str = "day"
    years_of_experience: str = ""
    start_date: str = ""
    end_date: str = ""
    seasonality: str = "summer"
    agency: str = "Other"
    planned_time_off: List[str] = field(default_factory=list)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def resolve_field(cls, name: str) -> Optional[str]:
        """Map a camelCase or snake_case key onto a dataclass field name."""
        key = (name or "").strip()
        lookup = _FIELD_LOOKUP.get(key) or _FIELD_LOOKUP.get(key.lower())
        return lookup

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ContractInput":
        """Coerce a plain dict (form state, JSON file, stored record) into a ContractInput."""
        if isinstance(d, ContractInput):
            return d
        kwargs: Dict[str, Any] = {}
        for k, v in (d or {}).items():
            name = ContractInput.resolve_field(k)
            if not name:
                continue
            if name == "use_current_gas_price":
                kwargs[name] = parse_flag(v)
            elif name == "planned_time_off":
                kwargs[name] = [str(x) for x in v] if isinstance(v, (list, tuple)) else []
            else:
                kwargs[name] = "" if v is None else str(v)
        if not kwargs.get("id"):
            kwargs["id"] = uuid.uuid4().hex
        return ContractInput(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase record, the shape the form, the stores and the chat context use."""
        return {_camel(k): v for k, v in asdict(self).items()}


_FIELD_LOOKUP: Dict[str, str] = {}
for _f in fields(ContractInput):
    _FIELD_LOOKUP[_f.name] = _f.name
    _FIELD_LOOKUP[_camel(_f.name)] = _f.name
    _FIELD_LOOKUP[_camel(_f.name).lower()] = _f.name


def new_contract(contract_id: Optional[str] = None) -> ContractInput:
    """Blank contract as the form creates it."""
    return ContractInput(
        id=contract_id or uuid.uuid4().hex,
        weekly_hours="36",
        vehicle_mpg="25",
        transportation_type="personal",
        use_current_gas_price=True,
    )


@dataclass
class RatingDetail:
    positive: bool
    message: str


@dataclass
class TakeHomePay:
    weekly_taxable_income: float
    weekly_taxes: float
    weekly_non_taxable_income: float
    weekly_take_home: float


@dataclass
class ComputedMetrics:
    weekly_taxable_income: float
    weekly_non_taxable_income: float
    weekly_taxes: float
    weekly_take_home: float
    weekly_transportation_expense: float
    weekly_living_expense: float
    weekly_total_expense: float
    weekly_net_income: float        # rounded to cents
    total_bonuses: float
    total_contract_value: float     # rounded to cents
    rating_score: int               # 1–5
    rating_details: List[RatingDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
