# nursecalc/market/tax_rates.py
"""
Static 2023 state and federal income tax data.

Rates are percentages. A bracket's `max` of None means unbounded. The tables
are lookup data for the market-insight panel; the contract valuation itself
uses a single flat estimated rate (see valuation.strategy_factory).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

FLAT_TAX_RATE = 30.0
STANDARD_DEDUCTIONS = [
    ("Standard Deduction", 12950),
    ("Estimated Healthcare", 2500),
]


@dataclass
class TaxBracket:
    min: float
    max: Optional[float] = None
    rate: float = 0.0


@dataclass
class StateTaxInfo:
    base_rate: float
    brackets: List[TaxBracket]
    notes: Optional[str] = None


@dataclass
class Deduction:
    type: str
    amount: float


@dataclass
class TaxData:
    state_tax_rate: float
    tax_brackets: List[TaxBracket]
    effective_tax_rate: float
    estimated_annual_tax: float
    federal_tax_rate: float
    special_notes: Optional[str] = None
    deductions: List[Deduction] = field(default_factory=list)


_Row = Tuple[float, Sequence[Tuple[float, Optional[float], float]], Optional[str]]

# state: (base rate, [(min, max, rate), ...], notes)
_STATE_TABLE: Dict[str, _Row] = {
    "AL": (5, [(0, 500, 2), (501, 3000, 4), (3001, None, 5)],
           "Alabama has a standard deduction of $2,500 for single filers."),
    "AK": (0, [(0, None, 0)], "Alaska has no state income tax."),
    "AZ": (2.5, [(0, None, 2.5)], "Arizona has a flat income tax rate."),
    "AR": (4.9, [(0, None, 4.9)], "Arkansas implemented a flat tax in 2023."),
    "CA": (9.3, [(0, 10099, 1), (10100, 23942, 2), (23943, 37788, 4), (37789, 52455, 6),
                 (52456, 66295, 8), (66296, 338639, 9.3), (338640, 406364, 10.3),
                 (406365, 677275, 11.3), (677276, None, 12.3)],
           "California has the highest top marginal income tax rate in the country."),
    "CO": (4.4, [(0, None, 4.4)], "Colorado has a flat tax rate on federal taxable income."),
    "CT": (5.5, [(0, 10000, 3), (10001, 50000, 5), (50001, 100000, 5.5), (100001, 200000, 6),
                 (200001, 250000, 6.5), (250001, 500000, 6.9), (500001, None, 6.99)], None),
    "DE": (6.6, [(0, 2000, 0), (2001, 5000, 2.2), (5001, 10000, 3.9), (10001, 20000, 4.8),
                 (20001, 25000, 5.2), (25001, 60000, 5.55), (60001, None, 6.6)], None),
    "FL": (0, [(0, None, 0)], "Florida has no state income tax."),
    "GA": (5.75, [(0, None, 5.75)], "Georgia implemented a flat tax in 2023."),
    "HI": (8.25, [(0, 2400, 1.4), (2401, 4800, 3.2), (4801, 9600, 5.5), (9601, 14400, 6.4),
                  (14401, 19200, 6.8), (19201, 24000, 7.2), (24001, 36000, 7.6),
                  (36001, 48000, 7.9), (48001, 150000, 8.25), (150001, 175000, 9),
                  (175001, 200000, 10), (200001, None, 11)], None),
    "ID": (5.8, [(0, None, 5.8)], "Idaho has a flat tax rate as of 2023."),
    "IL": (4.95, [(0, None, 4.95)], "Illinois has a flat tax rate."),
    "IN": (3.15, [(0, None, 3.15)],
           "Indiana has a flat tax rate. Counties may charge an additional income tax."),
    "IA": (6, [(0, 6000, 4.4), (6001, 30000, 4.82), (30001, 75000, 5.7), (75001, None, 6)], None),
    "KS": (5.7, [(0, 15000, 3.1), (15001, 30000, 5.25), (30001, None, 5.7)], None),
    "KY": (4.5, [(0, None, 4.5)], "Kentucky has a flat tax rate as of 2023."),
    "LA": (4.25, [(0, 12500, 1.85), (12501, 50000, 3.5), (50001, None, 4.25)], None),
    "ME": (7.15, [(0, 23000, 5.8), (23001, 54450, 6.75), (54451, None, 7.15)], None),
    "MD": (5.75, [(0, 1000, 2), (1001, 2000, 3), (2001, 3000, 4), (3001, 100000, 4.75),
                  (100001, 125000, 5), (125001, 150000, 5.25), (150001, 250000, 5.5),
                  (250001, None, 5.75)], None),
    "MA": (5, [(0, None, 5)], "Massachusetts has a flat tax rate."),
    "MI": (4.25, [(0, None, 4.25)], "Michigan has a flat tax rate."),
    "MN": (7.85, [(0, 28080, 5.35), (28081, 92230, 6.8), (92231, 171220, 7.85),
                  (171221, None, 9.85)], None),
    "MS": (5, [(0, None, 5)], "Mississippi implemented a flat tax in 2023."),
    "MO": (5.3, [(0, 1088, 0), (1089, 2176, 1.5), (2177, 3264, 2), (3265, 4352, 2.5),
                 (4353, 5440, 3), (5441, 6528, 3.5), (6529, 7616, 4), (7617, 8704, 4.5),
                 (8705, None, 5.3)], None),
    "MT": (6.75, [(0, 3300, 1), (3301, 5800, 2), (5801, 8900, 3), (8901, 12000, 4),
                  (12001, 15400, 5), (15401, 19800, 6), (19801, None, 6.75)], None),
    "NE": (6.84, [(0, 3340, 2.46), (3341, 19990, 3.51), (19991, 32210, 5.01),
                  (32211, None, 6.84)], None),
    "NV": (0, [(0, None, 0)], "Nevada has no state income tax."),
    "NH": (5, [(0, None, 5)],
           "New Hampshire only taxes interest and dividend income, not salary or wages."),
    "NJ": (5.525, [(0, 20000, 1.4), (20001, 35000, 1.75), (35001, 40000, 3.5),
                   (40001, 75000, 5.525), (75001, 500000, 6.37), (500001, 1000000, 8.97),
                   (1000001, None, 10.75)], None),
    "NM": (5.9, [(0, 5500, 1.7), (5501, 11000, 3.2), (11001, 16000, 4.7), (16001, 210000, 4.9),
                 (210001, None, 5.9)], None),
    "NY": (6.33, [(0, 8500, 4), (8501, 11700, 4.5), (11701, 13900, 5.25), (13901, 80650, 5.85),
                  (80651, 215400, 6.25), (215401, 1077550, 6.85), (1077551, 5000000, 9.65),
                  (5000001, 25000000, 10.3), (25000001, None, 10.9)],
           "New York City residents pay additional city income tax."),
    "NC": (4.75, [(0, None, 4.75)], "North Carolina has a flat tax rate."),
    "ND": (2.9, [(0, 40525, 1.1), (40526, 98100, 2.04), (98101, 204675, 2.27),
                 (204676, 445000, 2.64), (445001, None, 2.9)], None),
    "OH": (3.99, [(0, 25000, 2.75), (25001, 44250, 3.23), (44251, 88450, 3.71),
                  (88451, 110650, 3.99), (110651, None, 3.99)], None),
    "OK": (4.75, [(0, 7200, 0.25), (7201, 8700, 0.75), (8701, 9800, 1.75), (9801, 12200, 2.75),
                  (12201, 15000, 3.75), (15001, None, 4.75)], None),
    "OR": (9.9, [(0, 3650, 4.75), (3651, 9200, 6.75), (9201, 125000, 8.75), (125001, None, 9.9)],
           "Oregon has no state sales tax, which partially offsets high income tax rates."),
    "PA": (3.07, [(0, None, 3.07)], "Pennsylvania has a flat tax rate."),
    "RI": (5.99, [(0, 68200, 3.75), (68201, 155050, 4.75), (155051, None, 5.99)], None),
    "SC": (6.5, [(0, 3200, 0), (3201, 16040, 3), (16041, None, 6.5)], None),
    "SD": (0, [(0, None, 0)], "South Dakota has no state income tax."),
    "TN": (0, [(0, None, 0)], "Tennessee has no income tax on wages and salaries."),
    "TX": (0, [(0, None, 0)], "Texas has no state income tax."),
    "UT": (4.85, [(0, None, 4.85)], "Utah has a flat tax rate."),
    "VT": (6.6, [(0, 42150, 3.35), (42151, 102200, 6.6), (102201, 213150, 7.6),
                 (213151, None, 8.75)], None),
    "VA": (5.75, [(0, 3000, 2), (3001, 5000, 3), (5001, 17000, 5), (17001, None, 5.75)], None),
    "WA": (0, [(0, None, 0)],
           "Washington has no state income tax, but has capital gains tax on high earners."),
    "WV": (6.5, [(0, 10000, 3), (10001, 25000, 4), (25001, 40000, 4.5), (40001, 60000, 6),
                 (60001, None, 6.5)], None),
    "WI": (7.65, [(0, 12760, 3.54), (12761, 25520, 4.65), (25521, 280950, 5.3),
                  (280951, None, 7.65)], None),
    "WY": (0, [(0, None, 0)], "Wyoming has no state income tax."),
    "DC": (8.95, [(0, 10000, 4), (10001, 40000, 6), (40001, 60000, 6.5), (60001, 250000, 8.5),
                  (250001, 500000, 9.25), (500001, 1000000, 9.75), (1000001, None, 10.75)],
           "Washington DC has separate tax rates and is treated as a state for tax purposes."),
}

_DEFAULT_STATE: _Row = (5, [(0, None, 5)], "Using estimated tax rate.")

FEDERAL_BRACKETS = [
    TaxBracket(0, 11000, 10),
    TaxBracket(11001, 44725, 12),
    TaxBracket(44726, 95375, 22),
    TaxBracket(95376, 182100, 24),
    TaxBracket(182101, 231250, 32),
    TaxBracket(231251, 578125, 35),
    TaxBracket(578126, None, 37),
]


def state_tax_info(state: str) -> StateTaxInfo:
    """Static data for a two-letter state code; unknown codes get a 5% estimate."""
    base, rows, notes = _STATE_TABLE.get((state or "").strip().upper(), _DEFAULT_STATE)
    return StateTaxInfo(
        base_rate=base,
        brackets=[TaxBracket(lo, hi, rate) for lo, hi, rate in rows],
        notes=notes,
    )


def _tax_owed(brackets: Sequence[TaxBracket], income: float) -> float:
    owed = 0.0
    remaining = income
    for b in sorted(brackets, key=lambda x: x.min):
        upper = float("inf") if b.max is None else b.max
        portion = min(remaining, upper - b.min)
        if portion <= 0:
            break
        owed += portion * (b.rate / 100)
        remaining -= portion
        if remaining <= 0:
            break
    return owed


def effective_rate(brackets: Sequence[TaxBracket], income: float) -> float:
    """Effective percentage rate for `income`, two decimals."""
    if not brackets or income <= 0:
        return 0.0
    return round(_tax_owed(brackets, income) / income * 100, 2)


def federal_effective_rate(annual_income: float) -> float:
    if annual_income <= 0:
        return 0.0
    return round(_tax_owed(FEDERAL_BRACKETS, annual_income) / annual_income * 100, 1)


def federal_marginal_rate(annual_income: float) -> float:
    """Rate of the federal bracket the last dollar falls in."""
    rate = FEDERAL_BRACKETS[0].rate
    for b in FEDERAL_BRACKETS:
        if annual_income >= b.min:
            rate = b.rate
    return rate


def _deductions() -> List[Deduction]:
    return [Deduction(t, a) for t, a in STANDARD_DEDUCTIONS]


def get_state_tax_rates(state: str, annual_income: float = 100000) -> TaxData:
    info = state_tax_info(state)
    eff = effective_rate(info.brackets, annual_income)
    return TaxData(
        state_tax_rate=info.base_rate,
        tax_brackets=info.brackets,
        effective_tax_rate=eff,
        estimated_annual_tax=annual_income * eff / 100,
        federal_tax_rate=federal_effective_rate(annual_income),
        special_notes=info.notes,
        deductions=_deductions(),
    )


def flat_tax_data(annual_income: float = 100000) -> TaxData:
    """The flat 30% summary the assistant quotes when no state detail is wanted."""
    return TaxData(
        state_tax_rate=FLAT_TAX_RATE,
        tax_brackets=[TaxBracket(0, None, FLAT_TAX_RATE)],
        effective_tax_rate=FLAT_TAX_RATE,
        estimated_annual_tax=annual_income * FLAT_TAX_RATE / 100,
        federal_tax_rate=federal_effective_rate(annual_income),
        special_notes="Flat 30% tax rate applied",
        deductions=_deductions(),
    )
