# nursecalc/valuation/comparison.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from nursecalc.valuation.contracts import ContractInput, parse_number
from nursecalc.valuation.engine import ContractValuationEngine

COMPARISON_COLUMNS = [
    "id", "name", "weekly_income", "weekly_stipends",
    "weekly_expenses", "weekly_net", "total_value",
]


def _engine(engine: Optional[ContractValuationEngine]) -> ContractValuationEngine:
    return engine or ContractValuationEngine()


def contract_name(c: ContractInput) -> str:
    return c.facility_name.strip() or f"Contract {c.id}"


def expense_breakdown(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> List[Dict[str, Any]]:
    eng = _engine(engine)
    return [
        {"name": "Housing", "value": parse_number(c.housing_cost)},
        {"name": "Transportation", "value": eng.transportation_expense(c)},
        {"name": "Food", "value": parse_number(c.food_cost)},
        {"name": "Other", "value": parse_number(c.other_cost)},
    ]


def comparison_row(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> Dict[str, Any]:
    eng = _engine(engine)
    return {
        "id": c.id,
        "name": contract_name(c),
        "weekly_income": eng.taxable_income(c),
        "weekly_stipends": eng.non_taxable_income(c),
        "weekly_expenses": eng.total_expense(c),
        "weekly_net": eng.net_income(c),
        "total_value": eng.total_contract_value(c),
        "expense_breakdown": expense_breakdown(c, eng),
    }


def comparison_frame(contracts: Iterable[ContractInput],
                     engine: Optional[ContractValuationEngine] = None) -> pd.DataFrame:
    """One row per contract, in the order given (display order)."""
    eng = _engine(engine)
    rows = [comparison_row(c, eng) for c in contracts]
    if not rows:
        return pd.DataFrame(columns=COMPARISON_COLUMNS)
    df = pd.DataFrame(rows)
    return df[COMPARISON_COLUMNS]


def taxable_ratio(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> float:
    """Share of gross weekly income that is taxable, percent with one decimal."""
    eng = _engine(engine)
    taxable = eng.taxable_income(c)
    total = taxable + eng.non_taxable_income(c)
    if not total:
        return 0.0
    return round(taxable / total * 100, 1)


def contract_tips(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> List[str]:
    eng = _engine(engine)
    tips: List[str] = []
    if eng.total_contract_value(c) > 50000:
        tips.append("Consider negotiating for a higher salary")
    if eng.net_income(c) > 1000:
        tips.append("You may be able to afford a more expensive lifestyle")
    if eng.total_expense(c) < 500:
        tips.append("You may be able to save more money")
    return tips


def rating_label(score: int) -> str:
    if score >= 4:
        return "Great contract"
    if score >= 3:
        return "Good contract"
    return "Below average contract"
