# scripts/value_contract.py
import argparse
import json
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pandas as pd

from nursecalc.valuation.contracts import ContractInput
from nursecalc.valuation.comparison import contract_name, rating_label
from nursecalc.valuation.strategy_factory import TAX_RATE_PROFILES, get_engine


def load_inputs(path: str):
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    records = data if isinstance(data, list) else [data]
    return [ContractInput.from_dict(r) for r in records if isinstance(r, dict)]


def metrics_table(contracts, profile: str = "estimate") -> pd.DataFrame:
    engine = get_engine(profile)
    rows = []
    for c in contracts:
        m = engine.evaluate(c)
        rows.append({
            "contract": contract_name(c),
            "taxable/wk": m.weekly_taxable_income,
            "stipends/wk": m.weekly_non_taxable_income,
            "taxes/wk": m.weekly_taxes,
            "expenses/wk": m.weekly_total_expense,
            "net/wk": m.weekly_net_income,
            "bonuses": m.total_bonuses,
            "total value": m.total_contract_value,
            "rating": f"{m.rating_score} ({rating_label(m.rating_score)})",
        })
    return pd.DataFrame(rows)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Value travel nurse contracts from a JSON file.")
    ap.add_argument("path", help="JSON file holding one contract object or a list of them")
    ap.add_argument("--profile", default="estimate", choices=sorted(TAX_RATE_PROFILES),
                    help="tax rate profile")
    args = ap.parse_args(argv)

    contracts = load_inputs(args.path)
    if not contracts:
        print("No contracts found in", args.path)
        return 1
    with pd.option_context("display.width", 200, "display.max_columns", None):
        print(metrics_table(contracts, args.profile).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
