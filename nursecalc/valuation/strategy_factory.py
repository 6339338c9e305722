# valuation/strategy_factory.py
from typing import Any, Dict, Optional

from nursecalc.valuation.engine import ContractValuationEngine, ESTIMATED_TAX_RATE, REFERENCE_GAS_PRICE

# "estimate" drives the numbers; "flat_display" is the 30% the explanatory text and chat quote
TAX_RATE_PROFILES = {
    "estimate": ESTIMATED_TAX_RATE,
    "flat_display": 0.30,
}


def get_engine(name: str = "estimate", reference_gas_price: float = REFERENCE_GAS_PRICE) -> ContractValuationEngine:
    if name in TAX_RATE_PROFILES:
        return ContractValuationEngine(tax_rate=TAX_RATE_PROFILES[name],
                                       reference_gas_price=reference_gas_price)
    raise ValueError(f"Unknown tax rate profile: {name}")


def engine_from_config(cfg: Optional[Dict[str, Any]] = None) -> ContractValuationEngine:
    """Profile from config; an explicit estimated_tax_rate wins over the profile's rate."""
    if cfg is None:
        from nursecalc.config import get_config
        cfg = get_config()
    profile = cfg.get("tax_rate_profile", "estimate")
    if profile not in TAX_RATE_PROFILES:
        print(f"[VALUATION] unknown tax profile '{profile}', defaulting to 'estimate'")
        profile = "estimate"
    engine = get_engine(profile, reference_gas_price=float(cfg.get("reference_gas_price", REFERENCE_GAS_PRICE)))
    override = cfg.get("estimated_tax_rate")
    if override is not None:
        engine.tax_rate = float(override)
    return engine
