# nursecalc/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

# Optional: load .env in local dev
try:
    from dotenv import load_dotenv  # type: ignore
    load_dotenv()
except Exception:
    pass

try:
    import yaml  # type: ignore
except Exception:
    yaml = None  # We'll tolerate missing yaml and just use env defaults


def _load_yaml(path: str | Path) -> dict:
    """Best-effort YAML loader; returns {} if file missing or pyyaml not installed."""
    p = Path(path)
    if not p.exists() or yaml is None:
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except Exception:
        return {}


def _getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def _getenv_float(name: str, default: Optional[float]) -> Optional[float]:
    v = os.getenv(name)
    if v is None or not str(v).strip():
        return default
    try:
        return float(v)
    except ValueError:
        print(f"[config] ignoring non-numeric {name}={v!r}")
        return default


def get_config() -> Dict[str, Any]:
    """
    Central place for app/runtime config.
    Merges (in order): defaults <- YAML (if present) <- ENV.
    Returns only keys the app actually uses.
    """
    cfg = {}
    for candidate in ("nursecalc/config.yaml", "config.yaml"):
        cfg.update(_load_yaml(candidate))

    defaults = {
        "tax_rate_profile": "estimate",   # estimate (25%) | flat_display (30%)
        "estimated_tax_rate": None,       # explicit override of the profile's rate
        "reference_gas_price": 3.50,
        "chat_model": "gpt-4o-mini",
        "score_model": None,              # falls back to chat_model
        "chat_streaming": True,
        "min_tax_home_distance": 45.0,
        "data_dir": "data",
    }

    merged = {**defaults, **cfg}

    # ENV overrides
    merged["tax_rate_profile"] = os.getenv("TAX_RATE_PROFILE", merged["tax_rate_profile"])
    merged["estimated_tax_rate"] = _getenv_float("ESTIMATED_TAX_RATE", merged["estimated_tax_rate"])
    merged["reference_gas_price"] = _getenv_float("REFERENCE_GAS_PRICE", merged["reference_gas_price"])
    merged["chat_model"] = os.getenv("OPENAI_MODEL", merged["chat_model"])
    merged["score_model"] = os.getenv("SCORE_MODEL", merged["score_model"]) or merged["chat_model"]
    merged["chat_streaming"] = _getenv_bool("CHAT_STREAMING", merged["chat_streaming"])
    merged["min_tax_home_distance"] = _getenv_float("MIN_TAX_HOME_DISTANCE", merged["min_tax_home_distance"])
    merged["data_dir"] = os.getenv("NURSECALC_DATA_DIR", merged["data_dir"])

    return merged
