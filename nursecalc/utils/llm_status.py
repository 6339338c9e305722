# nursecalc/utils/llm_status.py
from __future__ import annotations
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class _CallRecord:
    model: Optional[str] = None
    started_at: Optional[float] = None     # epoch seconds
    duration_s: Optional[float] = None
    success: Optional[bool] = None         # None while a call is in flight
    error: Optional[str] = None
    calls: int = 0
    failures: int = 0


# process-local; one Streamlit server shares it across sessions
_record = _CallRecord()


def record_llm_call_start(model_name: str) -> None:
    _record.model = model_name
    _record.started_at = time.time()
    _record.duration_s = None
    _record.success = None
    _record.error = None
    _record.calls += 1


def record_llm_call_end(success: bool, error: Optional[str] = None) -> None:
    if _record.started_at:
        _record.duration_s = time.time() - _record.started_at
    _record.success = bool(success)
    if not success:
        _record.failures += 1
        _record.error = error


def reset_llm_status() -> None:
    global _record
    _record = _CallRecord()


def _secrets_has_key() -> bool:
    # st.secrets raises FileNotFoundError without .streamlit/secrets.toml
    try:
        import streamlit as st
        return bool(st.secrets.get("OPENAI_API_KEY", ""))
    except FileNotFoundError:
        return False
    except Exception as e:
        print("[get_llm_status] suppressed:", repr(e))
        return False


def get_llm_status(api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Sidebar summary of the most recent chat/score call. Never raises.
    `api_key` is the key saved in the settings panel, if any.
    """
    last_call = None
    if _record.started_at:
        last_call = datetime.fromtimestamp(_record.started_at, tz=timezone.utc).astimezone().isoformat(timespec="seconds")

    return {
        "api_key_set": bool(api_key or os.environ.get("OPENAI_API_KEY")) or _secrets_has_key(),
        "model": _record.model or os.environ.get("OPENAI_MODEL") or "gpt-4o-mini",
        "last_call": last_call,
        "last_duration": None if _record.duration_s is None else round(_record.duration_s, 2),
        "last_success": _record.success,
        "last_error": _record.error,
        "calls": _record.calls,
        "failures": _record.failures,
    }
