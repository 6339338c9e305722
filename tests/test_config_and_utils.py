from nursecalc.config import get_config
from nursecalc.utils import llm_status
from nursecalc.utils.events import publish, read_events

_ENV = ("TAX_RATE_PROFILE", "ESTIMATED_TAX_RATE", "REFERENCE_GAS_PRICE", "OPENAI_MODEL", "SCORE_MODEL",
        "CHAT_STREAMING", "MIN_TAX_HOME_DISTANCE", "NURSECALC_DATA_DIR")


def _clean(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for k in _ENV:
        monkeypatch.delenv(k, raising=False)


def test_config_defaults(tmp_path, monkeypatch):
    _clean(monkeypatch, tmp_path)
    cfg = get_config()
    assert cfg["tax_rate_profile"] == "estimate"
    assert cfg["estimated_tax_rate"] is None
    assert cfg["reference_gas_price"] == 3.50
    assert cfg["chat_model"] == "gpt-4o-mini"
    assert cfg["score_model"] == "gpt-4o-mini"
    assert cfg["chat_streaming"] is True
    assert cfg["min_tax_home_distance"] == 45.0


def test_config_yaml_then_env(tmp_path, monkeypatch):
    _clean(monkeypatch, tmp_path)
    (tmp_path / "config.yaml").write_text("tax_rate_profile: flat_display\nreference_gas_price: 4.1\n")
    cfg = get_config()
    assert cfg["tax_rate_profile"] == "flat_display"
    assert cfg["reference_gas_price"] == 4.1

    monkeypatch.setenv("REFERENCE_GAS_PRICE", "3.9")
    monkeypatch.setenv("ESTIMATED_TAX_RATE", "not-a-number")
    monkeypatch.setenv("CHAT_STREAMING", "no")
    monkeypatch.setenv("SCORE_MODEL", "gpt-4o")
    cfg = get_config()
    assert cfg["reference_gas_price"] == 3.9
    assert cfg["estimated_tax_rate"] is None
    assert cfg["chat_streaming"] is False
    assert cfg["score_model"] == "gpt-4o"


def test_events_jsonl(tmp_path, monkeypatch):
    path = tmp_path / "ev" / "events.jsonl"
    monkeypatch.setenv("NURSECALC_EVENTS_PATH", str(path))
    publish("ContractSaved", {"contract_id": "a"})
    publish("ChatFailed", {"error": ValueError("x")})
    assert path.exists()
    assert [e["type"] for e in read_events()] == ["ContractSaved", "ChatFailed"]
    saved = read_events("ContractSaved")
    assert saved[0]["payload"] == {"contract_id": "a"}
    assert saved[0]["ts"].endswith("Z")


def test_llm_status_tracking(monkeypatch):
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    llm_status.reset_llm_status()
    s = llm_status.get_llm_status(api_key="sk-x")
    assert s["api_key_set"] is True
    assert s["last_success"] is None
    assert s["model"] == "gpt-4o-mini"

    llm_status.record_llm_call_start("gpt-4o")
    llm_status.record_llm_call_end(False, "TimeoutError()")
    s = llm_status.get_llm_status(api_key="sk-x")
    assert s["model"] == "gpt-4o"
    assert s["last_success"] is False
    assert s["last_error"] == "TimeoutError()"
    assert (s["calls"], s["failures"]) == (1, 1)
    assert s["last_call"]
