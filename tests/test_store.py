import json
from datetime import datetime

import pytest

from nursecalc.chat.models import ChatMessage
from nursecalc.storage import store
from nursecalc.utils.events import read_events
from nursecalc.valuation.contracts import ContractInput


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NURSECALC_DATA_DIR", raising=False)
    monkeypatch.delenv("NURSECALC_EVENTS_PATH", raising=False)


def test_save_load_delete_contract():
    c = ContractInput(id="c1", facility_name="Mercy", hourly_rate="50", planned_time_off=["2024-07-04"])
    store.save_contract(c)
    store.save_contract({"id": "c2", "hourlyRate": "60"})
    got = store.load_contracts()
    assert [x.id for x in got] == ["c1", "c2"]
    assert got[0] == c
    assert got[1].hourly_rate == "60"

    c.hourly_rate = "55"
    store.save_contract(c)
    assert store.load_contracts()[0].hourly_rate == "55"

    assert store.delete_contract("c1") is True
    assert store.delete_contract("c1") is False
    assert [x.id for x in store.load_contracts()] == ["c2"]
    assert len(read_events("ContractSaved")) == 3
    assert len(read_events("ContractDeleted")) == 1


def test_invalid_contract_rejected_and_skipped(tmp_path):
    with pytest.raises(ValueError):
        store.save_contract(ContractInput(id="bad", transportation_type="boat"))
    with pytest.raises(TypeError):
        store.save_contract(42)

    (tmp_path / "data").mkdir(exist_ok=True)
    (tmp_path / "data" / "contracts.json").write_text(json.dumps({
        "ok": {"id": "ok", "hourlyRate": "50"},
        "bad": {"id": "bad", "useCurrentGasPrice": "yes"},
    }))
    assert [c.id for c in store.load_contracts()] == ["ok"]


def test_settings_roundtrip():
    assert store.get_setting(store.API_KEY_SETTING) is None
    assert store.get_setting("home_address", "") == ""
    store.set_setting(store.API_KEY_SETTING, "sk-abc")
    assert store.get_setting(store.API_KEY_SETTING) == "sk-abc"
    raw = json.loads(open("data/settings.json", encoding="utf-8").read())
    assert "updated_at" in raw[store.API_KEY_SETTING]


def test_chat_transcript(tmp_path):
    store.append_chat_message(ChatMessage(role="user", content="hi"))
    store.append_chat_message({"role": "assistant", "content": "hello"})
    with open(tmp_path / "data" / "chat.jsonl", "a", encoding="utf-8") as f:
        f.write("{not json\n")

    msgs = store.load_chat_messages()
    assert [(m.role, m.content) for m in msgs] == [("user", "hi"), ("assistant", "hello")]
    assert isinstance(msgs[0].timestamp, datetime)
    assert [m.content for m in store.load_chat_messages(limit=1)] == ["hello"]

    with pytest.raises(TypeError):
        store.append_chat_message("hi")

    store.clear_chat_messages()
    assert store.load_chat_messages() == []


def test_data_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("NURSECALC_DATA_DIR", str(tmp_path / "elsewhere"))
    store.set_setting("k", 1)
    assert (tmp_path / "elsewhere" / "settings.json").exists()
