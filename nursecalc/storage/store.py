# nursecalc/storage/store.py
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from dataclasses import asdict, is_dataclass
from datetime import datetime, date, timezone
import json
import os

from pydantic import ValidationError

from nursecalc.chat.models import ChatMessage
from nursecalc.utils.events import publish
from nursecalc.validation.json_schema_validator import validate_record
from nursecalc.valuation.contracts import ContractInput

API_KEY_SETTING = "openai_api_key"


def _data_dir() -> Path:
    # resolved per call so tests can chdir into a tmp dir
    return Path(os.environ.get("NURSECALC_DATA_DIR", "data"))


def _contracts_path() -> Path:
    return _data_dir() / "contracts.json"


def _settings_path() -> Path:
    return _data_dir() / "settings.json"


def _chat_path() -> Path:
    return _data_dir() / "chat.jsonl"


def _json_default(o: Any):
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    return str(o)


def _read_json(p: Path) -> Dict[str, Any]:
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"[STORE] unreadable {p}: {e}", flush=True)
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=_json_default), encoding="utf-8")
    tmp.replace(p)


# ---- contracts ----

def save_contract(contract: Union[ContractInput, Dict[str, Any]]) -> Dict[str, Any]:
    """Upsert by id. Raises ValueError when the record does not match contract.schema.json."""
    if isinstance(contract, ContractInput):
        record = contract.to_dict()
    elif isinstance(contract, dict):
        record = ContractInput.from_dict(contract).to_dict()
    else:
        raise TypeError(f"Unsupported record type for contract: {type(contract)}")

    errs = validate_record(record)
    if errs:
        raise ValueError("; ".join(errs))

    p = _contracts_path()
    data = _read_json(p)
    data[record["id"]] = record
    _write_json(p, data)
    publish("ContractSaved", {"contract_id": record["id"]})
    return record


def load_contracts() -> List[ContractInput]:
    """Stored contracts in save order; records that fail validation are skipped."""
    out: List[ContractInput] = []
    for cid, record in _read_json(_contracts_path()).items():
        if not isinstance(record, dict):
            continue
        errs = validate_record(record)
        if errs:
            print(f"[STORE] skipping invalid contract {cid}: {errs[0]}", flush=True)
            continue
        out.append(ContractInput.from_dict(record))
    return out


def delete_contract(contract_id: str) -> bool:
    p = _contracts_path()
    data = _read_json(p)
    if contract_id not in data:
        return False
    del data[contract_id]
    _write_json(p, data)
    publish("ContractDeleted", {"contract_id": contract_id})
    return True


# ---- settings ----

def set_setting(key: str, value: Any) -> None:
    p = _settings_path()
    data = _read_json(p)
    data[key] = {"value": value, "updated_at": datetime.now(timezone.utc).isoformat()}
    _write_json(p, data)


def get_setting(key: str, default: Any = None) -> Any:
    entry = _read_json(_settings_path()).get(key)
    if isinstance(entry, dict) and "value" in entry:
        return entry["value"]
    return default


# ---- chat transcript ----

def append_chat_message(message: Union[ChatMessage, Dict[str, Any]]) -> None:
    """
    Append-only write. Accepts a ChatMessage, a dataclass or a plain dict.
    Serializes datetimes to ISO-8601.
    """
    if isinstance(message, ChatMessage):
        payload = message.model_dump()
    elif is_dataclass(message):
        payload = asdict(message)
    elif isinstance(message, dict):
        payload = ChatMessage.model_validate(message).model_dump()
    else:
        raise TypeError(f"Unsupported record type for ChatMessage: {type(message)}")

    p = _chat_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        f.write(json.dumps(payload, ensure_ascii=False, default=_json_default) + "\n")


def load_chat_messages(limit: Optional[int] = None) -> List[ChatMessage]:
    """All stored messages (or the last `limit`), timestamps parsed back to datetime."""
    p = _chat_path()
    if not p.exists():
        return []

    out: List[ChatMessage] = []
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                out.append(ChatMessage.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                # tolerate torn or hand-edited lines
                continue
    if limit is not None:
        out = out[-limit:] if limit > 0 else []
    return out


def clear_chat_messages() -> None:
    p = _chat_path()
    if p.exists():
        p.unlink()
