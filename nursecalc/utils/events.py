# nursecalc/utils/events.py
import json, os
from datetime import datetime, timezone
from typing import Dict, Any, List


def events_path() -> str:
    return os.environ.get("NURSECALC_EVENTS_PATH", os.path.join("data", "events.jsonl"))


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    path = events_path()
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    record = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "type": event_type,
        "payload": payload,
    }
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


def read_events(event_type: str = None) -> List[Dict[str, Any]]:
    path = events_path()
    if not os.path.exists(path):
        return []
    out = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError:
                continue
            if event_type and rec.get("type") != event_type:
                continue
            out.append(rec)
    return out
