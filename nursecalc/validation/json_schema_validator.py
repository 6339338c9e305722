from __future__ import annotations
from pathlib import Path
from functools import lru_cache
import json
from jsonschema import Draft7Validator

_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas" / "json"


@lru_cache(maxsize=None)
def load_schema(name: str = "contract") -> dict:
    p = _SCHEMA_DIR / f"{name}.schema.json"
    return json.loads(p.read_text(encoding="utf-8")) if p.exists() else {}


def validate_record(record: dict, name: str = "contract") -> list[str]:
    """Error strings for one record ("path: message"); empty when valid or no schema is found."""
    schema = load_schema(name)
    if not schema:
        return []
    validator = Draft7Validator(schema)
    return [f"{'.'.join([str(p) for p in e.path]) or '$'}: {e.message}" for e in validator.iter_errors(record)]


def validate_rows(rows: list[dict], name: str = "contract") -> list[dict]:
    """
    Returns a list of error dicts: {"index": i, "errors": [str, ...]}
    """
    problems = []
    for i, row in enumerate(rows or []):
        errs = validate_record(row, name)
        if errs:
            problems.append({"index": i, "errors": errs})
    return problems
