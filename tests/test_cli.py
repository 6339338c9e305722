import importlib.util
import json
from pathlib import Path

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "value_contract.py"


def _load_cli():
    spec = importlib.util.spec_from_file_location("value_contract", _SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_cli_prints_metrics(tmp_path, capsys):
    path = tmp_path / "contracts.json"
    path.write_text(json.dumps([
        {"id": "a", "facilityName": "Mercy", "hourlyRate": "50", "weeklyHours": "36",
         "housingStipend": "500", "mealStipend": "100", "contractLength": "13"},
        {"id": "b", "hourlyRate": "40", "weeklyHours": "36"},
    ]))
    cli = _load_cli()
    assert cli.main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "Mercy" in out
    assert "Contract b" in out
    assert "25350" in out


def test_cli_profile_and_single_object(tmp_path):
    path = tmp_path / "one.json"
    path.write_text(json.dumps({"id": "a", "hourlyRate": "50", "weeklyHours": "36"}))
    cli = _load_cli()
    df = cli.metrics_table(cli.load_inputs(str(path)), "flat_display")
    assert len(df) == 1
    assert round(df.loc[0, "taxes/wk"], 2) == 540.0


def test_cli_empty_file(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]")
    assert _load_cli().main([str(path)]) == 1
