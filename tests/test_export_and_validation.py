import json

from nursecalc.storage.converters import export_json, to_json_ld
from nursecalc.validation.json_schema_validator import validate_record, validate_rows
from nursecalc.valuation.contracts import ContractInput, new_contract


def test_new_contract_matches_schema():
    assert validate_record(new_contract().to_dict()) == []


def test_schema_errors():
    errs = validate_record({"hourlyRate": 50})
    assert any("'id' is a required property" in e for e in errs)
    assert any(e.startswith("hourlyRate:") for e in errs)

    problems = validate_rows([{"id": "a"}, {"id": "b", "transportationType": "boat"}])
    assert [p["index"] for p in problems] == [1]


def test_json_ld_job_posting():
    c = ContractInput(id="c1", facility_name="Mercy", location="Memphis, TN", specialty="ICU",
                      hourly_rate="50", weekly_hours="36", housing_stipend="500", meal_stipend="100",
                      contract_length="13", start_date="2024-06-01")
    doc = to_json_ld(c)
    assert doc["@type"] == "JobPosting"
    assert doc["title"] == "Travel Nurse - ICU"
    assert doc["hiringOrganization"]["name"] == "Mercy"
    assert doc["jobLocation"]["address"]["addressRegion"] == "TN"
    assert doc["baseSalary"]["value"]["value"] == 50.0
    assert doc["jobStartDate"] == "2024-06-01"
    props = {p["name"]: p["value"] for p in doc["additionalProperty"]}
    assert props["totalContractValue"] == 25350.0
    assert props["weeklyNetIncome"] == 1950.0

    assert json.loads(export_json(c)) == doc
