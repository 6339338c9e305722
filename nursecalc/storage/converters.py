# nursecalc/storage/converters.py
import json
from typing import Any, Dict, Optional

from nursecalc.market.housing import split_location
from nursecalc.valuation.contracts import ContractInput, parse_number, round2
from nursecalc.valuation.engine import ContractValuationEngine


def to_json_ld(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> Dict[str, Any]:
    """schema.org JobPosting view of a contract, with the computed figures as additionalProperty."""
    eng = engine or ContractValuationEngine()
    m = eng.evaluate(c)
    city, state = split_location(c.location)

    doc: Dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "JobPosting",
        "identifier": c.id,
        "title": f"Travel Nurse - {c.specialty}" if c.specialty else "Travel Nurse",
        "employmentType": "TEMPORARY",
        "hiringOrganization": {"@type": "Organization", "name": c.facility_name or c.agency},
        "jobLocation": {
            "@type": "Place",
            "address": {"@type": "PostalAddress", "addressLocality": city, "addressRegion": state,
                        "addressCountry": "US"},
        },
        "baseSalary": {
            "@type": "MonetaryAmount",
            "currency": "USD",
            "value": {"@type": "QuantitativeValue", "value": parse_number(c.hourly_rate), "unitText": "HOUR"},
        },
        "workHours": f"{c.weekly_hours} hours/week" if c.weekly_hours else "",
        "additionalProperty": [
            {"@type": "PropertyValue", "name": "weeklyNonTaxableIncome", "value": round2(m.weekly_non_taxable_income)},
            {"@type": "PropertyValue", "name": "weeklyNetIncome", "value": m.weekly_net_income},
            {"@type": "PropertyValue", "name": "totalContractValue", "value": m.total_contract_value},
            {"@type": "PropertyValue", "name": "ratingScore", "value": m.rating_score},
            {"@type": "PropertyValue", "name": "contractLengthWeeks", "value": c.contract_length},
            {"@type": "PropertyValue", "name": "shiftType", "value": c.shift_type},
        ],
    }
    if c.start_date:
        doc["jobStartDate"] = c.start_date
    if c.end_date:
        doc["validThrough"] = c.end_date
    return doc


def export_json(c: ContractInput, engine: Optional[ContractValuationEngine] = None) -> str:
    return json.dumps(to_json_ld(c, engine), indent=2, ensure_ascii=False)
