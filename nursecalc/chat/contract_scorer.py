# nursecalc/chat/contract_scorer.py
import json
import os
import re
from typing import Any, Optional

from pydantic import ValidationError

from nursecalc.chat.models import ContractScore
from nursecalc.utils.events import publish
from nursecalc.utils.llm_status import record_llm_call_start, record_llm_call_end
from nursecalc.valuation.contracts import ContractInput, format_money
from nursecalc.valuation.engine import ContractValuationEngine

SCORE_SYSTEM = ("You are an expert travel nurse contract analyst. "
                "Provide detailed analysis of travel nurse contracts in JSON format.")

SCORE_PROMPT = """You are an expert travel nurse contract analyzer. Analyze this contract and provide a detailed evaluation:

Contract Details:
- Facility: {facility}
- Location: {location}
- Specialty: {specialty}
- Years of Experience: {experience}
- Shift Type: {shift}
- Contract Length: {weeks} weeks
- Start Date: {start}
- Hourly Rate: ${rate}
- Weekly Hours: {hours}
- Total Compensation: ${total}
- Time Off Requests: {time_off}
- Season: {season}

Consider:
1. Market rates for {specialty} nurses with {experience} years of experience
2. Cost of living in {location}
3. Seasonal demand and timing
4. Shift differentials
5. Contract length and time off impact
6. Total compensation package

Return ONLY a JSON object with keys:
- score (integer 1-10)
- reasoning (string)
- pros (array of strings)
- cons (array of strings)
- recommendations (array of strings)
"""


def _extract_first_json_object(txt: str) -> Optional[str]:
    """First complete top-level {...} in txt; tolerates ```json fences and leading prose."""
    if not isinstance(txt, str) or not txt.strip():
        return None
    if "```" in txt:
        m = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", txt, re.IGNORECASE)
        if m:
            txt = m.group(1)

    start = txt.find("{")
    if start == -1:
        return None
    depth, in_str, esc = 0, False, False
    for i in range(start, len(txt)):
        ch = txt[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return txt[start:i + 1]
    return None


def parse_score(txt: str) -> Optional[ContractScore]:
    json_str = _extract_first_json_object(txt)
    if not json_str:
        return None
    try:
        return ContractScore.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, ValidationError) as e:
        print("[SCORE] could not parse model output:", repr(e), flush=True)
        return None


class ContractScorer:
    """
    Asks the chat model for a 1-10 contract score with pros/cons.
    `client` is anything exposing `chat.completions.create(...)` (the OpenAI SDK client by default).
    """
    def __init__(self, client: Any = None, model: Optional[str] = None,
                 engine: Optional[ContractValuationEngine] = None):
        self._client = client
        self.model = model or os.environ.get("SCORE_MODEL") or os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.engine = engine or ContractValuationEngine()

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI()  # uses env OPENAI_API_KEY
        return self._client

    def build_prompt(self, c: ContractInput) -> str:
        return SCORE_PROMPT.format(
            facility=c.facility_name,
            location=c.location,
            specialty=c.specialty or "Unspecified",
            experience=c.years_of_experience or "0",
            shift=c.shift_type,
            weeks=c.contract_length or "13",
            start=c.start_date or "Not specified",
            rate=c.hourly_rate,
            hours=c.weekly_hours,
            total=format_money(self.engine.total_contract_value(c)),
            time_off=", ".join(str(d) for d in c.planned_time_off) or "None",
            season=c.seasonality,
        )

    def score(self, c: ContractInput) -> Optional[ContractScore]:
        if not (c.facility_name and c.location and c.hourly_rate):
            return None

        prompt = self.build_prompt(c)
        record_llm_call_start(self.model)
        try:
            resp = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SCORE_SYSTEM},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.2,
            )
            text = resp.choices[0].message.content or ""
        except Exception as e:
            record_llm_call_end(False, repr(e))
            print("[SCORE] model call failed:", repr(e), flush=True)
            return None

        result = parse_score(text)
        record_llm_call_end(result is not None)
        if result is not None:
            publish("ContractScored", {"contract_id": c.id, "score": result.score})
        return result
