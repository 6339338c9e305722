from types import SimpleNamespace

from nursecalc.chat.contract_scorer import ContractScorer, parse_score
from nursecalc.utils import llm_status
from nursecalc.valuation.contracts import ContractInput

_REPLY = """Here is my analysis:
```json
{"score": 8, "reasoning": "Solid pay for {ICU}.", "pros": ["High rate"], "cons": ["Nights"],
 "recommendations": ["Negotiate housing"]}
```"""


class _FakeCompletions:
    def __init__(self, reply=None, exc=None):
        self.reply = reply
        self.exc = exc
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


def _scorer(fake):
    return ContractScorer(client=SimpleNamespace(chat=SimpleNamespace(completions=fake)), model="gpt-4o-mini")


def _contract(**kw):
    base = dict(id="c1", facility_name="Mercy", location="Memphis, TN", specialty="ICU",
                hourly_rate="50", weekly_hours="36", housing_stipend="500", meal_stipend="100",
                contract_length="13")
    base.update(kw)
    return ContractInput(**base)


def test_parse_score_variants():
    s = parse_score(_REPLY)
    assert s.score == 8
    assert s.reasoning == "Solid pay for {ICU}."
    assert s.pros == ["High rate"]

    assert parse_score('Sure! {"score": 7.4, "reasoning": "ok"} trailing').score == 7
    assert parse_score('{"score": 11}') is None
    assert parse_score("no json here") is None
    assert parse_score("") is None


def test_prompt_includes_total_compensation():
    prompt = _scorer(_FakeCompletions()).build_prompt(_contract(planned_time_off=["2024-07-04"]))
    assert "Facility: Mercy" in prompt
    assert "Total Compensation: $25350.00" in prompt
    assert "Time Off Requests: 2024-07-04" in prompt


def test_score_success(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NURSECALC_EVENTS_PATH", raising=False)
    llm_status.reset_llm_status()
    fake = _FakeCompletions(reply=_REPLY)
    result = _scorer(fake).score(_contract())
    assert result.score == 8
    assert fake.calls[0]["messages"][0]["role"] == "system"
    assert llm_status.get_llm_status(api_key="x")["last_success"] is True


def test_score_requires_core_fields():
    fake = _FakeCompletions(reply=_REPLY)
    assert _scorer(fake).score(_contract(facility_name="")) is None
    assert _scorer(fake).score(_contract(hourly_rate="")) is None
    assert fake.calls == []


def test_score_failure_returns_none():
    assert _scorer(_FakeCompletions(exc=RuntimeError("down"))).score(_contract()) is None
    assert _scorer(_FakeCompletions(reply="I cannot help")).score(_contract()) is None
