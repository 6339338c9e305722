import pytest

from nursecalc.market.tax_rates import (
    TaxBracket, effective_rate, federal_effective_rate, federal_marginal_rate, flat_tax_data,
    get_state_tax_rates, state_tax_info,
)


def test_no_income_tax_states():
    for st in ("TX", "FL", "TN", "AK"):
        td = get_state_tax_rates(st, 120000)
        assert td.state_tax_rate == 0
        assert td.effective_tax_rate == 0
        assert td.estimated_annual_tax == 0


def test_flat_state_effective_equals_rate():
    assert get_state_tax_rates("AZ", 80000).effective_tax_rate == 2.5


def test_progressive_state_is_below_top_rate():
    td = get_state_tax_rates("ca", 200000)
    assert td.state_tax_rate == 9.3
    assert 0 < td.effective_tax_rate < 9.3
    assert td.special_notes.startswith("California")
    assert [d.type for d in td.deductions] == ["Standard Deduction", "Estimated Healthcare"]


def test_unknown_state_gets_estimate():
    info = state_tax_info("ZZ")
    assert info.base_rate == 5
    assert info.notes == "Using estimated tax rate."
    td = get_state_tax_rates("ZZ", 100000)
    assert td.effective_tax_rate == 5.0
    assert td.estimated_annual_tax == pytest.approx(5000)


def test_bracket_walk():
    brackets = [TaxBracket(10000, None, 20), TaxBracket(0, 10000, 10)]
    assert effective_rate(brackets, 20000) == 15.0
    assert effective_rate(brackets, 0) == 0.0
    assert effective_rate([], 50000) == 0.0


@pytest.mark.parametrize("income,rate", [(5000, 10), (50000, 22), (200000, 32), (600000, 37)])
def test_federal_marginal_rate(income, rate):
    assert federal_marginal_rate(income) == rate


def test_federal_effective_rate():
    assert federal_effective_rate(0) == 0.0
    assert federal_effective_rate(10000) == 10.0
    assert 10 < federal_effective_rate(100000) < 24


def test_flat_tax_data():
    td = flat_tax_data(100000)
    assert td.effective_tax_rate == 30.0
    assert td.estimated_annual_tax == 30000
    assert td.special_notes == "Flat 30% tax rate applied"
