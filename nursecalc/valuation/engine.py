# nursecalc/valuation/engine.py
from typing import List

from nursecalc.valuation.contracts import (
    ContractInput,
    ComputedMetrics,
    RatingDetail,
    TakeHomePay,
    number_or,
    parse_number,
    round2,
)

ESTIMATED_TAX_RATE = 0.25       # applied to taxable wages
REFERENCE_GAS_PRICE = 3.50      # $/gal when "use current gas price" is ticked
DEFAULT_VEHICLE_MPG = 25.0
DEFAULT_CONTRACT_WEEKS = 13.0

# Personal-vehicle commute model: round trip, 5 workdays, 4 weeks
ROUND_TRIP = 2
WORKDAYS_PER_WEEK = 5
WEEKS_PER_MONTH = 4


class ContractValuationEngine:
    """
    Pure, total valuation of one travel contract.
    Blank or malformed numeric fields count as 0; nothing here raises.
    The instance only holds two constants, so it is safe to share across threads.
    """
    def __init__(self, tax_rate: float = ESTIMATED_TAX_RATE,
                 reference_gas_price: float = REFERENCE_GAS_PRICE):
        self.tax_rate = tax_rate
        self.reference_gas_price = reference_gas_price

    # ---- income ----
    def taxable_income(self, c: ContractInput) -> float:
        return parse_number(c.hourly_rate) * parse_number(c.weekly_hours)

    def non_taxable_income(self, c: ContractInput) -> float:
        return (parse_number(c.housing_stipend) + parse_number(c.meal_stipend)
                + parse_number(c.transportation_stipend) + parse_number(c.other_stipend))

    def take_home_pay(self, c: ContractInput) -> TakeHomePay:
        taxable = self.taxable_income(c)
        taxes = taxable * self.tax_rate
        non_taxable = self.non_taxable_income(c)
        return TakeHomePay(
            weekly_taxable_income=taxable,
            weekly_taxes=taxes,
            weekly_non_taxable_income=non_taxable,
            weekly_take_home=(taxable - taxes) + non_taxable,
        )

    # ---- expenses ----
    def transportation_expense(self, c: ContractInput) -> float:
        mode = (c.transportation_type or "").strip().lower()
        if mode in ("public", "rideshare"):
            # entered as a flat figure; no unit conversion
            return parse_number(c.transportation_cost)
        if mode == "personal":
            distance = parse_number(c.commute_distance)
            mpg = number_or(c.vehicle_mpg, DEFAULT_VEHICLE_MPG)
            if c.use_current_gas_price:
                gas_price = self.reference_gas_price
            else:
                gas_price = number_or(c.fuel_cost_per_gallon, self.reference_gas_price)
            monthly_fuel = (distance * ROUND_TRIP * WORKDAYS_PER_WEEK * WEEKS_PER_MONTH * gas_price) / mpg
            return monthly_fuel + parse_number(c.parking_cost)
        return 0.0

    def living_expense(self, c: ContractInput) -> float:
        return parse_number(c.housing_cost) + parse_number(c.food_cost) + parse_number(c.other_cost)

    def total_expense(self, c: ContractInput) -> float:
        # out-of-pocket only; stipends are income, never netted here
        return self.transportation_expense(c) + self.living_expense(c)

    def total_bonuses(self, c: ContractInput) -> float:
        return (parse_number(c.sign_on_bonus) + parse_number(c.completion_bonus)
                + parse_number(c.referral_bonus) + parse_number(c.other_bonus))

    # ---- bottom line ----
    def net_income(self, c: ContractInput) -> float:
        """Weekly take-home minus weekly expenses, bonuses excluded. Rounded to cents."""
        return round2(self.take_home_pay(c).weekly_take_home - self.total_expense(c))

    def total_contract_value(self, c: ContractInput) -> float:
        """Weekly figures scaled by contract length, plus one-time bonuses. Rounded to cents."""
        weeks = number_or(c.contract_length, DEFAULT_CONTRACT_WEEKS)
        total_from_weekly = self.take_home_pay(c).weekly_take_home * weeks
        total_expenses = self.total_expense(c) * weeks
        return round2(total_from_weekly - total_expenses + self.total_bonuses(c))

    # ---- rating ----
    def rating_score(self, c: ContractInput) -> int:
        score = 1
        total_value = self.total_contract_value(c)
        if total_value > 100000:
            score += 2
        elif total_value > 50000:
            score += 1

        weekly_net = self.net_income(c)
        if weekly_net > 2000:
            score += 2
        elif weekly_net > 1000:
            score += 1

        if self.total_expense(c) > 1000:
            score -= 1
        return max(1, min(5, score))

    def rating_details(self, c: ContractInput) -> List[RatingDetail]:
        details: List[RatingDetail] = []
        if self.total_contract_value(c) > 50000:
            details.append(RatingDetail(True, "High total contract value"))
        else:
            details.append(RatingDetail(False, "Low total contract value"))
        if self.net_income(c) > 1000:
            details.append(RatingDetail(True, "High weekly net income"))
        else:
            details.append(RatingDetail(False, "Low weekly net income"))
        if self.total_expense(c) < 500:
            details.append(RatingDetail(True, "Low expenses"))
        else:
            details.append(RatingDetail(False, "High expenses"))
        return details

    def evaluate(self, c: ContractInput) -> ComputedMetrics:
        pay = self.take_home_pay(c)
        transport = self.transportation_expense(c)
        living = self.living_expense(c)
        return ComputedMetrics(
            weekly_taxable_income=pay.weekly_taxable_income,
            weekly_non_taxable_income=pay.weekly_non_taxable_income,
            weekly_taxes=pay.weekly_taxes,
            weekly_take_home=pay.weekly_take_home,
            weekly_transportation_expense=transport,
            weekly_living_expense=living,
            weekly_total_expense=transport + living,
            weekly_net_income=self.net_income(c),
            total_bonuses=self.total_bonuses(c),
            total_contract_value=self.total_contract_value(c),
            rating_score=self.rating_score(c),
            rating_details=self.rating_details(c),
        )


def has_rating_inputs(c: ContractInput) -> bool:
    """The star rating is only shown once pay rate, hours and length are all filled in."""
    return all(str(v or "").strip() for v in (c.hourly_rate, c.weekly_hours, c.contract_length))
