# ==============================================================================
# app/calculator/engine.py
# ------------------------------------------------------------------------------
# The financial projection engine. Maps the inputs of an agent business plan
# (or of the agency plan) to its derived targets and dollar figures.
#
# Everything here is pure: no database access, no Flask, no module state.
# Callers fetch inputs, call recompute() on every change, and store the result.
# ==============================================================================

import logging
import math
from dataclasses import asdict, dataclass, field, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import List, Optional

from .schema import ADDITIONAL_EXPENSE_FIELDS, AGENCY_ROW_COLUMNS, MAX_AGENTS

Number = Optional[float]

HOURS_PER_WORKING_DAY = 8


# --- Helper Functions ---

def to_number(value):
    """
    Coerces a raw field value to a float, or None when it is empty or unusable.
    Accepts numbers and strings such as "1,200", "$600000" or "10%".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(',', '').replace('$', '').replace('%', '')
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def round_half_up(value):
    """Rounds to the nearest whole unit, halves away from zero. None passes through."""
    if value is None:
        return None
    try:
        number = Decimal(str(value))
        if not number.is_finite():
            return None
        # Large floats need more digits than the default context carries.
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, number.adjusted() + 2)
            return int(number.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return None


def _divide(numerator, denominator):
    # Division guard: a missing, zero or negative denominator yields None,
    # as does a quotient too large to represent.
    if numerator is None or denominator is None or denominator <= 0:
        return None
    result = numerator / denominator
    return result if math.isfinite(result) else None


def _product(*operands):
    if any(op is None for op in operands):
        return None
    result = 1.0
    for op in operands:
        result *= op
    return result


def splits_whole(first, second):
    """True when two percentages together make exactly 100."""
    return abs((first + second) - 100) < 1e-9


# --- Agent Business Plan ---

@dataclass(frozen=True)
class BusinessPlanInputs:
    """User-entered fields of an agent business plan. Every field is nullable."""
    gross_commission_target: Number = None
    avg_commission_price_per_property: Number = None
    franchise_fee_percent: Number = None
    agent_percent: Number = None
    business_percent: Number = None
    fall_over_rate_percent: Number = None
    appraisal_to_listing_ratio_percent: Number = None
    listing_to_written_ratio_percent: Number = None
    connects_per_appraisal: Number = None
    calls_per_connect: Number = None
    working_days_per_year: Number = None
    calls_per_person: Number = None
    salary_per_hour: Number = None
    marketing_expenses: Number = None
    cost_per_third_party_call: Number = None
    cost_per_appraisal: Number = None
    how_many_calls: Number = None
    how_many_appraisals: Number = None

    @classmethod
    def from_mapping(cls, data):
        """Builds inputs from a form, JSON body or model row; unknown keys are ignored."""
        if data is None:
            data = {}
        getter = data.get if hasattr(data, 'get') else (lambda key: getattr(data, key, None))
        return cls(**{f.name: to_number(getter(f.name)) for f in fields(cls)})

    def replace(self, **changes):
        values = self.to_dict()
        values.update(changes)
        return BusinessPlanInputs(**values)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class BusinessPlanDerived:
    """Computed fields of an agent business plan. None means "not computable yet"."""
    commission_average: Optional[int] = None
    agent_commission: Optional[int] = None
    business_commission: Optional[int] = None
    settled_sales_target: Optional[int] = None
    listings_target: Optional[int] = None
    appraisals_target: Optional[int] = None
    connects_for_appraisals: Optional[int] = None
    phone_calls_required: Optional[int] = None
    calls_per_day: Optional[int] = None
    people_required: Optional[int] = None
    salary_per_day: Optional[int] = None
    total_salary_cost: Optional[int] = None
    total_third_party_call_cost: Optional[int] = None
    total_appraisal_cost: Optional[int] = None
    net_commission: Optional[int] = None

    def to_dict(self):
        return asdict(self)


def recompute(inputs):
    """
    Derives every target and dollar figure of an agent business plan.

    Fields are evaluated strictly in dependency order. Each money or count
    figure is rounded half-up as soon as it is computed, and later fields
    read the rounded value. A field whose operands are missing, or whose
    denominator is missing, zero or negative, is None, and so is everything
    downstream of it. Never raises.

    Args:
        inputs (BusinessPlanInputs): The user-entered fields.

    Returns:
        BusinessPlanDerived: The computed fields.
    """
    v = {f.name: to_number(getattr(inputs, f.name, None)) for f in fields(BusinessPlanInputs)}

    # Commission structure
    commission_average = None
    if v['avg_commission_price_per_property'] is not None and v['franchise_fee_percent'] is not None:
        commission_average = round_half_up(
            v['avg_commission_price_per_property'] * (1 - v['franchise_fee_percent'] / 100))

    agent_commission = business_commission = None
    agent_percent, business_percent = v['agent_percent'], v['business_percent']
    if (commission_average is not None and agent_percent is not None
            and business_percent is not None and splits_whole(agent_percent, business_percent)):
        agent_commission = round_half_up(commission_average * agent_percent / 100)
        business_commission = round_half_up(commission_average * business_percent / 100)

    # Sales funnel
    settled_sales_target = round_half_up(_divide(v['gross_commission_target'], agent_commission))

    # The fall-over factor inflates both the listings and the appraisals stage.
    fall_over_factor = None
    if v['fall_over_rate_percent'] is not None:
        fall_over_factor = 1 + v['fall_over_rate_percent'] / 100

    listing_ratio = v['listing_to_written_ratio_percent']
    listings_target = round_half_up(_divide(
        _product(settled_sales_target, fall_over_factor),
        listing_ratio / 100 if listing_ratio is not None else None))

    appraisal_ratio = v['appraisal_to_listing_ratio_percent']
    appraisals_target = round_half_up(_divide(
        _product(listings_target, fall_over_factor),
        appraisal_ratio / 100 if appraisal_ratio is not None else None))

    # Call effort
    connects_for_appraisals = round_half_up(_product(appraisals_target, v['connects_per_appraisal']))
    phone_calls_required = round_half_up(_product(connects_for_appraisals, v['calls_per_connect']))

    working_days = v['working_days_per_year']
    calls_per_day = round_half_up(_divide(phone_calls_required, working_days))

    people_required = None
    calls_per_person = v['calls_per_person']
    if (calls_per_person is not None and calls_per_person > 0
            and working_days is not None and working_days > 0):
        people = _divide(phone_calls_required, calls_per_person * working_days)
        if people is not None:
            people_required = math.ceil(people)

    # Costs
    salary_per_day = round_half_up(_product(v['salary_per_hour'], HOURS_PER_WORKING_DAY))
    total_salary_cost = round_half_up(_product(salary_per_day, people_required, working_days))
    total_third_party_call_cost = round_half_up(_product(v['cost_per_third_party_call'], v['how_many_calls']))
    total_appraisal_cost = round_half_up(_product(v['cost_per_appraisal'], v['how_many_appraisals']))

    net_commission = None
    if None not in (v['gross_commission_target'], v['marketing_expenses'],
                    total_appraisal_cost, total_third_party_call_cost):
        net_commission = round_half_up(
            v['gross_commission_target'] - v['marketing_expenses']
            - total_appraisal_cost - total_third_party_call_cost)

    derived = BusinessPlanDerived(
        commission_average=commission_average,
        agent_commission=agent_commission,
        business_commission=business_commission,
        settled_sales_target=settled_sales_target,
        listings_target=listings_target,
        appraisals_target=appraisals_target,
        connects_for_appraisals=connects_for_appraisals,
        phone_calls_required=phone_calls_required,
        calls_per_day=calls_per_day,
        people_required=people_required,
        salary_per_day=salary_per_day,
        total_salary_cost=total_salary_cost,
        total_third_party_call_cost=total_third_party_call_cost,
        total_appraisal_cost=total_appraisal_cost,
        net_commission=net_commission,
    )
    logging.debug(f"Recomputed business plan: {derived}")
    return derived


# --- Agency (Admin) Business Plan ---

@dataclass(frozen=True)
class AgencyPlanInputs:
    """User-entered fields of the agency business plan."""
    number_of_agents: Number = None
    commission_amount: Number = None
    marketing_amount: Number = None
    business_commission_percent: Number = None
    agent_commission_percent: Number = None
    business_expenses_percent: Number = None
    agent_expenses_percent: Number = None
    super_percent: Number = None
    rent: Number = None
    staff_salary: Number = None
    internet: Number = None
    fuel: Number = None
    other_expenses: Number = None

    @classmethod
    def from_mapping(cls, data):
        if data is None:
            data = {}
        getter = data.get if hasattr(data, 'get') else (lambda key: getattr(data, key, None))
        return cls(**{f.name: to_number(getter(f.name)) for f in fields(cls)})

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class AgencyAgentRow:
    name: str
    business_commission: Optional[int] = None
    agent_commission: Optional[int] = None
    business_expenses: Optional[int] = None
    agent_expenses: Optional[int] = None
    business_earnings: Optional[int] = None
    agent_earnings: Optional[int] = None


@dataclass(frozen=True)
class AgencyPlanDerived:
    agents: List[AgencyAgentRow] = field(default_factory=list)
    totals: dict = field(default_factory=dict)
    additional_expenses_total: Optional[int] = None


def _share(amount, percent):
    return round_half_up(_product(amount, percent / 100 if percent is not None else None))


def recompute_agency_plan(inputs):
    """
    Splits the agency's commission and marketing spend across its agents.

    Every agent row is identical: the plan models a uniform team. Totals sum
    the rows with missing values counted as zero; a total is None only when
    no row has a value for that column.
    """
    v = {f.name: to_number(getattr(inputs, f.name, None)) for f in fields(AgencyPlanInputs)}

    business_commission = _share(v['commission_amount'], v['business_commission_percent'])
    agent_commission = _share(v['commission_amount'], v['agent_commission_percent'])
    business_expenses = _share(v['marketing_amount'], v['business_expenses_percent'])
    agent_expenses = _share(v['marketing_amount'], v['agent_expenses_percent'])

    super_percent = v['super_percent']
    business_earnings = agent_earnings = None
    if None not in (business_commission, business_expenses, super_percent):
        business_earnings = round_half_up(business_commission - business_expenses * super_percent / 100)
    if None not in (agent_commission, agent_expenses, super_percent):
        agent_earnings = round_half_up(agent_commission + agent_expenses * super_percent / 100)

    agent_count = round_half_up(v['number_of_agents']) or 0
    if agent_count > MAX_AGENTS:
        logging.warning(f"Agency plan asked for {agent_count} agents; showing the first {MAX_AGENTS}.")
        agent_count = MAX_AGENTS
    agents = [
        AgencyAgentRow(
            name=f"Agent {i}",
            business_commission=business_commission,
            agent_commission=agent_commission,
            business_expenses=business_expenses,
            agent_expenses=agent_expenses,
            business_earnings=business_earnings,
            agent_earnings=agent_earnings,
        )
        for i in range(1, max(agent_count, 0) + 1)
    ]

    totals = {}
    for column in AGENCY_ROW_COLUMNS:
        values = [getattr(row, column) for row in agents if getattr(row, column) is not None]
        totals[column] = sum(values) if values else None

    expenses = [v[name] for name in ADDITIONAL_EXPENSE_FIELDS if v[name] is not None]
    additional_expenses_total = round_half_up(sum(expenses)) if expenses else None

    logging.debug(f"Recomputed agency plan for {len(agents)} agents. Totals: {totals}")
    return AgencyPlanDerived(agents=agents, totals=totals,
                             additional_expenses_total=additional_expenses_total)
