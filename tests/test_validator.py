# tests/test_validator.py

import pytest

from app.calculator.engine import AgencyPlanInputs, BusinessPlanInputs
from app.calculator.errors import MissingRequiredField, PercentageMismatch, PlanValidationError
from app.calculator.validator import validate, validate_agency_plan


def test_complete_plan_is_valid(full_inputs):
    result = validate(full_inputs)
    assert result.is_valid
    assert result.messages == []
    result.raise_for_errors()


def test_mismatched_percentages_block_saving():
    result = validate(BusinessPlanInputs(gross_commission_target=500_000, agent_percent=55, business_percent=44))
    assert not result.is_valid
    assert len(result.errors) == 1
    error = result.errors[0]
    assert isinstance(error, PercentageMismatch)
    assert error.field == 'agent_percent'
    assert error.message == ("Agent Percentage (55%) and Business Percentage (44%) "
                             "must add up to 100% (currently 99%).")


def test_fractional_percentages_that_sum_to_100_are_accepted():
    result = validate(BusinessPlanInputs(gross_commission_target=1, agent_percent=33.3, business_percent=66.7))
    assert result.is_valid


def test_single_percentage_is_not_a_mismatch():
    assert validate(BusinessPlanInputs(gross_commission_target=1, agent_percent=70)).is_valid


def test_gross_commission_target_is_required():
    result = validate(BusinessPlanInputs(agent_percent=60, business_percent=40))
    assert [type(e) for e in result.errors] == [MissingRequiredField]
    assert result.messages == ['Gross Commission Target is required.']


def test_all_errors_are_reported():
    result = validate(BusinessPlanInputs(agent_percent=10, business_percent=10))
    assert [type(e) for e in result.errors] == [MissingRequiredField, PercentageMismatch]


def test_raise_for_errors_raises_first_error():
    result = validate(BusinessPlanInputs(agent_percent=10, business_percent=10))
    with pytest.raises(PlanValidationError) as excinfo:
        result.raise_for_errors()
    assert isinstance(excinfo.value, MissingRequiredField)
    assert excinfo.value.field == 'gross_commission_target'


def test_agency_plan_requires_number_of_agents():
    result = validate_agency_plan(AgencyPlanInputs(commission_amount=1000))
    assert result.messages == ['Number of Agents is required.']


def test_agency_plan_checks_both_splits():
    result = validate_agency_plan(AgencyPlanInputs(
        number_of_agents=3, agent_commission_percent=60, business_commission_percent=30,
        agent_expenses_percent=50, business_expenses_percent=60))
    assert [e.field for e in result.errors] == ['agent_commission_percent', 'agent_expenses_percent']
    assert all(isinstance(e, PercentageMismatch) for e in result.errors)
    assert 'currently 90%' in result.messages[0]
    assert 'currently 110%' in result.messages[1]
