# ==============================================================================
# app/calculator/validator.py
# ------------------------------------------------------------------------------
# The validation gate run before a plan is persisted. Recomputation never goes
# through here: the engine tolerates incomplete input, saving does not.
# ==============================================================================

from dataclasses import dataclass, field
from typing import List

from .engine import splits_whole, to_number
from .errors import MissingRequiredField, PercentageMismatch, PlanValidationError
from .schema import AGENCY_PLAN_INPUTS, BUSINESS_PLAN_INPUTS


@dataclass
class ValidationResult:
    errors: List[PlanValidationError] = field(default_factory=list)

    @property
    def is_valid(self):
        return not self.errors

    @property
    def messages(self):
        return [error.message for error in self.errors]

    def raise_for_errors(self):
        """Raises the first error, if any."""
        if self.errors:
            raise self.errors[0]


def _check_required(inputs, name, labels, errors):
    if to_number(getattr(inputs, name, None)) is None:
        errors.append(MissingRequiredField(f"{labels[name]['label']} is required.", field=name))


def _check_split(inputs, first, second, labels, errors):
    a = to_number(getattr(inputs, first, None))
    b = to_number(getattr(inputs, second, None))
    if a is None or b is None:
        return
    if not splits_whole(a, b):
        errors.append(PercentageMismatch(
            f"{labels[first]['label']} ({a:g}%) and {labels[second]['label']} ({b:g}%) "
            f"must add up to 100% (currently {a + b:g}%).",
            field=first,
        ))


def validate(inputs):
    """
    Validates an agent business plan before saving.

    Args:
        inputs (BusinessPlanInputs): The user-entered fields.

    Returns:
        ValidationResult: Empty errors list when the plan may be saved.
    """
    errors = []
    _check_required(inputs, 'gross_commission_target', BUSINESS_PLAN_INPUTS, errors)
    _check_split(inputs, 'agent_percent', 'business_percent', BUSINESS_PLAN_INPUTS, errors)
    return ValidationResult(errors)


def validate_agency_plan(inputs):
    """Validates the agency business plan before saving."""
    errors = []
    _check_required(inputs, 'number_of_agents', AGENCY_PLAN_INPUTS, errors)
    _check_split(inputs, 'agent_commission_percent', 'business_commission_percent',
                 AGENCY_PLAN_INPUTS, errors)
    _check_split(inputs, 'agent_expenses_percent', 'business_expenses_percent',
                 AGENCY_PLAN_INPUTS, errors)
    return ValidationResult(errors)
