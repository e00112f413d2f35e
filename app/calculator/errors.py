# ==============================================================================
# app/calculator/errors.py
# ------------------------------------------------------------------------------
# Exceptions raised around business plans. The engine itself never raises;
# these are used by the validation gate and the plan store.
# ==============================================================================


class PlanError(Exception):
    """Base class for all business plan errors."""


class PlanValidationError(PlanError):
    """A plan failed validation and must not be persisted."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class PercentageMismatch(PlanValidationError):
    """Two percentages that must split a whole do not add up to 100."""


class MissingRequiredField(PlanValidationError):
    """A field required for saving was left empty."""


class PlanNotFound(PlanError):
    """No plan exists with the given id for the given owner."""


class PersistenceError(PlanError):
    """The database rejected a read or write."""
