# ==============================================================================
# app/main/store.py
# ------------------------------------------------------------------------------
# Reads and writes business plans. Validation and recomputation happen here,
# right before a plan is written, so a stored plan always carries derived
# figures that match its inputs.
# ==============================================================================

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.calculator.engine import recompute
from app.calculator.errors import PersistenceError, PlanNotFound
from app.calculator.schema import PERIOD_TYPES
from app.calculator.validator import validate, validate_agency_plan
from app.models import AgencyPlan, BusinessPlan


def _commit(action):
    # sqlite3 raises a bare OverflowError for integers beyond 64 bits.
    try:
        db.session.commit()
    except (SQLAlchemyError, OverflowError) as e:
        db.session.rollback()
        logging.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise PersistenceError(f"Could not {action}. Please try again.") from e


# --- Agent Business Plans ---

def get_latest_plan(agent_id):
    """Returns the agent's most recently created plan, or None."""
    return (BusinessPlan.query.filter_by(agent_id=agent_id)
            .order_by(BusinessPlan.created_at.desc(), BusinessPlan.id.desc())
            .first())


def list_plans(agent_id):
    """Returns all plans of an agent, newest first."""
    return (BusinessPlan.query.filter_by(agent_id=agent_id)
            .order_by(BusinessPlan.created_at.desc(), BusinessPlan.id.desc())
            .all())


def get_plan(plan_id, agent_id=None):
    query = BusinessPlan.query.filter_by(id=plan_id)
    if agent_id is not None:
        query = query.filter_by(agent_id=agent_id)
    plan = query.first()
    if plan is None:
        raise PlanNotFound(f"Business plan {plan_id} was not found.")
    return plan


def save_plan(agent, inputs, plan_id=None, name=None, period_type='yearly'):
    """
    Validates, recomputes and persists an agent business plan.

    Args:
        agent (Agent): Owner of the plan.
        inputs (BusinessPlanInputs): The user-entered fields.
        plan_id (int): Id of an existing plan of this agent to overwrite;
            None inserts a new plan.
        name (str): Optional plan name.
        period_type (str): One of PERIOD_TYPES; stored as-is.

    Returns:
        BusinessPlan: The stored row.

    Raises:
        PlanValidationError: The inputs failed the validation gate.
        PlanNotFound: plan_id does not exist for this agent.
        PersistenceError: The database rejected the write.
    """
    validate(inputs).raise_for_errors()
    derived = recompute(inputs)

    if period_type not in PERIOD_TYPES:
        period_type = 'yearly'

    now = datetime.utcnow()
    if plan_id is not None:
        plan = get_plan(plan_id, agent_id=agent.id)
        action = f"update business plan {plan_id}"
    else:
        plan = BusinessPlan(agent_id=agent.id, created_at=now)
        db.session.add(plan)
        action = f"create a business plan for {agent.name}"

    plan.agent_name = agent.name
    plan.name = name or plan.name or f"{agent.name} plan"
    plan.period_type = period_type
    plan.updated_at = now
    plan.apply(inputs, derived)

    _commit(action)
    logging.info(f"Saved business plan {plan.id} for agent {agent.id} ({agent.name}).")
    return plan


def delete_plan(plan_id, agent_id):
    """Deletes one plan of an agent."""
    plan = get_plan(plan_id, agent_id=agent_id)
    db.session.delete(plan)
    _commit(f"delete business plan {plan_id}")
    logging.info(f"Deleted business plan {plan_id} of agent {agent_id}.")


# --- Agency Plans ---

def get_latest_agency_plan(owner_id):
    return (AgencyPlan.query.filter_by(owner_id=owner_id)
            .order_by(AgencyPlan.created_at.desc(), AgencyPlan.id.desc())
            .first())


def save_agency_plan(owner_id, inputs, plan_id=None):
    """Validates and persists the agency plan inputs. Same errors as save_plan."""
    validate_agency_plan(inputs).raise_for_errors()

    now = datetime.utcnow()
    if plan_id is not None:
        plan = AgencyPlan.query.filter_by(id=plan_id, owner_id=owner_id).first()
        if plan is None:
            raise PlanNotFound(f"Agency plan {plan_id} was not found.")
    else:
        plan = AgencyPlan(owner_id=owner_id, created_at=now)
        db.session.add(plan)

    plan.updated_at = now
    plan.apply(inputs)
    _commit("save the agency plan")
    logging.info(f"Saved agency plan {plan.id} for owner {owner_id}.")
    return plan
