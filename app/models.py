# ==============================================================================
# app/models.py
# ------------------------------------------------------------------------------
# Defines the database schema using SQLAlchemy ORM models.
# ==============================================================================

from datetime import datetime
from app import db
from app.calculator.engine import AgencyPlanInputs, BusinessPlanDerived, BusinessPlanInputs, round_half_up
from app.calculator.schema import AGENCY_PLAN_INPUTS, BUSINESS_PLAN_DERIVED, BUSINESS_PLAN_INPUTS


class Agent(db.Model):
    """
    An agent of the agency. Business plans are keyed by the agent's id.
    """
    __tablename__ = 'agent'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False, index=True)
    email = db.Column(db.String(128))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Deleting an agent deletes all of their plans.
    business_plans = db.relationship('BusinessPlan', backref='agent', lazy='dynamic',
                                     cascade="all, delete-orphan")

    def __repr__(self):
        return f'<Agent {self.id}: {self.name}>'


class BusinessPlan(db.Model):
    """
    A named business plan of one agent: every user-entered input plus the
    derived figures as they were when the plan was last saved.
    """
    __tablename__ = 'business_plan'
    id = db.Column(db.Integer, primary_key=True)
    agent_id = db.Column(db.Integer, db.ForeignKey('agent.id'), nullable=False, index=True)
    agent_name = db.Column(db.String(128))
    name = db.Column(db.String(128))
    period_type = db.Column(db.String(16), default='yearly', nullable=False)

    # Inputs
    gross_commission_target = db.Column(db.Float)
    avg_commission_price_per_property = db.Column(db.Float)
    franchise_fee_percent = db.Column(db.Float)
    agent_percent = db.Column(db.Float)
    business_percent = db.Column(db.Float)
    fall_over_rate_percent = db.Column(db.Float)
    appraisal_to_listing_ratio_percent = db.Column(db.Float)
    listing_to_written_ratio_percent = db.Column(db.Float)
    connects_per_appraisal = db.Column(db.Float)
    calls_per_connect = db.Column(db.Float)
    working_days_per_year = db.Column(db.Float)
    calls_per_person = db.Column(db.Float)
    salary_per_hour = db.Column(db.Float)
    marketing_expenses = db.Column(db.Float)
    cost_per_third_party_call = db.Column(db.Float)
    cost_per_appraisal = db.Column(db.Float)
    how_many_calls = db.Column(db.Float)
    how_many_appraisals = db.Column(db.Float)

    # Derived (written by the plan store from engine output only)
    commission_average = db.Column(db.Integer)
    agent_commission = db.Column(db.Integer)
    business_commission = db.Column(db.Integer)
    settled_sales_target = db.Column(db.Integer)
    listings_target = db.Column(db.Integer)
    appraisals_target = db.Column(db.Integer)
    connects_for_appraisals = db.Column(db.Integer)
    phone_calls_required = db.Column(db.Integer)
    calls_per_day = db.Column(db.Integer)
    people_required = db.Column(db.Integer)
    salary_per_day = db.Column(db.Integer)
    total_salary_cost = db.Column(db.Integer)
    total_third_party_call_cost = db.Column(db.Integer)
    total_appraisal_cost = db.Column(db.Integer)
    net_commission = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, index=True, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<BusinessPlan {self.id}: agent={self.agent_id} name={self.name!r}>'

    def inputs(self):
        return BusinessPlanInputs.from_mapping({key: getattr(self, key) for key in BUSINESS_PLAN_INPUTS})

    def derived(self):
        return BusinessPlanDerived(**{key: getattr(self, key) for key in BUSINESS_PLAN_DERIVED})

    def apply(self, inputs, derived):
        """Copies engine inputs and output onto the row."""
        for key, value in inputs.to_dict().items():
            setattr(self, key, value)
        for key, value in derived.to_dict().items():
            setattr(self, key, value)


class AgencyPlan(db.Model):
    """
    The agency-wide business plan maintained by an administrator.
    Only inputs are stored; the per-agent table is recomputed on read.
    """
    __tablename__ = 'agency_plan'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)

    number_of_agents = db.Column(db.Integer)
    commission_amount = db.Column(db.Float)
    marketing_amount = db.Column(db.Float)
    business_commission_percent = db.Column(db.Float)
    agent_commission_percent = db.Column(db.Float)
    business_expenses_percent = db.Column(db.Float)
    agent_expenses_percent = db.Column(db.Float)
    super_percent = db.Column(db.Float)
    rent = db.Column(db.Float)
    staff_salary = db.Column(db.Float)
    internet = db.Column(db.Float)
    fuel = db.Column(db.Float)
    other_expenses = db.Column(db.Float)

    created_at = db.Column(db.DateTime, index=True, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<AgencyPlan {self.id}: owner={self.owner_id}>'

    def inputs(self):
        return AgencyPlanInputs.from_mapping({key: getattr(self, key) for key in AGENCY_PLAN_INPUTS})

    def apply(self, inputs):
        for key, value in inputs.to_dict().items():
            if key == 'number_of_agents' and value is not None:
                value = round_half_up(value)
            setattr(self, key, value)


class AppSetting(db.Model):
    """
    Key-value settings for the presentation layer (currency symbol,
    report footer), editable through the admin panel.
    """
    __tablename__ = 'app_setting'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), unique=True, nullable=False, index=True)
    value = db.Column(db.String(256), nullable=False)
    description = db.Column(db.String(512))  # For hints in the admin panel
    value_type = db.Column(db.String(32), default='string')  # 'float', 'int', 'string'

    def __repr__(self):
        return f'<AppSetting {self.key}: {self.value}>'

    def get_value(self):
        """Casts the string value to its correct Python type."""
        if self.value_type == 'float':
            return float(self.value)
        if self.value_type == 'int':
            return int(self.value)
        return self.value

    @classmethod
    def lookup(cls, key, default=None):
        setting = cls.query.filter_by(key=key).first()
        return setting.get_value() if setting else default
