# ==============================================================================
# app/main/forms.py
# ------------------------------------------------------------------------------
# Defines web forms using Flask-WTF for user input and validation.
# Numeric plan fields are all optional: the engine recomputes on incomplete
# input, and the save-time rules live in app/calculator/validator.py.
# ==============================================================================

from flask_wtf import FlaskForm
from wtforms import (StringField, FloatField, IntegerField, SubmitField, SelectField,
                     PasswordField, TextAreaField, HiddenField)
from wtforms.validators import DataRequired, NumberRange, InputRequired, Optional, Length

from app.calculator.schema import MAX_AGENTS, MAX_AMOUNT, PERIOD_TYPES

PERCENT = [Optional(), NumberRange(min=0, max=100, message="Enter a percentage between 0 and 100.")]
AMOUNT = [Optional(), NumberRange(min=0, max=MAX_AMOUNT,
                                  message=f"Enter an amount between 0 and {MAX_AMOUNT:,}.")]


class AppSettingForm(FlaskForm):
    """Form for editing a single application setting."""
    value = TextAreaField('Value', validators=[DataRequired()], render_kw={'rows': 3})
    submit = SubmitField('Save Changes')


class AdminLoginForm(FlaskForm):
    """Form for admin login."""
    password = PasswordField('Password', validators=[InputRequired(message="Password is required.")])
    submit = SubmitField('Log In')


class AgentForm(FlaskForm):
    """Form for adding an agent."""
    name = StringField('Full Name', validators=[DataRequired(message="This field is required."), Length(max=128)])
    email = StringField('Email', validators=[Optional(), Length(max=128)])
    submit = SubmitField('Save Agent')


class BusinessPlanForm(FlaskForm):
    """Form for an agent business plan."""
    plan_id = HiddenField()
    name = StringField('Plan Name', validators=[Optional(), Length(max=128)])
    period_type = SelectField('Period', choices=[(p, p.capitalize()) for p in PERIOD_TYPES], default='yearly')

    # Commission structure
    avg_commission_price_per_property = FloatField('Average Commission Price per Property ($)', validators=AMOUNT)
    franchise_fee_percent = FloatField('Franchise Fee (%)', validators=PERCENT)
    agent_percent = FloatField('Agent Percentage (%)', validators=PERCENT)
    business_percent = FloatField('Business Percentage (%)', validators=PERCENT)

    # Targets
    gross_commission_target = FloatField('Gross Commission Target ($)', validators=AMOUNT)

    # Performance ratios
    fall_over_rate_percent = FloatField('Fall Over Rate (%)', validators=PERCENT)
    appraisal_to_listing_ratio_percent = FloatField('Appraisal to Listing Ratio (%)', validators=PERCENT)
    listing_to_written_ratio_percent = FloatField('Listing to Written Ratio (%)', validators=PERCENT)
    connects_per_appraisal = FloatField('Connects for Appraisal', validators=AMOUNT)
    calls_per_connect = FloatField('Calls for Connect', validators=AMOUNT)

    # Call effort and costs
    working_days_per_year = FloatField('Working Days per Year', validators=[Optional(), NumberRange(min=0, max=366)])
    calls_per_person = FloatField('Calls per Person per Day', validators=AMOUNT)
    salary_per_hour = FloatField('Salary per Hour ($)', validators=AMOUNT)
    marketing_expenses = FloatField('Marketing Expenses ($)', validators=AMOUNT)
    cost_per_third_party_call = FloatField('Cost per Third Party Call ($)', validators=AMOUNT)
    how_many_calls = FloatField('How Many Calls', validators=AMOUNT)
    cost_per_appraisal = FloatField('Cost per Appraisal ($)', validators=AMOUNT)
    how_many_appraisals = FloatField('How Many Appraisals', validators=AMOUNT)

    recompute = SubmitField('Recalculate')
    save = SubmitField('Save Plan')


class AgencyPlanForm(FlaskForm):
    """Form for the agency (admin) business plan."""
    number_of_agents = IntegerField('Number of Agents', validators=[Optional(), NumberRange(min=0, max=MAX_AGENTS)])
    commission_amount = FloatField('Commission Amount ($)', validators=AMOUNT)
    marketing_amount = FloatField('Marketing Amount ($)', validators=AMOUNT)
    business_commission_percent = FloatField('Business Commission (%)', validators=PERCENT)
    agent_commission_percent = FloatField('Agent Commission (%)', validators=PERCENT)
    business_expenses_percent = FloatField('Business Expenses (%)', validators=PERCENT)
    agent_expenses_percent = FloatField('Agent Expenses (%)', validators=PERCENT)
    super_percent = FloatField('Super (%)', validators=PERCENT)
    rent = FloatField('Rent ($)', validators=AMOUNT)
    staff_salary = FloatField('Staff Salary ($)', validators=AMOUNT)
    internet = FloatField('Internet ($)', validators=AMOUNT)
    fuel = FloatField('Fuel ($)', validators=AMOUNT)
    other_expenses = FloatField('Other Expenses ($)', validators=AMOUNT)

    recompute = SubmitField('Recalculate')
    save = SubmitField('Save Plan')
