# ==============================================================================
# app/calculator/schema.py
# ------------------------------------------------------------------------------
# Defines the fields of the business plans: names, labels and display kinds.
# This schema is the single source of truth for the engine's input/output
# shapes, the persisted columns, the forms and the exported reports.
# ==============================================================================

# Display kinds understood by the presentation filters:
#   'currency' -> $1,234    'hourly' -> $25.50
#   'percent'  -> 12%       'integer' -> 1,234
BUSINESS_PLAN_INPUTS = {
    'gross_commission_target': {'label': 'Gross Commission Target', 'kind': 'currency'},
    'avg_commission_price_per_property': {'label': 'Average Commission Price per Property', 'kind': 'currency'},
    'franchise_fee_percent': {'label': 'Franchise Fee', 'kind': 'percent'},
    'agent_percent': {'label': 'Agent Percentage', 'kind': 'percent'},
    'business_percent': {'label': 'Business Percentage', 'kind': 'percent'},
    'fall_over_rate_percent': {'label': 'Fall Over Rate', 'kind': 'percent'},
    'appraisal_to_listing_ratio_percent': {'label': 'Appraisal to Listing Ratio', 'kind': 'percent'},
    'listing_to_written_ratio_percent': {'label': 'Listing to Written Ratio', 'kind': 'percent'},
    'connects_per_appraisal': {'label': 'Connects for Appraisal', 'kind': 'integer'},
    'calls_per_connect': {'label': 'Calls for Connect', 'kind': 'integer'},
    'working_days_per_year': {'label': 'Working Days per Year', 'kind': 'integer'},
    'calls_per_person': {'label': 'Calls per Person', 'kind': 'integer'},
    'salary_per_hour': {'label': 'Salary per Hour', 'kind': 'hourly'},
    'marketing_expenses': {'label': 'Marketing Expenses', 'kind': 'currency'},
    'cost_per_third_party_call': {'label': 'Cost per Third Party Call', 'kind': 'currency'},
    'cost_per_appraisal': {'label': 'Cost per Appraisal', 'kind': 'currency'},
    'how_many_calls': {'label': 'How Many Calls', 'kind': 'integer'},
    'how_many_appraisals': {'label': 'How Many Appraisals', 'kind': 'integer'},
}

# Listed in evaluation order.
BUSINESS_PLAN_DERIVED = {
    'commission_average': {'label': 'Commission Average', 'kind': 'currency'},
    'agent_commission': {'label': 'Agent Commission', 'kind': 'currency'},
    'business_commission': {'label': 'Business Commission', 'kind': 'currency'},
    'settled_sales_target': {'label': 'Settled Sales', 'kind': 'integer'},
    'listings_target': {'label': 'Listings', 'kind': 'integer'},
    'appraisals_target': {'label': 'Appraisals', 'kind': 'integer'},
    'connects_for_appraisals': {'label': 'Connects for Appraisals', 'kind': 'integer'},
    'phone_calls_required': {'label': 'Phone Calls to Achieve Appraisals', 'kind': 'integer'},
    'calls_per_day': {'label': 'Calls per Day', 'kind': 'integer'},
    'people_required': {'label': 'Number of People Required', 'kind': 'integer'},
    'salary_per_day': {'label': 'Salary per Day', 'kind': 'currency'},
    'total_salary_cost': {'label': 'Persons Salary', 'kind': 'currency'},
    'total_third_party_call_cost': {'label': 'Total Third Party Calls', 'kind': 'currency'},
    'total_appraisal_cost': {'label': 'Total Cost for Appraisals', 'kind': 'currency'},
    'net_commission': {'label': 'Net Commission', 'kind': 'currency'},
}

PERIOD_TYPES = ('daily', 'weekly', 'monthly', 'yearly')

# Report layout for the agent business plan, in the order sections are printed.
BUSINESS_PLAN_SECTIONS = [
    ('Commission Structure', [
        'avg_commission_price_per_property', 'franchise_fee_percent', 'commission_average',
        'agent_percent', 'business_percent', 'agent_commission', 'business_commission',
    ]),
    ('Targets', [
        'gross_commission_target', 'settled_sales_target', 'listings_target', 'appraisals_target',
        'connects_for_appraisals', 'phone_calls_required', 'calls_per_day', 'working_days_per_year',
        'calls_per_person', 'people_required', 'salary_per_hour', 'salary_per_day',
        'total_salary_cost', 'marketing_expenses', 'cost_per_third_party_call', 'how_many_calls',
        'total_third_party_call_cost', 'cost_per_appraisal', 'how_many_appraisals',
        'total_appraisal_cost', 'net_commission',
    ]),
    ('Performance Ratios', [
        'fall_over_rate_percent', 'appraisal_to_listing_ratio_percent',
        'listing_to_written_ratio_percent', 'connects_per_appraisal', 'calls_per_connect',
    ]),
]

# --- Agency (admin) business plan ---

AGENCY_PLAN_INPUTS = {
    'number_of_agents': {'label': 'Number of Agents', 'kind': 'integer'},
    'commission_amount': {'label': 'Commission Amount', 'kind': 'currency'},
    'marketing_amount': {'label': 'Marketing Amount', 'kind': 'currency'},
    'business_commission_percent': {'label': 'Business Commission Percentage', 'kind': 'percent'},
    'agent_commission_percent': {'label': 'Agent Commission Percentage', 'kind': 'percent'},
    'business_expenses_percent': {'label': 'Business Expenses Percentage', 'kind': 'percent'},
    'agent_expenses_percent': {'label': 'Agent Expenses Percentage', 'kind': 'percent'},
    'super_percent': {'label': 'Super Percentage', 'kind': 'percent'},
    'rent': {'label': 'Rent', 'kind': 'currency'},
    'staff_salary': {'label': 'Staff Salary', 'kind': 'currency'},
    'internet': {'label': 'Internet', 'kind': 'currency'},
    'fuel': {'label': 'Fuel', 'kind': 'currency'},
    'other_expenses': {'label': 'Other Expenses', 'kind': 'currency'},
}

AGENCY_ROW_COLUMNS = {
    'business_commission': 'Business Commission',
    'agent_commission': 'Agent Commission',
    'business_expenses': 'Business Expenses',
    'agent_expenses': 'Agent Expenses',
    'business_earnings': 'Business Earnings',
    'agent_earnings': 'Agent Earnings',
}

ADDITIONAL_EXPENSE_FIELDS = ['rent', 'staff_salary', 'internet', 'fuel', 'other_expenses']

# Upper bounds on user-entered amounts and on the agency table size.
MAX_AMOUNT = 1_000_000_000_000
MAX_AGENTS = 500
