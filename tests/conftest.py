# tests/conftest.py

import pytest

from config import TestConfig


@pytest.fixture
def app_with_db():
    """
    Creates a new app instance for a test, sets up an in-memory database,
    and yields the app within an application context.
    """
    from app import create_app, db
    from app.seed import seed_data

    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        seed_data()
        yield app  # The tests will run here
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture
def admin_client(client):
    """A test client with an admin session."""
    with client.session_transaction() as session:
        session['admin_logged_in'] = True
    return client


@pytest.fixture
def agent(app_with_db):
    from app import db
    from app.models import Agent

    agent = Agent(name='Jane Citizen', email='jane@example.com')
    db.session.add(agent)
    db.session.commit()
    return agent


@pytest.fixture
def full_inputs():
    """A complete agent business plan. Expected figures are worked out in test_engine.py."""
    from app.calculator.engine import BusinessPlanInputs

    return BusinessPlanInputs(
        gross_commission_target=1_000_000,
        avg_commission_price_per_property=600_000,
        franchise_fee_percent=10,
        agent_percent=60,
        business_percent=40,
        fall_over_rate_percent=10,
        appraisal_to_listing_ratio_percent=40,
        listing_to_written_ratio_percent=50,
        connects_per_appraisal=10,
        calls_per_connect=5,
        working_days_per_year=250,
        calls_per_person=2,
        salary_per_hour=25,
        marketing_expenses=50_000,
        cost_per_third_party_call=2,
        cost_per_appraisal=150,
        how_many_calls=1000,
        how_many_appraisals=19,
    )
