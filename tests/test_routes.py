# tests/test_routes.py

from app.main import routes, store
from app.main.utils import PdfEngineUnavailable
from app.models import AgencyPlan, Agent, BusinessPlan


def _form(inputs, **extra):
    data = {name: '' if value is None else str(value) for name, value in inputs.to_dict().items()}
    data.update(extra)
    return data


def test_index_lists_agents(client, agent):
    response = client.get('/')
    assert response.status_code == 200
    assert b'Jane Citizen' in response.data


def test_empty_plan_page_shows_not_available(client, agent):
    response = client.get(f'/plans/{agent.id}')
    assert response.status_code == 200
    assert b'Business Plan: Jane Citizen' in response.data
    assert b'N/A' in response.data


def test_unknown_agent_is_404(client):
    assert client.get('/plans/999').status_code == 404


def test_recalculate_shows_results_without_saving(client, agent, full_inputs):
    response = client.post(f'/plans/{agent.id}', data=_form(full_inputs, recompute='Recalculate'))
    assert response.status_code == 200
    assert b'$540,000' in response.data
    assert b'$945,150' in response.data
    assert BusinessPlan.query.count() == 0


def test_partial_form_still_recalculates(client, agent):
    response = client.post(f'/plans/{agent.id}', data={
        'avg_commission_price_per_property': '600000', 'franchise_fee_percent': '10',
        'recompute': 'Recalculate'})
    assert response.status_code == 200
    assert b'$540,000' in response.data


def test_save_creates_plan_and_redirects(client, agent, full_inputs):
    response = client.post(f'/plans/{agent.id}',
                            data=_form(full_inputs, name='2025 plan', period_type='monthly', save='Save Plan'))
    assert response.status_code == 302

    plan = BusinessPlan.query.one()
    assert f'plan_id={plan.id}' in response.headers['Location']
    assert plan.name == '2025 plan'
    assert plan.period_type == 'monthly'
    assert plan.net_commission == 945_150

    page = client.get(response.headers['Location'])
    assert b'Business plan saved successfully!' in page.data
    assert b'$945,150' in page.data


def test_save_with_plan_id_updates_existing(client, agent, full_inputs):
    plan = store.save_plan(agent, full_inputs)
    response = client.post(f'/plans/{agent.id}', data=_form(full_inputs.replace(marketing_expenses=0),
                                                             plan_id=str(plan.id), save='Save Plan'))
    assert response.status_code == 302
    assert BusinessPlan.query.count() == 1
    assert BusinessPlan.query.one().net_commission == 995_150


def test_save_is_blocked_by_percentage_mismatch(client, agent, full_inputs):
    data = _form(full_inputs.replace(agent_percent=55, business_percent=44), save='Save Plan')
    response = client.post(f'/plans/{agent.id}', data=data)
    assert response.status_code == 200
    assert b'must add up to 100% (currently 99%)' in response.data
    assert BusinessPlan.query.count() == 0


def test_save_is_blocked_by_out_of_range_percent(client, agent, full_inputs):
    response = client.post(f'/plans/{agent.id}', data=_form(full_inputs.replace(franchise_fee_percent=150),
                                                             save='Save Plan'))
    assert response.status_code == 200
    assert b'Enter a percentage between 0 and 100.' in response.data
    assert BusinessPlan.query.count() == 0



def test_save_is_blocked_by_out_of_range_amount(client, agent, full_inputs):
    response = client.post(f'/plans/{agent.id}', data=_form(full_inputs.replace(gross_commission_target=1e20),
                                                             save='Save Plan'))
    assert response.status_code == 200
    assert b'Enter an amount between 0 and 1,000,000,000,000.' in response.data
    assert BusinessPlan.query.count() == 0

def test_get_loads_latest_plan(client, agent, full_inputs):
    store.save_plan(agent, full_inputs.replace(marketing_expenses=0))
    response = client.get(f'/plans/{agent.id}')
    assert b'$995,150' in response.data


def test_history_lists_plans_and_flashes_when_empty(client, agent, full_inputs):
    response = client.get(f'/plans/{agent.id}/history')
    assert b'No saved plans found. Create a new plan to get started.' in response.data

    store.save_plan(agent, full_inputs, name='Stretch target')
    response = client.get(f'/plans/{agent.id}/history')
    assert b'Stretch target' in response.data


def test_delete_plan_route(client, agent, full_inputs):
    plan = store.save_plan(agent, full_inputs)
    response = client.post(f'/plan/{plan.id}/delete', follow_redirects=True)
    assert b'Business plan deleted successfully!' in response.data
    assert BusinessPlan.query.count() == 0


def test_csv_export(client, agent, full_inputs):
    plan = store.save_plan(agent, full_inputs)
    response = client.get(f'/plan/{plan.id}/export.csv')
    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    assert 'attachment' in response.headers['Content-Disposition']
    text = response.data.decode('utf-8')
    assert text.startswith('Section,Field,Value\nAgent Information,Agent Name,Jane Citizen\n')
    assert 'Targets,Net Commission,"$945,150"' in text


def test_pdf_export(client, agent, full_inputs, monkeypatch):
    plan = store.save_plan(agent, full_inputs)
    rendered = {}

    def fake_render_pdf(html, brand=''):
        rendered.update(html=html, brand=brand)
        return b'%PDF-1.4 fake'

    monkeypatch.setattr(routes, 'render_pdf', fake_render_pdf)

    response = client.get(f'/plan/{plan.id}/export.pdf?view=1')
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.headers['Content-Disposition'].startswith('inline')
    assert response.data == b'%PDF-1.4 fake'
    assert 'Agent Business Plan' in rendered['html']
    assert '$945,150' in rendered['html']
    assert rendered['brand'] == 'Generated by RealRed Enterprises'


def test_pdf_export_without_engine_redirects_with_message(client, agent, full_inputs, monkeypatch):
    plan = store.save_plan(agent, full_inputs)

    def unavailable(html, brand=''):
        raise PdfEngineUnavailable('wkhtmltopdf is not installed or not on PATH.')

    monkeypatch.setattr(routes, 'render_pdf', unavailable)
    response = client.get(f'/plan/{plan.id}/export.pdf', follow_redirects=True)
    assert response.status_code == 200
    assert b'Failed to generate PDF: wkhtmltopdf is not installed' in response.data


def test_api_recompute(client, full_inputs):
    response = client.post('/api/recompute', json=full_inputs.replace(working_days_per_year=0).to_dict())
    assert response.status_code == 200
    payload = response.get_json()
    assert payload['derived']['commission_average'] == 540_000
    assert payload['derived']['calls_per_day'] is None
    assert payload['display']['calls_per_day'] == 'N/A'
    assert payload['display']['net_commission'] == '$945,150'
    assert payload['errors'] == []
    assert payload['can_save'] is True


def test_api_recompute_reports_validation_errors(client):
    response = client.post('/api/recompute', json={'agent_percent': '55', 'business_percent': '44'})
    payload = response.get_json()
    assert payload['can_save'] is False
    assert [e['type'] for e in payload['errors']] == ['MissingRequiredField', 'PercentageMismatch']
    assert payload['errors'][1]['field'] == 'agent_percent'


# --- Admin area ---

def test_admin_pages_require_login(client):
    response = client.get('/agency-plan')
    assert response.status_code == 302
    assert '/admin/login' in response.headers['Location']


def test_admin_login(client):
    response = client.post('/admin/login', data={'password': 'wrong'})
    assert b'Invalid password.' in response.data

    response = client.post('/admin/login', data={'password': 'test-admin'})
    assert response.status_code == 302
    with client.session_transaction() as session:
        assert session['admin_logged_in'] is True


def test_add_and_delete_agent(admin_client):
    response = admin_client.post('/agents', data={'name': 'Sam Lee', 'email': 'sam@example.com'},
                                 follow_redirects=True)
    assert b'Agent &#34;Sam Lee&#34; was added.' in response.data

    response = admin_client.post('/agents', data={'name': 'Sam Lee'})
    assert b'An agent with this name already exists.' in response.data

    agent = Agent.query.filter_by(name='Sam Lee').one()
    admin_client.post(f'/agent/delete/{agent.id}')
    assert Agent.query.count() == 0


def test_agency_plan_save_and_export(admin_client):
    data = {
        'number_of_agents': '2', 'commission_amount': '100000', 'marketing_amount': '10000',
        'business_commission_percent': '40', 'agent_commission_percent': '60',
        'business_expenses_percent': '30', 'agent_expenses_percent': '70', 'super_percent': '10',
        'rent': '2000', 'save': 'Save Plan',
    }
    response = admin_client.post('/agency-plan', data=data, follow_redirects=True)
    assert b'Business plan saved successfully!' in response.data
    assert b'$121,400' in response.data
    assert AgencyPlan.query.count() == 1

    response = admin_client.get('/agency-plan/export.csv')
    assert response.status_code == 200
    text = response.data.decode('utf-8')
    assert 'Agent Financials,Total,"$80,000","$120,000"' in text
    assert 'Additional Expenses,Total,"$2,000"' in text


def test_agency_plan_rejects_mismatched_split(admin_client):
    data = {'number_of_agents': '2', 'business_commission_percent': '50',
            'agent_commission_percent': '60', 'save': 'Save Plan'}
    response = admin_client.post('/agency-plan', data=data)
    assert b'must add up to 100% (currently 110%)' in response.data
    assert AgencyPlan.query.count() == 0


def test_agency_export_before_saving(admin_client):
    response = admin_client.get('/agency-plan/export.csv', follow_redirects=True)
    assert b'Save the agency plan before exporting it.' in response.data


def test_edit_setting_validates_numbers(admin_client, app_with_db):
    from app import db
    from app.models import AppSetting

    setting = AppSetting(key='DEFAULT_WORKING_DAYS', value='240', value_type='int')
    db.session.add(setting)
    db.session.commit()

    response = admin_client.post(f'/admin/setting/edit/{setting.id}', data={'value': 'many'})
    assert b'is not a valid int value.' in response.data

    response = admin_client.post(f'/admin/setting/edit/{setting.id}', data={'value': '230'})
    assert response.status_code == 302
    assert AppSetting.lookup('DEFAULT_WORKING_DAYS') == 230


def test_agency_recalculate_caps_agent_rows(admin_client):
    response = admin_client.post('/agency-plan', data={
        'number_of_agents': '200000', 'commission_amount': '100000',
        'business_commission_percent': '40', 'agent_commission_percent': '60', 'recompute': 'Recalculate'})
    assert response.status_code == 200
    assert b'<td>Agent 500</td>' in response.data
    assert b'<td>Agent 501</td>' not in response.data
    assert AgencyPlan.query.count() == 0


def test_plan_page_marks_cells_for_live_updates(client, agent):
    response = client.get(f'/plans/{agent.id}')
    assert b'data-field="net_commission"' in response.data
    assert b'/api/recompute' in response.data
