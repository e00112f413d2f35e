# ==============================================================================
# app/main/routes.py
# ------------------------------------------------------------------------------
# Defines all user-facing routes for the main application blueprint.
# Every edit of a plan is recomputed by the engine before the page is drawn;
# saving goes through the validation gate and the plan store.
# ==============================================================================

from datetime import datetime
from functools import wraps
from flask import (render_template, request, flash, redirect, url_for,
                   current_app, session, Response, jsonify)
from sqlalchemy.exc import IntegrityError

from app import db
from app.main import bp
from app.models import Agent, AppSetting, BusinessPlan
from app.calculator.engine import (AgencyPlanInputs, BusinessPlanInputs, recompute,
                                   recompute_agency_plan)
from app.calculator.errors import PersistenceError, PlanNotFound, PlanValidationError
from app.calculator.validator import validate, validate_agency_plan
from app.main import store
from app.main.forms import (AdminLoginForm, AgencyPlanForm, AgentForm, AppSettingForm,
                            BusinessPlanForm)
from app.main.utils import (PdfEngineUnavailable, build_agency_sections, build_plan_sections,
                            export_csv, plan_display, render_pdf, report_settings)

# The admin area has a single shared login, so the agency plan has a single owner.
ADMIN_OWNER_ID = 'admin'

# --- Helper Functions ---

def admin_required(f):
    """Decorator to protect admin routes with session-based authentication."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get('admin_logged_in'):
            flash('You must log in to the admin panel to access this page.', 'warning')
            return redirect(url_for('main.admin_login'))
        return f(*args, **kwargs)
    return decorated_function


def _parse_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flash_form_errors(form):
    for field_name, errors in form.errors.items():
        label = getattr(form, field_name).label.text if hasattr(form, field_name) else field_name
        for error in errors:
            flash(f'{label}: {error}', 'danger')


def _file_response(payload, mimetype, filename, inline=False):
    disposition = 'inline' if inline else 'attachment'
    return Response(payload, mimetype=mimetype,
                    headers={'Content-Disposition': f'{disposition}; filename={filename}'})


def _pdf_response(title, sections, filename, settings):
    html = render_template('report_pdf.html', title=title, sections=sections,
                           brand=settings['brand'], generated_on=datetime.utcnow())
    try:
        pdf = render_pdf(html, brand=settings['brand'])
    except (PdfEngineUnavailable, OSError) as e:
        current_app.logger.error(f"PDF generation failed: {e}", exc_info=True)
        flash(f'Failed to generate PDF: {e}', 'danger')
        return None
    return _file_response(pdf, 'application/pdf', filename, inline=bool(request.args.get('view')))


# --- Agents ---

@bp.route('/')
def index():
    """Lists agents with links to their business plans."""
    agents = Agent.query.order_by(Agent.name).all()
    return render_template('index.html', agents=agents)


@bp.route('/agents', methods=['GET', 'POST'])
@admin_required
def manage_agents():
    """Lists agents and handles adding a new one."""
    form = AgentForm()
    if form.validate_on_submit():
        try:
            agent = Agent(name=form.name.data.strip(), email=(form.email.data or '').strip() or None)
            db.session.add(agent)
            db.session.commit()
            flash(f'Agent "{agent.name}" was added.', 'success')
            return redirect(url_for('main.manage_agents'))
        except IntegrityError:
            db.session.rollback()
            flash('An agent with this name already exists.', 'danger')
    agents = Agent.query.order_by(Agent.name).all()
    return render_template('agents.html', form=form, agents=agents)


@bp.route('/agent/delete/<int:agent_id>', methods=['POST'])
@admin_required
def delete_agent(agent_id):
    """Deletes an agent together with all of their plans."""
    agent = db.get_or_404(Agent, agent_id)
    name = agent.name
    db.session.delete(agent)
    db.session.commit()
    flash(f'Agent "{name}" and their plans were deleted.', 'success')
    return redirect(url_for('main.manage_agents'))


# --- Agent Business Plans ---

@bp.route('/plans/<int:agent_id>', methods=['GET', 'POST'])
def business_plan(agent_id):
    """Edits, recalculates and saves an agent's business plan."""
    agent = db.get_or_404(Agent, agent_id)
    settings = report_settings()
    plan = None

    if request.method == 'POST':
        form = BusinessPlanForm()
        # Recalculate from the raw submission so partially filled forms still show results.
        inputs = BusinessPlanInputs.from_mapping(request.form)
        plan_id = _parse_id(form.plan_id.data)

        if form.save.data:
            if not form.validate_on_submit():
                _flash_form_errors(form)
            else:
                result = validate(inputs)
                if not result.is_valid:
                    for message in result.messages:
                        flash(message, 'danger')
                else:
                    try:
                        plan = store.save_plan(agent, inputs, plan_id=plan_id, name=form.name.data,
                                               period_type=form.period_type.data)
                        flash('Business plan saved successfully!', 'success')
                        return redirect(url_for('main.business_plan', agent_id=agent.id, plan_id=plan.id))
                    except (PlanNotFound, PersistenceError) as e:
                        current_app.logger.error(f"Saving plan for agent {agent.id} failed: {e}")
                        flash(f'Failed to save business plan: {e}', 'danger')
    else:
        requested_id = _parse_id(request.args.get('plan_id'))
        if requested_id is not None:
            try:
                plan = store.get_plan(requested_id, agent_id=agent.id)
            except PlanNotFound as e:
                flash(str(e), 'warning')
        if plan is None:
            plan = store.get_latest_plan(agent.id)
        form = BusinessPlanForm(obj=plan)
        if plan is not None:
            form.plan_id.data = plan.id
        inputs = plan.inputs() if plan is not None else BusinessPlanInputs()

    derived = recompute(inputs)
    sections = build_plan_sections(
        inputs, derived, agent_name=agent.name, period_type=form.period_type.data,
        created_at=plan.created_at if plan else None, updated_at=plan.updated_at if plan else None,
        symbol=settings['currency_symbol'])
    return render_template('business_plan.html', agent=agent, form=form, plan=plan,
                           sections=sections, validation=validate(inputs))


@bp.route('/plans/<int:agent_id>/history')
def plan_history(agent_id):
    """Lists every saved plan of an agent."""
    agent = db.get_or_404(Agent, agent_id)
    plans = store.list_plans(agent.id)
    if not plans:
        flash('No saved plans found. Create a new plan to get started.', 'info')
    return render_template('plan_history.html', agent=agent, plans=plans,
                           currency_symbol=report_settings()['currency_symbol'])


@bp.route('/plan/<int:plan_id>/load')
def load_plan(plan_id):
    plan = db.get_or_404(BusinessPlan, plan_id)
    flash('Plan loaded for editing.', 'info')
    return redirect(url_for('main.business_plan', agent_id=plan.agent_id, plan_id=plan.id))


@bp.route('/plan/<int:plan_id>/delete', methods=['POST'])
def delete_plan(plan_id):
    plan = db.get_or_404(BusinessPlan, plan_id)
    agent_id = plan.agent_id
    try:
        store.delete_plan(plan_id, agent_id)
        flash('Business plan deleted successfully!', 'success')
    except (PlanNotFound, PersistenceError) as e:
        current_app.logger.error(f"Deleting plan {plan_id} failed: {e}")
        flash(f'Failed to delete business plan: {e}', 'danger')
    return redirect(url_for('main.plan_history', agent_id=agent_id))


def _stored_plan_sections(plan, settings):
    return build_plan_sections(plan.inputs(), plan.derived(), agent_name=plan.agent_name,
                               period_type=plan.period_type, created_at=plan.created_at,
                               updated_at=plan.updated_at, symbol=settings['currency_symbol'])


@bp.route('/plan/<int:plan_id>/export.csv')
def export_plan_csv(plan_id):
    plan = db.get_or_404(BusinessPlan, plan_id)
    sections = _stored_plan_sections(plan, report_settings())
    filename = f"business_plan_{plan.id}_{datetime.utcnow():%Y-%m-%d}.csv"
    return _file_response(export_csv(sections), 'text/csv', filename)


@bp.route('/plan/<int:plan_id>/export.pdf')
def export_plan_pdf(plan_id):
    plan = db.get_or_404(BusinessPlan, plan_id)
    settings = report_settings()
    filename = f"business_plan_{plan.id}_{datetime.utcnow():%Y-%m-%d}.pdf"
    response = _pdf_response('Agent Business Plan', _stored_plan_sections(plan, settings), filename, settings)
    if response is None:
        return redirect(url_for('main.business_plan', agent_id=plan.agent_id, plan_id=plan.id))
    return response


@bp.route('/api/recompute', methods=['POST'])
def api_recompute():
    """
    Recomputes a plan from a JSON body of input fields. The plan page calls
    it as the user types; nothing is persisted.
    """
    payload = request.get_json(silent=True) or {}
    inputs = BusinessPlanInputs.from_mapping(payload)
    derived = recompute(inputs)
    result = validate(inputs)
    return jsonify({
        'derived': derived.to_dict(),
        'display': plan_display(inputs, derived, report_settings()['currency_symbol']),
        'errors': [{'type': type(e).__name__, 'field': e.field, 'message': e.message}
                   for e in result.errors],
        'can_save': result.is_valid,
    })


# --- Agency (Admin) Business Plan ---

@bp.route('/agency-plan', methods=['GET', 'POST'])
@admin_required
def agency_plan():
    """Edits and saves the agency business plan."""
    settings = report_settings()
    plan = store.get_latest_agency_plan(ADMIN_OWNER_ID)

    if request.method == 'POST':
        form = AgencyPlanForm()
        inputs = AgencyPlanInputs.from_mapping(request.form)
        if form.save.data:
            if not form.validate_on_submit():
                _flash_form_errors(form)
            else:
                try:
                    store.save_agency_plan(ADMIN_OWNER_ID, inputs, plan_id=plan.id if plan else None)
                    flash('Business plan saved successfully!', 'success')
                    return redirect(url_for('main.agency_plan'))
                except PlanValidationError:
                    for message in validate_agency_plan(inputs).messages:
                        flash(message, 'danger')
                except (PlanNotFound, PersistenceError) as e:
                    current_app.logger.error(f"Saving agency plan failed: {e}")
                    flash(f'Failed to save business plan: {e}', 'danger')
    else:
        form = AgencyPlanForm(obj=plan)
        inputs = plan.inputs() if plan is not None else AgencyPlanInputs()

    derived = recompute_agency_plan(inputs)
    sections = build_agency_sections(inputs, derived,
                                     created_at=plan.created_at if plan else None,
                                     updated_at=plan.updated_at if plan else None,
                                     symbol=settings['currency_symbol'])
    return render_template('agency_plan.html', form=form, plan=plan, sections=sections)


def _agency_sections_or_none(settings):
    plan = store.get_latest_agency_plan(ADMIN_OWNER_ID)
    if plan is None:
        flash('Save the agency plan before exporting it.', 'warning')
        return None
    inputs = plan.inputs()
    return build_agency_sections(inputs, recompute_agency_plan(inputs), created_at=plan.created_at,
                                 updated_at=plan.updated_at, symbol=settings['currency_symbol'])


@bp.route('/agency-plan/export.csv')
@admin_required
def export_agency_csv():
    sections = _agency_sections_or_none(report_settings())
    if sections is None:
        return redirect(url_for('main.agency_plan'))
    filename = f"admin_business_plan_{datetime.utcnow():%Y-%m-%d}.csv"
    return _file_response(export_csv(sections), 'text/csv', filename)


@bp.route('/agency-plan/export.pdf')
@admin_required
def export_agency_pdf():
    settings = report_settings()
    sections = _agency_sections_or_none(settings)
    if sections is None:
        return redirect(url_for('main.agency_plan'))
    filename = f"admin_business_plan_{datetime.utcnow():%Y-%m-%d}.pdf"
    response = _pdf_response('Admin Business Plan', sections, filename, settings)
    if response is None:
        return redirect(url_for('main.agency_plan'))
    return response


# --- Admin Panel Routes ---

@bp.route('/admin/login', methods=['GET', 'POST'])
def admin_login():
    """Handles admin login."""
    form = AdminLoginForm()
    if form.validate_on_submit():
        if form.password.data == current_app.config.get('ADMIN_PASSWORD'):
            session['admin_logged_in'] = True
            flash('You have logged in successfully.', 'success')
            return redirect(url_for('main.manage_agents'))
        else:
            flash('Invalid password.', 'danger')
    return render_template('admin_login.html', form=form, title='Admin Login')


@bp.route('/admin/logout')
def admin_logout():
    """Handles admin logout."""
    session.pop('admin_logged_in', None)
    flash('You have logged out.', 'info')
    return redirect(url_for('main.index'))


@bp.route('/admin/settings', methods=['GET'])
@admin_required
def admin_settings():
    settings = AppSetting.query.order_by(AppSetting.key).all()
    return render_template('admin_settings.html', settings=settings)


@bp.route('/admin/setting/edit/<int:setting_id>', methods=['GET', 'POST'])
@admin_required
def edit_setting(setting_id):
    setting = db.get_or_404(AppSetting, setting_id)
    form = AppSettingForm(obj=setting)
    if form.validate_on_submit():
        new_value = form.value.data.strip()
        if setting.value_type in ('float', 'int'):
            try:
                float(new_value) if setting.value_type == 'float' else int(new_value)
            except ValueError:
                flash(f'"{new_value}" is not a valid {setting.value_type} value.', 'danger')
                return render_template('admin_form.html', form=form, title=f'Edit Setting: {setting.key}',
                                       description=setting.description)
        setting.value = new_value
        db.session.commit()
        flash(f'Setting "{setting.key}" was updated.', 'success')
        return redirect(url_for('main.admin_settings'))
    return render_template('admin_form.html', form=form, title=f'Edit Setting: {setting.key}',
                           description=setting.description)
