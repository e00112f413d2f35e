from flask import Blueprint
from datetime import datetime

bp = Blueprint('main', __name__)

# Makes 'now' and the admin flag available in all templates
@bp.app_context_processor
def inject_globals():
    from flask import session
    return {'now': datetime.utcnow(), 'is_admin': bool(session.get('admin_logged_in'))}

# Import routes, filters, and forms at the bottom
from app.main import routes, filters, forms
