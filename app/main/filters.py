# ==============================================================================
# app/main/filters.py
# ------------------------------------------------------------------------------
# Defines custom Jinja2 template filters for the application. The same
# functions format values for the CSV and PDF exports, so every figure reads
# identically on screen and on paper.
# ==============================================================================

from app.calculator.engine import round_half_up, to_number
from app.main import bp

NOT_AVAILABLE = 'N/A'


def format_currency(value, symbol='$'):
    """1234567.4 -> "$1,234,567". Negative amounts keep the sign in front."""
    number = round_half_up(to_number(value))
    if number is None:
        return NOT_AVAILABLE
    sign = '-' if number < 0 else ''
    return f"{sign}{symbol}{abs(number):,}"


def format_hourly(value, symbol='$'):
    """25.5 -> "$25.50"."""
    number = to_number(value)
    if number is None:
        return NOT_AVAILABLE
    sign = '-' if number < 0 else ''
    return f"{sign}{symbol}{abs(number):,.2f}"


def format_percent(value):
    number = round_half_up(to_number(value))
    if number is None:
        return NOT_AVAILABLE
    return f"{number}%"


def format_integer(value):
    number = round_half_up(to_number(value))
    if number is None:
        return NOT_AVAILABLE
    return f"{number:,}"


def format_value(value, kind, symbol='$'):
    """Formats a value according to its display kind from the field schema."""
    if kind == 'currency':
        return format_currency(value, symbol)
    if kind == 'hourly':
        return format_hourly(value, symbol)
    if kind == 'percent':
        return format_percent(value)
    return format_integer(value)


@bp.app_template_filter('currency')
def currency_filter(value, symbol='$'):
    return format_currency(value, symbol)

