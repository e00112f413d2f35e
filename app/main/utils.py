# ==============================================================================
# app/main/utils.py
# ------------------------------------------------------------------------------
# Turns plan inputs and engine output into report sections for the web page,
# the CSV export and the PDF export.
# ==============================================================================

import io
import logging
import os
import shutil

import pandas as pd
import pdfkit
from flask import current_app

from app.calculator.schema import (ADDITIONAL_EXPENSE_FIELDS, AGENCY_PLAN_INPUTS, AGENCY_ROW_COLUMNS,
                                   BUSINESS_PLAN_DERIVED, BUSINESS_PLAN_INPUTS, BUSINESS_PLAN_SECTIONS)
from app.main.filters import NOT_AVAILABLE, format_currency, format_value
from app.models import AppSetting

ALL_PLAN_FIELDS = {**BUSINESS_PLAN_INPUTS, **BUSINESS_PLAN_DERIVED}


class PdfEngineUnavailable(RuntimeError):
    """Raised when wkhtmltopdf cannot be found."""


def report_settings():
    """Currency symbol and footer brand, from the settings table with config fallbacks."""
    return {
        'currency_symbol': AppSetting.lookup('CURRENCY_SYMBOL', '$'),
        'brand': AppSetting.lookup('REPORT_BRAND', current_app.config.get('REPORT_BRAND', '')),
    }


def _format_timestamp(value):
    return value.strftime('%Y-%m-%d %H:%M') if value else NOT_AVAILABLE


def plan_display(inputs, derived, symbol='$'):
    """Every plan field as its display string, keyed by field name."""
    values = {**inputs.to_dict(), **derived.to_dict()}
    return {name: format_value(values.get(name), spec['kind'], symbol)
            for name, spec in ALL_PLAN_FIELDS.items()}


def build_plan_sections(inputs, derived, agent_name=None, period_type=None,
                        created_at=None, updated_at=None, symbol='$'):
    """
    Lays out an agent business plan as report sections.

    Returns:
        list: dicts with 'title', 'columns' and 'rows' (lists of display strings).
        Sections built from plan fields also carry 'fields', the field name of each row.
    """
    display = plan_display(inputs, derived, symbol)
    sections = [{
        'title': 'Agent Information',
        'columns': ['Field', 'Value'],
        'rows': [['Agent Name', agent_name or NOT_AVAILABLE],
                 ['Period', (period_type or 'yearly').capitalize()]],
    }]
    for title, names in BUSINESS_PLAN_SECTIONS:
        sections.append({
            'title': title,
            'columns': ['Field', 'Value'],
            'rows': [[ALL_PLAN_FIELDS[name]['label'], display[name]] for name in names],
            'fields': list(names),
        })
    sections.append({
        'title': 'Metadata',
        'columns': ['Field', 'Value'],
        'rows': [['Created At', _format_timestamp(created_at)],
                 ['Updated At', _format_timestamp(updated_at)]],
    })
    return sections


def build_agency_sections(inputs, derived, created_at=None, updated_at=None, symbol='$'):
    """Lays out the agency plan: the per-agent financials table and the extra expenses."""
    columns = list(AGENCY_ROW_COLUMNS)
    agent_rows = [[row.name] + [format_currency(getattr(row, col), symbol) for col in columns]
                  for row in derived.agents]
    total_row = ['Total'] + [format_currency(derived.totals.get(col), symbol) for col in columns]

    expense_rows = [[AGENCY_PLAN_INPUTS[name]['label'], format_currency(getattr(inputs, name), symbol)]
                    for name in ADDITIONAL_EXPENSE_FIELDS]
    expense_rows.append(['Total', format_currency(derived.additional_expenses_total, symbol)])

    setting_rows = [[spec['label'], format_value(getattr(inputs, name), spec['kind'], symbol)]
                    for name, spec in AGENCY_PLAN_INPUTS.items() if name not in ADDITIONAL_EXPENSE_FIELDS]

    return [
        {'title': 'Plan Settings', 'columns': ['Field', 'Value'], 'rows': setting_rows},
        {'title': 'Agent Financials', 'columns': ['Agent'] + list(AGENCY_ROW_COLUMNS.values()),
         'rows': agent_rows + [total_row]},
        {'title': 'Additional Expenses', 'columns': ['Field', 'Value'], 'rows': expense_rows},
        {'title': 'Metadata', 'columns': ['Field', 'Value'],
         'rows': [['Created At', _format_timestamp(created_at)],
                  ['Updated At', _format_timestamp(updated_at)]]},
    ]


def export_csv(sections):
    """
    Writes report sections as CSV. Each section is its own block: a header
    row prefixed with 'Section', its rows, then a blank line.
    """
    buffer = io.StringIO()
    for section in sections:
        df = pd.DataFrame(section['rows'], columns=section['columns'])
        df.insert(0, 'Section', section['title'])
        df.to_csv(buffer, index=False, lineterminator='\n')
        buffer.write('\n')
    return buffer.getvalue().encode('utf-8')


def _resolve_wkhtmltopdf_path():
    """Config WKHTMLTOPDF_PATH first, then a PATH lookup."""
    configured = (current_app.config.get('WKHTMLTOPDF_PATH') or '').strip()
    if configured and os.path.isfile(configured):
        return configured
    return shutil.which('wkhtmltopdf')


def render_pdf(html, brand=''):
    """
    Renders report HTML to PDF bytes with pdfkit. wkhtmltopdf paginates long
    tables; every page gets a "Page x of y" footer.

    Raises:
        PdfEngineUnavailable: wkhtmltopdf is not installed.
    """
    path = _resolve_wkhtmltopdf_path()
    if not path:
        raise PdfEngineUnavailable(
            "wkhtmltopdf is not installed or not on PATH. Install it and/or set WKHTMLTOPDF_PATH.")

    options = {
        'page-size': 'A4',
        'encoding': 'UTF-8',
        'margin-top': '10mm',
        'margin-bottom': '15mm',
        'footer-font-size': '7',
        'footer-right': 'Page [page] of [topage]',
        'footer-left': brand or '',
        'quiet': '',
    }
    configuration = pdfkit.configuration(wkhtmltopdf=path)
    logging.info(f"Rendering PDF report with wkhtmltopdf at {path}")
    return pdfkit.from_string(html, False, options=options, configuration=configuration)
