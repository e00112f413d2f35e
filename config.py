# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the Flask application.
# Uses environment variables for sensitive data to keep them out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    """
    Base configuration class. Contains default settings that can be overridden
    by environment-specific configurations.
    """
    # --- Security ---
    # Loaded from the environment; the fallback is for local development only.
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-should-really-set-a-secret-key-in-your-env-file'

    # Password for the admin area (agent management, agency plan, settings)
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'change-this-default-password'

    # --- Database Configuration ---
    # SQLite in the instance folder unless DATABASE_URL points elsewhere.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance/app.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Reports ---
    # Path to the wkhtmltopdf binary used by pdfkit. None means "look on PATH".
    WKHTMLTOPDF_PATH = os.environ.get('WKHTMLTOPDF_PATH') or None

    # Footer text on exported reports when no REPORT_BRAND setting is stored
    REPORT_BRAND = os.environ.get('REPORT_BRAND') or 'Generated by RealRed Enterprises'


class TestConfig(Config):
    """Configuration used by the test suite."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    ADMIN_PASSWORD = 'test-admin'
    SECRET_KEY = 'test-secret-key'
