from app import db
from app.models import AppSetting

DEFAULT_SETTINGS = {
    # key: [value, description, value_type]
    'CURRENCY_SYMBOL': ['$', 'Symbol printed in front of money amounts on screen and in reports', 'string'],
    'REPORT_BRAND': ['Generated by RealRed Enterprises', 'Footer text of exported PDF reports', 'string'],
}

def seed_data():
    """Populates the database with default settings."""
    for key, data in DEFAULT_SETTINGS.items():
        setting = AppSetting.query.filter_by(key=key).first()
        if not setting: # Only add if it doesn't exist
            setting = AppSetting(key=key, value=data[0], description=data[1], value_type=data[2])
            db.session.add(setting)
            print(f'Seeding setting: {key}')

    db.session.commit()
    print('Seeding complete.')
