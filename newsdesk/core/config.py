import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Newsdesk.
    Every value can be overridden through the environment (or a .env file),
    and again through Flask app.config before Newsdesk(app) is called.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Flat-file account store
    DATA_DIR = os.getenv('DATA_DIR', os.path.join(os.getcwd(), 'data'))
    ACCOUNTS_FILE = os.getenv('ACCOUNTS_FILE', os.path.join(DATA_DIR, 'accounts.json'))

    # Klaviyo API
    KLAVIYO_API_BASE = os.getenv('KLAVIYO_API_BASE', 'https://a.klaviyo.com/api')
    KLAVIYO_REVISION = os.getenv('KLAVIYO_REVISION', '2023-02-22')
    KLAVIYO_TIMEOUT = float(os.getenv('KLAVIYO_TIMEOUT', '30'))

    # Comma separated list, or '*' for any origin (the UI runs on its own dev server)
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Port for local server
    PORT = int(os.getenv('PORT', '3001'))


# Keys copied into app.config (unless already set) by Newsdesk.init_app
CONFIG_KEYS = [
    'SECRET_KEY',
    'DATA_DIR',
    'ACCOUNTS_FILE',
    'KLAVIYO_API_BASE',
    'KLAVIYO_REVISION',
    'KLAVIYO_TIMEOUT',
    'CORS_ORIGINS',
    'LOG_LEVEL',
    'PORT',
]
