import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'classbook.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Database connection pooling
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 300,  # Recycle connections every 5 minutes
        'pool_pre_ping': True,  # Verify connections before use
        'pool_timeout': 20
    }

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Timezone Configuration - meeting dates and monthly reports use local time
    TIMEZONE = os.environ.get('TIMEZONE', 'Asia/Jakarta')

    # Money display
    CURRENCY_SYMBOL = os.environ.get('CURRENCY_SYMBOL', 'Rp')
    RECEIPT_PREFIX = os.environ.get('RECEIPT_PREFIX', 'RCP')

    # Internal re-attempts after losing an optimistic-lock race
    COMMIT_CONFLICT_RETRIES = int(os.environ.get('COMMIT_CONFLICT_RETRIES', 3))

    # Attended meetings after the last payment before a reminder is due
    PAYMENT_REMINDER_INTERVAL = int(os.environ.get('PAYMENT_REMINDER_INTERVAL', 3))

    # Application Info
    APP_NAME = os.environ.get('APP_NAME', 'Classbook')
    COMPANY_NAME = os.environ.get('COMPANY_NAME')

class DevelopmentConfig(Config):
    DEBUG = True
    FLASK_ENV = 'development'

class ProductionConfig(Config):
    DEBUG = False
    FLASK_ENV = 'production'

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    LOG_LEVEL = 'WARNING'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
