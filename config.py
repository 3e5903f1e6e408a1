# config.py
# Flask application configuration

import os

from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, '.env'))


def _bool_env(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


class Config:
    BASE_DIR = BASE_DIR
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(BASE_DIR, "instance", "som_popular.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me')  # set a random key in production
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Outgoing mail for participant notifications
    MAIL_ENABLED = _bool_env('MAIL_ENABLED', default=False)
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_USE_TLS = _bool_env('MAIL_USE_TLS', default=True)
    MAIL_USE_SSL = _bool_env('MAIL_USE_SSL', default=False)
    MAIL_SENDER = os.environ.get('MAIL_SENDER', 'Som Popular <noreply@sompopular.pt>')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret'
    MAIL_ENABLED = False
