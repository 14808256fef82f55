"""Configuration classes selected by FLASK_ENV."""
import os
from dotenv import load_dotenv

load_dotenv()


def _database_url(default):
    db_url = os.environ.get('DATABASE_URL', default)
    # Heroku/Railway style URLs
    if db_url.startswith('postgres://'):
        db_url = db_url.replace('postgres://', 'postgresql+psycopg2://', 1)
    return db_url


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev_key_please_change')

    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///newsroom.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True, 'pool_recycle': 300}

    # OpenID Connect identity provider
    OIDC_CLIENT_ID = os.environ.get('OIDC_CLIENT_ID')
    OIDC_CLIENT_SECRET = os.environ.get('OIDC_CLIENT_SECRET')
    OIDC_METADATA_URL = os.environ.get('OIDC_METADATA_URL')

    # 'sql' or 'document'
    ARTICLE_STORE = os.environ.get('ARTICLE_STORE', 'sql')
    MONGO_URI = os.environ.get('MONGO_URI', 'mongodb://localhost:27017')
    MONGO_DB_NAME = os.environ.get('MONGO_DB_NAME', 'newsroom')

    LANGUAGES = os.environ.get('LANGUAGES', 'en,id').split(',')
    BABEL_DEFAULT_LOCALE = 'en'

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ARTICLE_STORE = 'sql'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
