import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', f"sqlite:///{os.path.join(basedir, 'data', 'societyhub.db')}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Data-access backend: 'sql' uses the local database, 'rest' an external API
    BACKEND = os.environ.get('BACKEND', 'sql')
    BACKEND_URL = os.environ.get('BACKEND_URL', 'http://localhost:8000/api/v1/')
    BACKEND_TOKEN = os.environ.get('BACKEND_TOKEN')
    BACKEND_TIMEOUT = float(os.environ.get('BACKEND_TIMEOUT', '15'))

    PER_PAGE = int(os.environ.get('PER_PAGE', '50'))

    CACHE_TYPE = 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = 900  # 15 minutes

    # Session cookie security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.environ.get('FLASK_ENV') == 'production'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    BACKEND = 'sql'
