# societyhub/extensions.py
"""
Extension singletons shared by the blueprints, bound to an app in create_app.
"""

from flask_login import LoginManager
from flask_migrate import Migrate
from flask_caching import Cache

# db and bcrypt are created next to the models that use them
from models import db, bcrypt, init_db_events

migrate = Migrate()
login_manager = LoginManager()
cache = Cache()


def init_extensions(app):
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    init_db_events(app)

    # per-user record lists and memoized dropdown lookups
    cache.init_app(app, config={
        'CACHE_TYPE': app.config.get('CACHE_TYPE', 'SimpleCache'),
        'CACHE_DEFAULT_TIMEOUT': app.config.get('CACHE_DEFAULT_TIMEOUT', 900),
    })

    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'
