# societyhub/__init__.py - Application Factory Pattern
"""
Flask application factory for the society / facility admin console.
Used to create app instances for the server, the CLI and the tests.
"""

import logging
import os
import sys

from flask import Flask


def _configure_logging(app):
    # prefer stdout (good for Docker); enable file logging with LOG_TO_FILE=1
    if os.environ.get('LOG_TO_FILE') == '1':
        from logging.handlers import RotatingFileHandler
        try:
            os.makedirs('logs', exist_ok=True)
            file_handler = RotatingFileHandler('logs/app.log', maxBytes=10240, backupCount=3)
            file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)
        except OSError:
            # fallback to stderr if file logging cannot be configured
            app.logger.addHandler(logging.StreamHandler(sys.stderr))
            app.logger.warning('Could not configure file logging; logs will be sent to stderr')
    else:
        app.logger.addHandler(logging.StreamHandler(sys.stdout))
    app.logger.setLevel(logging.INFO)


def create_app(config_class=None):
    """
    Application Factory Pattern

    Args:
        config_class: Configuration class (default: Config from config.py)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        from config import Config
        config_class = Config
    app.config.from_object(config_class)
    if not app.config.get('SECRET_KEY') and not app.config.get('TESTING'):
        raise RuntimeError(
            "SECRET_KEY environment variable is required. "
            "Set it via: export SECRET_KEY='your-secure-random-key'"
        )

    _configure_logging(app)
    app.logger.info('Application startup')

    # Ensure data directory exists when using a local sqlite file
    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if db_uri.startswith('sqlite:///') and ':memory:' not in db_uri:
        db_dir = os.path.dirname(db_uri.replace('sqlite:///', ''))
        if db_dir and not os.path.exists(db_dir):
            try:
                os.makedirs(db_dir, exist_ok=True)
            except OSError:
                app.logger.warning(f'Could not create directory for sqlite DB: {db_dir}')

    # Initialize extensions
    from societyhub.extensions import init_extensions, login_manager
    init_extensions(app)

    from societyhub.gateway import init_gateway
    init_gateway(app)

    # User loader callback
    from models import db, User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Template helpers
    from utils import format_date
    from societyhub.permissions import can
    app.jinja_env.globals.update(can=can, format_date=format_date)
    app.jinja_env.filters['date'] = format_date

    # Register blueprints
    from societyhub.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp)

    from societyhub.blueprints.main import main_bp
    app.register_blueprint(main_bp)

    from societyhub.blueprints.admin import admin_bp
    app.register_blueprint(admin_bp)

    from societyhub.blueprints.people import people_bp
    app.register_blueprint(people_bp)

    from societyhub.blueprints.buildings import buildings_bp
    app.register_blueprint(buildings_bp)

    from societyhub.blueprints.community import community_bp
    app.register_blueprint(community_bp)

    from societyhub.blueprints.ehs import ehs_bp
    app.register_blueprint(ehs_bp)

    from societyhub.cli import register_commands
    register_commands(app)

    return app
