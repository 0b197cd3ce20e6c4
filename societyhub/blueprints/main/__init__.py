# societyhub/blueprints/main/__init__.py
"""
Main Blueprint

Responsible for:
- Home screen with the modules the current role may open
"""

from flask import Blueprint

main_bp = Blueprint('main', __name__)

# Import routes after blueprint creation to avoid circular imports
from . import routes
