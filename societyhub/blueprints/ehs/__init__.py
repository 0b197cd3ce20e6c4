# societyhub/blueprints/ehs/__init__.py
"""
EHS (Environment, Health & Safety) Blueprint

Responsible for:
- Site and contractor directories
- Equipment inspection checklists
- Safety violation debit notes
- Safety statistics boards
- First-aid treatment register
- EHS dashboard
"""

from flask import Blueprint

ehs_bp = Blueprint('ehs', __name__, url_prefix='/ehs')

# Import routes after blueprint creation to avoid circular imports
from . import routes
