# societyhub/blueprints/people/__init__.py
"""
People Blueprint

Responsible for:
- Employees (reporting lines, branches, departments)
- Society admins and super admins
"""

from flask import Blueprint

people_bp = Blueprint('people', __name__, url_prefix='/people')

# Import routes after blueprint creation to avoid circular imports
from . import routes
