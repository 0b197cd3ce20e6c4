# societyhub/blueprints/buildings/__init__.py
"""
Buildings Blueprint

Responsible for:
- Societies
- Blocks, floors and units inside a society
"""

from flask import Blueprint

buildings_bp = Blueprint('buildings', __name__, url_prefix='/buildings')

# Import routes after blueprint creation to avoid circular imports
from . import routes
