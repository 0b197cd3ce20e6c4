# societyhub/blueprints/community/__init__.py
"""
Community Blueprint

Responsible for:
- Society events
- Marketplace listings and their review (approve / reject / sold)
"""

from flask import Blueprint

community_bp = Blueprint('community', __name__, url_prefix='/community')

# Import routes after blueprint creation to avoid circular imports
from . import routes
