"""
Route guards: console roles and the module permission matrix
"""
from functools import wraps
from flask import redirect, url_for, flash, request
from flask_login import current_user

from societyhub.permissions import can


def _guard(allowed):
    """Build a decorator admitting logged-in users for whom ``allowed()`` holds."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return redirect(url_for('auth.login', next=request.path))
            if not allowed():
                flash('Access denied', 'danger')
                return redirect(url_for('main.index'))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def role_required(*roles):
    """
    Require one of the console roles. ``admin`` is always let through.

    Example:
        @role_required('manager')
        def staff_overview():
            pass
    """
    accepted = set(roles) | {'admin'}
    return _guard(lambda: getattr(current_user, 'role', None) in accepted)


def permission_required(module, action='view'):
    """
    Require ``action`` on ``module`` in the permission matrix of the user's role.

    Example:
        @permission_required('debit_notes', 'add')
        def raise_debit_note():
            pass
    """
    return _guard(lambda: can(module, action))
