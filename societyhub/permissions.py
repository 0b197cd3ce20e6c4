"""
Capability lookups: can role X perform action Y on module Z.

Matrices come from the data-access gateway (``role_permissions`` table or the
REST ``permissions/me`` endpoint) and are indexed once per request.
"""
import re

from flask import current_app, g
from flask_login import current_user

ACTIONS = ('view', 'add', 'edit', 'delete')
CONSOLE_ROLES = ('admin', 'manager', 'ehs_officer', 'viewer')

ACTION_SYNONYMS = {
    'all': 'all',
    'view': 'view',
    'list': 'view',
    'read': 'view',
    'add': 'add',
    'create': 'add',
    'edit': 'edit',
    'update': 'edit',
    'delete': 'delete',
    'remove': 'delete',
}

MODULES = (
    'employees', 'society_admins',
    'societies', 'blocks', 'floors', 'units',
    'events', 'listings',
    'sites', 'contractors', 'checklists', 'debit_notes', 'statistics_boards', 'first_aid_cases',
)

PEOPLE = ('employees', 'society_admins')
BUILDINGS = ('societies', 'blocks', 'floors', 'units')
COMMUNITY = ('events', 'listings')
EHS = ('sites', 'contractors', 'checklists', 'debit_notes', 'statistics_boards', 'first_aid_cases')

DEFAULT_PERMISSIONS = {
    'admin': {module: ['all'] for module in MODULES},
    'manager': dict(
        {module: ['all'] for module in PEOPLE + BUILDINGS + COMMUNITY},
        **{module: ['view'] for module in EHS},
    ),
    'ehs_officer': dict(
        {module: ['all'] for module in EHS},
        **{module: ['view'] for module in BUILDINGS},
    ),
    'viewer': {module: ['view'] for module in MODULES},
}

# 'DebitNotes', 'debit-notes' and 'debit_notes' all name the same module
_MODULE_KEYS = {re.sub(r'[^a-z]', '', module): module for module in MODULES}


def normalise_action(action):
    return ACTION_SYNONYMS.get((action or '').lower(), 'view')


def normalise_module(module_key):
    key = re.sub(r'[^a-z]', '', (module_key or '').lower())
    return _MODULE_KEYS.get(key, module_key)


def default_matrix(role):
    modules = DEFAULT_PERMISSIONS.get(role, {})
    return [{
        'role': role,
        'module_permissions': [{'module': m, 'actions': list(a)} for m, a in modules.items()],
    }]


class PermissionIndex:
    def __init__(self, index=None):
        self._index = index or {}

    @classmethod
    def from_matrices(cls, matrices):
        index = {}
        for matrix in matrices or []:
            entries = matrix.get('module_permissions') or matrix.get('modulePermissions') or []
            for entry in entries:
                module = entry.get('module') or ''
                if not module:
                    continue
                actions = index.setdefault(normalise_module(module), set())
                for action in entry.get('actions') or []:
                    actions.add(normalise_action(action))
        return cls(index)

    def can(self, module, action):
        actions = self._index.get(normalise_module(module))
        if not actions:
            return False
        if 'all' in actions:
            return True
        return normalise_action(action) in actions

    def actions(self, module):
        actions = self._index.get(normalise_module(module), set())
        if 'all' in actions:
            return set(ACTIONS)
        return set(actions)

    def __bool__(self):
        return bool(self._index)


def current_permissions():
    """Permission index for the logged-in console user, memoised on ``g``."""
    key = (current_user.get_id(), getattr(current_user, 'role', None))
    cached = g.get('permissions')
    if cached is not None and cached[0] == key:
        return cached[1]
    index = PermissionIndex()
    if current_user.is_authenticated:
        from societyhub.gateway import get_gateway
        result = get_gateway().own_permissions(current_user.role)
        if result.ok:
            index = PermissionIndex.from_matrices(result.value)
        else:
            current_app.logger.warning(f'Permission lookup failed for {current_user.username}: {result.reason}')
    g.permissions = (key, index)
    return index


def can(module, action='view'):
    return current_permissions().can(module, action)
