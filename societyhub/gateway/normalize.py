"""
Ingress/egress mapping between backend payloads and canonical records.

Backends disagree on envelopes (``data`` / ``message`` / ``result``), on id
keys (``_id`` / ``id``) and on field spelling (``branch`` vs ``branch_id``,
``mobile`` vs ``phone``). Everything is converted here, once, into a plain
dict with snake_case keys, a string ``id``, ``date`` objects for date fields
and ``<ref>_name`` keys for populated references.
"""
import re
from datetime import date

from utils import parse_date, parse_integer

LIST_KEYS = ('records', 'items', 'admins', 'societies', 'employees', 'docs', 'rows')
ENTITY_KEYS = ('result', 'user', 'data')
DATE_FIELDS = frozenset({
    'dob', 'date', 'starts_on', 'ends_on', 'inspection_date', 'incident_date',
})
DEFAULT_ERROR = 'An error occurred during the API request'

_camel_boundary = re.compile(r'(?<!^)(?=[A-Z])')


def to_snake(key):
    return _camel_boundary.sub('_', key).lower()


def to_camel(key):
    head, *rest = key.split('_')
    return head + ''.join(part.title() for part in rest)


def record_id(raw):
    value = raw.get('_id', raw.get('id'))
    return str(value) if value not in (None, '') else ''


def name_of(value):
    """Display name of a reference that may be a plain string or a populated object."""
    if isinstance(value, dict):
        return value.get('name') or value.get('fullName') or value.get('societyName') or ''
    return value if isinstance(value, str) else ''


def ref_id(value):
    if isinstance(value, dict):
        return record_id(value) or None
    return str(value) if value not in (None, '') else None


def unwrap_list(payload):
    """Return ``(items, pagination)`` from any of the list envelopes in use."""
    if isinstance(payload, list):
        return payload, None
    if not isinstance(payload, dict):
        return [], None

    pagination = payload.get('pagination')
    for key in ('data', 'message', 'result'):
        value = payload.get(key)
        if isinstance(value, list):
            return value, pagination
        if isinstance(value, dict):
            for inner in LIST_KEYS:
                if isinstance(value.get(inner), list):
                    return value[inner], value.get('pagination') or pagination
    for key in LIST_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key], pagination
    return [], pagination


def unwrap_entity(payload):
    """Return the single entity inside ``payload`` or None when there is none."""
    if not isinstance(payload, dict):
        return None
    for key in ENTITY_KEYS:
        value = payload.get(key)
        if isinstance(value, dict) and ('_id' in value or 'id' in value):
            return value
    if '_id' in payload or 'id' in payload:
        return payload
    return None


def page_numbers(pagination, page, count):
    """``(page, total_pages, total)`` from a pagination block, falling back to the request."""
    if not isinstance(pagination, dict):
        pagination = {}
    return (
        max(parse_integer(pagination.get('page'), page), 1),
        max(parse_integer(pagination.get('totalPages'), 1), 1),
        max(parse_integer(pagination.get('total'), count), 0),
    )


def unwrap_permissions(payload):
    """Module permission entries of a ``permissions/me`` response; [] when absent."""
    data = payload.get('result', payload) if isinstance(payload, dict) else payload
    if isinstance(data, dict):
        data = data.get('modulePermissions') or data.get('module_permissions')
    if not isinstance(data, list):
        return []
    return [entry for entry in data if isinstance(entry, dict)]


def error_message(payload, default=DEFAULT_ERROR):
    if isinstance(payload, dict):
        for key in ('message', 'error', 'detail'):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict) and isinstance(value.get('message'), str):
                return value['message']
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return default


def canonical(raw):
    """Generic adapter used for every resource without a dedicated one."""
    record = {}
    for key, value in raw.items():
        if key in ('_id', '__v'):
            continue
        record[to_snake(key)] = value
    record['id'] = record_id(raw)

    for key, value in list(record.items()):
        if key in DATE_FIELDS:
            record[key] = parse_date(value) if value else None
        elif isinstance(value, dict):
            if key.endswith('_snapshot'):
                base = key[:-len('_snapshot')]
                record.setdefault(f'{base}_name', name_of(value))
                record.setdefault(f'{base}_id', ref_id(value))
            elif key.endswith('_id'):
                # populated reference, e.g. siteId: {_id, name}
                record[key] = ref_id(value)
                record.setdefault(f'{key[:-3]}_name', name_of(value))
            else:
                record.setdefault(f'{key}_id', ref_id(value))
                record.setdefault(f'{key}_name', name_of(value))
    return record


def _status(raw):
    if 'isActive' in raw:
        return 'Active' if raw['isActive'] else 'Inactive'
    return raw.get('status') or 'Inactive'


def adapt_employee(raw):
    record = canonical(raw)
    full_name = f"{raw.get('firstName') or ''} {raw.get('lastName') or ''}".strip()
    branch = raw.get('branch') or raw.get('branch_id') or raw.get('branchId')
    manager = raw.get('reportingManager') or raw.get('reportingManagerId')
    record.update(
        name=raw.get('name') or full_name or 'Unknown',
        mobile=raw.get('mobile') or raw.get('phone') or '',
        branch=name_of(branch),
        department=name_of(raw.get('department')),
        dob=parse_date(raw.get('dob') or raw.get('dateOfBirth') or ''),
        status=_status(raw),
        role=name_of(raw.get('role')),
        reporting_manager_id=ref_id(manager),
        reporting_manager_name=name_of(manager) or raw.get('reportingManagerName') or '',
    )
    return record


def adapt_society_admin(raw):
    record = canonical(raw)
    full_name = raw.get('fullName') or f"{raw.get('firstName') or ''} {raw.get('lastName') or ''}".strip()
    parts = full_name.split(' ')
    society_id = ref_id(raw.get('societyId'))
    record.update(
        full_name=full_name,
        first_name=raw.get('firstName') or parts[0],
        last_name=raw.get('lastName') or ' '.join(parts[1:]),
        society_id=society_id,
        society_name=raw.get('societyName') or name_of(raw.get('societyId')) or '',
        role=raw.get('roleKey') or name_of(raw.get('role')) or ('society_admin' if society_id else 'super_admin'),
        is_active=bool(raw.get('isActive', True)),
    )
    record.pop('role_id', None)
    return record


ADAPTERS = {
    'employees': adapt_employee,
    'society_admins': adapt_society_admin,
}


def normalize_record(resource, raw):
    return ADAPTERS.get(resource, canonical)(raw)


def to_backend(payload):
    """Outbound mapping: camelCase keys, ISO dates."""
    body = {}
    for key, value in payload.items():
        if isinstance(value, date):
            value = value.isoformat()
        body[to_camel(key)] = value
    return body
