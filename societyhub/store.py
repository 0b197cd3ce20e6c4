"""
Record Store and Filter/Search Engine shared by every list screen.
"""
from datetime import date

from flask_login import current_user

from societyhub.extensions import cache
from societyhub.gateway import get_gateway
from utils import format_date


class RecordStore:
    """
    Current list of one resource for one console user.

    The list is replaced wholesale on every successful refresh and left as-is
    (last known good) when a refresh fails. It lives in the app cache so it
    survives between requests of the same user.
    """

    def __init__(self, resource, owner=None):
        self.resource = resource
        self.key = f'records:{resource}:{owner or "anonymous"}'

    @classmethod
    def for_user(cls, resource):
        owner = current_user.get_id() if current_user.is_authenticated else None
        return cls(resource, owner)

    @property
    def records(self):
        return list(cache.get(self.key) or [])

    def replace(self, records):
        cache.set(self.key, list(records))

    def refresh(self, gateway, page=1, limit=50, keep=None, **params):
        result = gateway.list(self.resource, page=page, limit=limit, **params)
        if result.ok:
            items = result.value.items
            if keep is not None:
                items = [r for r in items if keep(r)]
                result.value.items = items
            self.replace(items)
        return result

    def prepend(self, record):
        if record:
            self.replace([record] + self.records)

    def replace_one(self, record):
        if not record:
            return
        self.replace([record if r.get('id') == record.get('id') else r for r in self.records])

    def remove(self, record_id):
        self.replace([r for r in self.records if r.get('id') != str(record_id)])


def _scalar(value):
    return isinstance(value, (str, int, float, date)) and not isinstance(value, bool)


def _field_text(record, fields):
    keys = fields or [k for k, v in record.items() if _scalar(v)]
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        yield str(value)
        if isinstance(value, date):
            # tables show dates as dd/mm/yyyy
            yield format_date(value)


def filter_records(records, search='', filters=None, fields=None):
    """
    Subset of ``records`` matching the free-text search and filter selections.

    Search is a case-insensitive substring match over ``fields`` (every scalar
    field when not given). Each non-empty filter value must equal the record's
    value for that key. No search and no filters returns the records unchanged.
    """
    needle = (search or '').strip().lower()
    active = {k: str(v) for k, v in (filters or {}).items() if v not in (None, '')}
    if not needle and not active:
        return list(records)

    matched = []
    for record in records:
        if needle and not any(needle in text.lower() for text in _field_text(record, fields)):
            continue
        if any(str(record.get(k) if record.get(k) is not None else '') != v for k, v in active.items()):
            continue
        matched.append(record)
    return matched


def distinct_values(records, key):
    """Sorted distinct non-empty values of ``key``, for filter dropdowns."""
    return sorted({str(r[key]) for r in records if r.get(key) not in (None, '')}, key=str.lower)


# Cached helper functions for dropdown values
@cache.memoize(timeout=900)
def lookup_records(resource, owner=None):
    """
    Records of ``resource`` used to fill select boxes; None when unavailable.

    ``owner`` scopes per-account lists (employees) and is part of the cache key.
    """
    params = {'owner_id': owner} if owner is not None else {}
    result = get_gateway().list(resource, page=1, limit=500, **params)
    if not result.ok:
        return None
    return result.value.items


def lookup_options(resource, label='name', where=None, owner=None):
    records = lookup_records(resource, owner) or []
    if where is not None:
        records = [r for r in records if where(r)]
    return sorted(((r['id'], str(r.get(label) or r['id'])) for r in records), key=lambda o: o[1].lower())


def clear_lookups():
    """Clear all dropdown caches - call after adding/editing records"""
    cache.delete_memoized(lookup_records)
