"""
Gateway over an external REST backend.
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import requests
from flask import current_app

from .normalize import (
    error_message, normalize_record, page_numbers, to_backend, to_camel, unwrap_entity, unwrap_list,
    unwrap_permissions,
)
from .result import Ok, Err, Page


@dataclass(frozen=True)
class Endpoint:
    path: str
    list_method: str = 'GET'
    update_method: str = 'PATCH'
    detail_path: Optional[str] = None  # singular path for create/update/delete when it differs

    @property
    def detail(self):
        return self.detail_path or self.path


ENDPOINTS = {
    'employees': Endpoint('users/employee-list', list_method='POST', detail_path='users/employee'),
    'society_admins': Endpoint('admin/society-admins', update_method='PUT', detail_path='admin/society-admin'),
    'societies': Endpoint('admin/societies', update_method='PUT', detail_path='admin/society'),
    'blocks': Endpoint('buildings/blocks', update_method='PUT'),
    'floors': Endpoint('buildings/floors', update_method='PUT'),
    'units': Endpoint('buildings/units', update_method='PUT'),
    'events': Endpoint('events', update_method='PUT'),
    'listings': Endpoint('marketplace', update_method='PUT'),
    'sites': Endpoint('ehs/sites'),
    'contractors': Endpoint('ehs/contractors'),
    'checklists': Endpoint('ehs/checklists'),
    'debit_notes': Endpoint('ehs/safety-violation-debit-notes'),
    'statistics_boards': Endpoint('ehs/safety-statistics-boards'),
    'first_aid_cases': Endpoint('ehs/first-aid'),
}


class RestGateway:
    """Data access through the backend's REST API using a requests session."""

    def __init__(self, base_url, token=None, timeout=15, session=None):
        self.base_url = base_url.rstrip('/') + '/'
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    def _endpoint(self, resource):
        try:
            return ENDPOINTS[resource]
        except KeyError:
            raise KeyError(f'Unknown resource: {resource}')

    def _request(self, method, path, **kwargs):
        url = urljoin(self.base_url, path.lstrip('/'))
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            current_app.logger.warning(f'{method} {url} failed: {e}')
            return Err(f'Backend unavailable: {e.__class__.__name__}', status=503)

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if response.status_code >= 400:
            reason = error_message(payload)
            current_app.logger.warning(f'{method} {url} -> {response.status_code}: {reason}')
            return Err(reason, status=response.status_code)
        return Ok(payload)

    def list(self, resource, page=1, limit=50, **params):
        endpoint = self._endpoint(resource)
        query = {'page': page, 'limit': limit}
        owner_id = params.pop('owner_id', None)
        query.update({to_camel(k): v for k, v in params.items() if v not in (None, '')})

        if endpoint.list_method == 'POST':
            body = dict(query)
            if owner_id is not None:
                body['id'] = owner_id
            result = self._request('POST', endpoint.path, json=body)
        else:
            result = self._request('GET', endpoint.path, params=query)
        if not result.ok:
            return result

        items, pagination = unwrap_list(result.value)
        records = [normalize_record(resource, raw) for raw in items if isinstance(raw, dict)]
        page, total_pages, total = page_numbers(pagination, page, len(records))
        return Ok(Page(items=records, page=page, total_pages=total_pages, total=total))

    def get(self, resource, record_id):
        endpoint = self._endpoint(resource)
        result = self._request('GET', f'{endpoint.detail}/{record_id}')
        if not result.ok:
            return result
        raw = unwrap_entity(result.value)
        if raw is None:
            return Err('Record not found', status=404)
        return Ok(normalize_record(resource, raw))

    def create(self, resource, payload):
        endpoint = self._endpoint(resource)
        result = self._request('POST', endpoint.detail, json=to_backend(payload))
        return self._entity(resource, result)

    def update(self, resource, record_id, payload):
        endpoint = self._endpoint(resource)
        result = self._request(endpoint.update_method, f'{endpoint.detail}/{record_id}', json=to_backend(payload))
        return self._entity(resource, result)

    def delete(self, resource, record_id):
        endpoint = self._endpoint(resource)
        result = self._request('DELETE', f'{endpoint.detail}/{record_id}')
        if not result.ok:
            return result
        raw = unwrap_entity(result.value)
        return Ok(normalize_record(resource, raw) if raw else {'id': str(record_id)})

    def _entity(self, resource, result):
        # a success envelope without an entity still counts as success;
        # the caller refreshes its list instead of merging
        if not result.ok:
            return result
        raw = unwrap_entity(result.value)
        return Ok(normalize_record(resource, raw) if raw else None)

    def permissions(self, role):
        # the backend only answers for the authenticated account
        return Err('Role permission matrices are not available from this backend', status=501)

    def own_permissions(self, role):
        result = self._request('GET', 'permissions/me')
        if not result.ok:
            return result
        return Ok(unwrap_permissions(result.value))

    def transition(self, resource, record_id, action, **fields):
        """Workflow step exposed as ``PUT <detail>/<id>/<action>``."""
        endpoint = self._endpoint(resource)
        body = to_backend(fields) if fields else None
        result = self._request('PUT', f'{endpoint.detail}/{record_id}/{action}', json=body)
        return self._entity(resource, result)
