# societyhub/gateway/__init__.py
"""
Data-access gateway

Every screen talks to its backend through one object exposing
list/get/create/update/delete/permissions and returning Ok/Err results.
Which backend is used is decided by the BACKEND config value.
"""

from flask import current_app

from .result import Ok, Err, Page
from .sql import SqlGateway
from .rest import RestGateway


def init_gateway(app):
    backend = app.config.get('BACKEND', 'sql')
    if backend == 'rest':
        gateway = RestGateway(
            app.config['BACKEND_URL'],
            token=app.config.get('BACKEND_TOKEN'),
            timeout=app.config.get('BACKEND_TIMEOUT', 15),
        )
    elif backend == 'sql':
        gateway = SqlGateway()
    else:
        raise RuntimeError(f"Unknown BACKEND '{backend}' (expected 'sql' or 'rest')")
    app.extensions['gateway'] = gateway
    app.logger.info(f'Data-access backend: {backend}')
    return gateway


def get_gateway():
    return current_app.extensions['gateway']


__all__ = ['Ok', 'Err', 'Page', 'SqlGateway', 'RestGateway', 'init_gateway', 'get_gateway']
