"""Stand-ins for the backend used by several test modules."""

from societyhub.gateway import Ok, Page


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError('No JSON body')
        return self._payload


class FakeSession:
    """Replays queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.headers = {}

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class ListGateway:
    """Gateway whose list() returns queued results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def list(self, resource, page=1, limit=50, **params):
        self.calls.append((resource, page, limit, params))
        return self.results.pop(0)


def page_of(*records):
    return Ok(Page(items=list(records), total=len(records)))
