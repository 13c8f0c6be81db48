from collections import namedtuple

import requests

from .const import HTTP_TIMEOUT
from .errors import TransportError
from .util import _getLogger


Request = namedtuple("Request", ["method", "url", "headers", "body"])
Response = namedtuple("Response", ["status", "headers", "body"])


class RequestsTransport(object):
    """
    Blocking HTTP transport built on `requests`. It drives the generator
    based operations of `igdclient.actions`, so every Gateway method that
    uses it blocks and returns its result.

    `session` is an optional `requests.Session`; `http_auth` and
    `http_headers` are sent with every request.
    """

    def __init__(self, session=None, timeout=HTTP_TIMEOUT, http_auth=None, http_headers=None):
        self.session = session
        self.timeout = timeout
        self.http_auth = http_auth
        self.http_headers = http_headers
        self._log = _getLogger("RequestsTransport")

    def __repr__(self):
        return "<RequestsTransport timeout=%r>" % self.timeout

    def send(self, request):
        headers = dict(self.http_headers or {})
        headers.update(request.headers)
        send = self.session.request if self.session is not None else requests.request
        try:
            resp = send(
                request.method,
                request.url,
                data=request.body,
                headers=headers,
                timeout=self.timeout,
                auth=self.http_auth,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError("%s %s failed: %s" % (request.method, request.url, exc)) from exc
        self._log.debug("%s %s: HTTP %s", request.method, request.url, resp.status_code)
        return Response(resp.status_code, resp.headers, resp.content)

    def run(self, operation):
        """
        Drive `operation` to completion, sending each request it yields, and
        return its result.
        """
        try:
            request = next(operation)
            while True:
                request = operation.send(self.send(request))
        except StopIteration as exc:
            return exc.value
        finally:
            operation.close()
