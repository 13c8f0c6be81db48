import threading
from functools import wraps

import http.server as httpserver

from lxml import etree
from requests.compat import urlparse

from igdclient.aio import AsyncTransport
from igdclient.const import NS_SOAP_ENV
from igdclient.transport import RequestsTransport, Request, Response
from tests.const import LOCALHOST, soap_fault


class SimpleMock(dict):
    """Case insensitive dict to mock HTTP response."""
    def __init__(self, *args, **kwargs):
        super(SimpleMock, self).__init__(*args, **kwargs)
        for k in list(self.keys()):
            v = super(SimpleMock, self).pop(k)
            self.__setitem__(k, v)

    def __setitem__(self, key, value):
        super(SimpleMock, self).__setitem__(str(key).lower(), value)

    def __getitem__(self, key):
        if key.lower() not in self:
            return None
        return super(SimpleMock, self).__getitem__(key.lower())

    def __setattr__(self, key, value):
        self.__setitem__(key, value)

    def __getattr__(self, key):
        return self.__getitem__(key)


class SimpleMockRequest(SimpleMock):
    """Case insensitive dict interface for an aiohttp Request object."""
    def update(self, request):
        self.clear()
        attributes = [
            "method",
            "host",
            "path",
            "path_qs",
            "query",
        ]
        self.headers = SimpleMock(request.headers)
        self.url = str(request.url)  # match requests interface
        self.url_object = request.url
        for attr in attributes:
            try:
                self[attr] = getattr(request, attr)
            except AttributeError:
                self[attr] = None


class FakeGateway(object):
    """
    Scripted IGD. GETs are answered from `documents`, keyed on URL path.
    POSTs are answered from `actions`, keyed on the action named in the
    SOAPAction header: a list of (status, body) answers used in order, the
    last one repeating, or a callable taking the request.
    """
    def __init__(self, documents=None, actions=None):
        self.load(documents, actions)

    def load(self, documents=None, actions=None):
        self.documents = dict(documents or {})
        self.actions = dict((k, v if callable(v) else list(v)) for k, v in (actions or {}).items())
        self.requests = []

    def respond(self, request):
        self.requests.append(request)
        if request.method == "GET":
            document = self.documents.get(urlparse(request.url).path)
            if document is None:
                return Response(404, {}, b"Not Found")
            return Response(200, {}, document.encode("utf-8"))

        soap_action = SimpleMock(request.headers)["soapaction"] or ""
        action = soap_action.strip('"').partition("#")[2]
        answers = self.actions.get(action)
        if answers is None:
            status, body = 500, soap_fault(401, "Invalid Action")
        elif callable(answers):
            status, body = answers(request)
        else:
            status, body = answers.pop(0) if len(answers) > 1 else answers[0]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return Response(status, {}, body)

    @property
    def posts(self):
        return [r for r in self.requests if r.method == "POST"]


class FakeTransport(RequestsTransport):
    """RequestsTransport that talks to a FakeGateway instead of the network."""
    def __init__(self, gateway):
        super(FakeTransport, self).__init__()
        self.gateway = gateway

    def send(self, request):
        return self.gateway.respond(request)


class FakeAsyncTransport(AsyncTransport):
    def __init__(self, gateway):
        self.gateway = gateway

    async def send(self, request):
        return self.gateway.respond(request)


class SequenceRandom(object):
    """Stand-in for random.Random proposing the given ports in order."""
    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.values.pop(0)


def echo_response(request):
    """
    Answer a SOAP request with a response carrying the same arguments, in the
    same order.
    """
    action = etree.fromstring(request.body)[0][0]
    qname = etree.QName(action)
    envelope = etree.Element("{%s}Envelope" % NS_SOAP_ENV, nsmap={"s": NS_SOAP_ENV})
    body = etree.SubElement(envelope, "{%s}Body" % NS_SOAP_ENV)
    response = etree.SubElement(
        body, "{%s}%sResponse" % (qname.namespace, qname.localname),
        nsmap={"u": qname.namespace})
    for child in action:
        etree.SubElement(response, child.tag).text = child.text
    return 200, etree.tostring(envelope, encoding="utf-8")


class _GatewayRequestHandler(httpserver.BaseHTTPRequestHandler):
    def _respond(self):
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else None
        resp = self.server.gateway.respond(
            Request(self.command, self.path, dict(self.headers.items()), body))
        self.send_response(resp.status)
        self.send_header("Content-Type", 'text/xml; charset="utf-8"')
        self.send_header("Content-Length", str(len(resp.body)))
        self.end_headers()
        self.wfile.write(resp.body)

    do_GET = _respond
    do_POST = _respond

    def log_message(self, *args):
        pass


def serve_gateway(gateway):
    """
    Serve `gateway` over HTTP on an ephemeral localhost port, in a daemon
    thread. Returns the server and its base URL.
    """
    httpd = httpserver.ThreadingHTTPServer((LOCALHOST, 0), _GatewayRequestHandler)
    httpd.gateway = gateway
    thread = threading.Thread(target=httpd.serve_forever)
    thread.daemon = True
    thread.start()
    return httpd, "http://%s:%s" % (LOCALHOST, httpd.server_address[1])


def async_test(f):
    """
    Decorator to create asyncio context for asyncio methods or functions.
    """
    @wraps(f)
    def g(*args, **kwargs):
        args[0].loop.run_until_complete(f(*args, **kwargs))
    return g
