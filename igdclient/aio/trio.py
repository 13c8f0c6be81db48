"""
trio backend: httpx for HTTP and `trio.socket` for SSDP.

Unlike the blocking and asyncio searches, which send from every IPv4
interface, this one sends from a single socket bound to
`SearchOptions.bind_addr` (all interfaces when unset), letting the routing
table pick the interface.
"""
import socket

import httpx
import trio

from . import AsyncTransport
from .. import ssdp
from ..const import DISCOVER_TIMEOUT, HTTP_TIMEOUT, MAX_RESPONSE_SIZE, ST_IGD
from ..errors import IGDError, NoGatewayFound, TransportError
from ..gateway import Gateway
from ..options import SearchOptions
from ..transport import Response
from ..util import _getLogger

_log = _getLogger("aio.trio")


class HttpxTransport(AsyncTransport):
    """
    HTTP transport on an `httpx.AsyncClient`. Without a `client` a
    short-lived one is opened for each request.
    """

    def __init__(self, client=None, timeout=HTTP_TIMEOUT, http_auth=None, http_headers=None):
        self.client = client
        self.timeout = timeout
        self.http_auth = tuple(http_auth) if http_auth else None
        self.http_headers = http_headers

    def __repr__(self):
        return "<HttpxTransport timeout=%r>" % self.timeout

    async def _request(self, client, request, headers):
        resp = await client.request(
            request.method,
            request.url,
            content=request.body,
            headers=headers,
            auth=self.http_auth,
            timeout=self.timeout,
        )
        _log.debug("%s %s: HTTP %s", request.method, request.url, resp.status_code)
        return Response(resp.status_code, resp.headers, resp.content)

    async def send(self, request):
        headers = dict(self.http_headers or {})
        headers.update(request.headers)
        try:
            if self.client is not None:
                return await self._request(self.client, request, headers)
            async with httpx.AsyncClient() as client:
                return await self._request(client, request, headers)
        except httpx.HTTPError as exc:
            raise TransportError("%s %s failed: %r" % (request.method, request.url, exc)) from exc


async def discover(search_target=ST_IGD, timeout=DISCOVER_TIMEOUT, options=None):
    """
    Asynchronously search for devices answering `search_target`, yielding a
    `ssdp.GatewayLocation` for each one as replies come in until `timeout`
    seconds have passed.
    """
    options = options or SearchOptions()
    if timeout <= 0:
        return

    try:
        sock = trio.socket.from_stdlib_socket(
            ssdp.make_search_socket(options.bind_addr or "0.0.0.0"))
    except socket.error as exc:
        raise TransportError("Unable to open a search socket: %s" % exc) from exc

    with sock:
        request = ssdp.ssdp_request(search_target, options.mx, options.broadcast_address)
        try:
            await sock.sendto(request, options.broadcast_address)
        except socket.error as exc:
            raise TransportError("Unable to send an SSDP search: %s" % exc) from exc

        collector = ssdp.SearchCollector(search_target)
        stop_wait = trio.current_time() + timeout
        while True:
            reply = None
            with trio.move_on_at(stop_wait):
                try:
                    reply = await sock.recvfrom(MAX_RESPONSE_SIZE)
                except socket.error as exc:
                    raise TransportError("Error receiving SSDP replies: %s" % exc) from exc
            if reply is None:
                break
            location = collector.feed(*reply)
            if location is not None:
                yield location


async def search_gateway(options=None, transport=None, **kwargs):
    """
    Asynchronous `ssdp.search_gateway` for trio: returns a `Gateway` whose
    methods are coroutines.
    """
    options = options or SearchOptions()
    transport = transport or HttpxTransport(timeout=options.http_timeout)
    error = None
    locations = discover(options.search_target, options.timeout, options)
    try:
        async for location in locations:
            try:
                return await Gateway.from_location(location, transport, **kwargs)
            except IGDError as exc:
                _log.debug("Skipping %s: %s", location, exc)
                error = exc
    finally:
        await locations.aclose()
    if error is not None:
        raise error
    raise NoGatewayFound("No gateway answered a search for %r" % options.search_target)
