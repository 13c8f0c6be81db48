"""
asyncio backend: aiohttp for HTTP and asyncio datagram endpoints for SSDP.

>>> gateway = await search_gateway()
>>> await gateway.get_external_ip()
"""
import asyncio

import aiohttp

from . import AsyncTransport
from .. import ssdp
from ..const import DISCOVER_TIMEOUT, HTTP_TIMEOUT, ST_IGD
from ..errors import IGDError, NoGatewayFound, TransportError
from ..gateway import Gateway
from ..options import SearchOptions
from ..transport import Response
from ..util import _getLogger

_log = _getLogger("aio.asyncio")


class AiohttpTransport(AsyncTransport):
    """
    HTTP transport on aiohttp. Without a `session` a short-lived
    `aiohttp.ClientSession` is opened for each request.
    """

    def __init__(self, session=None, timeout=HTTP_TIMEOUT, http_auth=None, http_headers=None):
        self.session = session
        self.timeout = timeout
        self.http_headers = dict(http_headers or {})
        if http_auth:
            self.http_headers["Authorization"] = aiohttp.BasicAuth(*http_auth).encode()

    def __repr__(self):
        return "<AiohttpTransport timeout=%r>" % self.timeout

    async def _request(self, session, request, headers):
        async with session.request(
            request.method,
            request.url,
            data=request.body,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as resp:
            body = await resp.read()
            _log.debug("%s %s: HTTP %s", request.method, request.url, resp.status)
            return Response(resp.status, resp.headers, body)

    async def send(self, request):
        headers = dict(self.http_headers)
        headers.update(request.headers)
        try:
            if self.session is not None:
                return await self._request(self.session, request, headers)
            async with aiohttp.ClientSession() as session:
                return await self._request(session, request, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError("%s %s failed: %r" % (request.method, request.url, exc)) from exc


class _SearchProtocol(asyncio.DatagramProtocol):
    def __init__(self, queue):
        self.queue = queue

    def datagram_received(self, data, addr):
        self.queue.put_nowait((data, addr))

    def error_received(self, exc):
        _log.debug("Error while discovering SSDP devices: %s", exc)


async def discover(search_target=ST_IGD, timeout=DISCOVER_TIMEOUT, options=None):
    """
    Asynchronously search for devices answering `search_target`, yielding a
    `ssdp.GatewayLocation` for each one as replies come in until `timeout`
    seconds have passed.
    """
    options = options or SearchOptions()
    if timeout <= 0:
        return

    loop = asyncio.get_running_loop()
    queue = asyncio.Queue()
    sockets = ssdp.open_search_sockets(options.bind_addr)
    transports = []
    try:
        ssdp.send_search(
            sockets, ssdp.ssdp_request(search_target, options.mx, options.broadcast_address),
            options.broadcast_address)
        for sock in sockets:
            try:
                transport, _ = await loop.create_datagram_endpoint(
                    lambda: _SearchProtocol(queue), sock=sock)
            except OSError as exc:
                raise TransportError("Unable to listen for SSDP replies: %s" % exc) from exc
            transports.append(transport)

        collector = ssdp.SearchCollector(search_target)
        stop_wait = loop.time() + timeout
        while True:
            seconds_left = stop_wait - loop.time()
            if seconds_left <= 0:
                break
            try:
                data, address = await asyncio.wait_for(queue.get(), seconds_left)
            except asyncio.TimeoutError:
                break
            location = collector.feed(data, address)
            if location is not None:
                yield location
    finally:
        for transport in transports:
            transport.close()
        for sock in sockets[len(transports):]:
            sock.close()


async def search_gateway(options=None, transport=None, **kwargs):
    """
    Asynchronous `ssdp.search_gateway`: returns a `Gateway` whose methods
    are coroutines.
    """
    options = options or SearchOptions()
    transport = transport or AiohttpTransport(timeout=options.http_timeout)
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
