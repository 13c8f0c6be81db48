import select
import socket
import time

import ifaddr

from .const import (
    DISCOVER_TIMEOUT, MAX_RESPONSE_SIZE, SSDP_MX, SSDP_TARGET, SSDP_TTL, ST_ALL, ST_IGD)
from .errors import IGDError, NoGatewayFound, TransportError
from .gateway import Gateway
from .options import SearchOptions
from .transport import RequestsTransport
from .util import _getLogger

_log = _getLogger("ssdp")


class GatewayLocation(object):
    """
    URL of a device description document, as found in the LOCATION header of
    a search reply, and the (host, port) the reply came from. Locations are
    equal when their URLs are.
    """

    def __init__(self, url, address=None):
        self.url = url
        self.address = address

    def __eq__(self, other):
        return isinstance(other, GatewayLocation) and self.url == other.url

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.url)

    def __repr__(self):
        return "<GatewayLocation '%s'>" % self.url


def ssdp_request(ssdp_st, ssdp_mx=SSDP_MX, target=SSDP_TARGET):
    """Return request bytes for given st and mx."""
    return "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            "HOST: {}:{}".format(*target),
            'MAN: "ssdp:discover"',
            "MX: {:d}".format(ssdp_mx),
            "ST: {}".format(ssdp_st),
            "",
            "",
        ]
    ).encode("utf-8")


def parse_search_response(text):
    """
    Parse an SSDP reply into a dict of lower-cased header names to values.
    Returns None unless it is a '200' HTTP response.
    """
    lines = text.split("\n")
    status = lines[0].strip().split(None, 2)
    if len(status) < 2 or not status[0].upper().startswith("HTTP/") or status[1] != "200":
        return None
    headers = {}
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep:
            continue
        headers[name.strip().lower()] = value.strip()
    return headers


def _split_urn_version(urn):
    if not urn.startswith("urn:"):
        return None, None
    head, _, version = urn.rpartition(":")
    try:
        return head, int(version)
    except ValueError:
        return None, None


def st_matches(search_target, st):
    """
    Whether a reply with ST header `st` answers a search for `search_target`.
    'ssdp:all' matches anything, and a URN matches the same type at the same
    or a later version.
    """
    target = search_target.strip().lower()
    st = st.strip().lower()
    if target == ST_ALL or st == target:
        return True
    target_type, target_version = _split_urn_version(target)
    st_type, st_version = _split_urn_version(st)
    return target_type is not None and st_type == target_type and st_version >= target_version


class SearchCollector(object):
    """
    Filters the replies to one search. Stray multicast traffic is normal, so
    anything that doesn't answer our search is logged and dropped, never
    raised. Each location URL is accepted once.
    """

    def __init__(self, search_target):
        self.search_target = search_target
        self._seen = set()

    def feed(self, data, address):
        """
        Return a new GatewayLocation for the reply `data` from `address`, or
        None if the reply is to be dropped.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            _log.debug("Ignoring invalid unicode response from %s", address)
            return None
        headers = parse_search_response(text)
        if headers is None:
            _log.debug("Ignoring non-200 or malformed response from %s", address)
            return None
        location = headers.get("location")
        st = headers.get("st")
        if not location or st is None:
            _log.debug("Ignoring response without LOCATION/ST from %s", address)
            return None
        if not st_matches(self.search_target, st):
            _log.debug("Ignoring response for %r from %s", st, address)
            return None
        if location in self._seen:
            return None
        self._seen.add(location)
        _log.debug("Found %s at %s", location, address)
        return GatewayLocation(location, address)


def get_addresses_ipv4():
    # Get all adapters on current machine
    adapters = ifaddr.get_adapters()
    # Get the ip from the found adapters
    # Ignore localhost und IPv6 addresses
    return list(
        set(
            addr.ip
            for iface in adapters
            for addr in iface.ips
            if addr.is_IPv4 and addr.ip != "127.0.0.1"
        )
    )


def make_search_socket(addr):
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, SSDP_TTL)
        sock.bind((addr, 0))
    except socket.error:
        sock.close()
        raise
    return sock


def open_search_sockets(bind_addr=None):
    """
    Open one UDP socket per local IPv4 interface, or a single one on
    `bind_addr`. Interfaces we can't bind to are skipped.
    """
    addresses = [bind_addr] if bind_addr is not None else get_addresses_ipv4()
    sockets = []
    for addr in addresses:
        try:
            sockets.append(make_search_socket(addr))
        except socket.error as exc:
            _log.debug("Can't search from %s: %s", addr, exc)
    return sockets


def send_search(sockets, request, target):
    """
    Send `request` from each socket. Sockets that fail are closed and
    dropped; if none is left TransportError is raised.
    """
    error = None
    for sock in list(sockets):
        try:
            sock.sendto(request, target)
        except socket.error as exc:
            _log.debug("Error sending search from %s: %s", sock.getsockname(), exc)
            error = exc
            sockets.remove(sock)
            sock.close()
    if not sockets:
        raise TransportError("Unable to send an SSDP search: %s" % (error or "no usable interface"))
    return sockets


def discover(search_target=ST_IGD, timeout=DISCOVER_TIMEOUT, options=None):
    """
    Search the network for devices answering `search_target` and yield a
    GatewayLocation for each one, as replies come in, until `timeout`
    seconds have passed. A timeout of zero or less yields nothing.
    """
    options = options or SearchOptions()
    if timeout <= 0:
        return

    sockets = open_search_sockets(options.bind_addr)
    try:
        send_search(
            sockets, ssdp_request(search_target, options.mx, options.broadcast_address),
            options.broadcast_address)
        for sock in sockets:
            sock.setblocking(False)

        collector = SearchCollector(search_target)
        stop_wait = time.monotonic() + timeout
        error = None
        while sockets:
            seconds_left = stop_wait - time.monotonic()
            if seconds_left <= 0:
                break

            ready = select.select(sockets, [], [], seconds_left)[0]

            for sock in ready:
                try:
                    data, address = sock.recvfrom(MAX_RESPONSE_SIZE)
                except socket.error as exc:
                    _log.exception("Socket error while discovering SSDP devices")
                    error = exc
                    sockets.remove(sock)
                    sock.close()
                    continue
                location = collector.feed(data, address)
                if location is not None:
                    yield location

        if not sockets:
            raise TransportError("Every search socket failed: %s" % error)
    finally:
        for s in sockets:
            s.close()


def search_gateway(options=None, transport=None, **kwargs):
    """
    Find a gateway on the local network and return a ready `Gateway`.

    Every location found is tried in turn until one resolves. Raises
    NoGatewayFound when nothing answered, otherwise the error of the last
    candidate that failed (e.g. UnsupportedGateway).
    """
    options = options or SearchOptions()
    transport = transport or RequestsTransport(timeout=options.http_timeout)
    error = None
    locations = discover(options.search_target, options.timeout, options)
    try:
        for location in locations:
            try:
                return Gateway.from_location(location, transport, **kwargs)
            except IGDError as exc:
                _log.debug("Skipping %s: %s", location, exc)
                error = exc
    finally:
        locations.close()
    if error is not None:
        raise error
    raise NoGatewayFound("No gateway answered a search for %r" % options.search_target)
