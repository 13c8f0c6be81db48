from .const import (
    ANY_PORT_ATTEMPTS, ANY_PORT_RANGE, DISCOVER_TIMEOUT, HTTP_TIMEOUT, SSDP_MX, SSDP_TARGET,
    ST_IGD)
from .errors import InvalidArgument


class SearchOptions(object):
    """
    Settings for a gateway search.

    `bind_addr` is the local IPv4 address to search from; by default every
    non-loopback IPv4 interface is used. `broadcast_address` is where the
    M-SEARCH goes, `timeout` is how many seconds replies are collected for and
    `http_timeout` bounds each description/SOAP request.
    """

    def __init__(
        self,
        bind_addr=None,
        broadcast_address=SSDP_TARGET,
        timeout=DISCOVER_TIMEOUT,
        search_target=ST_IGD,
        http_timeout=HTTP_TIMEOUT,
        mx=SSDP_MX,
    ):
        self.bind_addr = bind_addr
        self.broadcast_address = tuple(broadcast_address)
        self.timeout = timeout
        self.search_target = search_target
        self.http_timeout = http_timeout
        self.mx = mx

    def __repr__(self):
        return "<SearchOptions st=%r timeout=%r bind=%r>" % (
            self.search_target, self.timeout, self.bind_addr)


class AnyPortPolicy(object):
    """
    How `Gateway.add_any_port` proposes ports on gateways without the
    AddAnyPortMapping action: at most `attempts` random ports drawn from the
    inclusive `port_range`.
    """

    def __init__(self, attempts=ANY_PORT_ATTEMPTS, port_range=ANY_PORT_RANGE):
        low, high = port_range
        if attempts < 1:
            raise InvalidArgument("attempts must be at least 1, got %r" % attempts)
        if not 1024 < low <= high <= 65535:
            raise InvalidArgument("port_range must lie within 1025 to 65535, got %r" % (
                port_range,))
        self.attempts = attempts
        self.port_range = (low, high)

    def __repr__(self):
        return "<AnyPortPolicy attempts=%r range=%r>" % (self.attempts, self.port_range)
