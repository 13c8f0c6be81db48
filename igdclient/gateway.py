import random
from functools import partial
from types import MappingProxyType

from . import actions
from .options import AnyPortPolicy
from .transport import RequestsTransport


class Gateway(object):
    """
    A resolved Internet Gateway Device: the control URL of its WAN connection
    service, that service's type and the device's (host, port).

    Gateways hold no state of their own; every call goes to the device, which
    is the only record of the mappings. They aren't changed after creation
    and may be shared between threads or tasks.

    The transport decides how calls run. With the default `RequestsTransport`
    every method blocks and returns its result; with
    `igdclient.aio.asyncio.AiohttpTransport` or
    `igdclient.aio.trio.HttpxTransport` every method returns an awaitable.

    Example:

    >>> gateway = Gateway.from_url('http://192.168.1.254:5000/rootDesc.xml')
    >>> gateway.get_external_ip()
    IPv4Address('203.0.113.7')
    >>> gateway.add_port('TCP', 51413, '192.168.1.50', 51413, 0, 'torrent')
    """

    def __init__(
        self,
        location,
        address,
        service_type,
        control_url,
        control_schema=None,
        transport=None,
        any_port_policy=None,
    ):
        self.location = location
        self.address = address
        self.service_type = service_type
        self.control_url = control_url
        self.control_schema = MappingProxyType(dict(control_schema or {}))
        self.transport = transport or RequestsTransport()
        self.any_port_policy = any_port_policy or AnyPortPolicy()

    def __repr__(self):
        return "<Gateway '%s' service='%s'>" % (self.control_url, self.service_type)

    @classmethod
    def from_location(cls, location, transport=None, **kwargs):
        """
        Resolve the gateway described at `location`, a URL or an
        `ssdp.GatewayLocation`. Raises UnsupportedGateway if the device has
        no WAN connection service.
        """
        transport = transport or RequestsTransport()
        factory = partial(cls, transport=transport, **kwargs)
        return transport.run(actions.resolve(location, factory))

    from_url = from_location

    def get_external_ip(self):
        """
        The WAN address of the gateway, as an `ipaddress` object.
        """
        return self.transport.run(actions.get_external_ip(self))

    def add_port(self, protocol, external_port, internal_addr, internal_port,
                 lease_seconds=0, description=""):
        """
        Forward `external_port` to `internal_addr:internal_port`. Raises
        PortInUse if the external port is mapped already. A lease of 0 asks
        for a permanent mapping.
        """
        return self.transport.run(actions.add_port(
            self, protocol, external_port, internal_addr, internal_port, lease_seconds,
            description))

    def add_any_port(self, protocol, internal_addr, internal_port, lease_seconds=0,
                     description="", rng=None):
        """
        Forward any free external port to `internal_addr:internal_port` and
        return the port. `rng` is used to propose ports and needs a
        `randint(a, b)` method; by default a fresh `random.Random()` is used.
        """
        rng = rng if rng is not None else random.Random()
        return self.transport.run(actions.add_any_port(
            self, protocol, internal_addr, internal_port, lease_seconds, description,
            self.any_port_policy, rng))

    def remove_port(self, protocol, external_port):
        """
        Remove the mapping of `external_port`, if there is one.
        """
        return self.transport.run(actions.remove_port(self, protocol, external_port))

    def get_generic_port_mapping_entry(self, index):
        return self.transport.run(actions.get_generic_port_mapping_entry(self, index))

    def get_specific_port_mapping_entry(self, protocol, external_port):
        return self.transport.run(
            actions.get_specific_port_mapping_entry(self, protocol, external_port))
