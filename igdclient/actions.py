"""
The IGD operations, written once for every transport.

Each operation is a generator. It yields `transport.Request` objects, is sent
the matching `transport.Response` back, and finishes by returning its result
(or raising an `igdclient.errors` exception). Nothing in here does any I/O, a
transport's `run()` method does that: `RequestsTransport.run()` blocks while
the asynchronous transports' `run()` is a coroutine. Driving a single
operation may take several round-trips (resolving a gateway, the
add_any_port fallback), but each is bounded.
"""
import ipaddress
from collections import namedtuple

from . import description, soap
from .errors import (
    EnumerationComplete, InvalidArgument, InvalidResponse, MalformedResponse, NoPortsAvailable,
    PortInUse, ProtocolFault, TransportError, translate_fault)
from .marshal import (
    marshal_fields, marshal_value, validate_lease, validate_port, validate_protocol,
    validate_string)
from .transport import Request
from .util import _getLogger, host_port, resolve_url

_log = _getLogger("actions")

PortMapping = namedtuple(
    "PortMapping",
    [
        "remote_host",
        "external_port",
        "protocol",
        "internal_port",
        "internal_client",
        "enabled",
        "description",
        "lease_duration",
    ],
)

NO_SUCH_ENTRY = 714
SAME_PORT_VALUES_REQUIRED = 724

ADD_PORT_FAULTS = {718: PortInUse, 728: NoPortsAvailable, 729: PortInUse}
GENERIC_ENTRY_FAULTS = {713: EnumerationComplete, NO_SUCH_ENTRY: EnumerationComplete}


def fetch(url):
    """
    GET `url` and return the body. Anything but a 2xx status is a
    TransportError.
    """
    response = yield Request("GET", url, {}, None)
    if not 200 <= response.status < 300:
        raise TransportError("GET %s returned HTTP %s" % (url, response.status))
    return response.body


def resolve(location, factory):
    """
    Fetch and parse the description found at `location` (a URL or a
    `ssdp.GatewayLocation`), pick the WAN connection service, read its SCPD
    if it has one, and return `factory(...)` with the resolved handle's
    attributes as keyword arguments.
    """
    url = getattr(location, "url", location)
    document = yield from fetch(url)
    service = description.select_service(description.parse(document))

    control_schema = {}
    if service.scpd_path:
        scpd = yield from fetch(resolve_url(url, service.scpd_path))
        control_schema = description.parse_scpd(scpd)

    return factory(
        location=url,
        address=host_port(url),
        service_type=service.service_type,
        control_url=resolve_url(url, service.control_path),
        control_schema=control_schema,
    )


def order_arguments(control_schema, action_name, args):
    """
    Put `args` in the order the SCPD declares for `action_name`. Arguments
    the SCPD lists but we don't know are sent empty, and ones it doesn't list
    are left out. Without a schema for the action `args` is used as given.
    """
    declared = control_schema.get(action_name)
    if declared is None:
        return list(args)
    values = dict(args)
    dropped = set(values) - set(declared)
    if dropped:
        _log.debug("%s: gateway doesn't declare %s, not sending them",
                   action_name, sorted(dropped))
    return [(name, values.get(name, "")) for name in declared]


def call(gateway, action_name, args=(), fault_mapping=None):
    """
    Invoke `action_name` on the gateway's control URL and return the
    response fields as a dict of strings. Faults are translated with
    `errors.translate_fault(fault, fault_mapping)` and raised.
    """
    arguments = order_arguments(gateway.control_schema, action_name, args)
    body, headers = soap.build_request(gateway.service_type, action_name, arguments)
    _log.debug(">> %s (%s)", action_name, arguments)
    response = yield Request("POST", gateway.control_url, headers, body)

    try:
        result = soap.parse_response(response.body, action_name)
    except MalformedResponse:
        if not 200 <= response.status < 300:
            raise TransportError("%s returned HTTP %s" % (action_name, response.status))
        raise

    if isinstance(result, soap.SOAPFault):
        _log.debug("<< %s fault %s: %s", action_name, result.error_code,
                   result.error_description)
        raise translate_fault(result, fault_mapping)
    _log.debug("<< %s: %s", action_name, dict(result.fields))
    return result.fields


def _validate_address(internal_addr):
    try:
        return str(ipaddress.ip_address(str(internal_addr).strip()))
    except ValueError:
        raise InvalidArgument("internal address must be an IP address, got %r" % (
            internal_addr,))


def _add_port_args(protocol, external_port, internal_addr, internal_port, lease_seconds,
                   description_text):
    return [
        ("NewRemoteHost", ""),
        ("NewExternalPort", external_port),
        ("NewProtocol", protocol),
        ("NewInternalPort", internal_port),
        ("NewInternalClient", internal_addr),
        ("NewEnabled", True),
        ("NewPortMappingDescription", description_text or ""),
        ("NewLeaseDuration", lease_seconds),
    ]


def _require(fields, *names):
    missing = [name for name in names if name not in fields]
    if missing:
        raise InvalidResponse("Response is missing %s" % ", ".join(missing))


def get_external_ip(gateway):
    fields = yield from call(gateway, "GetExternalIPAddress")
    _require(fields, "NewExternalIPAddress")
    _, address = marshal_value("ip", fields["NewExternalIPAddress"])
    return address


def add_port(gateway, protocol, external_port, internal_addr, internal_port,
             lease_seconds=0, description_text=""):
    """
    Map `external_port` to `internal_addr:internal_port`. A conflicting
    mapping raises PortInUse; it is up to the caller to pick another port.
    """
    protocol = validate_protocol(protocol)
    validate_port("external port", external_port)
    validate_port("internal port", internal_port)
    validate_lease(lease_seconds)
    internal_addr = _validate_address(internal_addr)
    description_text = validate_string("description", description_text)

    args = _add_port_args(protocol, external_port, internal_addr, internal_port,
                          lease_seconds, description_text)
    yield from call(gateway, "AddPortMapping", args, ADD_PORT_FAULTS)


def add_any_port(gateway, protocol, internal_addr, internal_port, lease_seconds,
                 description_text, policy, rng):
    """
    Map any free external port to `internal_addr:internal_port` and return
    it.

    Gateways declaring AddAnyPortMapping pick the port themselves. For the
    others up to `policy.attempts` random ports from `policy.port_range` are
    tried with AddPortMapping, moving on whenever one is in use.
    """
    protocol = validate_protocol(protocol)
    validate_port("internal port", internal_port)
    validate_lease(lease_seconds)
    internal_addr = _validate_address(internal_addr)
    description_text = validate_string("description", description_text)
    low, high = policy.port_range

    if "AddAnyPortMapping" in gateway.control_schema:
        args = _add_port_args(protocol, rng.randint(low, high), internal_addr, internal_port,
                              lease_seconds, description_text)
        fields = yield from call(gateway, "AddAnyPortMapping", args, ADD_PORT_FAULTS)
        _require(fields, "NewReservedPort")
        _, port = marshal_value("ui2", fields["NewReservedPort"])
        return port

    for attempt in range(1, policy.attempts + 1):
        external_port = rng.randint(low, high)
        try:
            yield from add_port(gateway, protocol, external_port, internal_addr, internal_port,
                                lease_seconds, description_text)
        except PortInUse:
            _log.debug("Port %s is taken (attempt %d of %d)", external_port, attempt,
                       policy.attempts)
            continue
        except ProtocolFault as exc:
            if exc.error_code != SAME_PORT_VALUES_REQUIRED:
                raise
            # Gateway only maps external == internal.
            yield from add_port(gateway, protocol, internal_port, internal_addr, internal_port,
                                lease_seconds, description_text)
            return internal_port
        return external_port

    raise NoPortsAvailable(
        None, "No free external port found in %d attempts" % policy.attempts)


def remove_port(gateway, protocol, external_port):
    """
    Remove a mapping. Removing a mapping that doesn't exist succeeds.
    """
    protocol = validate_protocol(protocol)
    validate_port("external port", external_port)
    args = [
        ("NewRemoteHost", ""),
        ("NewExternalPort", external_port),
        ("NewProtocol", protocol),
    ]
    try:
        yield from call(gateway, "DeletePortMapping", args)
    except ProtocolFault as exc:
        if exc.error_code != NO_SUCH_ENTRY:
            raise
        _log.debug("No %s mapping for port %s, nothing to remove", protocol, external_port)


def _port_mapping(fields, **known):
    values = marshal_fields(fields)
    values.update(known)
    try:
        protocol = validate_protocol(values["NewProtocol"])
    except InvalidArgument:
        raise InvalidResponse("Unknown protocol %r in port mapping" % values["NewProtocol"])
    return PortMapping(
        remote_host=values.get("NewRemoteHost", ""),
        external_port=values["NewExternalPort"],
        protocol=protocol,
        internal_port=values["NewInternalPort"],
        internal_client=values["NewInternalClient"],
        enabled=values.get("NewEnabled", True),
        description=values.get("NewPortMappingDescription", ""),
        lease_duration=values.get("NewLeaseDuration", 0),
    )


def get_generic_port_mapping_entry(gateway, index):
    """
    Return the mapping at `index`. Past the last entry EnumerationComplete is
    raised. Entries may move between calls, as other clients add mappings
    and leases expire.
    """
    validate_port("index", index, allow_zero=True)
    fields = yield from call(
        gateway, "GetGenericPortMappingEntry", [("NewPortMappingIndex", index)],
        GENERIC_ENTRY_FAULTS)
    _require(fields, "NewExternalPort", "NewProtocol", "NewInternalPort", "NewInternalClient")
    return _port_mapping(fields)


def get_specific_port_mapping_entry(gateway, protocol, external_port):
    protocol = validate_protocol(protocol)
    validate_port("external port", external_port)
    args = [
        ("NewRemoteHost", ""),
        ("NewExternalPort", external_port),
        ("NewProtocol", protocol),
    ]
    fields = yield from call(gateway, "GetSpecificPortMappingEntry", args)
    _require(fields, "NewInternalPort", "NewInternalClient")
    return _port_mapping(fields, NewExternalPort=external_port, NewProtocol=protocol)
