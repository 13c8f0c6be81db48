import ipaddress
import re

from .const import TCP, UDP
from .errors import InvalidArgument, MalformedResponse


INT_RANGES = {
    "ui1": (0, 255),
    "ui2": (0, 65535),
    "ui4": (0, 4294967295),
    "i1": (-128, 127),
    "i2": (-32768, 32767),
    "i4": (-2147483648, 2147483647),
}

# Characters XML 1.0 can't carry, not even escaped.
_XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

TRUE_VALUES = {"1", "true", "yes"}
FALSE_VALUES = {"0", "false", "no"}

# UPnP types of the IGD fields we read back, keyed on argument name.
IGD_FIELD_TYPES = {
    "NewExternalIPAddress": "ip",
    "NewRemoteHost": "string",
    "NewExternalPort": "ui2",
    "NewProtocol": "string",
    "NewInternalPort": "ui2",
    "NewInternalClient": "string",
    "NewEnabled": "boolean",
    "NewPortMappingDescription": "string",
    "NewLeaseDuration": "ui4",
    "NewReservedPort": "ui2",
}


def marshal_value(datatype, value):
    """
    Turn the string `value` of UPnP type `datatype` into a Python value.
    Returns (marshalled, value); `marshalled` is False when the type isn't
    one we convert and `value` is handed back untouched.
    """
    if value is None:
        value = ""
    value = value.strip()

    if datatype in INT_RANGES:
        v_min, v_max = INT_RANGES[datatype]
        try:
            v = int(value)
        except ValueError:
            raise MalformedResponse("%r is not a valid %s" % (value, datatype))
        if not v_min <= v <= v_max:
            raise MalformedResponse(
                "%r is out of range for %s (%s to %s)" % (v, datatype, v_min, v_max))
        return True, v

    if datatype == "boolean":
        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return True, True
        if lowered in FALSE_VALUES:
            return True, False
        raise MalformedResponse("%r is not a valid boolean" % value)

    if datatype == "ip":
        try:
            return True, ipaddress.ip_address(value)
        except ValueError:
            raise MalformedResponse("%r is not a valid IP address" % value)

    return False, value


def marshal_fields(fields, types=None):
    """
    Marshal every field of a response envelope whose type is known.
    """
    types = IGD_FIELD_TYPES if types is None else types
    out = {}
    for name, value in fields.items():
        _, out[name] = marshal_value(types.get(name, "string"), value)
    return out


def validate_port(name, port, allow_zero=False):
    """
    Check a port number before it is serialized. Raises InvalidArgument.
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidArgument("%s must be an integer, got %r" % (name, port))
    low = 0 if allow_zero else 1
    if not low <= port <= 65535:
        raise InvalidArgument("%s must be in the range %s to 65535, got %r" % (name, low, port))
    return port


def validate_protocol(protocol):
    """
    Normalise a protocol name to 'TCP' or 'UDP'. Raises InvalidArgument.
    """
    value = getattr(protocol, "value", protocol)
    if isinstance(value, str) and value.upper() in (TCP, UDP):
        return value.upper()
    raise InvalidArgument("protocol must be TCP or UDP, got %r" % (protocol,))


def validate_lease(lease):
    if isinstance(lease, bool) or not isinstance(lease, int):
        raise InvalidArgument("lease duration must be an integer, got %r" % (lease,))
    v_min, v_max = INT_RANGES["ui4"]
    if not v_min <= lease <= v_max:
        raise InvalidArgument("lease duration out of range: %r" % lease)
    return lease


def validate_string(name, value):
    """
    Check a free-text argument can be sent in a SOAP envelope. Raises
    InvalidArgument.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidArgument("%s must be a string, got %r" % (name, value))
    if _XML_INVALID_CHARS.search(value):
        raise InvalidArgument("%s contains characters XML can't carry: %r" % (name, value))
    return value
