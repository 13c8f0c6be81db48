from collections import OrderedDict, namedtuple

from lxml import etree

from .const import ACCEPTED_SERVICE_TYPES
from .errors import MalformedDescription, UnsupportedGateway
from .util import _getLogger, _XMLChildren, _XMLFindChild, _XMLGetNodeText, _XMLLocalName


ServiceDescriptor = namedtuple(
    "ServiceDescriptor", ["service_type", "control_path", "event_path", "scpd_path"])

_log = _getLogger("description")


def _fromstring(document):
    if isinstance(document, str):
        document = document.encode("utf-8")
    try:
        return etree.fromstring(
            document.strip(), parser=etree.XMLParser(resolve_entities=False))
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MalformedDescription("Document is not well-formed XML: %s" % exc)


def _walk_device(device):
    """
    Yield the services of `device` and of every embedded device below it.
    """
    for service_list in _XMLChildren(device, "serviceList"):
        for node in _XMLChildren(service_list, "service"):
            yield ServiceDescriptor(
                _XMLGetNodeText(_XMLFindChild(node, "serviceType")),
                _XMLGetNodeText(_XMLFindChild(node, "controlURL")),
                _XMLGetNodeText(_XMLFindChild(node, "eventSubURL")),
                _XMLGetNodeText(_XMLFindChild(node, "SCPDURL")),
            )
    for device_list in _XMLChildren(device, "deviceList"):
        for sub_device in _XMLChildren(device_list, "device"):
            for service in _walk_device(sub_device):
                yield service


def parse(document):
    """
    Parse a device description document and return its services as a tuple
    of `ServiceDescriptor`, in document order and without duplicates.
    Services of embedded devices are included, at any depth. Unknown elements
    are ignored and missing fields are left empty.
    """
    root = _fromstring(document)
    if _XMLLocalName(root) == "device":
        devices = [root]
    else:
        devices = list(_XMLChildren(root, "device"))

    services = OrderedDict()
    for device in devices:
        for service in _walk_device(device):
            services.setdefault(service, None)
    return tuple(services)


def select_service(services, accepted=ACCEPTED_SERVICE_TYPES):
    """
    Return the first service whose type is one we can drive. Raises
    UnsupportedGateway when there is none.
    """
    for service in services:
        if service.service_type in accepted and service.control_path:
            _log.debug("Selected service %r at %r", service.service_type, service.control_path)
            return service
    raise UnsupportedGateway(
        "No WAN connection service found among %r" % [s.service_type for s in services])


def parse_scpd(document):
    """
    Parse a service control point definition (SCPD) document. Returns an
    ordered mapping of action name to the tuple of its input argument names,
    in the order the service declares them.
    """
    root = _fromstring(document)
    actions = OrderedDict()
    for action_list in _XMLChildren(root, "actionList"):
        for action_node in _XMLChildren(action_list, "action"):
            name = _XMLGetNodeText(_XMLFindChild(action_node, "name"))
            if not name:
                continue
            args_in = []
            for arg_list in _XMLChildren(action_node, "argumentList"):
                for arg_node in _XMLChildren(arg_list, "argument"):
                    direction = _XMLGetNodeText(_XMLFindChild(arg_node, "direction")).lower()
                    if direction == "in":
                        args_in.append(_XMLGetNodeText(_XMLFindChild(arg_node, "name")))
            actions[name] = tuple(args_in)
    return actions
