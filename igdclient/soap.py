from collections import OrderedDict, namedtuple

from lxml import etree

from .const import NS_SOAP_ENC, NS_SOAP_ENV
from .errors import ERR_CODE_DESCRIPTIONS, MalformedResponse
from .util import (
    _XMLChildren, _XMLFindChild, _XMLFindDescendant, _XMLGetNodeText, _XMLLocalName)


CONTENT_TYPE = 'text/xml; charset="utf-8"'

SOAPFault = namedtuple(
    "SOAPFault", ["faultcode", "faultstring", "error_code", "error_description"])

ResponseEnvelope = namedtuple("ResponseEnvelope", ["action_name", "fields"])


def serialize_value(value):
    """
    Lexical form of an argument value. Booleans are sent as "1"/"0", which is
    what every IGD boolean argument (NewEnabled) expects.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return "%d" % value
    return str(value)


def build_request(service_type, action_name, args=()):
    """
    Build the SOAP envelope for calling `action_name` on `service_type`.
    `args` is an ordered sequence of (name, value) pairs. Returns
    (body, headers) where body is UTF-8 encoded bytes.
    """
    envelope = etree.Element("{%s}Envelope" % NS_SOAP_ENV, nsmap={"s": NS_SOAP_ENV})
    envelope.set("{%s}encodingStyle" % NS_SOAP_ENV, NS_SOAP_ENC)
    body = etree.SubElement(envelope, "{%s}Body" % NS_SOAP_ENV)
    action = etree.SubElement(
        body, "{%s}%s" % (service_type, action_name), nsmap={"u": service_type})
    for name, value in args:
        etree.SubElement(action, name).text = serialize_value(value)

    data = b'<?xml version="1.0"?>\n' + etree.tostring(envelope, encoding="utf-8")
    headers = {
        "SOAPAction": '"%s#%s"' % (service_type, action_name),
        "Content-Type": CONTENT_TYPE,
    }
    return data, headers


def _parse_fault(fault):
    upnp_error = _XMLFindDescendant(fault, "UPnPError")
    if upnp_error is None:
        faultstring = _XMLGetNodeText(_XMLFindChild(fault, "faultstring"))
        raise MalformedResponse("SOAP fault without a UPnPError detail: %r" % faultstring)
    code_node = _XMLFindChild(upnp_error, "errorCode")
    try:
        error_code = int(_XMLGetNodeText(code_node))
    except ValueError:
        raise MalformedResponse("SOAP fault without a valid errorCode element")
    description_node = _XMLFindChild(upnp_error, "errorDescription")
    if description_node is None:
        error_description = ERR_CODE_DESCRIPTIONS.get(error_code, "")
    else:
        error_description = _XMLGetNodeText(description_node)
    return SOAPFault(
        _XMLGetNodeText(_XMLFindChild(fault, "faultcode")),
        _XMLGetNodeText(_XMLFindChild(fault, "faultstring")),
        error_code,
        error_description,
    )


def parse_response(data, action_name=None):
    """
    Parse a SOAP response body into a `ResponseEnvelope` or a `SOAPFault`.

    A fault is recognised by the structure of the envelope only; some gateways
    send faults with a 200 status. When `action_name` is given the body must
    carry an `<action_name>Response` element, otherwise the first element
    whose name ends in 'Response' is used.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        root = etree.fromstring(data.strip(), parser=etree.XMLParser(resolve_entities=False))
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MalformedResponse("Response is not well-formed XML: %s" % exc)

    if _XMLLocalName(root) != "Envelope":
        raise MalformedResponse("Response root is %r, not a SOAP Envelope" % root.tag)
    body = _XMLFindChild(root, "Body")
    if body is None:
        raise MalformedResponse("SOAP envelope has no Body")

    fault = _XMLFindChild(body, "Fault")
    if fault is not None:
        return _parse_fault(fault)

    if action_name is not None:
        response = _XMLFindChild(body, "%sResponse" % action_name)
    else:
        response = next(
            (n for n in _XMLChildren(body) if _XMLLocalName(n).lower().endswith("response")),
            None)
    if response is None:
        raise MalformedResponse(
            "Returned XML did not include an element with tag name '%sResponse'"
            % (action_name or ""))

    fields = OrderedDict()
    for node in _XMLChildren(response):
        fields[_XMLLocalName(node)] = node.text or ""
    local = _XMLLocalName(response)
    return ResponseEnvelope(local[:-len("Response")], fields)
