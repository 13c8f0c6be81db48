import logging

from lxml import etree
from requests.compat import urljoin, urlparse, urlunparse


def _getLogger(name):
    """
    Retrieve a logger instance. Checks if a handler is defined so we avoid the
    'No handlers could be found' message.
    """
    logger = logging.getLogger(name)
    # if not logging.root.handlers:
    #     logger.disabled = 1
    return logger


def base_url(location):
    """
    Return the scheme://host:port part of `location`. Gateways sometimes
    advertise a wrong URLBase, so the address we fetched the description
    from is the only one we trust.
    """
    parsed = urlparse(location)
    return urlunparse((parsed.scheme, parsed.netloc, "/", "", "", ""))


def resolve_url(location, path):
    """
    Resolve a control/event/SCPD path from a description document against
    the location it was served from. Absolute URLs keep only their path and
    query.
    """
    parsed = urlparse(path)
    if parsed.netloc:
        path = urlunparse(("", "", parsed.path, parsed.params, parsed.query, ""))
    return urljoin(base_url(location), path)


def host_port(location):
    """
    Return (host, port) for `location`, defaulting the port per scheme.
    """
    parsed = urlparse(location)
    port = parsed.port
    if port is None:
        port = 443 if parsed.scheme == "https" else 80
    return parsed.hostname, port


def _XMLLocalName(node):
    """
    Tag name of `node` without its namespace, or None for comments and
    processing instructions.
    """
    if not isinstance(node.tag, str):
        return None
    return etree.QName(node).localname


def _XMLChildren(node, name=None):
    for child in node:
        local = _XMLLocalName(child)
        if local is None:
            continue
        if name is None or local == name:
            yield child


def _XMLFindChild(node, name):
    return next(_XMLChildren(node, name), None)


def _XMLFindDescendant(node, name):
    for child in node.iter():
        if _XMLLocalName(child) == name:
            return child
    return None


def _XMLGetNodeText(node):
    """
    Stripped text of `node`, or an empty string when the node or its text is
    missing.
    """
    if node is None or node.text is None:
        return ""
    return node.text.strip()
