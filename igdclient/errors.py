class IGDError(Exception):
    """
    Base class for every error raised by igdclient.
    """

    pass


class TransportError(IGDError):
    """
    Connecting, sending or receiving failed, or the HTTP server answered with
    a status we can't use.
    """

    pass


class MalformedDescription(IGDError):
    """
    A device description or SCPD document wasn't well-formed XML.
    """

    pass


class MalformedResponse(IGDError):
    """
    A SOAP response wasn't well-formed, or didn't contain what the action
    promised.
    """

    pass


InvalidResponse = MalformedResponse


class NoGatewayFound(IGDError):
    """
    Nothing on the network answered the search.
    """

    pass


class UnsupportedGateway(IGDError):
    """
    A device answered, but it offers none of the WAN connection services we
    know how to drive.
    """

    pass


class InvalidArgument(IGDError, ValueError):
    """
    The caller passed a value we refuse to send, e.g. a port out of range.
    """

    pass


class ProtocolFault(IGDError):
    """
    The gateway answered an action with a UPnP error. `error_code` is kept
    for diagnostics.
    """

    def __init__(self, error_code=None, description=None):
        if description is None and error_code is not None:
            description = ERR_CODE_DESCRIPTIONS.get(error_code, "")
        super(ProtocolFault, self).__init__(error_code, description)
        self.error_code = error_code
        self.description = description

    def __str__(self):
        if self.error_code is None:
            return self.description or self.__class__.__name__
        return "%s: %s" % (self.error_code, self.description)


class PortInUse(ProtocolFault):
    """
    The external port is already mapped to someone else.
    """

    pass


class NoPortsAvailable(ProtocolFault):
    """
    The gateway has no free port left, or the any-port fallback ran out of
    attempts.
    """

    pass


class EnumerationComplete(ProtocolFault):
    """
    The port mapping index is past the last entry.
    """

    pass


def translate_fault(fault, mapping=None):
    """
    Build the exception for a `soap.SOAPFault`. `mapping` maps UPnP error
    codes to `ProtocolFault` subclasses; unmapped codes give a plain
    `ProtocolFault`.
    """
    exc_class = (mapping or {}).get(fault.error_code, ProtocolFault)
    return exc_class(fault.error_code, fault.error_description)


class _ErrorCodeDescriptions(object):
    """
    Lookup of UPnP error code descriptions, including the reserved ranges.
    """

    _descriptions = {
        401: "Invalid Action",
        402: "Invalid Args",
        404: "Invalid Var",
        501: "Action Failed",
        600: "Argument Value Invalid",
        601: "Argument Value Out of Range",
        602: "Optional Action Not Implemented",
        603: "Out of Memory",
        604: "Human Intervention Required",
        605: "String Argument Too Long",
        606: "Action not authorized",
        713: "SpecifiedArrayIndexInvalid",
        714: "NoSuchEntryInArray",
        715: "WildCardNotPermittedInSrcIP",
        716: "WildCardNotPermittedInExtPort",
        718: "ConflictInMappingEntry",
        724: "SamePortValuesRequired",
        725: "OnlyPermanentLeasesSupported",
        726: "RemoteHostOnlySupportsWildcard",
        727: "ExternalPortOnlySupportsWildcard",
        728: "NoPortMapsAvailable",
        729: "ConflictWithOtherMechanisms",
        732: "WildCardNotPermittedInIntPort",
    }

    _ranges = (
        (606, 612, "These ErrorCodes are reserved for UPnP DeviceSecurity."),
        (613, 699, "Common action errors. Defined by UPnP Forum Technical Committee."),
        (700, 799, "Action-specific errors defined by UPnP Forum working committee."),
        (800, 899, "Action-specific errors for non-standard actions. Defined by UPnP vendor."),
    )

    def __getitem__(self, key):
        if not isinstance(key, int):
            raise KeyError("'key' must be an integer")
        try:
            return self._descriptions[key]
        except KeyError:
            pass
        for low, high, description in self._ranges:
            if low <= key <= high:
                return description
        raise KeyError("Unknown error code %r" % key)

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default


ERR_CODE_DESCRIPTIONS = _ErrorCodeDescriptions()
