# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
This module provides a client for UPnP Internet Gateway Devices (IGD), the
service home and office routers expose so that programs behind NAT can open
inbound ports without anyone touching the router's configuration. It
implements SSDP (Simple Service Discovery Protocol) to find the router, reads
its device description and SCPD (Service Control Point Definition), and
speaks just enough SOAP (Simple Object Access Protocol) to drive the
WANIPConnection / WANPPPConnection service.

The usual flow for working with a gateway is:

- Discover the gateway using SSDP.

  An M-SEARCH HTTP request is multicast over UDP and devices answer with an
  HTTP response whose LOCATION header points to their description XML. The
  discover() function yields these locations as they come in. If you already
  know the URL of the XML file you can skip this step and call
  Gateway.from_url() directly.

- Resolve the gateway.

  The description is fetched and its (possibly nested) devices are searched
  for a WAN connection service. Its control URL, and the actions its SCPD
  declares, make up a Gateway. search_gateway() does discovery and
  resolution in one go.

- Call actions using SOAP.

  get_external_ip(), add_port(), add_any_port(), remove_port(),
  get_generic_port_mapping_entry() and get_specific_port_mapping_entry()
  each send one SOAP request (add_any_port() may send a few) and translate
  UPnP faults into the exceptions in igdclient.errors.

Everything is available blocking (this module, using requests) and
cooperatively for asyncio (igdclient.aio.asyncio, using aiohttp) and trio
(igdclient.aio.trio, using httpx). The protocol code is shared; only the
transport differs.

The following example finds the gateway, maps a port and lists the mappings:

------------------------------------------------------------------------------
import igdclient

gateway = igdclient.search_gateway()
print("External IP: %s" % gateway.get_external_ip())

gateway.add_port(igdclient.TCP, 51413, "192.168.1.50", 51413, 0, "torrent")

index = 0
while True:
    try:
        mapping = gateway.get_generic_port_mapping_entry(index)
    except igdclient.EnumerationComplete:
        break
    print("%s %s -> %s:%s" % (mapping.protocol, mapping.external_port,
                              mapping.internal_client, mapping.internal_port))
    index += 1
------------------------------------------------------------------------------

Useful Links:

* http://upnp.org/specs/gw/UPnP-gw-WANIPConnection-v1-Service.pdf
* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
"""
from igdclient import actions, const, description, errors, marshal, soap, ssdp, util  # noqa: F401
from .actions import PortMapping
from .const import TCP, UDP
from .errors import (
    IGDError, TransportError, MalformedDescription, MalformedResponse, InvalidResponse,
    NoGatewayFound, UnsupportedGateway, InvalidArgument, ProtocolFault, PortInUse,
    NoPortsAvailable, EnumerationComplete)
from .gateway import Gateway
from .options import AnyPortPolicy, SearchOptions
from .ssdp import GatewayLocation, discover, search_gateway
from .transport import RequestsTransport

__all__ = [
    "Gateway", "GatewayLocation", "PortMapping", "SearchOptions", "AnyPortPolicy",
    "RequestsTransport", "discover", "search_gateway", "TCP", "UDP",
    "IGDError", "TransportError", "MalformedDescription", "MalformedResponse", "InvalidResponse",
    "NoGatewayFound", "UnsupportedGateway", "InvalidArgument", "ProtocolFault", "PortInUse",
    "NoPortsAvailable", "EnumerationComplete",
]
