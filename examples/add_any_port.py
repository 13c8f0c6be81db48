#!/usr/bin/env python
#
# Let the gateway (or chance) pick a free external port.
#

import sys

import igdclient

local_ip = sys.argv[1] if len(sys.argv) > 1 else '192.168.1.50'

gateway = igdclient.search_gateway(igdclient.SearchOptions(timeout=3))
try:
    port = gateway.add_any_port(igdclient.UDP, local_ip, 51413, 0, 'torrent')
except igdclient.NoPortsAvailable:
    sys.exit("The gateway has no ports left")
print("Forwarding %s:%s -> %s:51413" % (gateway.get_external_ip(), port, local_ip))
