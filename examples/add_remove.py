#!/usr/bin/env python
#
# Forward a port to this machine, list the mappings and remove it again.
#

import socket

import igdclient

# If you know where your router's description lives you can skip discovery.
gateway = igdclient.Gateway.from_url('http://192.168.1.1:5000/rootDesc.xml')

# Find out which of our addresses faces the gateway.
sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
sock.connect(gateway.address)
local_ip = sock.getsockname()[0]
sock.close()

try:
    gateway.add_port(igdclient.TCP, 8080, local_ip, 80, 3600, 'web server')
except igdclient.PortInUse as e:
    print("Port 8080 is taken: %s" % e)

index = 0
while True:
    try:
        mapping = gateway.get_generic_port_mapping_entry(index)
    except igdclient.EnumerationComplete:
        break
    print(mapping)
    index += 1

# Removing a mapping that isn't there is fine.
gateway.remove_port(igdclient.TCP, 8080)
gateway.remove_port(igdclient.TCP, 8080)
