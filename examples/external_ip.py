#!/usr/bin/env python
#
# Find the gateway and print the address the rest of the internet sees.
#

import logging

import igdclient

logging.basicConfig(level=logging.DEBUG)

gateway = igdclient.search_gateway()
print(gateway)
print("External IP:", gateway.get_external_ip())
