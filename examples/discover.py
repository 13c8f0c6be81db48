#!/usr/bin/env python
#
# Demonstrate a simple gateway discovery.
#

import igdclient

# Every device answering the search is yielded as soon as its reply arrives.
for location in igdclient.discover(igdclient.ssdp.ST_ALL, timeout=5):
    print(location.url, '@', location.address)
