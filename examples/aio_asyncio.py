#!/usr/bin/env python
#
# The same calls from asyncio. Needs igdclient[asyncio].
#

import asyncio

import igdclient
from igdclient.aio.asyncio import search_gateway


async def main():
    gateway = await search_gateway()
    print("External IP:", await gateway.get_external_ip())
    port = await gateway.add_any_port(igdclient.TCP, '192.168.1.50', 8000, 600, 'asyncio')
    print("Mapped external port", port)
    await gateway.remove_port(igdclient.TCP, port)


asyncio.run(main())
