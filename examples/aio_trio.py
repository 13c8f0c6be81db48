#!/usr/bin/env python
#
# The same calls from trio, sharing one httpx client. Needs igdclient[trio].
#

import httpx
import trio

import igdclient
from igdclient.aio.trio import HttpxTransport, search_gateway


async def main():
    async with httpx.AsyncClient() as client:
        gateway = await search_gateway(transport=HttpxTransport(client))
        print("External IP:", await gateway.get_external_ip())
        try:
            await gateway.add_port(igdclient.TCP, 8000, '192.168.1.50', 8000, 600, 'trio')
        except igdclient.PortInUse:
            print("Port 8000 is taken")
        else:
            await gateway.remove_port(igdclient.TCP, 8000)


trio.run(main)
