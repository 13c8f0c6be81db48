"""
Cooperative backends. Import the one matching your event loop:

* `igdclient.aio.asyncio`: asyncio, with aiohttp (``pip install IGDClient[asyncio]``)
* `igdclient.aio.trio`: trio, with httpx (``pip install IGDClient[trio]``)

Both run the same operations as the blocking API, through `AsyncTransport.run`.
"""


class AsyncTransport(object):
    """
    Base for asynchronous transports. Subclasses implement `send(request)`
    as a coroutine returning a `transport.Response`.
    """

    async def send(self, request):
        raise NotImplementedError

    async def run(self, operation):
        """
        Drive `operation` to completion, awaiting each request it yields, and
        return its result.
        """
        try:
            request = next(operation)
            while True:
                response = await self.send(request)
                request = operation.send(response)
        except StopIteration as exc:
            return exc.value
        finally:
            operation.close()
