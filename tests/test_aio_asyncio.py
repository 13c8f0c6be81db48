import asyncio
import socket
import threading
import unittest
from base64 import b64encode

import aiohttp
import mock

import igdclient as igd
from igdclient.aio import asyncio as aio
from igdclient.const import ST_IGD
from tests.async_server import app, mock_gateway, mock_req, setup_web_server
from tests.const import (
    ASYNC_SERVER_ADDR,
    ASYNC_SERVER_PORT,
    LOCALHOST,
    TEST_ADD_PORT,
    TEST_CONFLICT,
    TEST_DELETE_PORT,
    TEST_EXTERNAL_IP,
    TEST_GENERIC_ENTRY,
    TEST_IGD_DESCRIPTION,
    TEST_INVALID_INDEX,
    TEST_NO_SUCH_ENTRY,
    TEST_NO_WAN_DESCRIPTION,
    TEST_WANIP_SCPD,
    ssdp_reply,
)
from tests.helpers import FakeAsyncTransport, FakeGateway, SequenceRandom, async_test

DESCRIPTION_URL = ASYNC_SERVER_ADDR + "/rootDesc.xml"


class TestAiohttpTransport(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.loop = asyncio.new_event_loop()
        cls.runner = cls.loop.run_until_complete(
            setup_web_server(app, host=LOCALHOST, port=ASYNC_SERVER_PORT)
        )

    @classmethod
    def tearDownClass(cls):
        cls.loop.run_until_complete(cls.runner.cleanup())
        cls.loop.close()

    def setUp(self):
        mock_gateway.load(
            documents={
                "/rootDesc.xml": TEST_IGD_DESCRIPTION,
                "/WANIPCn.xml": TEST_WANIP_SCPD,
            },
            actions={
                "GetExternalIPAddress": [(200, TEST_EXTERNAL_IP)],
                "AddPortMapping": [(500, TEST_CONFLICT), (500, TEST_CONFLICT), (200, TEST_ADD_PORT)],
                "DeletePortMapping": [(200, TEST_DELETE_PORT), (500, TEST_NO_SUCH_ENTRY)],
                "GetGenericPortMappingEntry": [(200, TEST_GENERIC_ENTRY), (500, TEST_INVALID_INDEX)],
            },
        )

    def tearDown(self):
        mock_req.clear()

    @async_test
    async def test_gateway(self):
        gateway = await igd.Gateway.from_url(DESCRIPTION_URL, aio.AiohttpTransport())
        self.assertEqual(gateway.control_url, ASYNC_SERVER_ADDR + "/ctl/IPConn")
        self.assertEqual(str(await gateway.get_external_ip()), "203.0.113.7")
        self.assertEqual(mock_req.method, "POST")
        self.assertEqual(
            mock_req.headers["SOAPAction"],
            '"urn:schemas-upnp-org:service:WANIPConnection:1#GetExternalIPAddress"')

    @async_test
    async def test_add_any_port(self):
        gateway = await igd.Gateway.from_url(DESCRIPTION_URL, aio.AiohttpTransport())
        rng = SequenceRandom(40001, 40002, 40003)
        port = await gateway.add_any_port(igd.TCP, "192.168.1.50", 51413, rng=rng)
        self.assertEqual(port, 40003)
        self.assertEqual(len(mock_gateway.posts), 3)

    @async_test
    async def test_remove_port_twice(self):
        gateway = await igd.Gateway.from_url(DESCRIPTION_URL, aio.AiohttpTransport())
        await gateway.remove_port(igd.TCP, 8080)
        await gateway.remove_port(igd.TCP, 8080)
        self.assertEqual(len(mock_gateway.posts), 2)

    @async_test
    async def test_enumerate(self):
        gateway = await igd.Gateway.from_url(DESCRIPTION_URL, aio.AiohttpTransport())
        mapping = await gateway.get_generic_port_mapping_entry(0)
        self.assertEqual(mapping.internal_client, "192.168.1.50")
        with self.assertRaises(igd.EnumerationComplete):
            await gateway.get_generic_port_mapping_entry(1)

    @async_test
    async def test_invalid_argument(self):
        gateway = await igd.Gateway.from_url(DESCRIPTION_URL, aio.AiohttpTransport())
        with self.assertRaises(igd.InvalidArgument):
            await gateway.add_port("SCTP", 8080, "192.168.1.50", 80)
        self.assertEqual(mock_gateway.posts, [])

    @async_test
    async def test_session_auth_and_headers(self):
        auth = ("myuser", "mypassword")
        async with aiohttp.ClientSession() as session:
            transport = aio.AiohttpTransport(
                session=session, http_auth=auth, http_headers={"test": "call"})
            gateway = await igd.Gateway.from_url(DESCRIPTION_URL, transport)
            await gateway.get_external_ip()
        basic_auth_string = f"{auth[0]}:{auth[1]}"
        b64 = b64encode(basic_auth_string.encode("utf-8")).decode()
        self.assertEqual("Basic %s" % b64, mock_req.headers["Authorization"])
        self.assertEqual(mock_req.headers["test"], "call")

    @async_test
    async def test_description_not_found(self):
        with self.assertRaises(igd.TransportError):
            await igd.Gateway.from_url(ASYNC_SERVER_ADDR + "/nothing.xml", aio.AiohttpTransport())

    @async_test
    async def test_connection_refused(self):
        with self.assertRaises(igd.TransportError) as ctx:
            await igd.Gateway.from_url(
                "http://%s:1/rootDesc.xml" % LOCALHOST, aio.AiohttpTransport(timeout=2))
        self.assertIsInstance(ctx.exception.__cause__, aiohttp.ClientError)


class TestAsyncOperations(unittest.TestCase):
    def setUp(self):
        self.loop = asyncio.new_event_loop()
        self.addCleanup(self.loop.close)
        self.device = FakeGateway(
            documents={
                "/rootDesc.xml": TEST_IGD_DESCRIPTION,
                "/WANIPCn.xml": TEST_WANIP_SCPD,
                "/media.xml": TEST_NO_WAN_DESCRIPTION,
            },
            actions={"GetExternalIPAddress": [(200, TEST_EXTERNAL_IP)]},
        )
        self.transport = FakeAsyncTransport(self.device)

    def test_auth_header(self):
        transport = aio.AiohttpTransport(
            http_auth=("myuser", "mypassword"), http_headers={"test": "call"})
        self.assertEqual(transport.http_headers, {
            "test": "call",
            "Authorization": "Basic %s" % b64encode(b"myuser:mypassword").decode(),
        })

    @async_test
    async def test_same_operations(self):
        """
        The asynchronous transport should send what the blocking one sends.
        """
        gateway = await igd.Gateway.from_url("http://192.168.1.1:5000/rootDesc.xml", self.transport)
        await gateway.get_external_ip()
        self.assertEqual([(r.method, r.url) for r in self.device.requests], [
            ("GET", "http://192.168.1.1:5000/rootDesc.xml"),
            ("GET", "http://192.168.1.1:5000/WANIPCn.xml"),
            ("POST", "http://192.168.1.1:5000/ctl/IPConn"),
        ])

    @async_test
    @mock.patch("igdclient.ssdp.open_search_sockets")
    async def test_discover_zero_timeout(self, mock_open):
        self.assertEqual([l async for l in aio.discover(ST_IGD, 0)], [])
        mock_open.assert_not_called()

    @async_test
    async def test_discover_loopback(self):
        responder = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        responder.bind((LOCALHOST, 0))
        self.addCleanup(responder.close)

        def serve():
            _, addr = responder.recvfrom(2048)
            responder.sendto(b"garbage", addr)
            responder.sendto(ssdp_reply("http://127.0.0.1:5000/rootDesc.xml"), addr)
            responder.sendto(ssdp_reply("http://127.0.0.1:5000/rootDesc.xml"), addr)

        thread = threading.Thread(target=serve)
        thread.daemon = True
        thread.start()

        options = igd.SearchOptions(bind_addr=LOCALHOST, broadcast_address=responder.getsockname())
        locations = [l async for l in aio.discover(ST_IGD, 0.5, options)]
        self.assertEqual([l.url for l in locations], ["http://127.0.0.1:5000/rootDesc.xml"])

    @async_test
    async def test_search_gateway(self):
        async def discover(*args):
            for url in ("http://192.168.1.1:5000/media.xml", "http://192.168.1.1:5000/rootDesc.xml"):
                yield igd.GatewayLocation(url)

        with mock.patch("igdclient.aio.asyncio.discover", discover):
            gateway = await aio.search_gateway(transport=self.transport)
        self.assertEqual(gateway.control_url, "http://192.168.1.1:5000/ctl/IPConn")

    @async_test
    async def test_search_gateway_nothing(self):
        async def discover(*args):
            return
            yield

        with mock.patch("igdclient.aio.asyncio.discover", discover):
            with self.assertRaises(igd.NoGatewayFound):
                await aio.search_gateway(transport=self.transport)
