import ipaddress
import unittest

import igdclient as igd
from igdclient.marshal import (
    marshal_fields, marshal_value, validate_lease, validate_port, validate_protocol,
    validate_string)


class TestMarshal(unittest.TestCase):
    def test_marshal_int(self):
        """
        Should parse an int into an int.
        """
        marshalled, val = marshal_value("ui2", " 51413 ")
        self.assertTrue(marshalled)
        self.assertEqual(val, 51413)

    def test_marshal_int_out_of_range(self):
        with self.assertRaises(igd.MalformedResponse):
            marshal_value("ui2", "65536")

    def test_marshal_int_garbage(self):
        with self.assertRaises(igd.MalformedResponse):
            marshal_value("ui4", "forever")

    def test_marshal_bool(self):
        """
        Should parse the UPnP boolean spellings.
        """
        for value, expected in (("1", True), ("true", True), ("Yes", True),
                                ("0", False), ("FALSE", False), ("no", False)):
            marshalled, val = marshal_value("boolean", value)
            self.assertTrue(marshalled)
            self.assertEqual(val, expected, value)

    def test_marshal_bool_garbage(self):
        with self.assertRaises(igd.MalformedResponse):
            marshal_value("boolean", "maybe")

    def test_marshal_ip(self):
        marshalled, val = marshal_value("ip", "203.0.113.7\n")
        self.assertTrue(marshalled)
        self.assertEqual(val, ipaddress.IPv4Address("203.0.113.7"))

    def test_marshal_bad_ip(self):
        with self.assertRaises(igd.MalformedResponse):
            marshal_value("ip", "0.0.0.300")

    def test_marshal_unknown_type(self):
        marshalled, val = marshal_value("string", "anything")
        self.assertFalse(marshalled)
        self.assertEqual(val, "anything")

    def test_marshal_none(self):
        self.assertEqual(marshal_value("string", None), (False, ""))

    def test_marshal_fields(self):
        fields = marshal_fields({
            "NewExternalPort": "80",
            "NewEnabled": "1",
            "NewPortMappingDescription": " web ",
            "X_Vendor": "x",
        })
        self.assertEqual(fields, {
            "NewExternalPort": 80,
            "NewEnabled": True,
            "NewPortMappingDescription": "web",
            "X_Vendor": "x",
        })


class TestValidation(unittest.TestCase):
    def test_port(self):
        self.assertEqual(validate_port("port", 1), 1)
        self.assertEqual(validate_port("port", 65535), 65535)

    def test_port_out_of_range(self):
        for port in (0, -1, 65536):
            with self.assertRaises(igd.InvalidArgument):
                validate_port("port", port)

    def test_port_zero_allowed(self):
        self.assertEqual(validate_port("index", 0, allow_zero=True), 0)

    def test_port_not_int(self):
        for port in ("80", 80.0, True, None):
            with self.assertRaises(igd.InvalidArgument):
                validate_port("port", port)

    def test_protocol(self):
        self.assertEqual(validate_protocol("tcp"), "TCP")
        self.assertEqual(validate_protocol(igd.UDP), "UDP")

    def test_bad_protocol(self):
        for protocol in ("SCTP", "", None, 6):
            with self.assertRaises(igd.InvalidArgument):
                validate_protocol(protocol)

    def test_lease(self):
        self.assertEqual(validate_lease(0), 0)
        self.assertEqual(validate_lease(4294967295), 4294967295)

    def test_bad_lease(self):
        for lease in (-1, 4294967296, "3600"):
            with self.assertRaises(igd.InvalidArgument):
                validate_lease(lease)

    def test_string(self):
        self.assertEqual(validate_string("description", "café\ttab\nline"), "café\ttab\nline")
        self.assertEqual(validate_string("description", None), "")

    def test_string_not_xml(self):
        for value in ("bad\x01desc", "nul\x00", "\ufffe", 42):
            with self.assertRaises(igd.InvalidArgument):
                validate_string("description", value)
