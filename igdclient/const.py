HTTP_TIMEOUT = 10
DISCOVER_TIMEOUT = 2

SSDP_TARGET = ("239.255.255.250", 1900)
SSDP_MX = DISCOVER_TIMEOUT
SSDP_TTL = 2
ST_ALL = "ssdp:all"
ST_IGD = "urn:schemas-upnp-org:device:InternetGatewayDevice:1"

# Largest SSDP reply we bother reading.
MAX_RESPONSE_SIZE = 1500

SERVICE_WANIP_1 = "urn:schemas-upnp-org:service:WANIPConnection:1"
SERVICE_WANIP_2 = "urn:schemas-upnp-org:service:WANIPConnection:2"
SERVICE_WANPPP_1 = "urn:schemas-upnp-org:service:WANPPPConnection:1"
ACCEPTED_SERVICE_TYPES = (SERVICE_WANIP_1, SERVICE_WANIP_2, SERVICE_WANPPP_1)

NS_SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
NS_SOAP_ENC = "http://schemas.xmlsoap.org/soap/encoding/"

TCP = "TCP"
UDP = "UDP"

ANY_PORT_ATTEMPTS = 10
ANY_PORT_RANGE = (32768, 65535)
