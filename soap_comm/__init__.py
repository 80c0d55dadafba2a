"""
SOAP Communication Client

Minimal SOAP 1.1 client: wraps a request payload in a SOAP envelope, sends it
over HTTP, and unwraps either the response payload or a SOAP fault.

1. Envelope: Envelope/Header/Body/Fault model and XML codec
2. Adapters: transport interface, httpx transport and the SOAPClient
3. Telemetry: OpenTelemetry spans and metrics around each exchange
"""

from soap_comm.envelope import SOAPBody, SOAPEnvelope, SOAPFault, SOAPHeader
from soap_comm.errors import (
    DecodingError,
    EmptyResponseError,
    EncodingError,
    FaultError,
    SOAPError,
    TransportError,
)
from soap_comm.config import ClientConfig, TransportConfig
from soap_comm.adapters.http import HttpTransport, SOAPClient

__version__ = "0.1.0"

__all__ = [
    "SOAPClient",
    "HttpTransport",
    "ClientConfig",
    "TransportConfig",
    "SOAPEnvelope",
    "SOAPHeader",
    "SOAPBody",
    "SOAPFault",
    "SOAPError",
    "EncodingError",
    "TransportError",
    "EmptyResponseError",
    "DecodingError",
    "FaultError",
]
