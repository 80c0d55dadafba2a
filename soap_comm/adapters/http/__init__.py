"""
HTTP Adapter Package

SOAP 1.1 over HTTP: the httpx transport and the SOAP client built on it.
"""

from soap_comm.adapters.http.transport import HttpTransport, HttpxResponse
from soap_comm.adapters.http.client import SOAPClient

__all__ = ["HttpTransport", "HttpxResponse", "SOAPClient"]
