"""
Transport Adapters Module

- transport_interface: the request/response capability SOAP clients consume
- http: httpx transport and the SOAP client
"""

from .transport_interface import BufferedResponse, TransportAdapterInterface, TransportResponse

__all__ = [
    "BufferedResponse",
    "TransportAdapterInterface",
    "TransportResponse",
]
