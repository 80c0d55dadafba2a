"""
SOAP Envelope Module

- model: Envelope, Header, Body and Fault data shapes
- codec: envelope encoding and shape-directed decoding
"""

from .model import (
    SOAP_ENV_NAMESPACE,
    XSI_NAMESPACE,
    BodyOutcome,
    SOAPBody,
    SOAPEnvelope,
    SOAPFault,
    SOAPHeader,
)
from .codec import decode_envelope, encode_envelope

__all__ = [
    "SOAP_ENV_NAMESPACE",
    "XSI_NAMESPACE",
    "BodyOutcome",
    "SOAPBody",
    "SOAPEnvelope",
    "SOAPFault",
    "SOAPHeader",
    "decode_envelope",
    "encode_envelope",
]
