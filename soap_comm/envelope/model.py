"""
SOAP envelope model

Data shapes for the SOAP 1.1 envelope: the outer Envelope, its optional Header,
its Body, and the Fault structure a Body carries when the remote party fails.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

SOAP_ENV_NAMESPACE = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


class BodyOutcome(Enum):
    """What a decoded Body turned out to carry"""
    EMPTY = "empty"
    CONTENT = "content"
    FAULT = "fault"


@dataclass
class SOAPFault:
    """A SOAP fault; every field is omitted on the wire when empty"""
    code: str = ""
    message: str = ""
    actor: str = ""
    detail: str = ""


@dataclass
class SOAPHeader:
    """Opaque header slot. Not sent by the client and ignored on decode."""
    content: Any = None


@dataclass
class SOAPBody:
    """
    SOAP body.

    When sending, only ``content`` is set. When decoding, ``content`` is the
    caller's destination and ``outcome`` records whether it was filled or a
    fault was found instead.
    """
    content: Any = None
    fault: Optional[SOAPFault] = None
    outcome: BodyOutcome = BodyOutcome.EMPTY

    @property
    def is_fault(self) -> bool:
        return self.outcome is BodyOutcome.FAULT


@dataclass
class SOAPEnvelope:
    """SOAP envelope with an optional header and exactly one body"""
    body: SOAPBody = field(default_factory=SOAPBody)
    header: Optional[SOAPHeader] = None
    xsi_namespace: str = XSI_NAMESPACE

    @classmethod
    def wrap(cls, content: Any) -> "SOAPEnvelope":
        """Create a request envelope around a payload"""
        return cls(body=SOAPBody(content=content))

    @classmethod
    def bound_to(cls, destination: Any) -> "SOAPEnvelope":
        """Create a response envelope whose body decodes into ``destination``"""
        return cls(body=SOAPBody(content=destination))
