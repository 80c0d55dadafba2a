"""
SOAP client errors

Every failure of an exchange is raised as exactly one of the subclasses below.
"""

from typing import Optional


class SOAPError(Exception):
    """Base class for all errors raised by soap_comm"""


class EncodingError(SOAPError):
    """Raised when the request payload cannot be serialized into an envelope."""


class TransportError(SOAPError):
    """Raised when the request cannot be built, dispatched, or its body read.

    The underlying transport exception is chained as ``__cause__``.
    """


class EmptyResponseError(SOAPError):
    """Raised when the response body is zero bytes long."""

    def __init__(self, message: str = "received empty raw body", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodingError(SOAPError):
    """Raised when the response is not a well-formed envelope of the expected shape."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FaultError(SOAPError):
    """Raised when the remote party answered with a SOAP fault.

    ``code`` is always set from the fault; ``message``, ``actor`` and ``detail``
    are whatever the fault carried, possibly empty.
    """

    def __init__(self, fault, status_code: Optional[int] = None):
        super().__init__(f"received SOAP fault with code {fault.code}")
        self.fault = fault
        self.status_code = status_code

    @property
    def code(self) -> str:
        return self.fault.code

    @property
    def message(self) -> str:
        return self.fault.message

    @property
    def actor(self) -> str:
        return self.fault.actor

    @property
    def detail(self) -> str:
        return self.fault.detail
