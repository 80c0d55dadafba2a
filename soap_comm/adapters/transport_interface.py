"""
Transport adapter interface

The request/response capability a SOAP client consumes. Any transport (HTTP via
httpx, a test double, a custom channel) plugs into the client through these
interfaces.
"""

import abc
from typing import Dict


class TransportResponse(abc.ABC):
    """A response whose body has not necessarily been read yet"""

    status_code: int = 0

    @abc.abstractmethod
    def read(self) -> bytes:
        """Read the complete response body

        Returns:
            bytes: raw body, possibly empty

        Raises:
            TransportError: the body could not be read
        """
        pass

    def close(self) -> None:
        """Release the underlying connection"""
        pass


class TransportAdapterInterface(abc.ABC):
    """Transport adapter interface, defining what every transport must implement"""

    @abc.abstractmethod
    def post(self, address: str, body: bytes, headers: Dict[str, str]) -> TransportResponse:
        """Send one request and return its response

        Args:
            address: target endpoint
            body: serialized request document
            headers: transport headers (content type, SOAP action)

        Returns:
            TransportResponse: response with an unread body

        Raises:
            TransportError: the request could not be built or dispatched
        """
        pass

    def close(self) -> None:
        """Release resources held by the transport"""
        pass


class BufferedResponse(TransportResponse):
    """A response whose body is already in memory"""

    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def read(self) -> bytes:
        return self.content
