"""
HTTP transport adapter

Sends SOAP documents with HTTP POST using httpx. Every call opens its own
connection and closes it once the response body has been read; nothing is pooled
or kept alive between calls.
"""

import logging
from typing import Dict, Optional

import httpx

from soap_comm.adapters.transport_interface import TransportAdapterInterface, TransportResponse
from soap_comm.config import TransportConfig
from soap_comm.errors import TransportError

logger = logging.getLogger(__name__)


class HttpxResponse(TransportResponse):
    """Streamed httpx response; owns the client that produced it"""

    def __init__(self, client: httpx.Client, response: httpx.Response):
        self._client = client
        self._response = response
        self.status_code = response.status_code

    def read(self) -> bytes:
        try:
            return self._response.read()
        except httpx.HTTPError as e:
            raise TransportError(f"failed to read response body: {e}") from e

    def close(self) -> None:
        try:
            self._response.close()
        finally:
            self._client.close()


class HttpTransport(TransportAdapterInterface):
    """
    httpx-based transport, one connection per request
    """

    def __init__(self,
                 timeout_seconds: float = 30.0,
                 verify_tls: bool = True,
                 user_agent: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        """Initialize the HTTP transport

        Args:
            timeout_seconds: connect/read/write timeout in seconds
            verify_tls: whether to verify server certificates
            user_agent: User-Agent header value, httpx default when None
            transport: httpx transport override (e.g. httpx.MockTransport)
        """
        self.timeout_seconds = timeout_seconds
        self.verify_tls = verify_tls
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_config(cls, config: TransportConfig) -> "HttpTransport":
        return cls(
            timeout_seconds=config.timeout_seconds,
            verify_tls=config.verify_tls,
            user_agent=config.user_agent,
        )

    def post(self, address: str, body: bytes, headers: Dict[str, str]) -> TransportResponse:
        request_headers = dict(headers)
        request_headers["Connection"] = "close"
        if self.user_agent:
            request_headers["User-Agent"] = self.user_agent

        client = httpx.Client(
            timeout=self.timeout_seconds,
            verify=self.verify_tls,
            transport=self._transport,
        )
        try:
            request = client.build_request("POST", address, content=body, headers=request_headers)
            response = client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            client.close()
            raise TransportError(f"HTTP request to {address} failed: {e}") from e
        except BaseException:
            client.close()
            raise

        logger.debug(f"HTTP POST to {address} answered with status {response.status_code}")
        return HttpxResponse(client, response)
