"""
HTTP transport tests

Exercise HttpTransport and SOAPClient end to end against httpx.MockTransport.
"""

from dataclasses import dataclass

import httpx
import pytest

from soap_comm.adapters.http.client import SOAPClient
from soap_comm.adapters.http.transport import HttpTransport
from soap_comm.config import TransportConfig
from soap_comm.errors import EmptyResponseError, FaultError, TransportError

TEST_ENDPOINT = "http://soap.test/service"


@dataclass
class GetStatus:
    ID: int = 0


@dataclass
class StatusResponse:
    State: str = ""


def mock_transport(handler) -> HttpTransport:
    return HttpTransport(transport=httpx.MockTransport(handler))


def test_post_sends_headers_and_body():
    """The request is a POST with the caller's headers and Connection: close"""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.read()
        return httpx.Response(200, content=b"<Envelope><Body/></Envelope>")

    transport = HttpTransport(user_agent="soap-test/1.0", transport=httpx.MockTransport(handler))
    response = transport.post(TEST_ENDPOINT, b"<doc/>", {"SOAPAction": "Ping"})
    try:
        assert response.status_code == 200
        assert response.read() == b"<Envelope><Body/></Envelope>"
    finally:
        response.close()

    assert seen["method"] == "POST"
    assert seen["url"] == TEST_ENDPOINT
    assert seen["body"] == b"<doc/>"
    assert seen["headers"]["SOAPAction"] == "Ping"
    assert seen["headers"]["Connection"] == "close"
    assert seen["headers"]["User-Agent"] == "soap-test/1.0"


def test_network_failure_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        mock_transport(handler).post(TEST_ENDPOINT, b"<doc/>", {})

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_timeout_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        mock_transport(handler).post(TEST_ENDPOINT, b"<doc/>", {})


def test_invalid_address_raises_transport_error():
    transport = HttpTransport()

    with pytest.raises(TransportError):
        transport.post("ftp://soap.test/service", b"<doc/>", {})


def test_from_config():
    transport = HttpTransport.from_config(
        TransportConfig(timeout_seconds=2.5, verify_tls=False, user_agent="agent")
    )

    assert transport.timeout_seconds == 2.5
    assert transport.verify_tls is False
    assert transport.user_agent == "agent"


def test_client_round_trip_over_http():
    """A SOAP fault arrives with HTTP 500 and is still decoded as a fault"""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Content-Type"] == 'text/xml; charset="utf-8"'
        if request.headers["SOAPAction"] == "GetStatus":
            return httpx.Response(
                200,
                content=b"<Envelope><Body><StatusResponse><State>OK</State></StatusResponse></Body></Envelope>",
            )
        return httpx.Response(
            500,
            content=b"<Envelope><Body><Fault><faultcode>Client.UnknownAction</faultcode></Fault></Body></Envelope>",
        )

    client = SOAPClient(TEST_ENDPOINT, transport=mock_transport(handler))

    assert client.do("GetStatus", GetStatus(ID=42), StatusResponse()).State == "OK"

    with pytest.raises(FaultError) as excinfo:
        client.do("Reboot", GetStatus(ID=42), StatusResponse())
    assert excinfo.value.code == "Client.UnknownAction"
    assert excinfo.value.status_code == 500


def test_client_empty_http_body():
    client = SOAPClient(TEST_ENDPOINT, transport=mock_transport(lambda request: httpx.Response(204)))

    with pytest.raises(EmptyResponseError) as excinfo:
        client.do("GetStatus", GetStatus(ID=42), StatusResponse())

    assert excinfo.value.status_code == 204


class RecordingStream(httpx.SyncByteStream):
    """Response body stream that can fail mid-read and records being closed"""

    def __init__(self, content: bytes = b"", fail: bool = False):
        self.content = content
        self.fail = fail
        self.closed = False

    def __iter__(self):
        if self.fail:
            raise httpx.ReadError("connection reset while reading body")
        yield self.content

    def close(self) -> None:
        self.closed = True


def test_body_read_failure_raises_transport_error():
    stream = RecordingStream(fail=True)
    transport = mock_transport(lambda request: httpx.Response(200, stream=stream))

    response = transport.post(TEST_ENDPOINT, b"<doc/>", {})
    with pytest.raises(TransportError, match="failed to read") as excinfo:
        response.read()
    response.close()

    assert isinstance(excinfo.value.__cause__, httpx.ReadError)
    assert stream.closed


def test_response_and_client_closed_after_read():
    """Nothing outlives one exchange: the body stream and the client are both closed"""
    stream = RecordingStream(b"<Envelope><Body/></Envelope>")
    transport = mock_transport(lambda request: httpx.Response(200, stream=stream))

    response = transport.post(TEST_ENDPOINT, b"<doc/>", {})
    assert response.read() == b"<Envelope><Body/></Envelope>"
    response.close()

    assert stream.closed
    assert response._response.is_closed
    assert response._client.is_closed


def test_client_read_failure_over_http():
    stream = RecordingStream(fail=True)
    client = SOAPClient(
        TEST_ENDPOINT,
        transport=mock_transport(lambda request: httpx.Response(200, stream=stream)),
    )

    with pytest.raises(TransportError):
        client.do("GetStatus", GetStatus(ID=42), StatusResponse())

    assert stream.closed
