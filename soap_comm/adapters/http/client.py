"""
SOAP client

Performs SOAP 1.1 request/response exchanges against a single endpoint: the
request payload is wrapped in an envelope, POSTed through a transport adapter,
and the response envelope is decoded into a caller-supplied destination.
"""

import logging
import time
from typing import Any, Optional, TypeVar

from soap_comm.adapters.http.transport import HttpTransport
from soap_comm.adapters.transport_interface import TransportAdapterInterface
from soap_comm.config import ClientConfig
from soap_comm.envelope.codec import decode_envelope, encode_envelope
from soap_comm.envelope.model import SOAPEnvelope
from soap_comm.errors import (
    DecodingError,
    EmptyResponseError,
    EncodingError,
    FaultError,
    SOAPError,
    TransportError,
)
from soap_comm.telemetry.metrics import increment_counter, record_latency
from soap_comm.telemetry.tracer import create_span

logger = logging.getLogger(__name__)

CONTENT_TYPE = 'text/xml; charset="utf-8"'

T = TypeVar("T")

_ERROR_TYPES = (
    (EncodingError, "encoding"),
    (TransportError, "transport"),
    (EmptyResponseError, "empty_response"),
    (DecodingError, "decoding"),
    (FaultError, "fault"),
)


class SOAPClient:
    """
    SOAP client bound to one endpoint.

    The client keeps no per-call state, so one instance can serve concurrent
    callers; each call builds its own envelopes and buffers.

    This client does not send SOAP headers and ignores the ones it receives.
    """

    def __init__(self,
                 endpoint: str,
                 transport: Optional[TransportAdapterInterface] = None,
                 enable_tracing: bool = True):
        """Initialize a SOAP client

        Args:
            endpoint: SOAP endpoint URL
            transport: transport adapter, an HttpTransport with defaults when None
            enable_tracing: run each exchange inside an OpenTelemetry span
        """
        self.endpoint = endpoint
        self.transport = transport if transport is not None else HttpTransport()
        self.enable_tracing = enable_tracing
        logger.info(f"SOAP client created for endpoint {endpoint}")

    @classmethod
    def from_config(cls, config: ClientConfig) -> "SOAPClient":
        """Create a client and its HTTP transport from configuration"""
        return cls(
            endpoint=config.endpoint,
            transport=HttpTransport.from_config(config.transport),
            enable_tracing=config.enable_tracing,
        )

    def close(self) -> None:
        """Release the transport

        HttpTransport holds no connections between calls, so this is a no-op for
        it; custom transports that keep a channel open release it here.
        """
        self.transport.close()

    def __enter__(self) -> "SOAPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def do(self, action: str, request: Any, response: T) -> T:
        """Perform one SOAP exchange

        Args:
            action: SOAP action, sent as the SOAPAction HTTP header
            request: request payload, placed in the request body
            response: empty instance of the expected response payload;
                filled in place from the response body

        Returns:
            the ``response`` object, now populated

        Raises:
            ValueError: action is empty
            EncodingError: the request cannot be serialized
            TransportError: the request failed or its body could not be read
            EmptyResponseError: the response body is empty
            DecodingError: the response is not a valid envelope of the expected shape
            FaultError: the endpoint answered with a SOAP fault
        """
        if not isinstance(action, str) or not action:
            raise ValueError("SOAP action must be a non-empty string")

        if not self.enable_tracing:
            return self._exchange(action, request, response)

        with create_span("soap.client.do", {"soap.action": action, "soap.endpoint": self.endpoint},
                         tracer_name=__name__):
            return self._exchange(action, request, response)

    def _exchange(self, action: str, request: Any, response: T) -> T:
        attributes = {"action": action}
        start_time = time.time()
        increment_counter("soap.client.requests", 1, attributes)

        try:
            result = self._round_trip(action, request, response)
        except SOAPError as e:
            error_type = next(name for cls, name in _ERROR_TYPES if isinstance(e, cls))
            logger.error(f"SOAP call {action} to {self.endpoint} failed ({error_type}): {e}")
            increment_counter("soap.client.errors", 1, {"type": error_type, **attributes})
            raise
        finally:
            latency_ms = (time.time() - start_time) * 1000
            record_latency("soap.client.latency", latency_ms, attributes)

        logger.debug(f"SOAP call {action} completed, latency: {latency_ms:.2f}ms")
        increment_counter("soap.client.success", 1, attributes)
        return result

    def _round_trip(self, action: str, request: Any, response: T) -> T:
        document = encode_envelope(SOAPEnvelope.wrap(request))
        logger.debug(f"sending {len(document)} byte SOAP request: {document[:200]!r}")

        headers = {
            "Content-Type": CONTENT_TYPE,
            "SOAPAction": action,
        }
        try:
            reply = self.transport.post(self.endpoint, document, headers)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"SOAP request to {self.endpoint} failed: {e}") from e

        try:
            raw = reply.read()
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"failed to read SOAP response: {e}") from e
        finally:
            reply.close()

        status_code = reply.status_code
        logger.debug(f"received {len(raw)} byte SOAP response, status {status_code}")
        if len(raw) == 0:
            raise EmptyResponseError(status_code=status_code)

        envelope = decode_envelope(raw, response, status_code)
        if envelope.body.is_fault:
            raise FaultError(envelope.body.fault, status_code)

        return response
