"""
SOAP envelope codec

Encodes a SOAPEnvelope into a SOAP 1.1 document and decodes a response document
into a SOAPEnvelope whose body content is bound to a caller-supplied destination.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Optional

from soap_comm.envelope.model import (
    SOAP_ENV_NAMESPACE,
    XSI_NAMESPACE,
    BodyOutcome,
    SOAPEnvelope,
    SOAPFault,
)
from soap_comm.errors import DecodingError, EncodingError
from soap_comm.utils.serialization import bind_content, payload_to_elements, split_tag

logger = logging.getLogger(__name__)

ET.register_namespace("soap", SOAP_ENV_NAMESPACE)
ET.register_namespace("xsi", XSI_NAMESPACE)

_ENVELOPE = f"{{{SOAP_ENV_NAMESPACE}}}Envelope"
_HEADER = f"{{{SOAP_ENV_NAMESPACE}}}Header"
_BODY = f"{{{SOAP_ENV_NAMESPACE}}}Body"

# Fault child element -> SOAPFault attribute
_FAULT_FIELDS = {
    "faultcode": "code",
    "faultstring": "message",
    "faultactor": "actor",
    "detail": "detail",
}


def encode_envelope(envelope: SOAPEnvelope) -> bytes:
    """Serialize an envelope into a UTF-8 SOAP document

    Args:
        envelope: envelope to encode; ``body.fault`` is never emitted

    Returns:
        bytes: the document, with XML declaration

    Raises:
        EncodingError: the body or header content cannot be serialized
    """
    root = ET.Element(_ENVELOPE)
    try:
        if envelope.header is not None:
            header = ET.SubElement(root, _HEADER)
            header.extend(payload_to_elements(envelope.header.content))
        body = ET.SubElement(root, _BODY)
        body.extend(payload_to_elements(envelope.body.content))
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodingError(f"cannot encode SOAP envelope: {e}") from e

    if envelope.xsi_namespace and not _uses_namespace(root, envelope.xsi_namespace):
        # ElementTree declares only the namespaces its tags and attributes use
        root.set("xmlns:xsi", envelope.xsi_namespace)

    try:
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot serialize SOAP envelope: {e}") from e


def _uses_namespace(root: ET.Element, namespace: str) -> bool:
    marker = f"{{{namespace}}}"
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith(marker):
            return True
        if any(key.startswith(marker) for key in element.attrib):
            return True
    return False


def _is_soap_element(element: ET.Element, name: str) -> bool:
    """Envelope parts match on local name, in the SOAP namespace or unqualified"""
    namespace, local = split_tag(element.tag)
    return local == name and namespace in ("", SOAP_ENV_NAMESPACE)


def decode_envelope(raw: bytes, destination: Any,
                    status_code: Optional[int] = None) -> SOAPEnvelope:
    """Decode a response document, binding body content into ``destination``

    A Fault anywhere among the body's children wins over content: the fault is
    recorded and ``destination`` is left untouched.

    Args:
        raw: response document
        destination: empty instance of the expected response payload type
        status_code: transport status, carried on errors for diagnostics

    Returns:
        SOAPEnvelope: envelope with ``body.outcome`` set

    Raises:
        DecodingError: the document is malformed or not a SOAP envelope of the
            expected shape
    """
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise DecodingError(f"malformed SOAP response: {e}", status_code) from e

    if not _is_soap_element(root, "Envelope"):
        namespace, local = split_tag(root.tag)
        raise DecodingError(
            f"expected SOAP Envelope but have <{local}> in namespace {namespace!r}", status_code
        )

    bodies = [child for child in root if _is_soap_element(child, "Body")]
    if len(bodies) != 1:
        raise DecodingError(f"SOAP envelope must hold exactly one Body, found {len(bodies)}", status_code)
    body = bodies[0]

    envelope = SOAPEnvelope.bound_to(destination)

    fault = next((child for child in body if _is_soap_element(child, "Fault")), None)
    if fault is not None:
        envelope.body.fault = _decode_fault(fault)
        envelope.body.outcome = BodyOutcome.FAULT
        return envelope

    content = list(body)
    if not content:
        return envelope

    try:
        bind_content(content, destination)
    except (TypeError, ValueError, RecursionError) as e:
        raise DecodingError(f"cannot decode SOAP body: {e}", status_code) from e

    envelope.body.outcome = BodyOutcome.CONTENT
    return envelope


def _decode_fault(element: ET.Element) -> SOAPFault:
    fault = SOAPFault()
    for child in element:
        attribute = _FAULT_FIELDS.get(split_tag(child.tag)[1])
        if attribute:
            setattr(fault, attribute, "".join(child.itertext()).strip())
    logger.debug(f"decoded SOAP fault: {fault}")
    return fault
