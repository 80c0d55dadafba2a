"""
Payload serialization tests

Cover each supported payload shape: dataclasses, protobuf messages, mappings
and raw elements.
"""

import enum
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pytest
from google.protobuf import descriptor_pb2

from soap_comm.envelope.model import XSI_NAMESPACE
from soap_comm.utils.serialization import (
    bind_content,
    element_to_value,
    payload_to_elements,
    protobuf_to_dict,
)


class Color(enum.Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Typed:
    __xml_name__ = "Typed"

    kind: str = field(default="", metadata={"xml_attribute": True,
                                            "xml_name": f"{{{XSI_NAMESPACE}}}type"})
    color: Color = Color.RED
    blob: bytes = b""
    note: Optional[str] = "default"
    extra: Dict[str, Any] = field(default_factory=dict)


def parse(text: str) -> ET.Element:
    return ET.fromstring(text)


def test_mapping_payload_emits_one_element_per_key():
    elements = payload_to_elements({"First": {"A": 1}, "Second": [True, False]})

    assert [e.tag for e in elements] == ["First", "Second", "Second"]
    assert elements[0].findtext("A") == "1"
    assert [e.text for e in elements[1:]] == ["true", "false"]


def test_none_values_are_omitted():
    (element,) = payload_to_elements({"Req": {"present": "x", "absent": None}})

    assert element.find("present") is not None
    assert element.find("absent") is None


def test_raw_element_passes_through():
    raw = ET.Element("Custom", {"id": "7"})
    assert payload_to_elements(raw) == [raw]


def test_invalid_element_name_is_rejected():
    with pytest.raises(ValueError, match="invalid XML element name"):
        payload_to_elements({"has space": 1})


def test_dataclass_attributes_enums_and_bytes_round_trip():
    value = Typed(kind="xsd:string", color=Color.BLUE, blob=b"\x00\x01", note=None,
                  extra={"k": "v"})
    (element,) = payload_to_elements(value)

    assert element.get(f"{{{XSI_NAMESPACE}}}type") == "xsd:string"
    assert element.findtext("color") == "blue"
    assert element.find("note") is None

    destination = Typed()
    bind_content([element], destination)

    assert destination.kind == "xsd:string"
    assert destination.color is Color.BLUE
    assert destination.blob == b"\x00\x01"
    assert destination.note == "default"
    assert destination.extra == {"k": "v"}


def test_xsi_nil_sets_none():
    element = parse(
        f'<Typed xmlns:xsi="{XSI_NAMESPACE}"><note xsi:nil="true"/></Typed>'
    )
    destination = Typed()
    bind_content([element], destination)

    assert destination.note is None


def test_unknown_children_are_ignored():
    destination = Typed()
    bind_content([parse("<Typed><unexpected>1</unexpected></Typed>")], destination)

    assert destination == Typed()


def test_mapping_destination_receives_all_elements():
    destination = {}
    bind_content(
        [parse("<Result><Row>1</Row><Row>2</Row><Meta><Count>2</Count></Meta></Result>")],
        destination,
    )

    assert destination == {"Result": {"Row": ["1", "2"], "Meta": {"Count": "2"}}}


def test_list_destination_receives_raw_elements():
    element = parse("<Anything/>")
    destination = []
    bind_content([element], destination)

    assert destination == [element]


def test_unsupported_destination():
    with pytest.raises(TypeError):
        bind_content([parse("<A/>")], 42)


def test_element_to_value_leaf_and_tree():
    assert element_to_value(parse("<a>text</a>")) == "text"
    assert element_to_value(parse("<a/>")) == ""
    assert element_to_value(parse("<a><b>1</b></a>")) == {"b": "1"}


def test_protobuf_payload_round_trip():
    """Protobuf messages are emitted under their descriptor name"""
    message = descriptor_pb2.EnumValueDescriptorProto(name="ACTIVE", number=3)
    (element,) = payload_to_elements(message)

    assert element.tag == "EnumValueDescriptorProto"
    assert element.findtext("name") == "ACTIVE"
    assert element.findtext("number") == "3"

    destination = descriptor_pb2.EnumValueDescriptorProto()
    bind_content([element], destination)

    assert destination == message
    assert protobuf_to_dict(destination) == {"name": "ACTIVE", "number": 3}


def test_protobuf_repeated_and_nested_fields():
    message = descriptor_pb2.EnumDescriptorProto(
        name="State",
        value=[
            descriptor_pb2.EnumValueDescriptorProto(name="OK", number=0),
            descriptor_pb2.EnumValueDescriptorProto(name="FAILED", number=1),
        ],
    )
    (element,) = payload_to_elements(message)

    destination = descriptor_pb2.EnumDescriptorProto()
    bind_content([element], destination)

    assert destination == message


def test_protobuf_name_mismatch():
    with pytest.raises(ValueError):
        bind_content([parse("<Other/>")], descriptor_pb2.EnumValueDescriptorProto())


@dataclass
class Unresolved:
    value: "UndefinedType" = None


def test_raw_element_with_invalid_text_is_rejected():
    raw = ET.Element("Req")
    raw.text = "bad\x00char"

    with pytest.raises(ValueError, match="cannot be represented in XML"):
        payload_to_elements(raw)


def test_raw_element_checks_nested_names_and_attributes():
    raw = ET.Element("Req")
    ET.SubElement(raw, "Child", {"note": "tab\tok"}).tail = "\x01"

    with pytest.raises(ValueError):
        payload_to_elements(raw)

    bad_name = ET.Element("Req")
    ET.SubElement(bad_name, "has space")
    with pytest.raises(ValueError, match="invalid XML element name"):
        payload_to_elements(bad_name)


def test_raw_element_inside_mapping_is_checked():
    inner = ET.Element("Inner", {"id": "\x00"})

    with pytest.raises(ValueError):
        payload_to_elements({"Req": inner})


def test_unresolvable_field_annotation_is_a_type_error():
    with pytest.raises(TypeError, match="Unresolved"):
        bind_content([parse("<Unresolved><value>1</value></Unresolved>")], Unresolved())
