"""
Payload serialization tools

Converts request payloads into XML elements and binds response elements into
caller-supplied destinations. The destination's own shape decides how the XML
is read, so one client can carry any payload type.

Supported payload and destination shapes:
- dataclass instances (element named ``__xml_name__`` or the class name)
- protobuf messages (element named after the message descriptor)
- mappings (one element per key)
- xml.etree.ElementTree.Element (validated, then passed through as is)
"""

import base64
import dataclasses
import enum
import re
import types
import typing
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Set, Tuple, Type

from google.protobuf.descriptor import Descriptor, FieldDescriptor
from google.protobuf.json_format import MessageToDict, ParseDict, ParseError
from google.protobuf.message import Message

from soap_comm.envelope.model import XSI_NAMESPACE

XSI_NIL = f"{{{XSI_NAMESPACE}}}nil"

# Characters allowed by XML 1.0
_INVALID_XML_CHARS = re.compile(
    "[^\t\n\r\x20-\U0000d7ff\U0000e000-\U0000fffd\U00010000-\U0010ffff]"
)
_XML_NAME = re.compile(r"^[^\W\d][\w.\-]*$")

_UNION_TYPES = (typing.Union, getattr(types, "UnionType", typing.Union))
_TRUE_VALUES = ("true", "1")
_FALSE_VALUES = ("false", "0")


def split_tag(tag: str) -> Tuple[str, str]:
    """Split a Clark-notation tag into (namespace, local name)"""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


def local_name(tag: str) -> str:
    return split_tag(tag)[1]


def qualify(namespace: Optional[str], name: str) -> str:
    if not namespace or name.startswith("{"):
        return name
    return f"{{{namespace}}}{name}"


def protobuf_to_dict(message: Message) -> Dict[str, Any]:
    """Convert Protobuf message to dictionary

    Args:
        message: Protobuf message object

    Returns:
        Dict: Dictionary containing message fields
    """
    if message is None:
        return {}

    return MessageToDict(message, preserving_proto_field_name=True)


def dict_to_protobuf(data: Dict[str, Any], message: Message) -> Message:
    """Merge dictionary data into a Protobuf message in place

    Args:
        data: Dictionary data, keyed by proto field name
        message: Protobuf message object to fill

    Returns:
        Message: the same message object

    Raises:
        ValueError: the data does not fit the message type
    """
    if data:
        try:
            ParseDict(data, message, ignore_unknown_fields=True)
        except ParseError as e:
            raise ValueError(f"cannot fill {message.DESCRIPTOR.name}: {e}") from e
    return message


def element_name(payload: Any) -> Tuple[Optional[str], str]:
    """Return (namespace, local name) a payload is emitted under"""
    if isinstance(payload, Message):
        return None, payload.DESCRIPTOR.name
    cls = payload if isinstance(payload, type) else type(payload)
    return getattr(cls, "__xml_namespace__", None), getattr(cls, "__xml_name__", cls.__name__)


# Encoding

def payload_to_elements(payload: Any) -> List[ET.Element]:
    """Convert a request payload into the elements placed inside the SOAP body

    Raises:
        TypeError: the payload, or a value inside it, has an unsupported type
        ValueError: the payload is cyclic or holds names or text that XML cannot carry
    """
    if payload is None:
        return []
    if isinstance(payload, ET.Element):
        return [_checked_element(payload)]
    if isinstance(payload, Message):
        _, name = element_name(payload)
        element = ET.Element(_checked_name(name))
        for key, value in protobuf_to_dict(payload).items():
            _append_value(element, key, value, None, set())
        return [element]
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return [_dataclass_element(payload, None, set())]
    if isinstance(payload, Mapping):
        holder = ET.Element("holder")
        seen = {id(payload)}
        for key, value in payload.items():
            _append_value(holder, key, value, None, seen)
        return list(holder)
    raise TypeError(f"unsupported payload type: {type(payload).__name__}")


def _checked_name(name: Any) -> str:
    if not isinstance(name, str):
        raise TypeError(f"element names must be strings, got {type(name).__name__}")
    if not _XML_NAME.match(local_name(name)):
        raise ValueError(f"invalid XML element name: {name!r}")
    return name


def _checked_text(text: str) -> str:
    match = _INVALID_XML_CHARS.search(text)
    if match:
        raise ValueError(f"character {match.group()!r} cannot be represented in XML")
    return text


def _checked_element(element: ET.Element) -> ET.Element:
    """Validate a caller-built element tree; ElementTree serializes it unchecked"""
    for node in element.iter():
        # Comments and processing instructions carry a factory function as tag
        if isinstance(node.tag, str):
            _checked_name(node.tag)
        for key, value in node.attrib.items():
            _checked_name(key)
            _checked_text(value)
        for text in (node.text, node.tail):
            if text is not None:
                _checked_text(text)
    return element


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _scalar_text(value.value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (str, int, float)):
        return _checked_text(str(value))
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def _dataclass_element(obj: Any, tag: Optional[str], seen: Set[int]) -> ET.Element:
    namespace, name = element_name(obj)
    element = ET.Element(_checked_name(qualify(namespace, tag or name)))
    seen.add(id(obj))
    try:
        for f in dataclasses.fields(obj):
            value = getattr(obj, f.name)
            xml_name = f.metadata.get("xml_name", f.name)
            if f.metadata.get("xml_attribute"):
                if value is not None:
                    element.set(_checked_name(xml_name), _scalar_text(value))
                continue
            _append_value(element, xml_name, value, namespace, seen)
    finally:
        seen.discard(id(obj))
    return element


def _append_value(parent: ET.Element, tag: str, value: Any,
                  namespace: Optional[str], seen: Set[int]) -> None:
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        if id(value) in seen:
            raise ValueError("cyclic structure in payload")
        seen.add(id(value))
        try:
            for item in value:
                _append_value(parent, tag, item, namespace, seen)
        finally:
            seen.discard(id(value))
        return

    qualified = _checked_name(qualify(namespace, tag))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        if id(value) in seen:
            raise ValueError("cyclic structure in payload")
        parent.append(_dataclass_element(value, qualified, seen))
    elif isinstance(value, Message):
        child = ET.SubElement(parent, qualified)
        for key, item in protobuf_to_dict(value).items():
            _append_value(child, key, item, namespace, seen)
    elif isinstance(value, Mapping):
        if id(value) in seen:
            raise ValueError("cyclic structure in payload")
        child = ET.SubElement(parent, qualified)
        seen.add(id(value))
        try:
            for key, item in value.items():
                _append_value(child, key, item, namespace, seen)
        finally:
            seen.discard(id(value))
    elif isinstance(value, ET.Element):
        ET.SubElement(parent, qualified).append(_checked_element(value))
    else:
        ET.SubElement(parent, qualified).text = _scalar_text(value)


# Decoding

def bind_content(elements: List[ET.Element], destination: Any) -> Any:
    """Bind the SOAP body's content elements into ``destination``

    Dataclass and protobuf destinations are filled from the first element.
    Mapping destinations are updated with every element, keyed by local name,
    and list destinations receive the raw elements.

    Raises:
        TypeError: the destination shape is not supported
        ValueError: the elements do not match the destination
    """
    if destination is None or not elements:
        return destination
    if isinstance(destination, list):
        destination.extend(elements)
    elif isinstance(destination, Message):
        element = elements[0]
        _check_name(element, None, destination.DESCRIPTOR.name)
        dict_to_protobuf(_message_dict(element, destination.DESCRIPTOR), destination)
    elif dataclasses.is_dataclass(destination) and not isinstance(destination, type):
        element = elements[0]
        cls = type(destination)
        if hasattr(cls, "__xml_name__"):
            _check_name(element, getattr(cls, "__xml_namespace__", None), cls.__xml_name__)
        for key, value in _field_values(element, cls).items():
            setattr(destination, key, value)
    elif isinstance(destination, MutableMapping):
        destination.update(_elements_to_dict(elements))
    else:
        raise TypeError(f"unsupported destination type: {type(destination).__name__}")
    return destination


def _check_name(element: ET.Element, namespace: Optional[str], name: str) -> None:
    got_namespace, got_name = split_tag(element.tag)
    if got_name != name or (namespace and got_namespace and got_namespace != namespace):
        raise ValueError(f"expected element <{name}> but have <{got_name}>")


def _is_nil(element: ET.Element) -> bool:
    return element.get(XSI_NIL, "").strip() in _TRUE_VALUES


def element_to_value(element: ET.Element) -> Any:
    """Generic conversion: text for leaves, nested dict for elements with children"""
    if len(element) == 0:
        return None if _is_nil(element) else (element.text or "")
    return _elements_to_dict(list(element))


def _elements_to_dict(elements: List[ET.Element]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for child in elements:
        key = local_name(child.tag)
        value = element_to_value(child)
        if key in result:
            if not isinstance(result[key], list):
                result[key] = [result[key]]
            result[key].append(value)
        else:
            result[key] = value
    return result


def _field_values(element: ET.Element, cls: Type) -> Dict[str, Any]:
    try:
        hints = typing.get_type_hints(cls)
    except NameError as e:
        raise TypeError(f"cannot resolve field types of {cls.__name__}: {e}") from e
    values = {}
    for f in dataclasses.fields(cls):
        xml_name = f.metadata.get("xml_name", f.name)
        hint = hints.get(f.name, Any)
        if f.metadata.get("xml_attribute"):
            raw = element.get(xml_name)
            if raw is not None:
                values[f.name] = _convert_text(raw, _unwrap_optional(hint))
            continue
        children = [c for c in element if local_name(c.tag) == local_name(xml_name)]
        if not children:
            continue
        hint = _unwrap_optional(hint)
        item_hint = _list_item_type(hint)
        if item_hint is not None:
            values[f.name] = [_convert_element(c, item_hint) for c in children]
        else:
            values[f.name] = _convert_element(children[0], hint)
    return values


def _unwrap_optional(hint: Any) -> Any:
    if typing.get_origin(hint) in _UNION_TYPES:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _list_item_type(hint: Any) -> Optional[Any]:
    if hint is list:
        return Any
    if typing.get_origin(hint) is list:
        args = typing.get_args(hint)
        return args[0] if args else Any
    return None


def _convert_element(element: ET.Element, hint: Any) -> Any:
    if _is_nil(element):
        return None
    if isinstance(hint, type):
        if hint is ET.Element:
            return element
        if dataclasses.is_dataclass(hint):
            try:
                return hint(**_field_values(element, hint))
            except TypeError as e:
                raise ValueError(f"cannot build {hint.__name__} from <{local_name(element.tag)}>: {e}") from e
        if issubclass(hint, Message):
            return dict_to_protobuf(_message_dict(element, hint.DESCRIPTOR), hint())
        if issubclass(hint, Mapping):
            return _elements_to_dict(list(element))
    elif typing.get_origin(hint) is dict:
        return _elements_to_dict(list(element))
    if len(element) and hint in (Any, str):
        return element_to_value(element) if hint is Any else "".join(element.itertext())
    return _convert_text(element.text or "", hint)


def _convert_text(text: str, hint: Any) -> Any:
    if hint is Any or hint is str:
        return text
    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        for member in hint:
            if str(member.value) == text.strip():
                return member
        try:
            return hint[text.strip()]
        except KeyError:
            raise ValueError(f"invalid {hint.__name__} value: {text!r}") from None
    if hint is bool:
        lowered = text.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"invalid boolean value: {text!r}")
    if hint is bytes:
        return base64.b64decode(text.strip(), validate=True)
    if hint in (int, float):
        return hint(text.strip())
    return text


def _message_dict(element: ET.Element, descriptor: Descriptor) -> Dict[str, Any]:
    """Shape an element into the dict ParseDict expects for ``descriptor``"""
    result: Dict[str, Any] = {}
    for child in element:
        name = local_name(child.tag)
        fd = descriptor.fields_by_name.get(name)
        if fd is None:
            fd = next((f for f in descriptor.fields if f.json_name == name), None)
        if fd is None:
            continue
        if fd.message_type is not None and fd.message_type.GetOptions().map_entry:
            value_fd = fd.message_type.fields_by_name["value"]
            entries = result.setdefault(fd.name, {})
            for entry in child:
                entries[local_name(entry.tag)] = _message_value(entry, value_fd)
            continue
        value = _message_value(child, fd)
        if fd.is_repeated:
            result.setdefault(fd.name, []).append(value)
        else:
            result[fd.name] = value
    return result


def _message_value(element: ET.Element, fd: FieldDescriptor) -> Any:
    if fd.type == FieldDescriptor.TYPE_MESSAGE:
        return _message_dict(element, fd.message_type)
    text = (element.text or "").strip()
    if fd.type == FieldDescriptor.TYPE_BOOL:
        return _convert_text(text, bool)
    return text
