"""
Decodes XML response bodies into dataclass shapes.

Each shape field is bound to a slash-separated tag path relative to the
document root, so nested result elements map straight onto flat
attributes:

    @dataclass
    class SendMessageResponse:
        ROOT = 'SendMessageResponse'
        message_id: str = xml_field('SendMessageResult/MessageId')
"""
import xml.etree.ElementTree as ET
from dataclasses import MISSING, field, fields, is_dataclass
from typing import Any, Optional, Type, TypeVar

from utils.exceptions import DecodeError

T = TypeVar('T')


def xml_field(path: str, *, many: bool = False, shape: Optional[type] = None) -> Any:
    """
    Declare a dataclass field bound to an XML tag path.

    Args:
        path: Tag path relative to the root element (e.g., 'Error/Code')
        many: Collect every matching element into a list
        shape: Decode each matching element into this nested shape
            instead of taking its text
    """
    metadata = {'path': path, 'many': many, 'shape': shape}
    if many:
        return field(default_factory=list, metadata=metadata)
    if shape is not None:
        return field(default=None, metadata=metadata)
    return field(default='', metadata=metadata)


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith('{'):
            element.tag = element.tag.split('}', 1)[1]
    return root


def _text(element: ET.Element) -> str:
    return (element.text or '').strip()


def _bind(element: ET.Element, shape: Type[T]) -> T:
    values = {}
    for shape_field in fields(shape):
        path = shape_field.metadata.get('path')
        if path is None:
            continue
        nested = shape_field.metadata.get('shape')
        if shape_field.metadata.get('many'):
            matches = element.findall(path)
            values[shape_field.name] = [
                _bind(match, nested) if nested else _text(match)
                for match in matches
            ]
            continue
        match = element.find(path)
        if match is None:
            if shape_field.default is MISSING:
                values[shape_field.name] = None
            continue
        values[shape_field.name] = _bind(match, nested) if nested else _text(match)
    return shape(**values)


def parse(body: bytes) -> ET.Element:
    """
    Parse a response body into a namespace-free element tree.

    Raises:
        DecodeError: If the body is empty or not well-formed XML
    """
    if not body or not body.strip():
        raise DecodeError("Empty response body", body)
    try:
        return _strip_namespaces(ET.fromstring(body))
    except ET.ParseError as e:
        raise DecodeError(f"Malformed XML response ({e})", body) from e


def decode(body: bytes, shape: Type[T]) -> T:
    """
    Decode an XML body into an instance of shape.

    Args:
        body: Raw response body
        shape: Dataclass whose fields are declared with xml_field();
            an optional ROOT class attribute names the expected root tag

    Returns:
        Populated shape instance

    Raises:
        DecodeError: If the body is malformed or its root tag does not
            match the shape
    """
    if not is_dataclass(shape):
        raise TypeError(f"{shape!r} is not a dataclass shape")
    return decode_element(parse(body), shape, body)


def decode_element(root: ET.Element, shape: Type[T], body: bytes = b'') -> T:
    """Bind an already parsed root element to shape, checking its ROOT tag."""
    expected_root = getattr(shape, 'ROOT', None)
    if expected_root and root.tag != expected_root:
        raise DecodeError(
            f"Expected <{expected_root}> response, got <{root.tag}>", body
        )
    return _bind(root, shape)
