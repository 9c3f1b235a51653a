"""Conversion between entry XML payloads and property maps.

A property map is a ``dict`` keyed by element local name. Each value is one of
the JSON shapes:

- ``str`` for a leaf element (``None`` when the leaf has no text)
- ``list`` for an element that repeats among its siblings, or whose first
  occurrence carries ``repeatable="true"``
- ``dict`` for an element with child elements

The parser never fetches DTDs or external entities.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Union

from lxml import etree

from ..errors import ParseError, SerializationError
from ..utils.logging import get_logger

logger = get_logger("feedprops.converters")

PropertyValue = Union[str, None, List[Any], Dict[str, Any]]
PropertyMap = Dict[str, PropertyValue]

DEFAULT_ROOT_TAG = "entity"
REPEATABLE_ATTR = "repeatable"


def _make_parser(*, encoding: Optional[str] = None) -> etree.XMLParser:
    return etree.XMLParser(
        encoding=encoding,
        resolve_entities="internal",
        no_network=True,
        load_dtd=False,
        remove_comments=True,
        remove_pis=True,
        recover=False,
    )


def _is_repeatable(element: etree._Element) -> bool:
    return (element.get(REPEATABLE_ATTR) or "").strip().lower() == "true"


def _element_value(element: etree._Element) -> PropertyValue:
    children = []
    for child in element:
        if child.tag is etree.Entity:
            raise ParseError(f"Unresolved entity reference &{child.name}; in <{etree.QName(element).localname}>")
        if isinstance(child.tag, str):
            children.append(child)
    if children:
        return _children_to_map(children)
    # An empty leaf stays present in the map as None.
    return "".join(element.itertext()) or None


def _children_to_map(children: List[etree._Element]) -> PropertyMap:
    props: PropertyMap = {}
    # Keys already collected into a list at this level.
    sequences: set[str] = set()
    for child in children:
        key = etree.QName(child).localname
        value = _element_value(child)
        if key in sequences:
            props[key].append(value)
        elif key in props:
            props[key] = [props[key], value]
            sequences.add(key)
        elif _is_repeatable(child):
            props[key] = [value]
            sequences.add(key)
        else:
            props[key] = value
    return props


def parse_xml_root(xml_text: Union[str, bytes]) -> etree._Element:
    """Parse ``xml_text`` and return its root element.

    ``str`` input is parsed as UTF-8 regardless of any encoding declaration;
    ``bytes`` honour the declared encoding.
    """
    if xml_text is None or not xml_text.strip():
        raise ParseError("Failed to parse XML: received empty content")
    if isinstance(xml_text, str):
        data, parser = xml_text.encode("utf-8"), _make_parser(encoding="utf-8")
    else:
        data, parser = xml_text, _make_parser()
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"Failed to parse XML: {exc}") from exc
    except (OSError, ValueError) as exc:
        raise ParseError(f"Failed to read XML: {exc}") from exc
    if root is None:
        raise ParseError("Failed to parse XML: no root element")
    return root


def convert_xml_to_properties(xml_text: Union[str, bytes]) -> PropertyMap:
    """Convert the children of the document root into a property map.

    Raises:
        ParseError: If the document is malformed or references an entity
            that cannot be resolved.
    """
    root = parse_xml_root(xml_text)
    props = properties_from_element(root)
    logger.debug("Converted <%s> into %d properties", etree.QName(root).localname, len(props))
    return props


def properties_from_element(root: etree._Element) -> PropertyMap:
    """Convert the children of an already parsed element into a property map."""
    value = _element_value(root)
    if isinstance(value, dict):
        return value
    return {}


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise SerializationError(f"Property keys must be non-empty strings, got {key!r}")
    return key


def _render_single(parent: etree._Element, key: str, value: Any) -> etree._Element:
    try:
        element = etree.SubElement(parent, key)
    except ValueError as exc:
        raise SerializationError(f"Invalid element name {key!r}: {exc}") from exc
    if value is None:
        return element
    if isinstance(value, str):
        try:
            element.text = value
        except ValueError as exc:
            raise SerializationError(f"Invalid text for <{key}>: {exc}") from exc
        return element
    if isinstance(value, Mapping):
        _render_map(element, value)
        return element
    if isinstance(value, (list, tuple)):
        raise SerializationError(f"Nested sequence under <{key}> cannot be rendered")
    raise SerializationError(
        f"Unsupported value for <{key}>: {type(value).__name__} (expected str, None, mapping or sequence)"
    )


def _render_map(parent: etree._Element, props: Mapping) -> None:
    for key, value in props.items():
        key = _check_key(key)
        if isinstance(value, (list, tuple)):
            for idx, item in enumerate(value):
                element = _render_single(parent, key, item)
                if idx == 0:
                    element.set(REPEATABLE_ATTR, "true")
        else:
            _render_single(parent, key, value)


def convert_properties_to_xml(props: Mapping, *, root_tag: str = DEFAULT_ROOT_TAG) -> str:
    """Render a property map as XML wrapped in ``<root_tag>``.

    The first element of every sequence carries ``repeatable="true"`` so that
    single-item sequences survive a round trip.

    Raises:
        SerializationError: If a key or value has no XML rendering.
    """
    if not isinstance(props, Mapping):
        raise SerializationError(f"Expected a mapping of properties, got {type(props).__name__}")
    try:
        root = etree.Element(root_tag)
    except ValueError as exc:
        raise SerializationError(f"Invalid root element name {root_tag!r}: {exc}") from exc
    _render_map(root, props)
    return etree.tostring(root, encoding="unicode")


class PropertyConverter:
    """Stateless converter bound to a root tag for serialization."""

    def __init__(self, *, root_tag: str = DEFAULT_ROOT_TAG) -> None:
        self.root_tag = root_tag

    def to_properties(self, xml_text: Union[str, bytes]) -> PropertyMap:
        return convert_xml_to_properties(xml_text)

    def to_xml(self, props: Mapping) -> str:
        return convert_properties_to_xml(props, root_tag=self.root_tag)
