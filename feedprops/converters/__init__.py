"""Conversion between entry XML payloads and property maps."""

from .xml_properties import (
    DEFAULT_ROOT_TAG,
    PropertyConverter,
    PropertyMap,
    PropertyValue,
    convert_properties_to_xml,
    convert_xml_to_properties,
)

__all__ = [
    "DEFAULT_ROOT_TAG",
    "PropertyConverter",
    "PropertyMap",
    "PropertyValue",
    "convert_properties_to_xml",
    "convert_xml_to_properties",
]
