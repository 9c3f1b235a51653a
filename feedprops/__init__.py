"""Property-map access to "payload-in-content" Atom feed entries.

This package converts entry XML payloads to and from plain property maps and
provides a feed client that reads and writes entries as such maps.
"""

from .client import FeedEntryClient
from .converters import PropertyConverter, convert_properties_to_xml, convert_xml_to_properties
from .errors import (
    ClientError,
    ConfigError,
    FeedPropsError,
    ParseError,
    SerializationError,
    TransportError,
    ValidationError,
)
from .models import FeedEntry
from .transport import AtomFeedTransport, FeedTransport

__all__ = [
    "FeedEntryClient",
    "PropertyConverter",
    "convert_properties_to_xml",
    "convert_xml_to_properties",
    "FeedEntry",
    "FeedTransport",
    "AtomFeedTransport",
    "FeedPropsError",
    "ParseError",
    "SerializationError",
    "ValidationError",
    "ClientError",
    "TransportError",
    "ConfigError",
]
