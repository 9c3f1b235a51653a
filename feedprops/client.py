"""Map-based CRUD over "payload-in-content" feed entries.

Each entry's XML payload is exposed as a property map: a ``dict`` whose
values are ``str`` (``None`` for empty elements), ``list`` for repeatable
elements, or a nested ``dict`` for elements with children. See
:mod:`feedprops.converters.xml_properties` for the conversion rules.

This client suits consumers that need quick access to a few fields of an
entry without defining a typed model for it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Iterable, List, Optional, TypeVar

from .converters import PropertyConverter, PropertyMap
from .errors import ClientError, ValidationError
from .models import FeedEntry
from .transport import FeedTransport
from .utils.logging import get_logger

T = TypeVar("T")
logger = get_logger("feedprops.client")

NAME_ELEMENT = "name"


def entry_url(base_url: str, props: Mapping) -> str:
    """Build the entry URL ``base_url/<name>`` from the map's ``name`` value.

    Raises:
        ValidationError: If ``name`` is missing, not a string, or empty.
    """
    if not isinstance(props, Mapping):
        raise ValidationError(f"Entry must be a mapping, got {type(props).__name__}")
    if NAME_ELEMENT not in props or props[NAME_ELEMENT] is None:
        raise ValidationError(f"entry map does not have '{NAME_ELEMENT}' key")
    name = props[NAME_ELEMENT]
    if not isinstance(name, str):
        raise ValidationError(f"entry map does not have '{NAME_ELEMENT}' key as a string: {type(name).__name__}")
    if not name.strip():
        raise ValidationError(f"'{NAME_ELEMENT}' in entry map is empty")
    return f"{base_url.rstrip('/')}/{name}"


class FeedEntryClient:
    """Feed client that represents entries as property maps.

    Parameters
    ----------
    transport:
        The feed transport performing the network calls. Any failure it
        raises is re-raised as :class:`ClientError` with the original
        exception as its cause.
    converter:
        Converter between payload XML and property maps.
    """

    def __init__(self, transport: FeedTransport, converter: Optional[PropertyConverter] = None) -> None:
        self.transport = transport
        self.converter = converter or PropertyConverter()

    def _call(self, action: str, url: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except Exception as exc:  # noqa: BLE001 - every transport failure is wrapped
            raise ClientError(f"Error while {action} {url}: {exc}", cause=exc) from exc

    def _entry_to_map(self, entry: FeedEntry) -> PropertyMap:
        logger.debug("Entry payload: %s", entry.payload)
        return self.converter.to_properties(entry.payload)

    def _map_to_entry(self, props: Mapping) -> FeedEntry:
        return FeedEntry.from_payload(self.converter.to_xml(props))

    def get_map_from_xml(self, xml_text: str) -> PropertyMap:
        """Convert a raw entry payload into a property map."""
        return self.converter.to_properties(xml_text)

    def get_entry(self, url: str) -> PropertyMap:
        """Fetch the entry at ``url`` as a property map.

        Raises:
            ClientError: If the transport fails.
            ParseError: If the entry payload is malformed.
        """
        entry = self._call("fetching", url, lambda: self.transport.fetch_entry(url))
        return self._entry_to_map(entry)

    def get_entries(self, url: str) -> List[PropertyMap]:
        """Fetch every entry of the feed at ``url``, in feed order.

        A single malformed entry fails the whole call.
        """
        entries = self._call("fetching", url, lambda: self.transport.fetch_feed(url))
        return [self._entry_to_map(entry) for entry in entries]

    def insert_entry(self, base_url: str, props: Mapping) -> PropertyMap:
        url = entry_url(base_url, props)
        entry = self._map_to_entry(props)
        logger.info("Inserting entry to feed %s", url)
        stored = self._call("inserting", url, lambda: self.transport.insert(url, entry))
        return self._entry_to_map(stored)

    def update_entry(self, base_url: str, props: Mapping) -> PropertyMap:
        url = entry_url(base_url, props)
        entry = self._map_to_entry(props)
        logger.info("Updating entry in feed %s", url)
        stored = self._call("updating", url, lambda: self.transport.update(url, entry))
        return self._entry_to_map(stored)

    def delete_entry(self, url: str, props: Optional[Mapping] = None) -> None:
        """Delete an entry.

        With only ``url``, it is the full entry URL. With ``props``, ``url``
        is the feed URL and the entry name is taken from ``props["name"]``.
        """
        if props is not None:
            url = entry_url(url, props)
        logger.info("Deleting entry %s", url)
        self._call("deleting", url, lambda: self.transport.delete(url))

    def insert_entries(self, base_url: str, entries: Iterable[Mapping]) -> List[PropertyMap]:
        """Insert each map in order; the first failure stops the batch."""
        return [self.insert_entry(base_url, props) for props in entries]

    def update_entries(self, base_url: str, entries: Iterable[Mapping]) -> List[PropertyMap]:
        """Update each map in order; the first failure stops the batch."""
        return [self.update_entry(base_url, props) for props in entries]

    def delete_entries(self, base_url: str, entries: Iterable[Mapping]) -> None:
        """Delete each map's entry in order; the first failure stops the batch."""
        for props in entries:
            self.delete_entry(base_url, props)
