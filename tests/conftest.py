"""Shared fixtures: a recording feed transport and sample entry payloads."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from feedprops.models import FeedEntry
from feedprops.transport import FeedTransport

FEED_URL = "http://sample.com/feed"
ENTRY_URL = FEED_URL + "/vehicle0"

VEHICLE_XML = (
    "<entity>"
    "<name>vehicle0</name>"
    "<owner>Joe</owner>"
    "<make>Honda</make>"
    "<model>Civic</model>"
    "<year>2007</year>"
    '<propertyName repeatable="true">prop0</propertyName>'
    "<propertyName>prop1</propertyName>"
    '<propertyValue repeatable="true">value0</propertyValue>'
    "<propertyValue>value1</propertyValue>"
    "<notes></notes>"
    "</entity>"
)

VEHICLE_MAP = {
    "name": "vehicle0",
    "owner": "Joe",
    "make": "Honda",
    "model": "Civic",
    "year": "2007",
    "propertyName": ["prop0", "prop1"],
    "propertyValue": ["value0", "value1"],
    "notes": None,
}


class RecordingTransport(FeedTransport):
    """In-memory transport that records every call it receives."""

    def __init__(self) -> None:
        self.entries: Dict[str, FeedEntry] = {}
        self.feeds: Dict[str, List[FeedEntry]] = {}
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, Exception] = {}

    def _record(self, op: str, url: str, entry: Optional[FeedEntry] = None) -> None:
        self.calls.append((op, url, entry))
        if url in self.fail_on:
            raise self.fail_on[url]

    def fetch_entry(self, url: str) -> FeedEntry:
        self._record("fetch_entry", url)
        try:
            return self.entries[url]
        except KeyError:
            raise IOError(f"no entry at {url}") from None

    def fetch_feed(self, url: str) -> List[FeedEntry]:
        self._record("fetch_feed", url)
        return list(self.feeds.get(url, []))

    def insert(self, url: str, entry: FeedEntry) -> FeedEntry:
        self._record("insert", url, entry)
        self.entries[url] = entry
        return entry

    def update(self, url: str, entry: FeedEntry) -> FeedEntry:
        self._record("update", url, entry)
        self.entries[url] = entry
        return entry

    def delete(self, url: str) -> None:
        self._record("delete", url)
        self.entries.pop(url, None)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
