from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import FeedEntry


class FeedTransport(ABC):
    """Abstract feed transport: the network side of the entry client."""

    @abstractmethod
    def fetch_entry(self, url: str) -> FeedEntry:
        """Return the entry stored at ``url``."""

    @abstractmethod
    def fetch_feed(self, url: str) -> List[FeedEntry]:
        """Return the entries of the feed at ``url`` in feed order."""

    @abstractmethod
    def insert(self, url: str, entry: FeedEntry) -> FeedEntry:
        """Create ``entry`` at ``url`` and return the stored entry."""

    @abstractmethod
    def update(self, url: str, entry: FeedEntry) -> FeedEntry:
        """Replace the entry at ``url`` and return the stored entry."""

    @abstractmethod
    def delete(self, url: str) -> None:
        """Delete the entry at ``url``."""
