"""Feed transports: the network side of the entry client."""

from .base import FeedTransport
from .atom import AtomFeedTransport

__all__ = ["FeedTransport", "AtomFeedTransport"]
