from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class FeedEntry:
    """One feed record carrying a "payload-in-content" XML blob.

    Only ``payload`` is read by the client; the remaining fields are filled
    by transports that know them.
    """

    payload: str
    id: Optional[str] = None
    title: Optional[str] = None
    edit_url: Optional[str] = None
    updated: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: str) -> "FeedEntry":
        return cls(payload=payload)
