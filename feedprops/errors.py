"""Exception types raised by feedprops."""

from __future__ import annotations

from typing import Optional


class FeedPropsError(Exception):
    """Base class for all feedprops errors."""


class ParseError(FeedPropsError):
    """Raised when an XML payload cannot be parsed into a property map."""


class SerializationError(FeedPropsError):
    """Raised when a property map cannot be rendered as XML."""


class ValidationError(FeedPropsError):
    """Raised when an entry map lacks a usable required field."""


class ConfigError(FeedPropsError):
    """Raised when the configuration file is invalid or missing required fields."""


class TransportError(FeedPropsError):
    """Raised by a feed transport for HTTP or envelope failures."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ClientError(FeedPropsError):
    """Wraps a failure raised by the feed transport.

    The original exception stays reachable as ``cause`` and ``__cause__``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
