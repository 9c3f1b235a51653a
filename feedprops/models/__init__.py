"""Typed models used across the application."""

from .entry import FeedEntry

__all__ = ["FeedEntry"]
