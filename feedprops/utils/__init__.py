"""Logging, configuration and retry helpers."""
