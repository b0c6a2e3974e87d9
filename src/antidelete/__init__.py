"""Recover deleted WhatsApp messages from a bounded in-memory cache."""

__version__ = "0.1.0"
