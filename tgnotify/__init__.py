"""Telegram notifications for CI workflows."""

__version__ = "1.0.0"
