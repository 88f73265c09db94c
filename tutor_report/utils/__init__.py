"""Utility modules for the Tutor Report PDF service."""

from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
