"""
Configuration for world generation and logging.
"""

from .config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
