"""Core settings for FyreChat."""

from .settings import OverlaySettings, load_settings

__all__ = ["OverlaySettings", "load_settings"]
