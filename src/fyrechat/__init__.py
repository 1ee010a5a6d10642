"""FyreChat - a live, ephemeral Twitch chat overlay."""

from .__version__ import __version__

__all__ = ["__version__"]
