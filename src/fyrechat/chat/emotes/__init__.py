"""Emote range parsing and message segmentation."""

from .renderer import (
    emote_url,
    parse_emote_ranges,
    render_message_html,
    render_segments_html,
    segment_message,
)

__all__ = [
    "emote_url",
    "parse_emote_ranges",
    "render_message_html",
    "render_segments_html",
    "segment_message",
]
