"""Chat decoding pipeline: IRC parsing, emote segmentation and badge resolution."""

from .models import ChatEvent, EmoteSegment, ResolvedChatEvent, Segment, TextSegment

__all__ = ["ChatEvent", "EmoteSegment", "ResolvedChatEvent", "Segment", "TextSegment"]
