"""Emote renderer - splits message text into text and emote segments."""

import html
from bisect import bisect_left

from ..models import (
    DEFAULT_COLOR,
    EmoteRange,
    EmoteSegment,
    ResolvedChatEvent,
    Segment,
    TextSegment,
)

EMOTE_URL_TEMPLATE = "https://static-cdn.jtvnw.net/emoticons/v2/{emote_id}/default/dark/1.0"


def emote_url(emote_id: str) -> str:
    """Return the Twitch CDN image URL for an emote id."""
    return EMOTE_URL_TEMPLATE.format(emote_id=emote_id)


def parse_emote_ranges(emotes_tag: str) -> list[EmoteRange]:
    """Parse Twitch emote positions from the IRC ``emotes`` tag.

    Format: emote_id:start-end,start-end/emote_id:start-end

    Groups or ranges that can't be parsed are skipped. The result is sorted
    by start offset; ties keep their order from the tag.
    """
    ranges: list[EmoteRange] = []
    if not emotes_tag:
        return ranges

    for emote_section in emotes_tag.split("/"):
        if ":" not in emote_section:
            continue
        emote_id, locations = emote_section.split(":", 1)
        if not emote_id or not locations:
            continue
        for range_str in locations.split(","):
            if "-" not in range_str:
                continue
            start_str, end_str = range_str.split("-", 1)
            try:
                start = int(start_str)
                end = int(end_str)
            except ValueError:
                continue
            ranges.append(EmoteRange(start=start, end=end, emote_id=emote_id))

    ranges.sort(key=lambda r: r.start)
    return ranges


def _utf16_index_map(text: str) -> list[int] | None:
    """Map each Python index of text to its UTF-16 code unit offset.

    Returns None when the text has no astral characters, in which case the
    two offset systems are identical.
    """
    if all(ord(ch) < 0x10000 for ch in text):
        return None
    offsets: list[int] = []
    unit = 0
    for ch in text:
        offsets.append(unit)
        unit += 2 if ord(ch) >= 0x10000 else 1
    return offsets


def segment_message(text: str, emotes_tag: str) -> list[Segment]:
    """Resolve a message's text into display-ordered segments.

    Text outside emote ranges becomes TextSegment, each range becomes an
    EmoteSegment. Overlapping ranges are not detected: a range starting
    before the cursor swallows the text between its start and the cursor.
    """
    if not emotes_tag:
        return [TextSegment(text)]

    ranges = parse_emote_ranges(emotes_tag)
    if not ranges:
        return [TextSegment(text)]

    index_map = _utf16_index_map(text)

    def to_index(unit: int) -> int:
        if index_map is None:
            return unit
        return bisect_left(index_map, unit)

    segments: list[Segment] = []
    cursor = 0
    for emote_range in ranges:
        start = to_index(emote_range.start)
        if start > cursor:
            segments.append(TextSegment(text[cursor:start]))
        segments.append(EmoteSegment(emote_range.emote_id))
        cursor = to_index(emote_range.end + 1)

    if cursor < len(text):
        segments.append(TextSegment(text[cursor:]))

    return segments


def render_segments_html(
    segments: list[Segment] | tuple[Segment, ...], emote_size: int = 28
) -> str:
    """Render segments as rich text for the overlay (escaped text + emote images)."""
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, EmoteSegment):
            parts.append(
                f'<img class="emote" alt="" height="{emote_size}" '
                f'src="{html.escape(emote_url(segment.emote_id))}">'
            )
        else:
            parts.append(html.escape(segment.text))
    return "".join(parts)


def render_message_html(
    resolved: ResolvedChatEvent, emote_size: int = 28, badge_size: int = 18
) -> str:
    """Render a resolved event as one overlay row: badges, colored name, then text."""
    event = resolved.event
    badges = "".join(
        f'<img class="badge" alt="" height="{badge_size}" src="{html.escape(url)}"> '
        for url in resolved.badge_urls
    )
    name = (
        f'<span class="name" style="color: {html.escape(event.color or DEFAULT_COLOR)}; '
        f'font-weight: bold;">{html.escape(event.name)}</span>'
    )
    text = render_segments_html(event.segments, emote_size)
    return f'<div class="meta">{badges}{name}</div><div class="text">{text}</div>'
