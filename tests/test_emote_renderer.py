"""Tests for emote range parsing, segmentation and HTML rendering."""

from fyrechat.chat.emotes.renderer import (
    emote_url,
    parse_emote_ranges,
    render_message_html,
    render_segments_html,
    segment_message,
)
from fyrechat.chat.models import EmoteRange, EmoteSegment, TextSegment


def _literal_text(segments) -> str:
    return "".join(s.text for s in segments if isinstance(s, TextSegment))


# --- parse_emote_ranges ---


def test_parse_emote_ranges_empty():
    assert parse_emote_ranges("") == []


def test_parse_emote_ranges_single():
    assert parse_emote_ranges("25:0-4") == [EmoteRange(0, 4, "25")]


def test_parse_emote_ranges_multiple_ranges():
    ranges = parse_emote_ranges("25:0-4,12-16")
    assert [(r.start, r.end) for r in ranges] == [(0, 4), (12, 16)]


def test_parse_emote_ranges_multiple_emotes():
    ranges = parse_emote_ranges("25:0-4/1234:6-9")
    assert [r.emote_id for r in ranges] == ["25", "1234"]


def test_parse_emote_ranges_sorted():
    ranges = parse_emote_ranges("25:10-14/1234:0-3")
    assert [r.start for r in ranges] == [0, 10]


def test_parse_emote_ranges_stable_on_ties():
    ranges = parse_emote_ranges("1:0-1/2:0-3")
    assert [r.emote_id for r in ranges] == ["1", "2"]


def test_parse_emote_ranges_no_colon():
    assert parse_emote_ranges("invalidformat") == []


def test_parse_emote_ranges_invalid_range():
    assert parse_emote_ranges("25:abc-def") == []


def test_parse_emote_ranges_skips_only_bad_entries():
    ranges = parse_emote_ranges("25:0-4,x-9,7/:3-4/88:6-8")
    assert ranges == [EmoteRange(0, 4, "25"), EmoteRange(6, 8, "88")]


# --- segment_message ---


def test_segment_empty_spec_is_single_literal():
    assert segment_message("hello Kappa", "") == [TextSegment("hello Kappa")]


def test_segment_empty_spec_empty_text():
    assert segment_message("", "") == [TextSegment("")]


def test_segment_unparsable_spec_is_single_literal():
    assert segment_message("hello", "garbage") == [TextSegment("hello")]


def test_segment_example():
    assert segment_message("LOL yay", "25:0-2/33:4-6") == [
        EmoteSegment("25"),
        TextSegment(" "),
        EmoteSegment("33"),
    ]


def test_segment_leading_and_trailing_text():
    assert segment_message("hi Kappa bye", "25:3-7") == [
        TextSegment("hi "),
        EmoteSegment("25"),
        TextSegment(" bye"),
    ]


def test_segment_adjacent_emotes():
    assert segment_message("KappaKappa", "25:0-4,5-9") == [EmoteSegment("25"), EmoteSegment("25")]


def test_segment_out_of_order_groups():
    segments = segment_message("a Kappa b PogChamp c", "88:10-17/25:2-6")
    assert segments == [
        TextSegment("a "),
        EmoteSegment("25"),
        TextSegment(" b "),
        EmoteSegment("88"),
        TextSegment(" c"),
    ]


def test_segment_coverage_removes_emote_spans():
    text = "one Kappa two LUL three Kappa"
    spec = "25:4-8,24-28/425618:14-16"
    segments = segment_message(text, spec)
    assert _literal_text(segments) == "one  two  three "
    assert sum(isinstance(s, EmoteSegment) for s in segments) == 3


def test_segment_overlapping_ranges_are_lossy():
    # The second range starts inside the first; nothing before it is re-emitted
    segments = segment_message("abcdefgh", "1:0-3/2:2-5")
    assert segments == [EmoteSegment("1"), EmoteSegment("2"), TextSegment("gh")]


def test_segment_utf16_offsets_after_astral_character():
    # The emoji is two UTF-16 code units, so "Kappa" starts at unit 3
    text = "\U0001f600 Kappa!"
    assert segment_message(text, "25:3-7") == [
        TextSegment("\U0001f600 "),
        EmoteSegment("25"),
        TextSegment("!"),
    ]


def test_segment_range_past_end_of_text():
    assert segment_message("hi", "25:0-9") == [EmoteSegment("25")]


# --- rendering ---


def test_emote_url():
    assert emote_url("25") == "https://static-cdn.jtvnw.net/emoticons/v2/25/default/dark/1.0"


def test_render_segments_html_escapes_text():
    html = render_segments_html([TextSegment("<b>&'\"")])
    assert html == "&lt;b&gt;&amp;&#x27;&quot;"


def test_render_segments_html_emote():
    html = render_segments_html([TextSegment("a "), EmoteSegment("25")])
    assert html.startswith("a <img")
    assert emote_url("25") in html


def test_render_message_html(resolved_event):
    html = render_message_html(resolved_event)
    assert "https://example.com/42/sub6" in html
    assert "color: #112233" in html
    assert ">Bob</span>" in html
    assert "hello &lt;world&gt;" in html
