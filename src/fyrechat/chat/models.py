"""Data models for the chat decoding pipeline."""

from dataclasses import dataclass, field

DEFAULT_NAME = "Unknown"
DEFAULT_COLOR = "#ffffff"

# "set_id/version_id" -> image_url
BadgeTable = dict[str, str]


@dataclass(frozen=True)
class TextSegment:
    """A literal text portion of a message."""

    text: str


@dataclass(frozen=True)
class EmoteSegment:
    """An inline emote, referenced by its Twitch emote id."""

    emote_id: str


Segment = TextSegment | EmoteSegment


@dataclass(frozen=True)
class EmoteRange:
    """One emote occurrence from the IRC ``emotes`` tag.

    Offsets are inclusive and counted in UTF-16 code units, as sent by Twitch.
    """

    start: int
    end: int
    emote_id: str


@dataclass(frozen=True)
class ChatEvent:
    """A decoded chat message, ready for badge resolution and rendering."""

    name: str = DEFAULT_NAME
    color: str = DEFAULT_COLOR
    segments: tuple[Segment, ...] = ()
    badge_keys: tuple[str, ...] = ()
    room_id: str = ""
    text: str = ""

    @property
    def plain_text(self) -> str:
        """The message text with emote spans removed."""
        return "".join(s.text for s in self.segments if isinstance(s, TextSegment))


@dataclass(frozen=True)
class ResolvedChatEvent:
    """A chat event paired with the badge image URLs that resolved for it."""

    event: ChatEvent
    badge_urls: tuple[str, ...] = field(default_factory=tuple)
