"""Twitch IRC chat connection over WebSocket, plus the PRIVMSG decoder."""

import logging
import random
import re

import aiohttp

from ..badges.cache import BadgeCache
from ..badges.resolver import parse_badge_keys
from ..emotes.renderer import segment_message
from ..models import DEFAULT_COLOR, DEFAULT_NAME, ChatEvent, ResolvedChatEvent
from .base import BaseChatConnection

logger = logging.getLogger(__name__)

TWITCH_IRC_WS_URL = "wss://irc-ws.chat.twitch.tv:443"

# Lines containing this marker are channel chat messages
CHANNEL_MESSAGE_MARKER = " PRIVMSG #"

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_TAG_ESCAPE_RE = re.compile(r"\\(.?)", re.DOTALL)


def unescape_tag_value(value: str) -> str:
    """Undo IRCv3 tag value escaping. Unknown escapes drop the backslash."""
    if "\\" not in value:
        return value
    return _TAG_ESCAPE_RE.sub(lambda m: _TAG_ESCAPES.get(m.group(1), m.group(1)), value)


def parse_irc_tags(tag_string: str) -> dict[str, str]:
    """Parse IRC tags string into a dictionary.

    Tags format: @key1=value1;key2=value2;...

    Values are kept raw (still escaped). A pair without '=' maps to an empty
    value. Repeated keys keep the last value.
    """
    tags: dict[str, str] = {}
    if not tag_string:
        return tags

    # Remove leading '@' if present
    if tag_string.startswith("@"):
        tag_string = tag_string[1:]

    for pair in tag_string.split(";"):
        if "=" in pair:
            key, value = pair.split("=", 1)
            tags[key] = value
        else:
            tags[pair] = ""

    return tags


def is_channel_message(line: str) -> bool:
    """Whether a raw IRC line is a channel chat message worth decoding."""
    return CHANNEL_MESSAGE_MARKER in line


def parse_privmsg(line: str) -> ChatEvent | None:
    """Decode a raw PRIVMSG line into a ChatEvent.

    Returns None when the line has no trailing message (no " :" delimiter).
    Missing or empty tags fall back to defaults; this never raises.
    """
    tags: dict[str, str] = {}
    rest = line

    if rest.startswith("@"):
        space_idx = rest.find(" ")
        if space_idx < 0:
            return None
        tags = parse_irc_tags(rest[:space_idx])
        rest = rest[space_idx + 1 :]

    msg_idx = rest.find(" :")
    if msg_idx < 0:
        return None

    text = rest[msg_idx + 2 :]

    return ChatEvent(
        name=unescape_tag_value(tags.get("display-name", "")) or DEFAULT_NAME,
        color=tags.get("color") or DEFAULT_COLOR,
        segments=tuple(segment_message(text, tags.get("emotes", ""))),
        badge_keys=tuple(parse_badge_keys(tags.get("badges", ""))),
        room_id=tags.get("room-id", ""),
        text=text,
    )


def anonymous_nick() -> str:
    """Generate a read-only justinfan nick."""
    return f"justinfan{random.randint(1000, 80999)}"


class TwitchChatConnection(BaseChatConnection):
    """Anonymous, read-only Twitch IRC chat connection over WebSocket.

    Decodes every channel message, loads badge tables on demand and emits
    one ResolvedChatEvent per message. Reconnects with backoff until
    disconnect() is called.
    """

    def __init__(self, badge_cache: BadgeCache | None = None, parent=None):
        super().__init__(badge_cache, parent)
        self._nick = ""
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._session: aiohttp.ClientSession | None = None

    async def connect_to_channel(self, channel: str) -> None:
        """Connect to a Twitch channel's chat and keep reconnecting until stopped."""
        self._begin_run()
        channel = channel.lower()

        while self._should_reconnect:
            try:
                await self._connect_and_read(channel)
            except Exception as e:
                if self._should_reconnect:
                    self._emit_error(f"Connection failed: {e}")
            finally:
                await self._cleanup()
                self._set_disconnected()

            if self._should_reconnect:
                await self._sleep_with_backoff()

    async def _connect_and_read(self, channel: str) -> None:
        """Open the WebSocket, join the channel and run the read loop."""
        self._session = aiohttp.ClientSession()
        self._ws = await self._session.ws_connect(TWITCH_IRC_WS_URL, heartbeat=60)

        self._nick = anonymous_nick()
        logger.info(f"Twitch IRC: connecting as {self._nick} to #{channel}")

        await self._ws.send_str("CAP REQ :twitch.tv/tags twitch.tv/commands")
        await self._ws.send_str("PASS SCHMOOPIIE")
        await self._ws.send_str(f"NICK {self._nick}")
        await self._ws.send_str(f"JOIN #{channel}")

        self._set_connected(channel, self._nick)
        self._reset_backoff()

        await self._read_loop()

    async def disconnect(self) -> None:
        """Disconnect from the channel and stop reconnecting."""
        self._request_stop()
        await self._cleanup()

    async def _read_loop(self) -> None:
        """Main read loop for incoming IRC frames."""
        async for msg in self._ws:
            if not self._should_reconnect:
                break

            if msg.type == aiohttp.WSMsgType.TEXT:
                for line in msg.data.split("\r\n"):
                    if line:
                        await self.handle_line(line)
            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                break

        logger.info(f"Twitch IRC: connection to #{self._channel} closed")

    async def handle_line(self, line: str) -> ResolvedChatEvent | None:
        """Handle a single IRC line, emitting a chat event if it carries one."""
        if line.startswith("PING"):
            if self._ws and not self._ws.closed:
                await self._ws.send_str(f"PONG {line[5:]}")
            return None

        if not is_channel_message(line):
            return None

        event = parse_privmsg(line)
        if event is None:
            logger.debug(f"Twitch IRC: dropped unparsable line: {line[:200]}")
            return None

        return await self._resolve_and_emit(event)

    async def _cleanup(self) -> None:
        """Clean up WebSocket and session."""
        if self._ws and not self._ws.closed:
            await self._ws.close()
        self._ws = None
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
