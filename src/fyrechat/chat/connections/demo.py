"""Offline demo source that cycles through canned chat messages."""

import itertools
import logging

from ..badges.resolver import parse_badge_keys
from ..models import ChatEvent, TextSegment
from .base import BaseChatConnection

logger = logging.getLogger(__name__)

DEMO_INTERVAL = 1.2  # seconds between messages
DEMO_ROOM_ID = "79615025"

DEMO_SAMPLES = [
    ("Fyre", "#9bf", "FyreChat demo \U0001f44b", "broadcaster/1"),
    (
        "ModUser",
        "#6f6",
        "Badges render via badgeProxy (or demoBadges=1).",
        "moderator/1,subscriber/12",
    ),
    ("Viewer", "#fc6", "Emotes render if emotes tag provides ranges.", "subscriber/3"),
]


def demo_event(index: int, with_badges: bool = False) -> ChatEvent:
    """Build the demo event for a sample index (wraps around)."""
    name, color, text, badges = DEMO_SAMPLES[index % len(DEMO_SAMPLES)]
    return ChatEvent(
        name=name,
        color=color,
        segments=(TextSegment(text),),
        badge_keys=tuple(parse_badge_keys(badges)) if with_badges else (),
        room_id=DEMO_ROOM_ID,
        text=text,
    )


class DemoChatConnection(BaseChatConnection):
    """Emits a demo message every DEMO_INTERVAL seconds until disconnected."""

    def __init__(
        self,
        with_badges: bool = False,
        interval: float = DEMO_INTERVAL,
        badge_cache=None,
        parent=None,
    ):
        super().__init__(badge_cache, parent)
        self._with_badges = with_badges
        self._interval = interval

    async def connect_to_channel(self, channel: str) -> None:
        self._begin_run()
        self._set_connected(channel, "demo")
        logger.info(f"Demo mode: emitting sample messages every {self._interval}s")
        try:
            for index in itertools.count():
                if not self._should_reconnect:
                    break
                await self._resolve_and_emit(demo_event(index, self._with_badges))
                if await self._wait_for_stop(self._interval):
                    break
        finally:
            self._set_disconnected()

    async def disconnect(self) -> None:
        self._request_stop()
