"""Shared test fixtures for fyrechat tests."""

import asyncio

import pytest

from fyrechat.chat.badges.cache import BadgeCache
from fyrechat.chat.badges.provider import BaseBadgeProvider
from fyrechat.chat.models import ChatEvent, ResolvedChatEvent, TextSegment


class FakeBadgeProvider(BaseBadgeProvider):
    """In-memory badge provider that counts fetches.

    Set ``gate`` to an asyncio.Event to hold fetches until it is set.
    A table of None simulates a failed fetch.
    """

    def __init__(self, global_table=None, channel_tables=None, fail=False):
        self.global_table = global_table if global_table is not None else {}
        self.channel_tables = channel_tables or {}
        self.fail = fail
        self.gate: asyncio.Event | None = None
        self.global_calls = 0
        self.channel_calls: dict[str, int] = {}

    async def fetch_global(self):
        self.global_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            return None
        return dict(self.global_table)

    async def fetch_channel(self, room_id):
        self.channel_calls[room_id] = self.channel_calls.get(room_id, 0) + 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            return None
        table = self.channel_tables.get(room_id)
        return dict(table) if table is not None else None


@pytest.fixture
def global_badges():
    return {
        "subscriber/6": "https://example.com/global/sub6",
        "moderator/1": "https://example.com/global/mod",
        "premium/1": "https://example.com/global/prime",
    }


@pytest.fixture
def channel_badges():
    return {
        "42": {
            "subscriber/6": "https://example.com/42/sub6",
            "bits/100": "https://example.com/42/bits100",
        }
    }


@pytest.fixture
def badge_provider(global_badges, channel_badges):
    return FakeBadgeProvider(global_badges, channel_badges)


@pytest.fixture
def badge_cache(badge_provider):
    return BadgeCache(badge_provider)


@pytest.fixture
def loaded_badge_cache(badge_cache):
    asyncio.run(badge_cache.ensure_loaded("42"))
    return badge_cache


@pytest.fixture
def chat_event():
    return ChatEvent(
        name="Bob",
        color="#112233",
        segments=(TextSegment("hello <world>"),),
        badge_keys=("subscriber/6",),
        room_id="42",
        text="hello <world>",
    )


@pytest.fixture
def resolved_event(chat_event):
    return ResolvedChatEvent(event=chat_event, badge_urls=("https://example.com/42/sub6",))


@pytest.fixture
def make_provider():
    """Factory for FakeBadgeProvider instances."""
    return FakeBadgeProvider
