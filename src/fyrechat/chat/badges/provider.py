"""Badge table providers."""

import json
import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

import aiohttp

from ..models import BadgeTable
from .resolver import build_badge_table

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 15  # seconds


async def safe_json(resp: aiohttp.ClientResponse) -> dict | list | None:
    """Parse JSON from a response, returning None on HTML error pages or bad JSON."""
    try:
        return await resp.json(content_type=None)
    except (aiohttp.ContentTypeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse JSON response: {e}")
        return None


class BaseBadgeProvider(ABC):
    """Base class for badge table providers.

    Both fetch methods return None when the table could not be fetched.
    """

    @abstractmethod
    async def fetch_global(self) -> BadgeTable | None:
        """Fetch the global (channel-independent) badge table."""

    @abstractmethod
    async def fetch_channel(self, room_id: str) -> BadgeTable | None:
        """Fetch the badge table for a channel.

        Args:
            room_id: The numeric Twitch room/broadcaster ID.
        """


class BadgeProxyProvider(BaseBadgeProvider):
    """Fetches Helix-shaped badge payloads from a badge proxy.

    The proxy exposes ``/badges/global`` and ``/badges/channels/{room_id}``
    and forwards the Helix ``chat/badges`` responses unchanged.
    """

    def __init__(self, base_url: str, timeout: float = FETCH_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_global(self) -> BadgeTable | None:
        return await self._fetch_table(f"{self.base_url}/badges/global")

    async def fetch_channel(self, room_id: str) -> BadgeTable | None:
        url = f"{self.base_url}/badges/channels/{quote(room_id, safe='')}"
        return await self._fetch_table(url)

    async def _fetch_table(self, url: str) -> BadgeTable | None:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers={"Cache-Control": "no-store"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as resp:
                    if resp.status != 200:
                        logger.warning(f"Badge fetch failed: {url} returned {resp.status}")
                        return None
                    data = await safe_json(resp)
        except Exception as e:
            logger.warning(f"Badge fetch error for {url}: {e!r}")
            return None

        if data is None:
            return None
        table = build_badge_table(data)
        logger.debug(f"Fetched {len(table)} badge URLs from {url}")
        return table
