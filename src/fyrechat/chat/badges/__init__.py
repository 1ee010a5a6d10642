"""Badge tables: fetching, caching and resolution."""

from .cache import BadgeCache
from .provider import BadgeProxyProvider, BaseBadgeProvider
from .resolver import build_badge_table, parse_badge_keys, resolve_badges

__all__ = [
    "BadgeCache",
    "BadgeProxyProvider",
    "BaseBadgeProvider",
    "build_badge_table",
    "parse_badge_keys",
    "resolve_badges",
]
