"""Badge key parsing and resolution against the badge tables."""

from typing import TYPE_CHECKING

from ..models import BadgeTable

if TYPE_CHECKING:
    from .cache import BadgeCache


def parse_badge_keys(badges_tag: str) -> list[str]:
    """Parse the IRC ``badges`` tag into "set_id/version" keys.

    Format: badge_name/version,badge_name/version
    """
    if not badges_tag:
        return []
    return [key.strip() for key in badges_tag.split(",") if key.strip()]


def build_badge_table(payload: dict | list | None) -> BadgeTable:
    """Flatten a Helix badge response into a "set_id/version" -> image_url table.

    The 2x image is preferred; versions without any image URL are skipped.
    """
    table: BadgeTable = {}
    if not isinstance(payload, dict):
        return table

    for badge_set in payload.get("data") or []:
        if not isinstance(badge_set, dict):
            continue
        set_id = badge_set.get("set_id", "")
        if not set_id:
            continue
        for version in badge_set.get("versions") or []:
            if not isinstance(version, dict):
                continue
            version_id = version.get("id", "")
            url = version.get("image_url_2x") or version.get("image_url_1x", "")
            if version_id and url:
                table[f"{set_id}/{version_id}"] = url

    return table


def resolve_badges(
    badge_keys: list[str] | tuple[str, ...],
    room_id: str,
    cache: "BadgeCache",
) -> list[str]:
    """Resolve badge keys to image URLs, channel badges taking precedence.

    Keys found in neither table are dropped. Order follows badge_keys.
    """
    channel_table = cache.get_channel(room_id) if room_id else {}
    global_table = cache.get_global()

    urls: list[str] = []
    for key in badge_keys:
        url = channel_table.get(key) or global_table.get(key)
        if url:
            urls.append(url)
    return urls
