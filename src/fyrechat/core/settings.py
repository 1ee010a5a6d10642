"""Settings management for FyreChat.

Settings are merged in three layers: hardcoded defaults, an optional JSON
defaults file, then query-string style overrides (``ch=foo&ttl=10``).
"""

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from urllib.parse import parse_qs

from appdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "fyrechat"
APP_AUTHOR = "fyrechat"
DEFAULTS_FILE_NAME = "fyrechat.default.json"

DEFAULT_CHANNEL = "alveussanctuary"
DEFAULT_MAX_MESSAGES = 30
DEFAULT_TTL = 22
DEFAULT_FADE = 2.0

# Query parameter -> settings field
QUERY_KEYS = {
    "ch": "channel",
    "max": "max_messages",
    "ttl": "ttl",
    "fade": "fade",
    "debug": "debug",
    "demo": "demo",
    "demoBadges": "demo_badges",
    "badgeProxy": "badge_proxy",
    "theme": "theme",
}

# JSON defaults file keys that differ from the field names
_FILE_KEY_ALIASES = {
    "max": "max_messages",
    "demoBadges": "demo_badges",
    "badgeProxy": "badge_proxy",
}


def get_config_dir() -> Path:
    """Get the configuration directory."""
    path = Path(user_config_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


def clamp_int(value, fallback: int, minimum: int, maximum: int) -> int:
    """Coerce value to an int in [minimum, maximum], or fallback if not numeric."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return max(minimum, min(maximum, math.floor(number)))


def clamp_float(value, fallback: float, minimum: float, maximum: float) -> float:
    """Coerce value to a float in [minimum, maximum], or fallback if not numeric."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return max(minimum, min(maximum, number))


def to_bool(value) -> bool:
    """Interpret 1/true/yes/on (any case) as True."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class OverlaySettings:
    """Overlay configuration."""

    channel: str = DEFAULT_CHANNEL
    max_messages: int = DEFAULT_MAX_MESSAGES
    ttl: int = DEFAULT_TTL  # seconds, 0 = messages never expire
    fade: float = DEFAULT_FADE  # seconds of fade-out before removal
    debug: bool = False
    demo: bool = False
    demo_badges: bool = False
    badge_proxy: str = ""  # empty = badges disabled
    theme: str = "glass"

    def normalize(self) -> "OverlaySettings":
        """Coerce and clamp every field in place. Returns self."""
        self.channel = str(self.channel or DEFAULT_CHANNEL).strip().lower() or DEFAULT_CHANNEL
        self.max_messages = clamp_int(self.max_messages, DEFAULT_MAX_MESSAGES, 1, 200)
        self.ttl = clamp_int(self.ttl, DEFAULT_TTL, 0, 3600)
        self.fade = clamp_float(self.fade, DEFAULT_FADE, 0, 30)
        self.debug = to_bool(self.debug)
        self.demo = to_bool(self.demo)
        self.demo_badges = to_bool(self.demo_badges)
        self.badge_proxy = str(self.badge_proxy or "").rstrip("/")
        self.theme = str(self.theme or "glass")
        return self

    def update(self, values: dict) -> None:
        """Apply known fields from a mapping; unknown keys are ignored."""
        for key, value in values.items():
            key = _FILE_KEY_ALIASES.get(key, key)
            if key in self.__dataclass_fields__:
                setattr(self, key, value)

    def to_dict(self) -> dict:
        return asdict(self)

    def summary(self) -> str:
        """One-line description for the debug banner."""
        mode = "DEMO" if self.demo else "IRC"
        return (
            f"{mode} | ch={self.channel} | max={self.max_messages} | ttl={self.ttl}s | "
            f"fade={self.fade:g}s | badgeProxy={self.badge_proxy or '(off)'}"
        )


def load_defaults_file(path: Path | None = None) -> dict:
    """Load the optional JSON defaults file.

    A missing, unreadable or malformed file yields an empty dict.
    """
    if path is None:
        path = get_config_dir() / DEFAULTS_FILE_NAME
    if not path.exists():
        logger.debug(f"No defaults file at {path}")
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load defaults file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring defaults file {path}: expected a JSON object")
        return {}
    return data


def parse_query_overrides(query: str) -> dict:
    """Parse query-string overrides into settings field values.

    Unknown parameters are ignored; for repeated parameters the last one wins.
    """
    overrides: dict = {}
    params = parse_qs(query.lstrip("?"), keep_blank_values=True)
    for param, field_name in QUERY_KEYS.items():
        if param in params:
            overrides[field_name] = params[param][-1]
    return overrides


def load_settings(query: str = "", defaults_path: Path | None = None) -> OverlaySettings:
    """Build settings from defaults, the defaults file and query overrides."""
    settings = OverlaySettings()
    settings.update(load_defaults_file(defaults_path))
    settings.update(parse_query_overrides(query))
    return settings.normalize()
