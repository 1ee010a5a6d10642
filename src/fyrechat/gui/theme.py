"""Overlay themes."""

DEFAULT_THEME = "glass"


class ThemeColors:
    """Color definitions for an overlay theme."""

    def __init__(
        self,
        *,
        bubble_bg: str,
        bubble_border: str,
        text: str,
        debug_bg: str,
        debug_text: str,
        radius: int = 12,
    ):
        self.bubble_bg = bubble_bg
        self.bubble_border = bubble_border
        self.text = text
        self.debug_bg = debug_bg
        self.debug_text = debug_text
        self.radius = radius


THEMES: dict[str, ThemeColors] = {
    "glass": ThemeColors(
        bubble_bg="rgba(20, 20, 28, 150)",
        bubble_border="rgba(255, 255, 255, 40)",
        text="#f2f2f2",
        debug_bg="rgba(0, 0, 0, 170)",
        debug_text="#9f9",
    ),
    "solid": ThemeColors(
        bubble_bg="#18181b",
        bubble_border="#2f2f35",
        text="#efeff1",
        debug_bg="#000000",
        debug_text="#9f9",
        radius=6,
    ),
}


def get_theme(name: str) -> ThemeColors:
    """Look up a theme by name, falling back to the default theme."""
    return THEMES.get(name, THEMES[DEFAULT_THEME])


def get_overlay_stylesheet(name: str) -> str:
    """Generate the overlay stylesheet for a theme."""
    c = get_theme(name)
    return f"""
        QWidget#overlay {{
            background: transparent;
        }}
        QTextBrowser#message {{
            background-color: {c.bubble_bg};
            border: 1px solid {c.bubble_border};
            border-radius: {c.radius}px;
            color: {c.text};
            padding: 6px 10px;
            font-size: 15px;
        }}
        QLabel#debug {{
            background-color: {c.debug_bg};
            color: {c.debug_text};
            font-family: monospace;
            padding: 4px 8px;
        }}
    """
