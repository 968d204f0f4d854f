"""Syntax color themes and the neon terminal palette.

A SyntaxTheme is a fixed-shape record with one color per token tag, so a
missing or misspelled tag is caught when the theme is defined rather than
when a token is colored. Colors are "#RRGGBB" strings, which keeps them
interpolatable by ``interpolate_color``; ``normalize_color`` brings shorthand
hex and named colors into that form.
"""

import re
from dataclasses import dataclass, fields

from rich.color import Color, ColorParseError
from rich.style import Style
from rich.theme import Theme

from codereel.errors import InvalidColorError, UnknownThemeError
from codereel.tokenizer import TokenType


# =============================================================================
# Terminal Palette (Dracula-based)
# =============================================================================

NEON_COLORS = {
    "background": "#282A36",
    "foreground": "#F8F8F2",
    "comment": "#6272A4",
    "red": "#FF5555",
    "green": "#50FA7B",
    "yellow": "#F1FA8C",
    "purple": "#BD93F9",
    "pink": "#FF79C6",
    "cyan": "#8BE9FD",
    "orange": "#FFB86C",
}

NEON_THEME = Theme({
    "neon.fg": NEON_COLORS["foreground"],
    "neon.error": f"bold {NEON_COLORS['red']}",
    "neon.success": f"bold {NEON_COLORS['green']}",
    "neon.warning": f"bold {NEON_COLORS['yellow']}",
    "neon.info": NEON_COLORS["cyan"],
    "neon.dim": f"dim {NEON_COLORS['foreground']}",
    "neon.number": NEON_COLORS["yellow"],
    "neon.string": NEON_COLORS["orange"],
})


# =============================================================================
# Syntax Themes
# =============================================================================


@dataclass(frozen=True)
class SyntaxTheme:
    """One color per token tag."""

    keyword: str
    type: str
    string: str
    number: str
    operator: str
    punctuation: str
    method: str
    comment: str
    annotation: str
    plain: str

    def color_for(self, tag: TokenType) -> str:
        """Return the color for a token tag."""
        return getattr(self, tag.value)

    def rich_style(self, tag: TokenType) -> Style:
        """Return a Rich Style coloring text of the given tag."""
        return Style(color=self.color_for(tag), italic=tag is TokenType.COMMENT)

    def to_rich_theme(self) -> Theme:
        """Build a Rich Theme with a ``code.<tag>`` style per tag."""
        return Theme({f"code.{f.name}": getattr(self, f.name) for f in fields(self)})


INTELLIJ_DARK = SyntaxTheme(
    keyword="#CC7832",
    type="#A9B7C6",
    string="#6A8759",
    number="#6897BB",
    operator="#A9B7C6",
    punctuation="#A9B7C6",
    method="#FFC66D",
    comment="#808080",
    annotation="#BBB529",
    plain="#A9B7C6",
)

WHITE = SyntaxTheme(
    keyword="#FFFFFF",
    type="#FFFFFF",
    string="#FFFFFF",
    number="#FFFFFF",
    operator="#FFFFFF",
    punctuation="#FFFFFF",
    method="#FFFFFF",
    comment="#70778A",
    annotation="#FFFFFF",
    plain="#FFFFFF",
)

EXPLAINOR = SyntaxTheme(
    keyword="#E2B7C1",
    type="#D5CCBF",
    string="#B2C7C9",
    number="#A5C9CA",
    operator="#70778A",
    punctuation="#EBE8E2",
    method="#B8D4E8",
    comment="#4A505E",
    annotation="#E2B7C1",
    plain="#FCFBF8",
)

NEON = SyntaxTheme(
    keyword=NEON_COLORS["pink"],
    type=NEON_COLORS["cyan"],
    string=NEON_COLORS["orange"],
    number=NEON_COLORS["purple"],
    operator=NEON_COLORS["pink"],
    punctuation=NEON_COLORS["foreground"],
    method=NEON_COLORS["green"],
    comment=NEON_COLORS["comment"],
    annotation=NEON_COLORS["yellow"],
    plain=NEON_COLORS["foreground"],
)

THEMES: dict[str, SyntaxTheme] = {
    "intellij-dark": INTELLIJ_DARK,
    "white": WHITE,
    "explainor": EXPLAINOR,
    "neon": NEON,
}

DEFAULT_THEME = INTELLIJ_DARK


def get_theme(name: str) -> SyntaxTheme:
    """Look up a bundled theme by name.

    Raises:
        UnknownThemeError: If no theme has that name.

    """
    try:
        return THEMES[name]
    except KeyError:
        raise UnknownThemeError(f"Unknown theme: {name!r} (known: {', '.join(THEMES)})") from None


def interpolate_color(color1: str, color2: str, t: float) -> str:
    """Interpolate between two hex colors.

    Args:
        color1: Starting hex color (e.g., "#8BE9FD").
        color2: Ending hex color (e.g., "#FF79C6").
        t: Interpolation factor (0.0 = color1, 1.0 = color2).

    Returns:
        Interpolated hex color string.

    """
    t = max(0.0, min(1.0, t))
    r1, g1, b1 = int(color1[1:3], 16), int(color1[3:5], 16), int(color1[5:7], 16)
    r2, g2, b2 = int(color2[1:3], 16), int(color2[3:5], 16), int(color2[5:7], 16)
    r = round(r1 + (r2 - r1) * t)
    g = round(g1 + (g2 - g1) * t)
    b = round(b1 + (b2 - b1) * t)
    return f"#{r:02x}{g:02x}{b:02x}"


_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")
_SHORT_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{3}")


def normalize_color(color: str) -> str:
    """Return ``color`` as a "#RRGGBB" string.

    "#RRGGBB" passes through unchanged, "#RGB" is expanded, and anything else
    is parsed by Rich ("white", "bright_red", "rgb(10,20,30)", "color(208)").

    Raises:
        InvalidColorError: If Rich cannot parse the color.

    """
    if _HEX_COLOR.fullmatch(color):
        return color
    if _SHORT_HEX_COLOR.fullmatch(color):
        return "#" + "".join(digit * 2 for digit in color[1:])
    try:
        return Color.parse(color).get_truecolor().hex
    except ColorParseError:
        raise InvalidColorError(f"Invalid color: {color!r}") from None
