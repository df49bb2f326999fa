"""Accent palettes — named semantic colour roles derived from a hue."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from textual.color import Color

WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
RED = Color(255, 0, 0)
YELLOW = Color(255, 255, 0)

DEFAULT_HUE = 180.0


class ColorMode(enum.StrEnum):
    LIGHT = "light"
    DARK = "dark"


def _hsl(hue: float, saturation: float, lightness: float) -> Color:
    return Color.from_hsl((hue % 360.0) / 360.0, saturation, lightness)


@dataclass(frozen=True)
class Palette:
    """Semantic colours for one pane.

    Only roles are consumed by the rest of sigmux; the concrete values come
    from :meth:`from_hue`.
    """

    primary: Color
    light: Color
    dark: Color
    on_primary: Color
    on_light: Color
    on_dark: Color
    alert: Color
    warning: Color
    alternate_1: Color
    alternate_2: Color
    alternate_3: Color

    @classmethod
    def from_hue(cls, hue: float = DEFAULT_HUE) -> Palette:
        return cls(
            primary=_hsl(hue, 0.6, 0.6),
            light=_hsl(hue + 10.0, 0.6, 0.95),
            dark=_hsl(hue - 10.0, 0.1, 0.15),
            on_primary=_hsl(hue, 0.6, 0.2),
            on_light=BLACK,
            on_dark=WHITE,
            alert=RED,
            warning=YELLOW,
            alternate_1=_hsl(hue + 90.0, 0.6, 0.6),
            alternate_2=_hsl(hue + 180.0, 0.6, 0.6),
            alternate_3=_hsl(hue + 270.0, 0.6, 0.6),
        )

    def background(self, mode: ColorMode) -> Color:
        """Pane background for the given colour mode."""
        return self.dark if mode == ColorMode.DARK else self.light

    def text(self, mode: ColorMode) -> Color:
        """Default text colour for the given colour mode."""
        return self.on_dark if mode == ColorMode.DARK else self.on_light
