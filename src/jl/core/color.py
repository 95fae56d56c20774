"""Color policy: decide whether to style output and how each element looks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from rich.color import ColorSystem
from rich.style import Style

from .models import Level

EXTRA_COLORS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


class ColorMode(str, Enum):
    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


LEVEL_STYLES: Mapping[Level, Style] = {
    Level.TRACE: Style(dim=True),
    Level.DEBUG: Style(color="blue"),
    Level.INFO: Style(color="green"),
    Level.WARN: Style(color="yellow"),
    Level.ERROR: Style(color="red"),
    Level.FATAL: Style(color="red", bold=True),
}


@dataclass(frozen=True, slots=True)
class ColorConfig:
    """Resolved styling for one run; every method is a no-op when disabled."""

    enabled: bool
    level_styles: Mapping[Level, Style] = field(default_factory=lambda: dict(LEVEL_STYLES))
    separator_style: Style = field(default_factory=lambda: Style(dim=True))
    stack_style: Style = field(default_factory=lambda: Style(dim=True))
    key_style: Style = field(default_factory=lambda: Style(color="magenta"))
    value_style: Style = field(default_factory=lambda: Style(color="cyan"))

    def _paint(self, style: Style, text: str) -> str:
        if not self.enabled:
            return text
        return style.render(text, color_system=ColorSystem.STANDARD)

    def style_level(self, level: Level) -> str:
        return self._paint(self.level_styles[level], str(level))

    def style_separator(self, sep: str) -> str:
        return self._paint(self.separator_style, sep)

    def style_key(self, key: str) -> str:
        return self._paint(self.key_style, key)

    def style_value(self, value: str) -> str:
        return self._paint(self.value_style, value)

    def style_stack(self, line: str) -> str:
        return self._paint(self.stack_style, line)


def resolve_color(
    mode: ColorMode,
    is_terminal: bool,
    *,
    key_color: str = "magenta",
    value_color: str = "cyan",
) -> ColorConfig:
    """`always` and `never` are absolute; `auto` follows the destination."""
    if mode is ColorMode.ALWAYS:
        enabled = True
    elif mode is ColorMode.NEVER:
        enabled = False
    else:
        enabled = is_terminal
    return ColorConfig(
        enabled=enabled,
        key_style=Style(color=key_color),
        value_style=Style(color=value_color),
    )
