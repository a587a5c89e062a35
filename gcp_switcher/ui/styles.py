"""Styling passed explicitly into the rendering functions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Styles:
    """Rich style strings for each visual role."""

    title: str = "bold color(213)"
    subtitle: str = "color(105)"
    info: str = "color(247)"
    success: str = "color(84)"
    error: str = "color(203)"
    highlight: str = "bold color(159)"
    focused_button: str = "bold color(231) on color(99)"
    blurred_button: str = "color(240)"
    active_item: str = "bold color(159)"


DEFAULT_STYLES = Styles()
