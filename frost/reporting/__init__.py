"""Reporting of unit outcomes."""

from .reporter import Reporter, Colors, colorize, set_color_enabled, is_color_enabled

__all__ = ["Reporter", "Colors", "colorize", "set_color_enabled", "is_color_enabled"]
