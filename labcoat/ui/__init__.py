"""Presentation for labcoat: text styles and UI resource generators."""

from labcoat.ui.generators import create_output_ui
from labcoat.ui.styles import ANSI_STYLES, PLAIN_STYLES, Styles, get_styles

__all__ = [
    "ANSI_STYLES",
    "PLAIN_STYLES",
    "Styles",
    "create_output_ui",
    "get_styles",
]
