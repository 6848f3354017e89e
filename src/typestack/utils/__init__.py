"""Utility functions for font naming and CSS formatting."""

from .naming import (
    family_from_file_name,
    file_identity,
    font_format,
    format_number,
    normalize_font_name,
    quote_family,
    round_half_up,
)

__all__ = [
    "family_from_file_name",
    "file_identity",
    "font_format",
    "format_number",
    "normalize_font_name",
    "quote_family",
    "round_half_up",
]
