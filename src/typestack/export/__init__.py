"""Stylesheet and configuration document export."""

from .css import CSSExporter
from .serializer import (
    ConfigSerializer,
    ImportResult,
    normalize_document,
    read_document,
    required_font_files,
    write_document,
)

__all__ = [
    "CSSExporter",
    "ConfigSerializer",
    "ImportResult",
    "normalize_document",
    "read_document",
    "required_font_files",
    "write_document",
]
