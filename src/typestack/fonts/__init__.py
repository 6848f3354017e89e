"""Font Stack Module
=================

The font registry, the override layers, the language catalog and the
adapter that reads glyph metadata from font files.
"""

from .catalog import LanguageCatalog
from .overrides import OverrideStore
from .parser import FontParser, FontToolsParser, ParseBatchResult, parse_font_files
from .registry import FontRegistry
from .weights import build_weight_options, resolve_weight_for_font, resolve_weight_to_available_option

__all__ = [
    "FontParser",
    "FontRegistry",
    "FontToolsParser",
    "LanguageCatalog",
    "OverrideStore",
    "ParseBatchResult",
    "build_weight_options",
    "parse_font_files",
    "resolve_weight_for_font",
    "resolve_weight_to_available_option",
]
