"""Typestack
=========

Font-stack resolution for multilingual typography: a primary font plus
ordered fallbacks, per-language and per-font overrides layered on global
defaults, and reproducible CSS and configuration export.
"""

__version__ = "1.0.0"

from .core.config import AppConfig, TypographySettings
from .core.exceptions import TypeStackError
from .core.models import Font, FontMetadata, MutationResult, ReasonCode, ResolvedFont
from .core.session import Session
from .export import CSSExporter, ConfigSerializer
from .fonts import FontRegistry, LanguageCatalog, OverrideStore
from .stack import build_snapshot, group_and_sort, resolve_for_language

__all__ = [
    "AppConfig",
    "CSSExporter",
    "ConfigSerializer",
    "Font",
    "FontMetadata",
    "FontRegistry",
    "LanguageCatalog",
    "MutationResult",
    "OverrideStore",
    "ReasonCode",
    "ResolvedFont",
    "Session",
    "TypeStackError",
    "TypographySettings",
    "build_snapshot",
    "group_and_sort",
    "resolve_for_language",
]
