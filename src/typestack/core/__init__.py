"""Core models, configuration and errors for the font-stack engine."""

from .config import AppConfig, CSSExportSettings, ParserSettings, TypographySettings
from .exceptions import (
    ConfigImportError,
    ParseError,
    RegistryError,
    TypeStackError,
    ValidationError,
)
from .models import (
    ExportOptions,
    Font,
    FontMetadata,
    FontRole,
    HeaderStyle,
    Language,
    MutationResult,
    ReasonCode,
    ResolutionSource,
    ResolvedFont,
    WeightAxis,
)

__all__ = [
    "AppConfig",
    "CSSExportSettings",
    "ConfigImportError",
    "ExportOptions",
    "Font",
    "FontMetadata",
    "FontRole",
    "HeaderStyle",
    "Language",
    "MutationResult",
    "ParseError",
    "ParserSettings",
    "ReasonCode",
    "RegistryError",
    "ResolutionSource",
    "ResolvedFont",
    "TypeStackError",
    "TypographySettings",
    "ValidationError",
    "WeightAxis",
]
