"""
Override Store
==============

Layered overrides applied on top of the registry defaults:

- language layer: which fallback font serves a language, which font replaces
  the primary font for a primary language, and the language's line height
- font layer: per-font scale and line height
- global layer: the default scale of every fallback font

Font and language ids are not checked here. References to fonts that no
longer exist are ignored at resolution time instead.
"""

import logging
from dataclasses import dataclass, field

from src.typestack.core.exceptions import InvalidOverrideValueError
from src.typestack.core.models import MutationResult

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_FALLBACK_SCALE = 100.0


def _check_positive(field_name: str, value: float | None) -> InvalidOverrideValueError | None:
    if value is not None and value <= 0:
        return InvalidOverrideValueError(field_name, value)
    return None


@dataclass
class OverrideStore:
    """Independent override maps keyed by language id or font id."""

    fallback_font_overrides: dict[str, str] = field(default_factory=dict)
    primary_font_overrides: dict[str, str] = field(default_factory=dict)
    line_height_overrides: dict[str, float] = field(default_factory=dict)
    font_scales: dict[str, float] = field(default_factory=dict)
    font_line_heights: dict[str, float] = field(default_factory=dict)
    global_fallback_scale: float = DEFAULT_GLOBAL_FALLBACK_SCALE

    # Language layer

    def set_fallback_override(self, language_id: str, font_id: str | None) -> MutationResult:
        """Pin the fallback font serving ``language_id``; None clears the pin."""
        if font_id is None:
            return self.clear_fallback_override(language_id)
        self.fallback_font_overrides[language_id] = font_id
        return MutationResult.success([font_id])

    def clear_fallback_override(self, language_id: str) -> MutationResult:
        self.fallback_font_overrides.pop(language_id, None)
        return MutationResult.success()

    def set_primary_override(self, language_id: str, font_id: str | None) -> MutationResult:
        """Replace the primary font for a primary language; None clears it."""
        if font_id is None:
            self.primary_font_overrides.pop(language_id, None)
            return MutationResult.success()
        self.primary_font_overrides[language_id] = font_id
        return MutationResult.success([font_id])

    def set_line_height_override(self, language_id: str, value: float | None) -> MutationResult:
        error = _check_positive("line_height", value)
        if error:
            return MutationResult.failure(error)
        if value is None:
            self.line_height_overrides.pop(language_id, None)
        else:
            self.line_height_overrides[language_id] = float(value)
        return MutationResult.success()

    # Global layer

    def set_global_fallback_scale(self, percent: float) -> MutationResult:
        if percent is None or percent <= 0:
            return MutationResult.failure(InvalidOverrideValueError("global_fallback_scale", percent))
        self.global_fallback_scale = float(percent)
        return MutationResult.success()

    # Font layer

    def set_font_scale(self, font_id: str, percent: float | None) -> MutationResult:
        error = _check_positive("scale", percent)
        if error:
            return MutationResult.failure(error)
        if percent is None:
            self.font_scales.pop(font_id, None)
        else:
            self.font_scales[font_id] = float(percent)
        return MutationResult.success([font_id])

    def set_font_line_height(self, font_id: str, value: float | None) -> MutationResult:
        error = _check_positive("line_height", value)
        if error:
            return MutationResult.failure(error)
        if value is None:
            self.font_line_heights.pop(font_id, None)
        else:
            self.font_line_heights[font_id] = float(value)
        return MutationResult.success([font_id])

    def scale_for(self, font_id: str) -> float | None:
        return self.font_scales.get(font_id)

    def line_height_for(self, font_id: str) -> float | None:
        return self.font_line_heights.get(font_id)

    # Resets

    def reset_all(self) -> MutationResult:
        self.fallback_font_overrides.clear()
        self.primary_font_overrides.clear()
        self.line_height_overrides.clear()
        self.font_scales.clear()
        self.font_line_heights.clear()
        self.global_fallback_scale = DEFAULT_GLOBAL_FALLBACK_SCALE
        logger.info("All overrides reset")
        return MutationResult.success()

    def reset_for_font(self, font_id: str) -> MutationResult:
        """Drop the font-layer values of ``font_id`` so it follows the global layer."""
        self.font_scales.pop(font_id, None)
        self.font_line_heights.pop(font_id, None)
        return MutationResult.success([font_id])

    def reset_for_language(self, language_id: str) -> MutationResult:
        self.fallback_font_overrides.pop(language_id, None)
        self.primary_font_overrides.pop(language_id, None)
        self.line_height_overrides.pop(language_id, None)
        return MutationResult.success()

    def forget_fonts(self, font_ids: list[str]) -> int:
        """
        Remove every reference to ``font_ids`` from all layers.

        Returns:
            Number of language mappings dropped
        """
        doomed = set(font_ids)
        dropped = 0
        for mapping in (self.fallback_font_overrides, self.primary_font_overrides):
            for language_id in [lang for lang, font_id in mapping.items() if font_id in doomed]:
                del mapping[language_id]
                dropped += 1
        for font_id in doomed:
            self.reset_for_font(font_id)
        if dropped:
            logger.debug(f"Dropped {dropped} language mapping(s) for removed fonts")
        return dropped

    def languages_using(self, font_id: str) -> list[str]:
        """Language ids mapped to ``font_id`` in either font layer, in insertion order."""
        languages = [lang for lang, fid in self.primary_font_overrides.items() if fid == font_id]
        languages.extend(
            lang
            for lang, fid in self.fallback_font_overrides.items()
            if fid == font_id and lang not in languages
        )
        return languages

    def copy(self) -> "OverrideStore":
        return OverrideStore(
            fallback_font_overrides=dict(self.fallback_font_overrides),
            primary_font_overrides=dict(self.primary_font_overrides),
            line_height_overrides=dict(self.line_height_overrides),
            font_scales=dict(self.font_scales),
            font_line_heights=dict(self.font_line_heights),
            global_fallback_scale=self.global_fallback_scale,
        )
