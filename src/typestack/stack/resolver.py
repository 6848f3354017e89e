"""
Stack Resolver
==============

Computes the effective font, scale, line height and weight for a language.

Precedence, highest first:

1. primary language with a live primary-font override -> that font
2. primary language -> the registry's primary font
3. live fallback-font override for the language -> that font
4. first general fallback not named like the primary -> that font,
   otherwise the primary font

Override references to fonts that are no longer in the registry count as
absent at every step.
"""

import logging
from collections.abc import Iterable

from src.typestack.core.models import Font, FontRole, ResolutionSource, ResolvedFont
from src.typestack.core.session import Session
from src.typestack.fonts.overrides import OverrideStore
from src.typestack.fonts.registry import FontRegistry
from src.typestack.fonts.weights import resolve_weight_for_font

logger = logging.getLogger(__name__)

PRIMARY_SCALE = 100.0


def _live_font(registry: FontRegistry, font_id: str | None, language_id: str) -> Font | None:
    if font_id is None:
        return None
    font = registry.get(font_id)
    if font is None:
        logger.debug(f"Ignoring dangling override {font_id} for {language_id}")
    return font


def first_auto_fallback(registry: FontRegistry) -> Font | None:
    """First fallback in registry order that serves languages without a pin."""
    primary = registry.primary
    if primary is None:
        return None
    for font in registry.fallbacks:
        if font.is_language_specific or font.is_primary_override:
            continue
        if font.normalized_name == primary.normalized_name:
            continue
        return font
    return None


def scale_for_font(font: Font, overrides: OverrideStore) -> float:
    """The primary font is never scaled; any other font uses its own scale or the global one."""
    if font.role == FontRole.PRIMARY:
        return PRIMARY_SCALE
    scale = overrides.scale_for(font.id)
    return scale if scale is not None else overrides.global_fallback_scale


def line_height_for(
    language_id: str, font: Font, overrides: OverrideStore, base_line_height: float
) -> float:
    by_language = overrides.line_height_overrides.get(language_id)
    if by_language is not None:
        return by_language
    by_font = overrides.line_height_for(font.id)
    if by_font is not None:
        return by_font
    return base_line_height


def resolve_for_language(
    language_id: str,
    registry: FontRegistry,
    overrides: OverrideStore,
    primary_languages: Iterable[str] = (),
    *,
    base_line_height: float = 1.2,
    base_weight: float = 400,
    default_primary_language: str = "en-US",
) -> ResolvedFont | None:
    """
    Resolve the effective typography of one language.

    Args:
        language_id: Language to resolve
        registry: Font stack
        overrides: Override layers
        primary_languages: Primary-script languages; empty means the default one
        base_line_height: Document line height
        base_weight: Requested document weight
        default_primary_language: Used when ``primary_languages`` is empty

    Returns:
        ResolvedFont, or None when the registry is empty
    """
    primary = registry.primary
    if primary is None:
        return None

    primary_set = set(primary_languages) or {default_primary_language}

    if language_id in primary_set:
        pinned = _live_font(registry, overrides.primary_font_overrides.get(language_id), language_id)
        if pinned is not None:
            font, source = pinned, ResolutionSource.PRIMARY_OVERRIDE
        else:
            font, source = primary, ResolutionSource.PRIMARY
    else:
        pinned = _live_font(registry, overrides.fallback_font_overrides.get(language_id), language_id)
        if pinned is not None:
            font, source = pinned, ResolutionSource.LANGUAGE_OVERRIDE
        else:
            auto = first_auto_fallback(registry)
            if auto is not None:
                font, source = auto, ResolutionSource.AUTO_FALLBACK
            else:
                font, source = primary, ResolutionSource.PRIMARY_DEFAULT

    return ResolvedFont(
        language_id=language_id,
        font_id=font.id,
        font=font,
        scale_percent=scale_for_font(font, overrides),
        line_height=line_height_for(language_id, font, overrides, base_line_height),
        weight=resolve_weight_for_font(font, base_weight),
        source=source,
    )


def resolve_session_language(session: Session, language_id: str) -> ResolvedFont | None:
    """``resolve_for_language`` with every input taken from ``session``."""
    return resolve_for_language(
        language_id,
        session.registry,
        session.overrides,
        session.primary_languages,
        base_line_height=session.line_height,
        base_weight=session.base_font_weight,
        default_primary_language=session.default_primary_language,
    )


def resolve_all(session: Session, language_ids: Iterable[str] | None = None) -> dict[str, ResolvedFont]:
    """
    Resolve several languages, in catalog order.

    Args:
        session: Session to resolve against
        language_ids: Languages to resolve (defaults to the configured ones)

    Returns:
        Language id to ResolvedFont; empty when the registry is empty
    """
    ids = session.configured_languages if language_ids is None else list(language_ids)
    resolved = {}
    for language_id in session.catalog.sort_ids(dict.fromkeys(ids)):
        result = resolve_session_language(session, language_id)
        if result is not None:
            resolved[language_id] = result
    return resolved
