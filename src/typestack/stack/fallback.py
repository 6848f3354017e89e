"""Per-language CSS fallback stacks."""

import logging
from dataclasses import dataclass

from src.typestack.core.models import Font
from src.typestack.core.session import Session
from src.typestack.utils.naming import family_from_file_name, quote_family

from .resolver import first_auto_fallback, scale_for_font

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackEntry:
    """
    One family in a language's font stack; ``font_id`` is None for the generic keyword.

    ``face`` names the entry's own @font-face rule when it has one.
    """

    family: str
    font_id: str | None
    scale_percent: float
    line_height: float
    face: str | None = None


def font_family(font: Font) -> str:
    """CSS family name of a font: the file name without extension, else the display name."""
    if font.file_name:
        return family_from_file_name(font.file_name)
    return font.source_name


def has_font_face(font: Font) -> bool:
    return bool(font.font_url and font.file_name)


def face_family(font: Font) -> str:
    """
    Family name used in the font's @font-face rule.

    A clone gets a face of its own, suffixed with its id, so its size-adjust
    can differ from the one of the entry it was copied from.
    """
    family = font_family(font)
    return f"{family}-{font.id}" if font.is_clone else family


def general_fallback_pool(session: Session) -> list[Font]:
    """
    Fallback fonts shared by every language, in registry order.

    Clones, fonts used by any language mapping and system fonts named like
    the primary font are left out.
    """
    primary = session.registry.primary
    if primary is None:
        return []

    mapped = set(session.overrides.fallback_font_overrides.values())
    mapped.update(session.overrides.primary_font_overrides.values())

    pool = []
    for font in session.registry.fallbacks:
        if font.is_clone or font.id in mapped:
            continue
        if font.is_system and font.normalized_name == primary.normalized_name:
            continue
        pool.append(font)
    return pool


def _entry(session: Session, font: Font) -> StackEntry:
    line_height = session.overrides.line_height_for(font.id)
    return StackEntry(
        family=font_family(font),
        font_id=font.id,
        scale_percent=scale_for_font(font, session.overrides),
        line_height=line_height if line_height is not None else session.line_height,
        face=face_family(font) if has_font_face(font) else None,
    )


def _leading_font(session: Session, language_id: str) -> Font | None:
    if session.is_primary_language(language_id):
        pinned_id = session.overrides.primary_font_overrides.get(language_id)
    else:
        pinned_id = session.overrides.fallback_font_overrides.get(language_id)
    pinned = session.registry.get(pinned_id)
    if pinned is not None:
        return pinned
    if pinned_id is not None:
        logger.debug(f"Ignoring dangling override {pinned_id} for {language_id}")

    if session.is_primary_language(language_id):
        return None
    # The auto fallback may be a font another language pins, which the pool leaves out
    return first_auto_fallback(session.registry)


def build_fallback_stack(session: Session, language_id: str) -> list[StackEntry]:
    """
    Ordered fallback stack for a language.

    The font the language resolves to comes first: its pinned font (primary
    override for primary languages, fallback override for the rest) when it
    is still in the registry, else the auto fallback for non-primary
    languages. The general fallback pool follows, then the generic family.
    """
    leading = _leading_font(session, language_id)

    stack: list[StackEntry] = []
    if leading is not None:
        stack.append(_entry(session, leading))
    for font in general_fallback_pool(session):
        if leading is None or font.id != leading.id:
            stack.append(_entry(session, font))

    if not any(entry.family == session.fallback_family for entry in stack):
        stack.append(
            StackEntry(
                family=session.fallback_family,
                font_id=None,
                scale_percent=session.overrides.global_fallback_scale,
                line_height=session.line_height,
            )
        )
    return stack


def css_font_family(stack: list[StackEntry], use_faces: bool = False) -> str:
    """
    Render a stack as a ``font-family`` value.

    With ``use_faces`` the entries that have an @font-face rule are named by
    their face family.
    """
    return ", ".join(
        quote_family(entry.face if use_faces and entry.face else entry.family) for entry in stack
    )
