"""Immutable view of a resolved session, consumed by the CSS exporter."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.typestack.core.models import HEADER_TAGS, Font, HeaderStyle, ResolvedFont
from src.typestack.core.session import Session

from .fallback import StackEntry, build_fallback_stack
from .resolver import resolve_all, scale_for_font


@dataclass(frozen=True)
class StackSnapshot:
    fonts: tuple[Font, ...]
    primary: Font | None
    base_font_size: float
    line_height: float
    global_fallback_scale: float
    fallback_family: str
    header_styles: dict[str, HeaderStyle] = field(default_factory=dict)
    font_scales: dict[str, float] = field(default_factory=dict)
    resolved: dict[str, ResolvedFont] = field(default_factory=dict)
    stacks: dict[str, list[StackEntry]] = field(default_factory=dict)
    language_codes: dict[str, str] = field(default_factory=dict)


def build_snapshot(session: Session, language_ids: Iterable[str] | None = None) -> StackSnapshot:
    """
    Resolve everything an export needs in one pass.

    Args:
        session: Session to snapshot
        language_ids: Languages to resolve (defaults to the configured ones)

    Returns:
        StackSnapshot with languages in catalog order and headers in h1..h6 order
    """
    resolved = resolve_all(session, language_ids)
    return StackSnapshot(
        fonts=session.registry.fonts,
        primary=session.registry.primary,
        base_font_size=session.base_font_size,
        line_height=session.line_height,
        global_fallback_scale=session.overrides.global_fallback_scale,
        fallback_family=session.fallback_family,
        header_styles={
            tag: session.header_styles[tag] for tag in HEADER_TAGS if tag in session.header_styles
        },
        font_scales={
            font.id: scale_for_font(font, session.overrides) for font in session.registry
        },
        resolved=resolved,
        stacks={language_id: build_fallback_stack(session, language_id) for language_id in resolved},
        language_codes={language_id: session.catalog.code_for(language_id) for language_id in resolved},
    )
