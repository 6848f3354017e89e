"""Font stack resolution, grouping and fallback stacks."""

from .fallback import StackEntry, build_fallback_stack, css_font_family, face_family, font_family
from .grouping import (
    FontGroups,
    FontManagerView,
    FontUsage,
    build_font_manager_view,
    group_and_sort,
    visual_font_order,
)
from .resolver import resolve_all, resolve_for_language, resolve_session_language
from .snapshot import StackSnapshot, build_snapshot

__all__ = [
    "FontGroups",
    "FontManagerView",
    "FontUsage",
    "StackEntry",
    "StackSnapshot",
    "build_fallback_stack",
    "build_font_manager_view",
    "build_snapshot",
    "css_font_family",
    "face_family",
    "font_family",
    "group_and_sort",
    "resolve_all",
    "resolve_for_language",
    "resolve_session_language",
    "visual_font_order",
]
