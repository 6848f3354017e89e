"""
Grouping and visual ordering of the font stack.

``group_and_sort`` splits the registry into the buckets the UI and the
exporter show; ``build_font_manager_view`` produces the deduplicated list in
which language clones are folded into their general twin.
"""

from dataclasses import dataclass, field

from src.typestack.core.models import Font
from src.typestack.fonts.catalog import LanguageCatalog
from src.typestack.fonts.overrides import OverrideStore
from src.typestack.fonts.registry import FontRegistry


@dataclass
class FontUsage:
    """A font together with the languages mapped to it, in catalog order."""

    font: Font
    language_ids: list[str] = field(default_factory=list)


@dataclass
class FontGroups:
    primary: Font | None
    global_fallback_fonts: list[Font] = field(default_factory=list)
    system_fonts: list[Font] = field(default_factory=list)
    primary_overrides: list[FontUsage] = field(default_factory=list)
    language_specific: list[FontUsage] = field(default_factory=list)


def _languages_by_font(mapping: dict[str, str], catalog: LanguageCatalog) -> dict[str, list[str]]:
    usage: dict[str, list[str]] = {}
    for language_id, font_id in mapping.items():
        usage.setdefault(font_id, []).append(language_id)
    return {font_id: catalog.sort_ids(languages) for font_id, languages in usage.items()}


def group_and_sort(
    registry: FontRegistry,
    overrides: OverrideStore,
    catalog: LanguageCatalog | None = None,
) -> FontGroups:
    """
    Partition the fallback fonts into display buckets.

    - ``primary_overrides``: fonts flagged as primary overrides or referenced
      by a primary-font override, in registry order; entries no language uses
      are left out
    - ``language_specific``: fonts pinned by a fallback override or flagged
      language-specific, ordered by the earliest catalog position among
      their languages
    - ``system_fonts``: the remaining name-only fonts
    - ``global_fallback_fonts``: the remaining uploaded fonts, minus those
      that are the primary font under another name

    Fonts sharing a file (or, for system fonts, a name) with an entry in use
    by a fallback override are left out of both general buckets.

    A font flagged as a primary override never lands in
    ``global_fallback_fonts``.
    """
    catalog = catalog or LanguageCatalog.default()
    primary = registry.primary
    groups = FontGroups(primary=primary)

    primary_usage = _languages_by_font(overrides.primary_font_overrides, catalog)
    fallback_usage = _languages_by_font(overrides.fallback_font_overrides, catalog)

    active_identities = {
        font.identity_key for font in registry.fallbacks if font.id in fallback_usage
    }

    specific: list[FontUsage] = []
    for font in registry.fallbacks:
        if font.is_primary_override or font.id in primary_usage:
            languages = primary_usage.get(font.id, [])
            if languages:
                groups.primary_overrides.append(FontUsage(font, languages))
            continue

        if font.is_language_specific or font.id in fallback_usage:
            specific.append(FontUsage(font, fallback_usage.get(font.id, [])))
            continue

        if font.identity_key in active_identities:
            continue

        if font.is_system:
            groups.system_fonts.append(font)
            continue

        if primary is not None and (
            font.normalized_name == primary.normalized_name
            or font.identity_key == primary.identity_key
        ):
            continue
        groups.global_fallback_fonts.append(font)

    groups.language_specific = sorted(
        specific,
        key=lambda usage: min(
            (catalog.sort_key(language_id) for language_id in usage.language_ids),
            default=float("inf"),
        ),
    )
    return groups


def visual_font_order(groups: FontGroups) -> list[str]:
    """Font ids in display order: primary, primary overrides, general fallbacks, pinned fonts."""
    ids = [groups.primary.id] if groups.primary else []
    ids.extend(usage.font.id for usage in groups.primary_overrides)
    ids.extend(font.id for font in groups.global_fallback_fonts)
    ids.extend(usage.font.id for usage in groups.language_specific)
    return ids


@dataclass
class FontManagerView:
    """
    Deduplicated font list with a reverse index of language mappings.

    ``mappings`` is keyed by font id, file name, display name and normalized
    name, so a visible entry also sees the languages of its hidden clones.
    """

    visible: list[Font]
    mappings: dict[str, list[str]]

    def languages_for(self, font: Font) -> list[str]:
        languages: list[str] = []
        for key in _mapping_keys(font):
            for language_id in self.mappings.get(key, []):
                if language_id not in languages:
                    languages.append(language_id)
        return languages


def _mapping_keys(font: Font) -> list[str]:
    keys = [font.id]
    if font.file_name:
        keys.append(font.file_name)
    keys.append(font.source_name)
    if font.normalized_name:
        keys.append(font.normalized_name)
    return keys


def build_font_manager_view(
    registry: FontRegistry,
    overrides: OverrideStore,
    catalog: LanguageCatalog | None = None,
    search: str = "",
) -> FontManagerView:
    """
    Build the font-manager list.

    General entries come first in registry order. A clone is shown only when
    no general entry shares its identity, and only once per identity.

    Args:
        registry: Font stack
        overrides: Override layers whose font mappings feed the reverse index
        catalog: Catalog used to order mapped languages
        search: Case-insensitive filter on display name or file name
    """
    catalog = catalog or LanguageCatalog.default()

    general: list[Font] = []
    seen: set[str] = set()
    for font in registry:
        if font.is_clone or font.identity_key in seen:
            continue
        seen.add(font.identity_key)
        general.append(font)

    orphans: list[Font] = []
    for font in registry:
        if not font.is_clone or font.identity_key in seen:
            continue
        seen.add(font.identity_key)
        orphans.append(font)

    visible = general + orphans
    needle = search.strip().lower()
    if needle:
        visible = [
            font
            for font in visible
            if needle in font.source_name.lower()
            or (font.file_name and needle in font.file_name.lower())
        ]

    mappings: dict[str, list[str]] = {}
    for mapping in (overrides.fallback_font_overrides, overrides.primary_font_overrides):
        for language_id, font_id in mapping.items():
            font = registry.get(font_id)
            keys = _mapping_keys(font) if font else [font_id]
            for key in keys:
                languages = mappings.setdefault(key, [])
                if language_id not in languages:
                    languages.append(language_id)

    return FontManagerView(
        visible=visible,
        mappings={key: catalog.sort_ids(languages) for key, languages in mappings.items()},
    )
