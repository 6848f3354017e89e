"""
Session
=======

One user's working state: the font registry, the override store, the language
sets and the document typography. Every resolver, exporter and serializer call
takes a session explicitly; nothing is held in module globals.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.typestack.fonts.catalog import LanguageCatalog
from src.typestack.fonts.overrides import OverrideStore
from src.typestack.fonts.registry import FontRegistry

from .config import TypographySettings
from .exceptions import UnknownHeaderTagError
from .models import HEADER_TAGS, Font, HeaderStyle, MutationResult, default_header_styles

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Mutable state of a single editing session."""

    registry: FontRegistry = field(default_factory=FontRegistry)
    overrides: OverrideStore = field(default_factory=OverrideStore)
    catalog: LanguageCatalog = field(default_factory=LanguageCatalog.default)
    configured_languages: list[str] = field(default_factory=list)
    primary_languages: list[str] = field(default_factory=list)
    header_styles: dict[str, HeaderStyle] = field(default_factory=default_header_styles)
    base_font_size: float = 60.0
    line_height: float = 1.2
    base_font_weight: int = 400
    default_primary_language: str = "en-US"
    fallback_family: str = "sans-serif"

    @classmethod
    def from_settings(
        cls, settings: TypographySettings | None = None, catalog: LanguageCatalog | None = None
    ) -> "Session":
        """Start an empty session from typography settings."""
        settings = settings or TypographySettings()
        session = cls(
            catalog=catalog or LanguageCatalog.default(),
            header_styles=default_header_styles(settings.line_height),
            base_font_size=settings.base_font_size,
            line_height=settings.line_height,
            base_font_weight=settings.base_font_weight,
            default_primary_language=settings.default_primary_language,
            fallback_family=settings.fallback_family,
        )
        session.overrides.global_fallback_scale = settings.global_fallback_scale
        return session

    @property
    def effective_primary_languages(self) -> list[str]:
        """Primary languages, or the default primary language when none are set."""
        return list(self.primary_languages) or [self.default_primary_language]

    def is_primary_language(self, language_id: str) -> bool:
        return language_id in self.effective_primary_languages

    # Languages

    def add_language(self, language_id: str) -> bool:
        """Activate a language; returns False if it was already configured."""
        if language_id in self.configured_languages:
            return False
        if language_id not in self.catalog:
            logger.warning(f"Language {language_id} is not in the catalog")
        self.configured_languages.append(language_id)
        return True

    def remove_language(self, language_id: str) -> bool:
        """Deactivate a language and drop its language-level overrides."""
        if language_id not in self.configured_languages:
            return False
        self.configured_languages.remove(language_id)
        if language_id in self.primary_languages:
            self.primary_languages.remove(language_id)
        self.overrides.reset_for_language(language_id)
        return True

    def set_primary_languages(self, language_ids: Iterable[str]) -> None:
        """Mark languages as primary-script languages, configuring them if needed."""
        primary = []
        for language_id in language_ids:
            if language_id in primary:
                continue
            self.add_language(language_id)
            primary.append(language_id)
        self.primary_languages = primary

    def configured_in_catalog_order(self) -> list[str]:
        return self.catalog.sort_ids(self.configured_languages)

    # Header styles

    def set_header_style(
        self,
        tag: str,
        scale: float | None = None,
        line_height: float | None = None,
        assigned_role: str | None = None,
    ) -> HeaderStyle:
        """
        Update one heading's typography; omitted values are kept.

        Raises:
            UnknownHeaderTagError: If ``tag`` is not h1..h6
            pydantic.ValidationError: If a value is out of range
        """
        if tag not in HEADER_TAGS:
            raise UnknownHeaderTagError(tag)
        current = self.header_styles.get(tag) or default_header_styles(self.line_height)[tag]
        data = current.model_dump()
        if scale is not None:
            data["scale"] = scale
        if line_height is not None:
            data["line_height"] = line_height
        if assigned_role is not None:
            data["assigned_role"] = assigned_role
        style = HeaderStyle(**data)
        self.header_styles[tag] = style
        return style

    # Fonts

    def add_uploaded_fonts(self, fonts: Iterable[Font]) -> MutationResult:
        """
        Apply parsed fonts in one step.

        The first font becomes primary when the stack is empty; the rest are
        appended as fallbacks with duplicate detection.
        """
        pending = list(fonts)
        loaded: list[str] = []
        if not len(self.registry) and pending:
            first = pending.pop(0)
            result = self.registry.load(first)
            if not result:
                return result
            loaded = result.font_ids

        result = self.registry.add_fallback_batch(pending)
        result.font_ids = loaded + result.font_ids
        result.added += len(loaded)
        return result

    def remove_font(self, font_id: str) -> MutationResult:
        """Remove a font (and its clones) and forget every override pointing at it."""
        result = self.registry.remove(font_id)
        if result:
            self.overrides.forget_fonts(result.font_ids)
        return result

    def assign_font_to_language(self, language_id: str, font_id: str) -> MutationResult:
        """
        Map a language to a font through a language-scoped clone.

        Primary languages get a primary-override clone, all others a
        language-specific clone pinned as their fallback font.
        """
        primary = self.is_primary_language(language_id)
        result = self.registry.clone_for_language(font_id, primary_override=primary)
        if not result:
            return result

        clone_id = result.font_ids[0]
        if primary:
            self.overrides.set_primary_override(language_id, clone_id)
        else:
            self.overrides.set_fallback_override(language_id, clone_id)
        self.add_language(language_id)
        logger.info(f"Mapped {language_id} to {clone_id}")
        return result

    def unassign_language(self, language_id: str) -> MutationResult:
        """Clear a language's font mapping and drop clones nothing else uses."""
        clone_ids = [
            mapping.pop(language_id)
            for mapping in (
                self.overrides.primary_font_overrides,
                self.overrides.fallback_font_overrides,
            )
            if language_id in mapping
        ]
        removed = []
        for clone_id in clone_ids:
            if self.overrides.languages_using(clone_id):
                continue
            if self.registry.discard_clone(clone_id):
                self.overrides.reset_for_font(clone_id)
                removed.append(clone_id)
        return MutationResult.success(removed)
