"""
Config Serializer
=================

Converts a session to and from a portable JSON document:

    {"metadata": {"version": 1, "timestamp": ..., "appName": ...},
     "data": {"fontStyles": {"primary": {...}},
              "configuredLanguages": [...],
              "primaryLanguages": [...],
              "headerStyles": {...}}}

Font binaries are never embedded. Importing is two-phase: the caller reads
``required_font_files`` from the document, parses those files, and passes
the parsed fonts to ``import_config``, which re-links every override to the
freshly created font ids.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.typestack.core.config import TypographySettings
from src.typestack.core.exceptions import (
    ConfigFileNotFoundError,
    InvalidConfigDocumentError,
    UnresolvableImportReferenceError,
    UnsupportedConfigVersionError,
)
from src.typestack.core.models import HEADER_TAGS, Font, HeaderStyle, new_font_id
from src.typestack.core.session import Session
from src.typestack.fonts.catalog import LanguageCatalog
from src.typestack.fonts.overrides import OverrideStore
from src.typestack.fonts.registry import FontRegistry
from src.typestack.utils.naming import file_identity, normalize_font_name

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1
PRIMARY_STYLE_ID = "primary"

# Legacy override values that mean "follow the normal cascade"
_CASCADE_MARKERS = ("legacy", "cascade")


class _DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FontEntryDocument(_DocumentModel):
    id: str
    type: Literal["primary", "fallback"] = "fallback"
    name: str = Field(..., min_length=1)
    file_name: str | None = Field(None, alias="fileName")
    is_lang_specific: bool = Field(False, alias="isLangSpecific")
    is_primary_override: bool = Field(False, alias="isPrimaryOverride")
    scale: float | None = Field(None, gt=0.0)
    line_height: float | None = Field(None, alias="lineHeight", gt=0.0)


class FontScalesDocument(_DocumentModel):
    active: float = Field(100.0, gt=0.0)
    fallback: float = Field(100.0, gt=0.0)


class FontStyleDocument(_DocumentModel):
    fonts: list[FontEntryDocument] = Field(default_factory=list)
    fallback_font_overrides: dict[str, str] = Field(
        default_factory=dict, alias="fallbackFontOverrides"
    )
    primary_font_overrides: dict[str, str] = Field(
        default_factory=dict, alias="primaryFontOverrides"
    )
    line_height_overrides: dict[str, float] = Field(
        default_factory=dict, alias="lineHeightOverrides"
    )
    font_scales: FontScalesDocument = Field(default_factory=FontScalesDocument, alias="fontScales")
    base_font_size: float = Field(60.0, alias="baseFontSize", gt=0.0)
    line_height: float = Field(1.2, alias="lineHeight", gt=0.0)
    base_font_weight: int = Field(400, alias="baseFontWeight", ge=1, le=1000)
    fallback_font: str = Field("sans-serif", alias="fallbackFont")

    @field_validator("fallback_font_overrides", mode="before")
    @classmethod
    def flatten_fallback_overrides(cls, v):
        """Older documents nest ``{originalId: cloneId}`` per language; keep the clone id."""
        if not isinstance(v, dict):
            return v
        flat = {}
        for language_id, value in v.items():
            if isinstance(value, dict):
                value = next((target for target in value.values() if target), None)
            if isinstance(value, str) and value not in _CASCADE_MARKERS:
                flat[language_id] = value
        return flat

    @field_validator("line_height_overrides", mode="before")
    @classmethod
    def drop_empty_line_heights(cls, v):
        if not isinstance(v, dict):
            return v
        return {language_id: value for language_id, value in v.items() if value is not None}


class HeaderStyleDocument(_DocumentModel):
    scale: float = Field(..., gt=0.0)
    line_height: float = Field(..., alias="lineHeight", gt=0.0)
    assigned_role: Literal["primary", "secondary"] = Field("primary", alias="assignedRole")


class ConfigData(_DocumentModel):
    font_styles: dict[str, FontStyleDocument] = Field(default_factory=dict, alias="fontStyles")
    configured_languages: list[str] = Field(default_factory=list, alias="configuredLanguages")
    primary_languages: list[str] = Field(default_factory=list, alias="primaryLanguages")
    header_styles: dict[str, HeaderStyleDocument] = Field(
        default_factory=dict, alias="headerStyles"
    )

    @property
    def primary_style(self) -> FontStyleDocument:
        if PRIMARY_STYLE_ID in self.font_styles:
            return self.font_styles[PRIMARY_STYLE_ID]
        return next(iter(self.font_styles.values()), FontStyleDocument())


class ConfigMetadata(_DocumentModel):
    version: int = CONFIG_VERSION
    timestamp: str | None = None
    app_name: str | None = Field(None, alias="appName")


class ConfigDocument(_DocumentModel):
    metadata: ConfigMetadata = Field(default_factory=ConfigMetadata)
    data: ConfigData


def normalize_document(raw: Any) -> ConfigData:
    """
    Accept a versioned document or a legacy flat one and return its data.

    Raises:
        InvalidConfigDocumentError: If ``raw`` is neither form or fails validation
        UnsupportedConfigVersionError: If the document is newer than this reader
    """
    if not isinstance(raw, Mapping):
        raise InvalidConfigDocumentError("expected a JSON object")

    metadata = raw.get("metadata")
    if isinstance(metadata, Mapping) and "data" in raw:
        version = metadata.get("version")
        if not isinstance(version, int) or version < 1:
            raise InvalidConfigDocumentError(f"bad version {version!r}")
        if version > CONFIG_VERSION:
            raise UnsupportedConfigVersionError(version, CONFIG_VERSION)
        payload = raw["data"]
    elif "fontStyles" in raw or "headerStyles" in raw:
        logger.info("Reading legacy flat configuration document")
        payload = dict(raw)
        if "configuredLanguages" not in payload and "visibleLanguageIds" in payload:
            payload["configuredLanguages"] = payload["visibleLanguageIds"]
    else:
        raise InvalidConfigDocumentError("no metadata/data envelope and no font styles")

    try:
        return ConfigData.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidConfigDocumentError(str(e)) from e


def required_font_files(document: Any) -> list[str]:
    """File names the caller must supply to import ``document``, in stack order."""
    data = normalize_document(document)
    files: list[str] = []
    seen: set[str] = set()
    for entry in data.primary_style.fonts:
        if entry.file_name and file_identity(entry.file_name) not in seen:
            seen.add(file_identity(entry.file_name))
            files.append(entry.file_name)
    return files


def read_document(path: str | Path) -> dict:
    """
    Read a JSON config document from disk.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        InvalidConfigDocumentError: If the file is not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigDocumentError(str(e)) from e


def write_document(document: dict, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
        f.write("\n")


@dataclass
class ImportResult:
    """Outcome of an import; unresolved entries are reported, never fatal."""

    session: Session
    dropped_fonts: list[str] = field(default_factory=list)
    dropped_references: int = 0
    ghost_fonts: list[str] = field(default_factory=list)
    errors: list[UnresolvableImportReferenceError] = field(default_factory=list)

    @property
    def registry(self) -> FontRegistry:
        return self.session.registry

    @property
    def overrides(self) -> OverrideStore:
        return self.session.overrides

    @property
    def languages(self) -> list[str]:
        return self.session.configured_languages

    @property
    def unresolved_count(self) -> int:
        return len(self.dropped_fonts) + self.dropped_references

    @property
    def fully_resolved(self) -> bool:
        return self.unresolved_count == 0 and not self.ghost_fonts


class _AvailableFonts:
    """Lookup of supplied fonts by file identity, then by normalized name."""

    def __init__(self, fonts: Iterable[Font]):
        self._by_file: dict[str, Font] = {}
        self._by_name: dict[str, Font] = {}
        for font in fonts:
            if font.file_name:
                self._by_file.setdefault(file_identity(font.file_name), font)
            self._by_name.setdefault(font.normalized_name, font)

    def match(self, entry: FontEntryDocument) -> Font | None:
        if entry.file_name:
            found = self._by_file.get(file_identity(entry.file_name))
            if found is not None:
                return found
        return self._by_name.get(normalize_font_name(entry.file_name or entry.name))


class ConfigSerializer:
    """Reads and writes config documents for a ``Session``."""

    def __init__(self, app_name: str = "Localize Type"):
        self.app_name = app_name

    def export(self, session: Session, timestamp: datetime | None = None) -> dict:
        """
        Serialize a session.

        Args:
            session: Session to export
            timestamp: Export time written to the metadata (defaults to now, UTC)

        Returns:
            JSON-compatible document
        """
        overrides = session.overrides
        fonts = [
            FontEntryDocument(
                id=font.id,
                type=font.role.value,
                name=font.source_name,
                file_name=font.file_name,
                is_lang_specific=font.is_language_specific,
                is_primary_override=font.is_primary_override,
                scale=overrides.scale_for(font.id),
                line_height=overrides.line_height_for(font.id),
            )
            for font in session.registry
        ]
        style = FontStyleDocument(
            fonts=fonts,
            fallback_font_overrides=dict(overrides.fallback_font_overrides),
            primary_font_overrides=dict(overrides.primary_font_overrides),
            line_height_overrides=dict(overrides.line_height_overrides),
            font_scales=FontScalesDocument(fallback=overrides.global_fallback_scale),
            base_font_size=session.base_font_size,
            line_height=session.line_height,
            base_font_weight=session.base_font_weight,
            fallback_font=session.fallback_family,
        )
        document = ConfigDocument(
            metadata=ConfigMetadata(
                version=CONFIG_VERSION,
                timestamp=(timestamp or datetime.now(timezone.utc)).isoformat(),
                app_name=self.app_name,
            ),
            data=ConfigData(
                font_styles={PRIMARY_STYLE_ID: style},
                configured_languages=list(session.configured_languages),
                primary_languages=list(session.primary_languages),
                header_styles={
                    tag: HeaderStyleDocument(**header.model_dump())
                    for tag, header in session.header_styles.items()
                },
            ),
        )
        return document.model_dump(mode="json", by_alias=True)

    def import_config(
        self,
        document: Any,
        available_fonts: Iterable[Font] = (),
        *,
        keep_unresolved: bool = False,
        settings: TypographySettings | None = None,
        catalog: LanguageCatalog | None = None,
    ) -> ImportResult:
        """
        Rebuild a session from a document and the font files supplied for it.

        Uploaded entries are matched to ``available_fonts`` by file name
        (case- and extension-insensitive), then by normalized name. Every
        entry gets a fresh id and override references are re-linked to the
        new ids.

        Args:
            document: Versioned or legacy config document
            available_fonts: Parsed fonts for the files the document needs
            keep_unresolved: Keep unmatched uploaded entries as ghosts instead
                of dropping them
            settings: Typography defaults for values the document lacks
            catalog: Language catalog of the new session

        Returns:
            ImportResult with the new session and what could not be resolved

        Raises:
            InvalidConfigDocumentError: If the document cannot be read at all
            UnsupportedConfigVersionError: If the document is too new
        """
        data = normalize_document(document)
        style = data.primary_style
        available = _AvailableFonts(available_fonts)

        session = Session.from_settings(settings, catalog)
        result = ImportResult(session=session)
        id_map: dict[str, str] = {}
        fonts: list[Font] = []
        identities: set[str] = set()

        for entry in style.fonts:
            font = self._build_font(entry, available, keep_unresolved, result)
            if font is None:
                continue
            if not font.is_clone and font.identity_key in identities:
                logger.info(f"Skipping duplicate entry {entry.name} in config")
                id_map[entry.id] = next(
                    f.id for f in fonts if not f.is_clone and f.identity_key == font.identity_key
                )
                continue
            if not font.is_clone:
                identities.add(font.identity_key)
            id_map[entry.id] = font.id
            fonts.append(font)
            if entry.scale is not None:
                session.overrides.font_scales[font.id] = entry.scale
            if entry.line_height is not None:
                session.overrides.font_line_heights[font.id] = entry.line_height

        fonts = self._promote_primary(fonts, result)
        session.registry = FontRegistry(fonts)
        live_ids = {font.id for font in fonts}

        for source, target in (
            (style.fallback_font_overrides, session.overrides.fallback_font_overrides),
            (style.primary_font_overrides, session.overrides.primary_font_overrides),
        ):
            for language_id, old_id in source.items():
                self._relink(target, language_id, old_id, id_map, live_ids, result)

        for font_id in list(session.overrides.font_scales):
            if font_id not in live_ids:
                del session.overrides.font_scales[font_id]
        for font_id in list(session.overrides.font_line_heights):
            if font_id not in live_ids:
                del session.overrides.font_line_heights[font_id]

        session.overrides.line_height_overrides = dict(style.line_height_overrides)
        session.overrides.global_fallback_scale = style.font_scales.fallback
        session.base_font_size = style.base_font_size
        session.line_height = style.line_height
        session.base_font_weight = style.base_font_weight
        session.fallback_family = style.fallback_font

        for language_id in data.configured_languages:
            session.add_language(language_id)
        session.set_primary_languages(data.primary_languages)
        for tag in HEADER_TAGS:
            if tag in data.header_styles:
                session.header_styles[tag] = HeaderStyle(**data.header_styles[tag].model_dump())

        if result.unresolved_count:
            logger.warning(
                f"Import dropped {len(result.dropped_fonts)} font(s) and "
                f"{result.dropped_references} override reference(s)"
            )
        logger.info(f"Imported {len(session.registry)} font(s), {len(session.configured_languages)} language(s)")
        return result

    @staticmethod
    def _build_font(
        entry: FontEntryDocument,
        available: _AvailableFonts,
        keep_unresolved: bool,
        result: ImportResult,
    ) -> Font | None:
        flags = {
            "id": new_font_id(),
            "is_language_specific": entry.is_lang_specific,
            "is_primary_override": entry.is_primary_override,
        }
        if not entry.file_name:
            return Font.system(entry.name, **flags)

        match = available.match(entry)
        if match is not None:
            return match.model_copy(update={"source_name": entry.name, **flags}, deep=True)

        error = UnresolvableImportReferenceError(entry.file_name)
        result.errors.append(error)
        if keep_unresolved:
            result.ghost_fonts.append(entry.file_name)
            return Font.uploaded(entry.file_name, source_name=entry.name, **flags)

        logger.warning(f"{error}; dropping {entry.name}")
        result.dropped_fonts.append(entry.file_name)
        return None

    @staticmethod
    def _promote_primary(fonts: list[Font], result: ImportResult) -> list[Font]:
        """Put the first file-backed entry first; a stack of only system fonts cannot stand."""
        if not fonts or not fonts[0].is_system:
            return fonts
        index = next((i for i, font in enumerate(fonts) if not font.is_system), None)
        if index is None:
            logger.warning("Config has no usable primary font; system fonts dropped")
            result.dropped_fonts.extend(font.source_name for font in fonts)
            return []
        return [fonts[index], *fonts[:index], *fonts[index + 1 :]]

    @staticmethod
    def _relink(
        target: dict[str, str],
        language_id: str,
        old_id: str,
        id_map: dict[str, str],
        live_ids: set[str],
        result: ImportResult,
    ) -> None:
        new_id = id_map.get(old_id)
        if new_id is None or new_id not in live_ids:
            logger.warning(f"Dropping override for {language_id}: font {old_id} not imported")
            result.dropped_references += 1
            result.errors.append(UnresolvableImportReferenceError(f"{language_id} -> {old_id}"))
            return
        target[language_id] = new_id
