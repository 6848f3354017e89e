"""Pydantic models for type-safe data structures."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.typestack.utils.naming import file_identity, normalize_font_name

from .exceptions import TypeStackError

HEADER_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


class ReasonCode(str, Enum):
    """Stable reason codes attached to rejected or partially applied mutations."""

    DUPLICATE_FONT = "duplicate_font"
    INVALID_PRIMARY_CANDIDATE = "invalid_primary_candidate"
    CANNOT_REMOVE_LAST_FONT = "cannot_remove_last_font"
    FONT_NOT_FOUND = "font_not_found"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    MISSING_GLYPH_DATA = "missing_glyph_data"
    INVALID_VALUE = "invalid_value"
    PARSE_FAILURE = "parse_failure"
    UNRESOLVABLE_IMPORT_REFERENCE = "unresolvable_import_reference"


class FontRole(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class ResolutionSource(str, Enum):
    """Which precedence rule produced a resolved font."""

    PRIMARY_OVERRIDE = "primary-override"
    PRIMARY = "primary"
    LANGUAGE_OVERRIDE = "language-override"
    AUTO_FALLBACK = "auto-fallback"
    PRIMARY_DEFAULT = "primary-default"


class WeightAxis(BaseModel):
    """Range of a variable font's ``wght`` axis."""

    min: float = Field(..., description="Minimum weight")
    max: float = Field(..., description="Maximum weight")
    default: float = Field(..., description="Default weight")

    @field_validator("max")
    @classmethod
    def max_not_below_min(cls, v: float, info: ValidationInfo) -> float:
        if info.data and "min" in info.data and v < info.data["min"]:
            raise ValueError("max must be greater than or equal to min")
        return v


class FontMetadata(BaseModel):
    """Glyph metadata returned by the font parser."""

    glyph_count: int = Field(..., ge=0, description="Number of glyphs")
    weight_axis: WeightAxis | None = Field(None, description="Variable weight axis")
    static_weight: int | None = Field(None, ge=1, le=1000, description="OS/2 weight class")

    @property
    def is_variable(self) -> bool:
        return self.weight_axis is not None


class UploadedSource(BaseModel):
    """A font backed by a file. ``metadata`` is None until glyph data is loaded."""

    kind: Literal["uploaded"] = "uploaded"
    file_name: str = Field(..., min_length=1)
    metadata: FontMetadata | None = None
    font_url: str | None = None


class SystemSource(BaseModel):
    """A font referenced by name only (no binary)."""

    kind: Literal["system"] = "system"


FontSource = Annotated[UploadedSource | SystemSource, Field(discriminator="kind")]


def new_font_id() -> str:
    return f"font-{uuid.uuid4().hex[:12]}"


class Font(BaseModel):
    """One entry in the font stack."""

    id: str = Field(default_factory=new_font_id)
    role: FontRole = FontRole.FALLBACK
    source_name: str = Field(..., min_length=1, description="Display name")
    source: FontSource = Field(default_factory=SystemSource)
    is_language_specific: bool = False
    is_primary_override: bool = False

    @classmethod
    def uploaded(
        cls,
        file_name: str,
        metadata: FontMetadata | None = None,
        source_name: str | None = None,
        font_url: str | None = None,
        **kwargs,
    ) -> "Font":
        """Create a file-backed font; the display name defaults to the file name."""
        return cls(
            source_name=source_name or file_name,
            source=UploadedSource(file_name=file_name, metadata=metadata, font_url=font_url),
            **kwargs,
        )

    @classmethod
    def system(cls, name: str, **kwargs) -> "Font":
        """Create a name-only system font."""
        return cls(source_name=name, source=SystemSource(), **kwargs)

    @property
    def file_name(self) -> str | None:
        return self.source.file_name if isinstance(self.source, UploadedSource) else None

    @property
    def font_url(self) -> str | None:
        return self.source.font_url if isinstance(self.source, UploadedSource) else None

    @property
    def metadata(self) -> FontMetadata | None:
        return self.source.metadata if isinstance(self.source, UploadedSource) else None

    @property
    def is_system(self) -> bool:
        """Name-only font with no file; never eligible as primary."""
        return isinstance(self.source, SystemSource)

    @property
    def is_loaded(self) -> bool:
        return self.metadata is not None

    @property
    def is_ghost(self) -> bool:
        """File-backed entry whose glyph data has not been supplied yet."""
        return not self.is_system and not self.is_loaded

    @property
    def is_clone(self) -> bool:
        return self.is_language_specific or self.is_primary_override

    @property
    def is_variable(self) -> bool:
        return self.metadata is not None and self.metadata.is_variable

    @property
    def weight_axis(self) -> WeightAxis | None:
        return self.metadata.weight_axis if self.metadata else None

    @property
    def static_weight(self) -> int | None:
        return self.metadata.static_weight if self.metadata else None

    @property
    def normalized_name(self) -> str:
        return normalize_font_name(self.file_name or self.source_name)

    @property
    def identity_key(self) -> str:
        """Key shared by every entry backed by the same physical font."""
        if self.file_name:
            return f"file:{file_identity(self.file_name)}"
        return f"name:{normalize_font_name(self.source_name)}"

    def __str__(self) -> str:
        return f"{self.source_name} ({self.role.value}, {self.id})"


class HeaderStyle(BaseModel):
    """Typography for one heading tag."""

    scale: float = Field(..., gt=0.0, description="Size multiplier of the base font size")
    line_height: float = Field(..., gt=0.0, description="Line height")
    assigned_role: Literal["primary", "secondary"] = Field("primary", description="Font style")


DEFAULT_HEADER_SCALES: dict[str, float] = {
    "h1": 1.0,
    "h2": 0.8,
    "h3": 0.6,
    "h4": 0.5,
    "h5": 0.4,
    "h6": 0.3,
}


def default_header_styles(line_height: float = 1.2) -> dict[str, HeaderStyle]:
    return {
        tag: HeaderStyle(scale=scale, line_height=line_height)
        for tag, scale in DEFAULT_HEADER_SCALES.items()
    }


class Language(BaseModel):
    """Entry of the language catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="BCP 47 code used in lang attributes")
    canonical_index: int = Field(..., ge=0)


class ResolvedFont(BaseModel):
    """Effective typography for one language."""

    model_config = ConfigDict(frozen=True)

    language_id: str
    font_id: str
    font: Font
    scale_percent: float
    line_height: float
    weight: float
    source: ResolutionSource


class ExportOptions(BaseModel):
    """Flags accepted by the CSS exporter."""

    model_config = ConfigDict(frozen=True)

    include_font_face: bool = False
    use_css_variables: bool = True
    include_comments: bool = True
    pretty_print: bool = True


@dataclass
class MutationResult:
    """Outcome of a registry or override mutation.

    Failed results leave the state untouched; ``reason`` says why.
    """

    ok: bool
    reason: ReasonCode | None = None
    message: str = ""
    font_ids: list[str] = field(default_factory=list)
    added: int = 0
    augmented: int = 0
    duplicates: int = 0
    rejected: int = 0
    error: TypeStackError | None = field(default=None, repr=False, compare=False)

    SUCCESS_MESSAGE: ClassVar[str] = "ok"

    @classmethod
    def success(cls, font_ids: list[str] | None = None, **counts) -> "MutationResult":
        return cls(ok=True, message=cls.SUCCESS_MESSAGE, font_ids=font_ids or [], **counts)

    @classmethod
    def failure(cls, error: TypeStackError, **counts) -> "MutationResult":
        return cls(
            ok=False,
            reason=ReasonCode(error.reason),
            message=str(error),
            error=error,
            **counts,
        )

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_reason(self) -> None:
        """Raise the exception matching ``reason`` if the mutation failed."""
        if self.ok:
            return
        raise self.error
