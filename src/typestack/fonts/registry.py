"""
Font Registry
=============

Ordered collection of the fonts in a stack. Position 0 is always the primary
font; every other entry is a fallback whose position is its priority.

All mutations are applied to a working copy and committed only when they
succeed, so a rejected call leaves the registry exactly as it was.
"""

import logging
from collections.abc import Iterable, Iterator

from src.typestack.core.exceptions import (
    CannotRemoveLastFontError,
    DuplicateFontError,
    FontNotFoundError,
    IndexOutOfRangeError,
    InvalidPrimaryCandidateError,
    MissingGlyphDataError,
)
from src.typestack.core.models import (
    Font,
    FontMetadata,
    FontRole,
    MutationResult,
    UploadedSource,
    new_font_id,
)

logger = logging.getLogger(__name__)

_ADDED = "added"
_AUGMENTED = "augmented"
_DUPLICATE = "duplicate"
_REJECTED = "rejected"


def _assign_roles(fonts: list[Font]) -> list[Font]:
    """Index 0 becomes primary, everything else a fallback. The primary is never a clone."""
    assigned = []
    for index, font in enumerate(fonts):
        if index == 0:
            if font.role != FontRole.PRIMARY or font.is_clone:
                font = font.model_copy(
                    update={
                        "role": FontRole.PRIMARY,
                        "is_language_specific": False,
                        "is_primary_override": False,
                    }
                )
        elif font.role != FontRole.FALLBACK:
            font = font.model_copy(update={"role": FontRole.FALLBACK})
        assigned.append(font)
    return assigned


def _same_font(existing: Font, candidate: Font, existing_is_primary: bool) -> bool:
    """Whether ``candidate`` would duplicate ``existing`` in the general pool."""
    if existing.file_name and candidate.file_name:
        return existing.identity_key == candidate.identity_key
    if existing.is_system and candidate.is_system:
        return existing.normalized_name == candidate.normalized_name
    # A system font named after the uploaded primary is the same typeface
    return existing_is_primary and existing.normalized_name == candidate.normalized_name


class FontRegistry:
    """
    Ordered font stack owning identity, order and lifecycle of its fonts.

    Invariants:
        - a non-empty registry has exactly one primary font, at index 0
        - the primary font is never a name-only system font
        - no two general (non-clone) entries share a file identity, and no two
          system entries share a normalized name
    """

    def __init__(self, fonts: Iterable[Font] | None = None):
        """
        Initialize the registry.

        Args:
            fonts: Initial entries in stack order; roles are derived from position

        Raises:
            InvalidPrimaryCandidateError: If the first entry is a system font
        """
        initial = list(fonts or [])
        if initial and initial[0].is_system:
            raise InvalidPrimaryCandidateError(initial[0].source_name)
        self._fonts: list[Font] = _assign_roles(initial)

    def __len__(self) -> int:
        return len(self._fonts)

    def __iter__(self) -> Iterator[Font]:
        return iter(tuple(self._fonts))

    def __contains__(self, font_id: object) -> bool:
        return any(font.id == font_id for font in self._fonts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FontRegistry):
            return NotImplemented
        return self._fonts == other._fonts

    def __repr__(self) -> str:
        return f"FontRegistry({[font.id for font in self._fonts]})"

    @property
    def fonts(self) -> tuple[Font, ...]:
        return tuple(self._fonts)

    @property
    def primary(self) -> Font | None:
        return self._fonts[0] if self._fonts else None

    @property
    def fallbacks(self) -> tuple[Font, ...]:
        return tuple(self._fonts[1:])

    def get(self, font_id: str | None) -> Font | None:
        if font_id is None:
            return None
        for font in self._fonts:
            if font.id == font_id:
                return font
        return None

    def index_of(self, font_id: str) -> int | None:
        for index, font in enumerate(self._fonts):
            if font.id == font_id:
                return index
        return None

    def copy(self) -> "FontRegistry":
        clone = FontRegistry()
        clone._fonts = list(self._fonts)
        return clone

    def load(self, font: Font, metadata: FontMetadata | None = None) -> MutationResult:
        """
        Install ``font`` as the primary font.

        The current primary entry keeps its id so overrides that reference it
        stay attached; its file, name and glyph data are replaced.

        Args:
            font: File-backed font to install
            metadata: Glyph metadata from the parser, if not already on ``font``

        Returns:
            MutationResult; ``MISSING_GLYPH_DATA`` for a font without a file
        """
        if font.is_system:
            logger.warning(f"Rejected primary load of {font.source_name}: no file or glyph data")
            return MutationResult.failure(MissingGlyphDataError())

        if metadata is not None:
            source = font.source.model_copy(update={"metadata": metadata})
            font = font.model_copy(update={"source": source})

        if not self._fonts:
            installed = font.model_copy(
                update={
                    "role": FontRole.PRIMARY,
                    "is_language_specific": False,
                    "is_primary_override": False,
                }
            )
            self._fonts = [installed]
        else:
            current = self._fonts[0]
            installed = current.model_copy(
                update={"source_name": font.source_name, "source": font.source}
            )
            self._fonts = [installed, *self._fonts[1:]]

        logger.info(f"Loaded primary font: {installed.source_name}")
        return MutationResult.success([installed.id], added=1)

    def add_fallback(self, font: Font) -> MutationResult:
        """Append one fallback font; see ``add_fallback_batch``."""
        result = self.add_fallback_batch([font])
        if result.duplicates:
            return MutationResult.failure(DuplicateFontError(font.source_name), duplicates=1)
        if result.rejected:
            return MutationResult.failure(InvalidPrimaryCandidateError(font.source_name))
        return result

    def add_fallback_batch(self, fonts: Iterable[Font]) -> MutationResult:
        """
        Append fonts in order, skipping duplicates.

        An upload whose file matches a ghost entry (file known, glyph data not
        loaded) fills in that entry instead of being counted as a duplicate.
        Duplicates inside the batch itself are detected as well. The batch is
        committed in one step.

        Returns:
            MutationResult with ``added``, ``augmented`` and ``duplicates`` counts
            and the ids of the entries that were added or augmented
        """
        working = list(self._fonts)
        touched: list[str] = []
        counts = {_ADDED: 0, _AUGMENTED: 0, _DUPLICATE: 0, _REJECTED: 0}

        for font in fonts:
            outcome, font_id = self._admit(working, font)
            counts[outcome] += 1
            if font_id is not None:
                touched.append(font_id)

        self._fonts = _assign_roles(working)

        if counts[_DUPLICATE]:
            logger.info(f"Skipped {counts[_DUPLICATE]} duplicate font(s)")
        logger.debug(
            f"Fallback batch: {counts[_ADDED]} added, {counts[_AUGMENTED]} augmented, "
            f"{counts[_DUPLICATE]} duplicates, {counts[_REJECTED]} rejected"
        )
        return MutationResult.success(
            touched,
            added=counts[_ADDED],
            augmented=counts[_AUGMENTED],
            duplicates=counts[_DUPLICATE],
            rejected=counts[_REJECTED],
        )

    def _admit(self, working: list[Font], font: Font) -> tuple[str, str | None]:
        if any(existing.id == font.id for existing in working):
            font = font.model_copy(update={"id": new_font_id()})

        if not working and font.is_system:
            logger.warning(f"System font {font.source_name} cannot start an empty stack")
            return _REJECTED, None

        if not font.is_clone:
            for index, existing in enumerate(working):
                if existing.is_clone or not _same_font(existing, font, index == 0):
                    continue
                if existing.is_ghost and font.is_loaded:
                    augmented_id = existing.id
                    for position, entry in enumerate(working):
                        if entry.is_ghost and entry.identity_key == existing.identity_key:
                            working[position] = entry.model_copy(update={"source": font.source})
                    logger.info(f"Attached glyph data to {existing.source_name}")
                    return _AUGMENTED, augmented_id
                logger.debug(f"Duplicate font skipped: {font.source_name}")
                return _DUPLICATE, None

        role = FontRole.PRIMARY if not working else FontRole.FALLBACK
        working.append(font.model_copy(update={"role": role}))
        return _ADDED, working[-1].id

    def remove(self, font_id: str) -> MutationResult:
        """
        Remove a font and every entry backed by the same physical font.

        Clones made for language mappings share the file (or normalized name)
        of their original and are removed together with it. When the primary
        goes, the first remaining file-backed entry is promoted.

        Returns:
            MutationResult with the removed ids; ``CANNOT_REMOVE_LAST_FONT`` if
            nothing would remain, ``INVALID_PRIMARY_CANDIDATE`` if only system
            fonts would remain
        """
        target = self.get(font_id)
        if target is None:
            return MutationResult.failure(FontNotFoundError(font_id))

        key = target.identity_key
        removed = [font.id for font in self._fonts if font.identity_key == key]
        remaining = [font for font in self._fonts if font.identity_key != key]

        if not remaining:
            logger.warning(f"Refused to remove {target.source_name}: last font in stack")
            return MutationResult.failure(CannotRemoveLastFontError())

        if remaining[0].is_system:
            candidate = next((i for i, font in enumerate(remaining) if not font.is_system), None)
            if candidate is None:
                logger.warning(f"Refused to remove {target.source_name}: no primary candidate left")
                return MutationResult.failure(InvalidPrimaryCandidateError(remaining[0].source_name))
            remaining.insert(0, remaining.pop(candidate))

        self._fonts = _assign_roles(remaining)
        logger.info(f"Removed font {target.source_name} ({len(removed)} entries)")
        return MutationResult.success(removed)

    def reorder(self, from_index: int, to_index: int) -> MutationResult:
        """
        Move the entry at ``from_index`` to ``to_index``.

        Roles follow position afterwards. Fails with ``INVALID_PRIMARY_CANDIDATE``
        if a system font would end up at index 0.
        """
        size = len(self._fonts)
        for index in (from_index, to_index):
            if not 0 <= index < size:
                return MutationResult.failure(IndexOutOfRangeError(index, size))

        if from_index == to_index:
            return MutationResult.success([self._fonts[from_index].id])

        working = list(self._fonts)
        moved = working.pop(from_index)
        working.insert(to_index, moved)

        if working[0].is_system:
            logger.warning(f"Refused reorder: {working[0].source_name} cannot be primary")
            return MutationResult.failure(InvalidPrimaryCandidateError(working[0].source_name))

        self._fonts = _assign_roles(working)
        return MutationResult.success([moved.id])

    def set_primary(self, font_id: str) -> MutationResult:
        """
        Promote a font to primary.

        The promoted entry takes index 0; the previous primary becomes an
        ordinary fallback at the position the promoted entry vacated.
        """
        index = self.index_of(font_id)
        if index is None:
            return MutationResult.failure(FontNotFoundError(font_id))

        font = self._fonts[index]
        if font.is_system:
            logger.warning(f"Refused to promote system font {font.source_name}")
            return MutationResult.failure(InvalidPrimaryCandidateError(font.source_name))

        if index == 0:
            return MutationResult.success([font_id])

        working = list(self._fonts)
        working[0], working[index] = working[index], working[0]
        self._fonts = _assign_roles(working)
        logger.info(f"Primary font is now {font.source_name}")
        return MutationResult.success([font_id])

    def toggle_global_fallback_status(self, font_id: str) -> MutationResult:
        """Move a language-pinned font into the general fallback pool (one way only)."""
        index = self.index_of(font_id)
        if index is None:
            return MutationResult.failure(FontNotFoundError(font_id))

        font = self._fonts[index]
        if font.is_language_specific:
            working = list(self._fonts)
            working[index] = font.model_copy(update={"is_language_specific": False})
            self._fonts = working
        return MutationResult.success([font_id])

    def clone_for_language(self, font_id: str, primary_override: bool = False) -> MutationResult:
        """
        Append a language-scoped copy of an existing font.

        Args:
            font_id: Font to copy
            primary_override: Mark the clone as a primary-font replacement instead
                of a language-specific fallback

        Returns:
            MutationResult whose ``font_ids`` holds the new clone's id
        """
        font = self.get(font_id)
        if font is None:
            return MutationResult.failure(FontNotFoundError(font_id))

        clone = font.model_copy(
            update={
                "id": new_font_id(),
                "role": FontRole.FALLBACK,
                "is_language_specific": not primary_override,
                "is_primary_override": primary_override,
            },
            deep=True,
        )
        self._fonts = [*self._fonts, clone]
        return MutationResult.success([clone.id], added=1)

    def discard_clone(self, font_id: str) -> bool:
        """Remove a single language clone without touching its original."""
        font = self.get(font_id)
        if font is None or not font.is_clone or font.role == FontRole.PRIMARY:
            return False
        self._fonts = [entry for entry in self._fonts if entry.id != font_id]
        return True

    def attach_glyph_data(
        self, file_name: str, metadata: FontMetadata, font_url: str | None = None
    ) -> int:
        """Fill in glyph data for every ghost entry backed by ``file_name``."""
        incoming = Font.uploaded(file_name)
        updated = 0
        working = list(self._fonts)
        for index, font in enumerate(working):
            if font.is_ghost and font.identity_key == incoming.identity_key:
                source = UploadedSource(
                    file_name=font.file_name, metadata=metadata, font_url=font_url or font.font_url
                )
                working[index] = font.model_copy(update={"source": source})
                updated += 1
        self._fonts = working
        return updated
