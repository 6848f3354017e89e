"""
Font File Parsing
=================

Adapter around fontTools that turns a font binary into the glyph metadata the
stack needs, plus a thread-pool helper that parses many files at once and
joins the results before they are applied to a registry.
"""

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from io import BytesIO
from typing import Protocol

from fontTools.ttLib import TTFont

from src.typestack.core.exceptions import FontFileTooLargeError, FontParseError, ParseError
from src.typestack.core.models import Font, FontMetadata, WeightAxis

logger = logging.getLogger(__name__)

WEIGHT_AXIS_TAG = "wght"


class FontParser(Protocol):
    """Anything that can turn font bytes into ``FontMetadata``."""

    def parse(self, data: bytes, file_name: str = "<memory>") -> FontMetadata: ...


class FontToolsParser:
    """Reads glyph count, weight axis and static weight with fontTools."""

    def __init__(self, max_file_bytes: int | None = None):
        self.max_file_bytes = max_file_bytes

    def parse(self, data: bytes, file_name: str = "<memory>") -> FontMetadata:
        """
        Parse one font binary.

        Args:
            data: Raw TTF/OTF/WOFF/WOFF2 bytes
            file_name: Name used in error messages

        Returns:
            FontMetadata for the font

        Raises:
            FontFileTooLargeError: If ``data`` exceeds ``max_file_bytes``
            FontParseError: If fontTools cannot read the font
        """
        if self.max_file_bytes is not None and len(data) > self.max_file_bytes:
            raise FontFileTooLargeError(file_name, len(data), self.max_file_bytes)

        try:
            font = TTFont(BytesIO(data), lazy=True)
        except Exception as e:
            raise FontParseError(file_name, str(e)) from e

        try:
            return FontMetadata(
                glyph_count=len(font.getGlyphOrder()),
                weight_axis=self._weight_axis(font),
                static_weight=self._static_weight(font),
            )
        except ParseError:
            raise
        except Exception as e:
            raise FontParseError(file_name, str(e)) from e
        finally:
            font.close()

    @staticmethod
    def _weight_axis(font: TTFont) -> WeightAxis | None:
        if "fvar" not in font:
            return None
        for axis in font["fvar"].axes:
            if axis.axisTag == WEIGHT_AXIS_TAG:
                return WeightAxis(
                    min=axis.minValue, max=axis.maxValue, default=axis.defaultValue
                )
        return None

    @staticmethod
    def _static_weight(font: TTFont) -> int | None:
        if "OS/2" not in font:
            return None
        weight = font["OS/2"].usWeightClass
        return weight if 1 <= weight <= 1000 else None


@dataclass
class ParseBatchResult:
    """Joined outcome of a parallel parse, in input order."""

    parsed: list[tuple[str, FontMetadata]] = field(default_factory=list)
    failures: dict[str, ParseError] = field(default_factory=dict)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def all_succeeded(self) -> bool:
        return not self.failures

    def to_fonts(self, font_urls: Mapping[str, str] | None = None) -> list[Font]:
        """Build uploaded fonts from the successful parses."""
        urls = font_urls or {}
        return [
            Font.uploaded(file_name, metadata=metadata, font_url=urls.get(file_name))
            for file_name, metadata in self.parsed
        ]


def parse_font_files(
    files: Mapping[str, bytes],
    parser: FontParser | None = None,
    max_workers: int = 4,
) -> ParseBatchResult:
    """
    Parse several font files in parallel.

    A failing file is recorded in ``failures`` and does not stop the others.
    Results are only returned once every file is done, so they can be applied
    to a registry in one synchronous step.

    Args:
        files: File name to bytes, in the order results should come back
        parser: Parser to use (defaults to ``FontToolsParser``)
        max_workers: Thread pool size

    Returns:
        ParseBatchResult
    """
    parser = parser or FontToolsParser()
    order = list(files)
    outcomes: dict[str, FontMetadata | ParseError] = {}

    if not order:
        return ParseBatchResult()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(order)))) as executor:
        future_to_name = {
            executor.submit(parser.parse, files[name], name): name for name in order
        }
        for future in as_completed(future_to_name):
            name = future_to_name[future]
            try:
                outcomes[name] = future.result()
            except ParseError as e:
                logger.warning(f"Failed to parse {name}: {e}")
                outcomes[name] = e
            except Exception as e:
                logger.warning(f"Parser raised for {name}: {e}")
                outcomes[name] = FontParseError(name, str(e))

    result = ParseBatchResult()
    for name in order:
        outcome = outcomes[name]
        if isinstance(outcome, ParseError):
            result.failures[name] = outcome
        else:
            result.parsed.append((name, outcome))

    logger.info(f"Parsed {len(result.parsed)}/{len(order)} font file(s)")
    return result
