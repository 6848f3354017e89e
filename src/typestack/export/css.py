"""
CSS Exporter
============

Renders a resolved snapshot into a stylesheet. Sections always come in the
same order:

1. header comment
2. @font-face rules
3. :root custom properties
4. heading rules
5. per-language override rules

Identical input gives byte-identical output. The header only carries a
timestamp when one is passed in.
"""

import logging
import re
from collections.abc import Iterable
from datetime import datetime

from src.typestack.core.models import ExportOptions, Language, ResolutionSource
from src.typestack.stack.fallback import css_font_family, face_family, font_family, has_font_face
from src.typestack.stack.snapshot import StackSnapshot
from src.typestack.utils.naming import font_format, format_number, quote_family, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "Localize Type"

_OVERRIDE_SOURCES = (ResolutionSource.PRIMARY_OVERRIDE, ResolutionSource.LANGUAGE_OVERRIDE)


def _rule(selector: str, declarations: list[str]) -> str:
    body = "\n".join(f"  {declaration}" for declaration in declarations)
    return f"{selector} {{\n{body}\n}}"


class CSSExporter:
    """Stylesheet generator for a ``StackSnapshot``."""

    def __init__(self, app_name: str = DEFAULT_APP_NAME):
        self.app_name = app_name

    def export(
        self,
        snapshot: StackSnapshot,
        languages: Iterable[Language | str] | None = None,
        options: ExportOptions | None = None,
        generated_at: datetime | None = None,
    ) -> str:
        """
        Generate the stylesheet.

        Args:
            snapshot: Resolved session state
            languages: Languages to emit override rules for (defaults to every
                resolved language); emitted in catalog order regardless of the
                order given
            options: Export flags
            generated_at: Timestamp for the header comment; omitted when None

        Returns:
            Stylesheet text
        """
        options = options or ExportOptions()
        sections = []

        if options.include_comments:
            sections.append(self._header_comment(generated_at))

        if options.include_font_face:
            sections.append(self._font_face_section(snapshot, options))

        if options.use_css_variables:
            sections.append(self._variables_section(snapshot, options))

        sections.append(self._header_section(snapshot, options))
        sections.append(self._language_section(snapshot, languages, options))

        css = "\n\n".join(section for section in sections if section)

        if not options.pretty_print:
            return re.sub(r"\s+", " ", css).strip()
        return css + "\n"

    def _header_comment(self, generated_at: datetime | None) -> str:
        lines = [f"/* Generated by {self.app_name} */"]
        if generated_at is not None:
            lines.append(f"/* {generated_at.isoformat()} */")
        return "\n".join(lines)

    @staticmethod
    def _section(title: str, rules: list[str], options: ExportOptions) -> str:
        if not rules:
            return ""
        body = "\n\n".join(rules)
        return f"/* {title} */\n{body}" if options.include_comments else body

    def _font_face_section(self, snapshot: StackSnapshot, options: ExportOptions) -> str:
        rules = []
        for font in snapshot.fonts:
            if not has_font_face(font):
                continue

            declarations = [
                f"font-family: {quote_family(face_family(font))};",
                f"src: url('{font.font_url}') format('{font_format(font.file_name)}');",
                "font-display: swap;",
            ]
            axis = font.weight_axis
            if axis is not None:
                declarations.append(
                    f"font-weight: {format_number(axis.min)} {format_number(axis.max)};"
                )
            scale = snapshot.font_scales.get(font.id, 100.0)
            declarations.append(f"size-adjust: {round_half_up(scale)}%;")
            rules.append(_rule("@font-face", declarations))
        return self._section("Font Face Declarations", rules, options)

    def _variables_section(self, snapshot: StackSnapshot, options: ExportOptions) -> str:
        primary_family = (
            quote_family(font_family(snapshot.primary)) if snapshot.primary else None
        )
        generic = quote_family(snapshot.fallback_family)
        primary_stack = f"{primary_family}, {generic}" if primary_family else generic

        declarations = [
            f"--font-primary: {primary_stack};",
            f"--font-size-base: {format_number(snapshot.base_font_size)}px;",
            f"--font-scale-fallback: {format_number(snapshot.global_fallback_scale)}%;",
            f"--line-height-base: {format_number(snapshot.line_height)};",
        ]
        for tag, style in snapshot.header_styles.items():
            declarations.append(f"--{tag}-scale: {format_number(style.scale)}em;")
            declarations.append(f"--{tag}-line-height: {format_number(style.line_height)};")
        return self._section("CSS Variables", [_rule(":root", declarations)], options)

    def _header_section(self, snapshot: StackSnapshot, options: ExportOptions) -> str:
        rules = [
            _rule(
                tag,
                [
                    f"font-size: {round_half_up(style.scale * snapshot.base_font_size)}px;",
                    f"line-height: {format_number(style.line_height)};",
                ],
            )
            for tag, style in snapshot.header_styles.items()
        ]
        return self._section("Header Styles", rules, options)

    def _language_section(
        self,
        snapshot: StackSnapshot,
        languages: Iterable[Language | str] | None,
        options: ExportOptions,
    ) -> str:
        requested = list(snapshot.resolved) if languages is None else list(languages)
        wanted = {lang.id if isinstance(lang, Language) else lang for lang in requested}
        codes = {lang.id: lang.code for lang in requested if isinstance(lang, Language)}

        rules = []
        # snapshot.resolved is already in catalog order
        for language_id, resolved in snapshot.resolved.items():
            if language_id not in wanted:
                continue
            overridden = resolved.source in _OVERRIDE_SOURCES
            if not overridden and resolved.line_height == snapshot.line_height:
                continue

            declarations = []
            if overridden:
                family = css_font_family(
                    snapshot.stacks[language_id], use_faces=options.include_font_face
                )
                declarations.append(f"font-family: {family};")
            declarations.append(f"line-height: {format_number(resolved.line_height)};")

            code = codes.get(language_id) or snapshot.language_codes.get(language_id, language_id)
            rules.append(_rule(f'[lang="{code}"]', declarations))

        unknown = wanted - set(snapshot.resolved)
        if unknown:
            logger.debug(f"No resolution for {len(unknown)} requested language(s); skipped")
        return self._section("Language-Specific Overrides", rules, options)
