"""Tests for stylesheet generation."""

import re
from datetime import datetime, timezone

import pytest

from src.typestack.core.models import ExportOptions, FontMetadata, WeightAxis
from src.typestack.export.css import CSSExporter
from src.typestack.fonts.registry import FontRegistry
from src.typestack.stack.snapshot import build_snapshot


@pytest.fixture
def exporter():
    return CSSExporter()


@pytest.fixture
def served_session(session, make_uploaded):
    """Session whose uploaded fonts have URLs."""
    session.registry = FontRegistry(
        [
            make_uploaded("Inter-Regular.ttf", id="inter", font_url="fonts/Inter-Regular.ttf"),
            make_uploaded(
                "NotoSansJP.otf",
                id="jp",
                font_url="fonts/NotoSansJP.otf",
                metadata=FontMetadata(glyph_count=17000, weight_axis=WeightAxis(min=100, max=900, default=400)),
            ),
            make_uploaded("NotoSansArabic.ttf", id="arabic", font_url="fonts/NotoSansArabic.ttf"),
        ]
    )
    return session


class TestDeterminism:
    """Identical input gives identical output."""

    def test_byte_identical(self, exporter, session):
        session.overrides.set_fallback_override("ja-JP", "jp")
        snapshot = build_snapshot(session)

        assert exporter.export(snapshot) == exporter.export(snapshot)

    def test_minified_is_collapsed_pretty_output(self, exporter, served_session):
        served_session.overrides.set_line_height_override("ar", 1.6)
        snapshot = build_snapshot(served_session)
        pretty = exporter.export(snapshot, options=ExportOptions(include_font_face=True))
        minified = exporter.export(
            snapshot, options=ExportOptions(include_font_face=True, pretty_print=False)
        )

        assert "\n" not in minified
        assert "  " not in minified
        assert minified == re.sub(r"\s+", " ", pretty).strip()

    def test_timestamp_only_when_given(self, exporter, session):
        snapshot = build_snapshot(session)
        stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        plain = exporter.export(snapshot)
        stamped = exporter.export(snapshot, generated_at=stamp)

        assert plain.startswith("/* Generated by Localize Type */\n\n")
        assert "/* 2024-05-01T12:00:00+00:00 */" in stamped


class TestSections:
    """Test individual sections."""

    def test_variables(self, exporter, session):
        session.overrides.set_global_fallback_scale(110)

        css = exporter.export(build_snapshot(session))

        assert "--font-primary: 'Inter-Regular', sans-serif;" in css
        assert "--font-size-base: 60px;" in css
        assert "--font-scale-fallback: 110%;" in css
        assert "--line-height-base: 1.2;" in css
        assert "--h2-scale: 0.8em;" in css

    def test_variables_disabled(self, exporter, session):
        css = exporter.export(build_snapshot(session), options=ExportOptions(use_css_variables=False))

        assert ":root" not in css

    def test_header_rules(self, exporter, session):
        session.set_header_style("h1", scale=1.25, line_height=1.1)

        css = exporter.export(build_snapshot(session))

        assert "h1 {\n  font-size: 75px;\n  line-height: 1.1;\n}" in css
        assert "h6 {\n  font-size: 18px;" in css

    def test_font_face_off_by_default(self, exporter, served_session):
        assert "@font-face" not in exporter.export(build_snapshot(served_session))

    def test_font_face_rules(self, exporter, served_session):
        served_session.overrides.set_font_scale("arabic", 92.5)
        served_session.assign_font_to_language("ja-JP", "jp")

        css = exporter.export(
            build_snapshot(served_session), options=ExportOptions(include_font_face=True)
        )

        assert css.count("@font-face") == 4
        assert "src: url('fonts/NotoSansJP.otf') format('opentype');" in css
        assert "font-weight: 100 900;" in css
        assert "size-adjust: 93%;" in css
        assert "font-family: 'Inter-Regular';\n  src: url('fonts/Inter-Regular.ttf') format('truetype');" in css

    def test_clone_gets_its_own_face(self, exporter, served_session):
        """A language clone keeps its own scale in a face named after its id."""
        clone = served_session.assign_font_to_language("ja-JP", "jp").font_ids[0]
        served_session.overrides.set_font_scale(clone, 80)

        css = exporter.export(
            build_snapshot(served_session), options=ExportOptions(include_font_face=True)
        )

        assert (
            f"font-family: 'NotoSansJP-{clone}';\n"
            "  src: url('fonts/NotoSansJP.otf') format('opentype');\n"
            "  font-display: swap;\n"
            "  font-weight: 100 900;\n"
            "  size-adjust: 80%;"
        ) in css
        assert "font-family: 'NotoSansJP';" in css
        assert f"[lang=\"ja-JP\"] {{\n  font-family: 'NotoSansJP-{clone}', 'NotoSansJP'," in css

    def test_language_stack_without_faces_uses_file_family(self, exporter, served_session):
        clone = served_session.assign_font_to_language("ja-JP", "jp").font_ids[0]

        css = exporter.export(build_snapshot(served_session))

        assert clone not in css
        assert "[lang=\"ja-JP\"] {\n  font-family: 'NotoSansJP'," in css

    def test_no_comments(self, exporter, session):
        css = exporter.export(build_snapshot(session), options=ExportOptions(include_comments=False))

        assert "/*" not in css


class TestLanguageRules:
    """Test per-language override rules."""

    def test_overridden_language_gets_stack(self, exporter, session):
        session.overrides.set_fallback_override("ja-JP", "jp")

        css = exporter.export(build_snapshot(session))

        assert (
            '[lang="ja-JP"] {\n'
            "  font-family: 'NotoSansJP', 'NotoSansArabic', 'Arial', sans-serif;\n"
            "  line-height: 1.2;\n"
            "}"
        ) in css

    def test_auto_mapped_language_skipped(self, exporter, session):
        css = exporter.export(build_snapshot(session))

        assert "[lang=" not in css

    def test_line_height_only_rule(self, exporter, session):
        session.overrides.set_line_height_override("ar", 1.6)

        css = exporter.export(build_snapshot(session))

        assert '[lang="ar"] {\n  line-height: 1.6;\n}' in css

    def test_catalog_order_and_filter(self, exporter, session):
        session.overrides.set_line_height_override("ar", 1.6)
        session.overrides.set_line_height_override("ja-JP", 1.5)
        session.overrides.set_line_height_override("de-DE", 1.3)
        snapshot = build_snapshot(session)

        css = exporter.export(snapshot, languages=["ar", "ja-JP"])

        assert css.index('[lang="ja-JP"]') < css.index('[lang="ar"]')
        assert '[lang="de-DE"]' not in css
