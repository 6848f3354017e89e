"""Tests for per-language fallback stacks."""

from src.typestack.core.models import Font
from src.typestack.stack.fallback import (
    StackEntry,
    build_fallback_stack,
    css_font_family,
    face_family,
    font_family,
    general_fallback_pool,
)
from src.typestack.stack.resolver import resolve_session_language


def _families(stack):
    return [entry.family for entry in stack]


class TestFontFamily:
    def test_uploaded_uses_file_stem(self, make_uploaded):
        assert font_family(make_uploaded("NotoSansJP.otf", source_name="Noto Sans JP")) == "NotoSansJP"

    def test_system_uses_name(self):
        assert font_family(Font.system("Arial")) == "Arial"

    def test_clone_face_is_suffixed_with_id(self, registry):
        clone_id = registry.clone_for_language("jp").font_ids[0]

        assert face_family(registry.get(clone_id)) == f"NotoSansJP-{clone_id}"
        assert face_family(registry.get("jp")) == "NotoSansJP"


class TestGeneralPool:
    """Test which fonts every language falls back through."""

    def test_pool_in_registry_order(self, session):
        assert [font.id for font in general_fallback_pool(session)] == ["jp", "arabic", "arial"]

    def test_mapped_fonts_and_clones_excluded(self, session):
        session.overrides.set_fallback_override("ar", "arabic")
        session.assign_font_to_language("ja-JP", "jp")

        assert [font.id for font in general_fallback_pool(session)] == ["jp", "arial"]

    def test_system_font_named_like_primary_excluded(self, session):
        session.registry.add_fallback_batch([Font.system("Helvetica", id="helv")])
        session.registry.load(Font.uploaded("Helvetica.ttf"))

        assert "helv" not in [font.id for font in general_fallback_pool(session)]


class TestBuildStack:
    """Test stack assembly per language."""

    def test_unpinned_language(self, session):
        stack = build_fallback_stack(session, "ar")

        assert _families(stack) == ["NotoSansJP", "NotoSansArabic", "Arial", "sans-serif"]
        assert stack[-1].font_id is None

    def test_pinned_font_comes_first(self, session):
        session.overrides.set_fallback_override("ar", "arabic")

        stack = build_fallback_stack(session, "ar")

        assert _families(stack) == ["NotoSansArabic", "NotoSansJP", "Arial", "sans-serif"]

    def test_primary_language_uses_primary_override(self, session):
        session.overrides.set_fallback_override("en-US", "arabic")
        clone_id = session.assign_font_to_language("en-US", "jp").font_ids[0]

        stack = build_fallback_stack(session, "en-US")

        assert stack[0].font_id == clone_id
        assert _families(stack)[0] == "NotoSansJP"

    def test_auto_fallback_pinned_elsewhere_leads(self, session):
        """The stack starts with the font the language resolves to, even when another language pins it."""
        session.overrides.set_fallback_override("ja-JP", "jp")

        stack = build_fallback_stack(session, "ar")

        assert stack[0].font_id == resolve_session_language(session, "ar").font_id == "jp"
        assert _families(stack) == ["NotoSansJP", "NotoSansArabic", "Arial", "sans-serif"]

    def test_unpinned_primary_language_has_no_leading_font(self, session):
        assert _families(build_fallback_stack(session, "en-US")) == [
            "NotoSansJP",
            "NotoSansArabic",
            "Arial",
            "sans-serif",
        ]

    def test_dangling_pin_ignored(self, session):
        session.overrides.set_fallback_override("ar", "gone")

        stack = build_fallback_stack(session, "ar")

        assert _families(stack)[0] == "NotoSansJP"

    def test_scales_and_line_heights(self, session):
        session.overrides.set_global_fallback_scale(110)
        session.overrides.set_font_scale("jp", 90)
        session.overrides.set_font_line_height("arabic", 1.5)

        by_family = {entry.family: entry for entry in build_fallback_stack(session, "ar")}

        assert by_family["NotoSansJP"].scale_percent == 90
        assert by_family["NotoSansArabic"].scale_percent == 110
        assert by_family["NotoSansArabic"].line_height == 1.5
        assert by_family["Arial"].line_height == session.line_height

    def test_generic_family_not_repeated(self, session):
        session.fallback_family = "Arial"

        assert _families(build_fallback_stack(session, "ar")).count("Arial") == 1


class TestCssFontFamily:
    def test_quoting(self):
        stack = [
            StackEntry("Noto Sans JP", "jp", 100, 1.2),
            StackEntry("O'Font", "o", 100, 1.2),
            StackEntry("sans-serif", None, 100, 1.2),
        ]

        assert css_font_family(stack) == "'Noto Sans JP', 'O\\'Font', sans-serif"

    def test_faces(self):
        stack = [
            StackEntry("NotoSansJP", "c1", 80, 1.2, face="NotoSansJP-c1"),
            StackEntry("Arial", "arial", 100, 1.2),
            StackEntry("sans-serif", None, 100, 1.2),
        ]

        assert css_font_family(stack) == "'NotoSansJP', 'Arial', sans-serif"
        assert css_font_family(stack, use_faces=True) == "'NotoSansJP-c1', 'Arial', sans-serif"
