"""Tests for session-level operations."""

import pytest
from pydantic import ValidationError

from src.typestack.core.config import TypographySettings
from src.typestack.core.exceptions import UnknownHeaderTagError
from src.typestack.core.models import ReasonCode
from src.typestack.core.session import Session


class TestConstruction:
    def test_from_settings(self):
        settings = TypographySettings(base_font_size=48, global_fallback_scale=110, line_height=1.4)

        session = Session.from_settings(settings)

        assert session.base_font_size == 48
        assert session.overrides.global_fallback_scale == 110
        assert session.header_styles["h3"].line_height == 1.4
        assert len(session.registry) == 0

    def test_default_primary_language(self):
        session = Session()

        assert session.effective_primary_languages == ["en-US"]
        assert session.is_primary_language("en-US")
        assert not session.is_primary_language("ja-JP")


class TestLanguages:
    """Test configuring languages."""

    def test_add_language_once(self, session):
        assert session.add_language("ko-KR")
        assert not session.add_language("ko-KR")
        assert session.configured_languages.count("ko-KR") == 1

    def test_unknown_language_still_added(self, session):
        assert session.add_language("tlh")
        assert "tlh" in session.configured_languages

    def test_remove_language_clears_overrides(self, session):
        session.overrides.set_fallback_override("ja-JP", "jp")
        session.overrides.set_line_height_override("ja-JP", 1.5)

        assert session.remove_language("ja-JP")
        assert "ja-JP" not in session.overrides.fallback_font_overrides
        assert "ja-JP" not in session.overrides.line_height_overrides
        assert not session.remove_language("ja-JP")

    def test_remove_primary_language(self, session):
        session.remove_language("de-DE")

        assert session.primary_languages == ["en-US"]

    def test_set_primary_languages(self, session):
        session.set_primary_languages(["fr-FR", "fr-FR", "en-US"])

        assert session.primary_languages == ["fr-FR", "en-US"]
        assert "fr-FR" in session.configured_languages

    def test_catalog_order(self, session):
        assert session.configured_in_catalog_order() == ["en-US", "de-DE", "ja-JP", "ar"]


class TestHeaderStyles:
    def test_partial_update(self, session):
        style = session.set_header_style("h2", scale=0.75)

        assert style.scale == 0.75
        assert style.line_height == 1.2
        assert session.header_styles["h2"] is style

    def test_unknown_tag(self, session):
        with pytest.raises(UnknownHeaderTagError):
            session.set_header_style("h7", scale=1.0)

    def test_invalid_value(self, session):
        with pytest.raises(ValidationError):
            session.set_header_style("h1", scale=-1)


class TestFontOperations:
    """Test font mutations that touch both registry and overrides."""

    def test_add_uploaded_fonts_to_empty_session(self, make_uploaded):
        session = Session()

        result = session.add_uploaded_fonts(
            [make_uploaded("Inter.ttf", id="p"), make_uploaded("Noto.ttf", id="n"), make_uploaded("inter.otf")]
        )

        assert result.ok
        assert result.added == 2
        assert result.duplicates == 1
        assert [font.id for font in session.registry] == ["p", "n"]

    def test_remove_font_forgets_overrides(self, session):
        session.assign_font_to_language("ja-JP", "jp")
        session.overrides.set_font_scale("jp", 90)

        result = session.remove_font("jp")

        assert result.ok
        assert session.overrides.fallback_font_overrides == {}
        assert session.overrides.font_scales == {}

    def test_remove_last_font_refused(self, make_uploaded):
        session = Session()
        session.add_uploaded_fonts([make_uploaded("Inter.ttf", id="p")])

        assert session.remove_font("p").reason == ReasonCode.CANNOT_REMOVE_LAST_FONT

    def test_assign_non_primary_language(self, session):
        clone_id = session.assign_font_to_language("ko-KR", "jp").font_ids[0]

        assert session.overrides.fallback_font_overrides["ko-KR"] == clone_id
        assert session.registry.get(clone_id).is_language_specific
        assert "ko-KR" in session.configured_languages

    def test_assign_primary_language(self, session):
        clone_id = session.assign_font_to_language("de-DE", "arabic").font_ids[0]

        assert session.overrides.primary_font_overrides["de-DE"] == clone_id
        assert session.registry.get(clone_id).is_primary_override

    def test_assign_unknown_font(self, session):
        assert session.assign_font_to_language("ko-KR", "nope").reason == ReasonCode.FONT_NOT_FOUND

    def test_unassign_drops_unused_clone(self, session):
        clone_id = session.assign_font_to_language("ko-KR", "jp").font_ids[0]
        session.overrides.set_font_scale(clone_id, 80)

        result = session.unassign_language("ko-KR")

        assert result.font_ids == [clone_id]
        assert clone_id not in session.registry
        assert session.overrides.scale_for(clone_id) is None
        assert "jp" in session.registry

    def test_unassign_keeps_shared_clone(self, session):
        clone_id = session.assign_font_to_language("ko-KR", "jp").font_ids[0]
        session.overrides.set_fallback_override("zh-Hans", clone_id)

        result = session.unassign_language("ko-KR")

        assert result.font_ids == []
        assert clone_id in session.registry
