"""
Pytest configuration and fixtures for font-stack tests.
"""

from io import BytesIO

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from src.typestack.core.models import Font, FontMetadata, WeightAxis
from src.typestack.core.session import Session
from src.typestack.fonts.catalog import LanguageCatalog
from src.typestack.fonts.overrides import OverrideStore
from src.typestack.fonts.registry import FontRegistry


def _rect(x0, y0, x1, y1):
    pen = TTGlyphPen(None)
    pen.moveTo((x0, y0))
    pen.lineTo((x1, y0))
    pen.lineTo((x1, y1))
    pen.lineTo((x0, y1))
    pen.closePath()
    return pen.glyph()


def build_font_bytes(weight=400, axis=None, family="Test Sans"):
    """Build a tiny four-glyph TrueType font; ``axis`` is ``(min, default, max)`` for wght."""
    fb = FontBuilder(1000, isTTF=True)
    glyph_order = [".notdef", "space", "A", "H"]
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({ord(" "): "space", ord("A"): "A", ord("H"): "H"})
    fb.setupGlyf(
        {
            ".notdef": _rect(100, 0, 900, 800),
            "space": TTGlyphPen(None).glyph(),
            "A": _rect(160, 0, 840, 820),
            "H": _rect(120, 0, 880, 820),
        }
    )
    fb.setupHorizontalMetrics({".notdef": (1000, 0), "space": (500, 0), "A": (1000, 0), "H": (1000, 0)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200, usWeightClass=weight)
    fb.setupPost()
    fb.setupMaxp()
    fb.setupHead()
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    if axis is not None:
        minimum, default, maximum = axis
        fb.setupFvar(axes=[("wght", minimum, default, maximum, "Weight")], instances=[])

    buffer = BytesIO()
    fb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def font_bytes():
    """Factory for in-memory font binaries."""
    return build_font_bytes


@pytest.fixture
def metadata():
    """Glyph metadata of a static regular font."""
    return FontMetadata(glyph_count=120, static_weight=400)


@pytest.fixture
def variable_metadata():
    """Glyph metadata of a variable font with a 100-900 weight axis."""
    return FontMetadata(glyph_count=300, weight_axis=WeightAxis(min=100, max=900, default=400))


@pytest.fixture
def make_uploaded(metadata):
    """Factory for loaded uploaded fonts."""

    def _make(file_name, **kwargs):
        kwargs.setdefault("metadata", metadata)
        return Font.uploaded(file_name, **kwargs)

    return _make


@pytest.fixture
def catalog():
    """Bundled language catalog."""
    return LanguageCatalog.default()


@pytest.fixture
def registry(make_uploaded):
    """Registry: Inter (primary), Noto Sans JP, Noto Sans Arabic, Arial (system)."""
    return FontRegistry(
        [
            make_uploaded("Inter-Regular.ttf", id="inter"),
            make_uploaded("NotoSansJP.otf", id="jp"),
            make_uploaded("NotoSansArabic.ttf", id="arabic"),
            Font.system("Arial", id="arial"),
        ]
    )


@pytest.fixture
def overrides():
    """Empty override store."""
    return OverrideStore()


@pytest.fixture
def session(registry, overrides, catalog):
    """Session over the sample registry with a few configured languages."""
    return Session(
        registry=registry,
        overrides=overrides,
        catalog=catalog,
        configured_languages=["en-US", "ja-JP", "ar", "de-DE"],
        primary_languages=["en-US", "de-DE"],
    )
