"""
Font Naming Utilities
=====================

Helpers for comparing font names and file names, and for formatting values
into CSS text.
"""

import math
import re

# Style suffixes stripped before comparing family names
STYLE_SUFFIXES = tuple(
    f"{sep}{style}"
    for style in (
        "regular",
        "bold",
        "italic",
        "medium",
        "light",
        "thin",
        "black",
        "semibold",
        "extrabold",
        "extralight",
    )
    for sep in ("-", " ", "_")
)

FONT_FORMATS = {
    ".ttf": "truetype",
    ".otf": "opentype",
    ".woff": "woff",
    ".woff2": "woff2",
}


def strip_extension(name: str) -> str:
    """Remove a trailing file extension, keeping dot-files intact."""
    last_dot = name.rfind(".")
    if last_dot > 0:
        return name[:last_dot]
    return name


def normalize_font_name(name: str | None) -> str:
    """
    Normalize a font or file name for identity comparisons.

    Lowercases, drops the extension and any trailing style suffixes, and folds
    dashes and underscores into spaces, so ``"Roboto-Regular.ttf"`` and
    ``"roboto"`` compare equal.
    """
    if not name:
        return ""

    normalized = strip_extension(name.strip().lower())

    changed = True
    while changed:
        changed = False
        for suffix in STYLE_SUFFIXES:
            if normalized.endswith(suffix) and len(normalized) > len(suffix):
                normalized = normalized[: -len(suffix)]
                changed = True

    normalized = re.sub(r"[-_]", " ", normalized)
    return re.sub(r"\s+", " ", normalized).strip()


def file_identity(file_name: str) -> str:
    """Case- and extension-insensitive identity key for a font file name."""
    return strip_extension(file_name.strip()).lower()


def family_from_file_name(file_name: str) -> str:
    """CSS family name derived from an uploaded file name."""
    return strip_extension(file_name)


def font_format(file_name: str) -> str:
    """CSS ``format()`` hint for a font file, defaulting to truetype."""
    suffix = file_name[file_name.rfind(".") :].lower() if "." in file_name else ""
    return FONT_FORMATS.get(suffix, "truetype")


def quote_family(family: str) -> str:
    """Quote a family name for use in ``font-family`` (generic keywords stay bare)."""
    if family in ("serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui"):
        return family
    # Already a stack string such as '"Noto Sans", sans-serif'
    if "," in family or family.startswith(("'", '"')):
        return family
    escaped = family.replace("'", "\\'")
    return f"'{escaped}'"


def round_half_up(value: float) -> int:
    """Round like ``Math.round``: halves always go up."""
    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    """Format a number for CSS output without trailing zeros."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")
