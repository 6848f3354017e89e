"""Font weight helpers: which weights a font offers and how requests snap to them."""

from dataclasses import dataclass

from src.typestack.core.models import Font

DEFAULT_WEIGHT = 400


@dataclass(frozen=True)
class WeightOption:
    label: str
    value: int


COMMON_WEIGHT_DEFS: tuple[WeightOption, ...] = (
    WeightOption("Thin 100", 100),
    WeightOption("Extra Light 200", 200),
    WeightOption("Light 300", 300),
    WeightOption("Regular 400", 400),
    WeightOption("Medium 500", 500),
    WeightOption("Semi Bold 600", 600),
    WeightOption("Bold 700", 700),
    WeightOption("Extra Bold 800", 800),
    WeightOption("Black 900", 900),
)


def is_weight_available(font: Font | None, weight: float) -> bool:
    """Whether ``font`` can render ``weight``. Fonts without glyph data accept anything."""
    if font is None:
        return False
    if not font.is_loaded:
        return True
    axis = font.weight_axis
    if axis is not None:
        return axis.min <= weight <= axis.max
    if font.static_weight is not None:
        return weight == font.static_weight
    return True


def build_weight_options(font: Font | None) -> list[WeightOption]:
    """
    List the selectable weights for a font.

    A variable font whose axis covers none of the common weights offers its
    default weight; a static font whose weight is not a common one offers
    exactly that weight.
    """
    common = [option for option in COMMON_WEIGHT_DEFS if is_weight_available(font, option.value)]
    if font is None or not font.is_loaded:
        return common

    axis = font.weight_axis
    if axis is not None:
        if not common:
            value = round(axis.default)
            return [WeightOption(f"Default {value}", value)]
        return common

    static = font.static_weight
    if static is not None and not any(option.value == static for option in common):
        return [WeightOption(f"Weight {static}", static)]
    return common


def resolve_weight_to_available_option(font: Font | None, requested: float | None) -> float:
    """Snap ``requested`` to the nearest selectable weight (first option wins ties)."""
    fallback = requested if requested is not None else DEFAULT_WEIGHT
    options = build_weight_options(font)
    if not options:
        return fallback
    if any(option.value == requested for option in options):
        return requested

    best = options[0].value
    for option in options[1:]:
        if abs(option.value - fallback) < abs(best - fallback):
            best = option.value
    return best


def resolve_weight_for_font(font: Font | None, requested: float | None) -> float:
    """
    Effective weight of ``font`` for a requested weight.

    Variable fonts clamp the request into their axis range, static fonts
    always render their own weight, and everything else passes the request
    through (400 when nothing was requested).
    """
    weight = requested if requested is not None else DEFAULT_WEIGHT
    if font is None or not font.is_loaded:
        return weight

    axis = font.weight_axis
    if axis is not None:
        return round(max(axis.min, min(axis.max, weight)))
    if font.static_weight is not None:
        return font.static_weight
    return weight
