"""Sentiment-driven scene palettes."""

from dataclasses import dataclass

from engine.errors import InputError
from scene.colors import HexColor, parse_color, to_rgba

SENTIMENTS = ("Positive", "Negative", "Neutral")

# sentiment -> (vivid, soft) for primary, secondary, accent; plus background
_TABLE = {
    "Positive": (("#00b4d8", "#8ecae6"), ("#06d6a0", "#95d5b2"), ("#ffdd00", "#ffd166"), "#023047"),
    "Negative": (("#9b2226", "#ae2012"), ("#bb3e03", "#ca6702"), ("#ee9b00", "#e9c46a"), "#001219"),
    "Neutral": (("#4895ef", "#4cc9f0"), ("#4361ee", "#4361ee"), ("#3f37c9", "#3a0ca3"), "#240046"),
}


@dataclass(frozen=True)
class Palette:
    primary: HexColor
    secondary: HexColor
    accent: HexColor
    background: HexColor


def _scale(hex_value: str, factor: float) -> HexColor:
    r, g, b, _ = to_rgba(parse_color(hex_value))
    scaled = [min(255, max(0, int(round(c * factor)))) for c in (r, g, b)]
    return HexColor("#{:02x}{:02x}{:02x}".format(*scaled))


def palette_for(sentiment: str, color_intensity: bool, sentiment_score: float = 0.0) -> Palette:
    """Scene colours for a sentiment label.

    With ``color_intensity`` the vivid variants are used and scaled by
    ``0.8 + |sentiment_score|·0.7``; the background is never scaled.
    """
    entry = _TABLE.get(str(sentiment).capitalize())
    if entry is None:
        raise InputError(f"unknown sentiment {sentiment!r}, expected one of {SENTIMENTS}")

    primary, secondary, accent, background = entry
    pick = 0 if color_intensity else 1
    factor = 0.8 + abs(float(sentiment_score)) * 0.7 if color_intensity else 1.0
    return Palette(
        primary=_scale(primary[pick], factor),
        secondary=_scale(secondary[pick], factor),
        accent=_scale(accent[pick], factor),
        background=HexColor(background),
    )
