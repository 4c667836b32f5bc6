"""Tests for tagged colour parsing and formatting."""

import pytest

from engine.errors import InputError
from scene.colors import (
    HexColor,
    HslColor,
    RgbaColor,
    format_color,
    parse_color,
    shift_color,
    to_rgba,
)

pytestmark = pytest.mark.smoke


@pytest.mark.parametrize(
    "text,expected",
    [
        ("#ABC", HexColor("#aabbcc")),
        ("#00b4d8", HexColor("#00b4d8")),
        ("  #FFFFFF ", HexColor("#ffffff")),
        ("hsl(200, 50%, 40%)", HslColor(200.0, 50.0, 40.0)),
        ("hsl(390, 10%, 90.5%)", HslColor(30.0, 10.0, 90.5)),
        ("rgb(1, 2, 3)", RgbaColor(1, 2, 3, 1.0)),
        ("rgba(255, 0, 10, 0.25)", RgbaColor(255, 0, 10, 0.25)),
    ],
)
def test_parse(text, expected):
    assert parse_color(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "red", "#12", "#1234567", "hsl(10, 120%, 50%)", "rgb(300, 0, 0)", "rgba(0, 0, 0, 2)", None],
)
def test_parse_rejects(text):
    with pytest.raises(InputError):
        parse_color(text)


@pytest.mark.parametrize(
    "color,text",
    [
        (HexColor("#0a0b0c"), "#0a0b0c"),
        (HslColor(0.0, 0.0, 0.0), "hsl(0, 0%, 0%)"),
        (HslColor(210.5, 40.0, 12.25), "hsl(210.5, 40%, 12.25%)"),
        (RgbaColor(4, 5, 6, 0.5), "rgba(4, 5, 6, 0.5)"),
    ],
)
def test_format(color, text):
    assert format_color(color) == text
    assert parse_color(text) == color


def test_format_rejects_plain_strings():
    with pytest.raises(InputError):
        format_color("#ffffff")


def test_to_rgba():
    assert to_rgba(HexColor("#ff8000")) == (255, 128, 0, 1.0)
    assert to_rgba(HslColor(0.0, 100.0, 50.0)) == (255, 0, 0, 1.0)
    assert to_rgba(RgbaColor(1, 2, 3, 0.4)) == (1, 2, 3, 0.4)


def test_shift_color():
    assert shift_color(HexColor("#808080"), 0.5) == HexColor("#c0c0c0")
    assert shift_color(HexColor("#808080"), -1.0) == HexColor("#000000")
    assert shift_color(RgbaColor(200, 10, 0), 1.0) == HexColor("#ff1400")
