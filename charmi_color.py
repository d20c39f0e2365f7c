#!/usr/bin/env python3
"""
🎨 CHARMI - Color Module
========================
Copyright (c) 2025 PNGN-Tec LLC

Color Values and Palettes
=========================
A color in CHARMI is either an ANSI palette index or an RGB triple:

    ColorValue = Ansi(index) | Rgb(r, g, b)

Palettes are authored as TOML tables whose values carry no type tag, so
the variant is picked from the *shape* of the raw value:

    x = 1                 -> Ansi(1)
    y = [10, 20, 30]      -> Rgb(10, 20, 30)
    z = "dark magenta"    -> Ansi(5)

Anything else (floats, booleans, out-of-range numbers, two- or
four-element lists, unknown names) is rejected with
InvalidColorDefinition. Values are never clamped.

Conversion helpers map colors to RGB (for pixel previews) and downgrade
them for terminals with 256 or 16 colors.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Union

from charmi_config import ANSI_16_COLORS, ANSI_CUBE_LEVELS, RGBColor
from charmi_errors import InvalidColorDefinition, UnknownColorName


def _is_byte(value) -> bool:
    # bool is an int subclass; TOML true/false must not pass as 1/0
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


# ============================================================================
# COLOR VALUES
# ============================================================================

@dataclass(frozen=True)
class Ansi:
    """Index into the terminal's 256-color palette"""
    index: int

    def __post_init__(self):
        if not _is_byte(self.index):
            raise InvalidColorDefinition(self.index, "ANSI index must be an integer in 0-255")


@dataclass(frozen=True)
class Rgb:
    """24-bit color"""
    r: int
    g: int
    b: int

    def __post_init__(self):
        if not all(_is_byte(c) for c in (self.r, self.g, self.b)):
            raise InvalidColorDefinition((self.r, self.g, self.b),
                                         "RGB components must be integers in 0-255")

    def as_tuple(self) -> RGBColor:
        return (self.r, self.g, self.b)


ColorValue = Union[Ansi, Rgb]

# Palette used while decoding: mask character -> color
Palette = Dict[str, ColorValue]

# ============================================================================
# NAMED COLORS
# ============================================================================

NAMED_COLORS: Dict[str, int] = {
    'black': 0,
    'dark red': 1, 'darkred': 1, 'maroon': 1,
    'dark green': 2, 'darkgreen': 2,
    'dark yellow': 3, 'darkyellow': 3, 'olive': 3,
    'dark blue': 4, 'darkblue': 4, 'navy': 4,
    'dark magenta': 5, 'darkmagenta': 5, 'purple': 5,
    'dark cyan': 6, 'darkcyan': 6, 'teal': 6,
    'grey': 7, 'gray': 7, 'silver': 7,
    'dark grey': 8, 'darkgrey': 8, 'dark gray': 8, 'darkgray': 8,
    'bright black': 8,
    'red': 9, 'bright red': 9,
    'green': 10, 'lime': 10, 'bright green': 10,
    'yellow': 11, 'bright yellow': 11,
    'blue': 12, 'bright blue': 12,
    'magenta': 13, 'fuchsia': 13, 'bright magenta': 13,
    'cyan': 14, 'aqua': 14, 'bright cyan': 14,
    'white': 15, 'bright white': 15,
}


def _normalize_name(name: str) -> str:
    return ' '.join(name.lower().replace('_', ' ').replace('-', ' ').split())


def named_color(name: str) -> ColorValue:
    """
    Look up one of the fixed color names.

    Raises:
        InvalidColorDefinition: The name is not recognized
    """
    index = NAMED_COLORS.get(_normalize_name(name))
    if index is None:
        raise InvalidColorDefinition(name, "unknown color name")
    return Ansi(index)


# ============================================================================
# STRUCTURAL DECODING
# ============================================================================

def color_from_definition(raw) -> ColorValue:
    """
    Decode a raw palette entry by its shape.

    Args:
        raw: An int, a 3-element list/tuple of ints, a color name, or an
            already decoded ColorValue

    Returns:
        Ansi for a single integer or a name, Rgb for a triple

    Raises:
        InvalidColorDefinition: For any other shape or an out-of-range value
    """
    if isinstance(raw, (Ansi, Rgb)):
        return raw
    if isinstance(raw, bool):
        raise InvalidColorDefinition(raw, "booleans are not colors")
    if isinstance(raw, int):
        return Ansi(raw)
    if isinstance(raw, str):
        return named_color(raw)
    if isinstance(raw, (list, tuple)):
        if len(raw) != 3:
            raise InvalidColorDefinition(raw, f"RGB needs 3 components, got {len(raw)}")
        return Rgb(*raw)
    raise InvalidColorDefinition(raw, f"unsupported type {type(raw).__name__}")


def build_palette(raw_colors: Mapping) -> Palette:
    """
    Decode a palette table.

    Args:
        raw_colors: Mapping of single-character keys to raw color entries

    Returns:
        Dictionary of key -> ColorValue
    """
    palette = {}
    for key, raw in raw_colors.items():
        if not isinstance(key, str) or len(key) != 1:
            raise InvalidColorDefinition(raw, f"palette key {key!r} must be a single character")
        palette[key] = color_from_definition(raw)
    return palette


def resolve(token: str, palette: Mapping[str, ColorValue]) -> ColorValue:
    """Look up token in palette, raising UnknownColorName if it is absent"""
    try:
        return palette[token]
    except KeyError:
        raise UnknownColorName(token) from None


def color_to_definition(color: ColorValue) -> Union[int, List[int]]:
    """Inverse of color_from_definition for the two concrete variants"""
    if isinstance(color, Ansi):
        return color.index
    return [color.r, color.g, color.b]


# ============================================================================
# RGB CONVERSION
# ============================================================================

def _ansi_to_rgb(index: int) -> RGBColor:
    if index < 16:
        return ANSI_16_COLORS[index]['rgb']
    if index < 232:
        cube = index - 16
        return (ANSI_CUBE_LEVELS[cube // 36],
                ANSI_CUBE_LEVELS[(cube // 6) % 6],
                ANSI_CUBE_LEVELS[cube % 6])
    level = 8 + (index - 232) * 10
    return (level, level, level)


def to_rgb(color: ColorValue) -> RGBColor:
    """Convert any color to an RGB tuple using the xterm palette"""
    if isinstance(color, Rgb):
        return color.as_tuple()
    return _ansi_to_rgb(color.index)


def _distance(a: RGBColor, b: RGBColor) -> int:
    return sum((x - y) ** 2 for x, y in zip(a, b))


def _nearest_level(value: int) -> int:
    return min(range(6), key=lambda i: abs(ANSI_CUBE_LEVELS[i] - value))


def to_ansi256(color: ColorValue) -> Ansi:
    """Map a color to the closest entry of the 256-color palette"""
    if isinstance(color, Ansi):
        return color

    rgb = color.as_tuple()
    r, g, b = (_nearest_level(c) for c in rgb)
    cube_index = 16 + 36 * r + 6 * g + b

    grey_step = min(23, max(0, round((sum(rgb) / 3 - 8) / 10)))
    grey_index = 232 + grey_step

    if _distance(rgb, _ansi_to_rgb(grey_index)) < _distance(rgb, _ansi_to_rgb(cube_index)):
        return Ansi(grey_index)
    return Ansi(cube_index)


def to_basic(color: ColorValue) -> Ansi:
    """Map a color to the closest of the 16 system colors"""
    if isinstance(color, Ansi) and color.index < 16:
        return color
    rgb = to_rgb(color)
    best = min(ANSI_16_COLORS, key=lambda i: _distance(rgb, ANSI_16_COLORS[i]['rgb']))
    return Ansi(best)
