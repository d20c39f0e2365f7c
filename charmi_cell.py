#!/usr/bin/env python3
"""
🎨 CHARMI - Cell Model
======================
Copyright (c) 2025 PNGN-Tec LLC

A CharmiCell is one terminal column of a character map image.

Cell States
===========
- Empty     character=None, no colors   fully transparent
- Effect    character=None, fg/bg set   tints what is underneath
- Glyph     character set               replaces the character underneath;
            colors replace only the channels that are set
- Obscured  obscured=True               continuation column of a wide
            character; rendered by the cell to its left, skipped everywhere

Blank (" " without colors) is an ordinary glyph cell: opaque whitespace.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from charmi_color import ColorValue
from charmi_errors import InvalidCharacterStream
from charmi_width import char_width


@dataclass(frozen=True)
class CharmiCell:
    """
    Single position of a character map image.

    Attributes:
        character: One character, or None for a transparent glyph
        fg: Foreground color override
        bg: Background color override
        obscured: Marks the right half of a wide character
        width: Terminal columns the character occupies (0 without one)
    """
    character: Optional[str] = None
    fg: Optional[ColorValue] = None
    bg: Optional[ColorValue] = None
    obscured: bool = False
    width: int = field(default=0, init=False, compare=False, repr=False)

    def __post_init__(self):
        if self.obscured and (self.character is not None or self.fg is not None
                              or self.bg is not None):
            raise ValueError("Obscured cells carry no character or colors")
        if self.character is None:
            return
        if not isinstance(self.character, str) or len(self.character) != 1:
            raise InvalidCharacterStream(f"Cell character must be one character, got {self.character!r}")
        width = char_width(self.character)
        if width <= 0:
            raise InvalidCharacterStream(
                f"Character U+{ord(self.character):04X} does not occupy a terminal column")
        object.__setattr__(self, 'width', width)

    @property
    def is_empty(self) -> bool:
        return (self.character is None and self.fg is None and self.bg is None
                and not self.obscured)

    @property
    def is_effect(self) -> bool:
        return self.character is None and not self.obscured and not self.is_empty

    @property
    def is_wide(self) -> bool:
        return self.width > 1

    def with_colors(self, fg: Optional[ColorValue] = None, bg: Optional[ColorValue] = None) -> 'CharmiCell':
        """Copy of this cell with fg/bg overridden where given"""
        return replace(self,
                       fg=fg if fg is not None else self.fg,
                       bg=bg if bg is not None else self.bg)

    @classmethod
    def glyph(cls, character: str, fg: Optional[ColorValue] = None,
              bg: Optional[ColorValue] = None) -> 'CharmiCell':
        return cls(character=character, fg=fg, bg=bg)

    @classmethod
    def effect(cls, fg: Optional[ColorValue] = None, bg: Optional[ColorValue] = None) -> 'CharmiCell':
        return cls(fg=fg, bg=bg)


EMPTY = CharmiCell()
BLANK = CharmiCell(character=' ')
OBSCURED = CharmiCell(obscured=True)


def cells_for_text(text: str, fg: Optional[ColorValue] = None,
                   bg: Optional[ColorValue] = None) -> list:
    """
    Lay a string out as cells, following every wide character with an
    obscured cell.
    """
    cells = []
    for character in text:
        cell = CharmiCell(character, fg, bg)
        cells.append(cell)
        cells.extend([OBSCURED] * (cell.width - 1))
    return cells


def broken_fill(cell: CharmiCell, fill_char: str = ' ') -> CharmiCell:
    """
    Stand-in for one column of a wide character that was cut in half,
    keeping the original colors.
    """
    if len(fill_char) != 1 or char_width(fill_char) != 1:
        raise ValueError(f"Fill character must be one column wide, got {fill_char!r}")
    return CharmiCell(fill_char, cell.fg, cell.bg)
