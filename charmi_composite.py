#!/usr/bin/env python3
"""
🎨 CHARMI - Compositing Module
==============================
Copyright (c) 2025 PNGN-Tec LLC

Layering one image onto another, cell by cell:

    source cell         effect on the destination
    -----------         -------------------------
    Empty               nothing
    Glyph               character replaced, fg/bg replaced only where set
    Effect              fg/bg applied, character kept (not on obscured cells)
    Obscured            nothing (the glyph to its left handles it)

Wide characters stay consistent on both sides: a wide source glyph marks
its continuation columns obscured, and a destination wide character that
gets partly overwritten leaves fill characters (blanks unless another
fill_char is given) in its old colors. Cells that fall
outside the destination are dropped.
"""

from typing import Tuple

from charmi_cell import OBSCURED, CharmiCell, broken_fill
from charmi_grid import CellBuffer, CellGrid, CharacterMapImage, FlexibleImage


def _break_wide(dest: CellBuffer, row: int, col: int, fill_char: str):
    """Turn the wide character covering (row, col), if any, into fill_char cells"""
    cell = dest.cell_at(row, col)
    if cell.obscured:
        lead_col = col - 1
        while lead_col >= 0 and dest.cell_at(row, lead_col).obscured:
            lead_col -= 1
        if lead_col < 0:
            return
        col = lead_col
        cell = dest.cell_at(row, col)
    if not cell.is_wide:
        return
    blank = broken_fill(cell, fill_char)
    for span_col in range(col, min(col + cell.width, dest.width)):
        dest.set_cell(row, span_col, blank)


def _place_glyph(dest: CellBuffer, row: int, col: int, cell: CharmiCell, fill_char: str):
    end = col + cell.width
    for covered in range(col, min(end, dest.width)):
        _break_wide(dest, row, covered, fill_char)

    under = dest.cell_at(row, col)
    fg = cell.fg if cell.fg is not None else under.fg
    bg = cell.bg if cell.bg is not None else under.bg
    if end > dest.width:
        # No room for the right half at the edge
        dest.set_cell(row, col, broken_fill(CharmiCell(fg=fg, bg=bg), fill_char))
        return
    dest.set_cell(row, col, CharmiCell(cell.character, fg, bg))
    for covered in range(col + 1, end):
        dest.set_cell(row, covered, OBSCURED)


def composite(dest: CellBuffer, src: CellGrid, offset: Tuple[int, int] = (0, 0),
              fill_char: str = ' '):
    """
    Layer src onto dest in place.

    Args:
        dest: Mutable destination (width, height, cell_at, set_cell)
        src: Image or buffer to draw
        offset: (x, y) of the source's top-left cell in the destination;
            may be negative
        fill_char: Stands in for wide characters cut in half, in their
            old colors
    """
    x_offset, y_offset = offset
    for src_row in range(src.height):
        row = src_row + y_offset
        if not 0 <= row < dest.height:
            continue
        for src_col in range(src.width):
            col = src_col + x_offset
            if not 0 <= col < dest.width:
                continue
            cell = src.cell_at(src_row, src_col)
            if cell.is_empty or cell.obscured:
                continue
            if cell.character is not None:
                _place_glyph(dest, row, col, cell, fill_char)
                continue
            under = dest.cell_at(row, col)
            if not under.obscured:
                dest.set_cell(row, col, under.with_colors(cell.fg, cell.bg))


def overlay(base: CharacterMapImage, src: CellGrid, offset: Tuple[int, int] = (0, 0),
            fill_char: str = ' ') -> CharacterMapImage:
    """New image of base's size with src drawn over it; base is unchanged"""
    buffer = CellBuffer.from_image(base)
    composite(buffer, src, offset, fill_char)
    image = buffer.to_image()
    if isinstance(base, FlexibleImage):
        return image.to_flexible()
    return image
