#!/usr/bin/env python3
"""
🎨 CHARMI - Grid Module
=======================
Copyright (c) 2025 PNGN-Tec LLC

Character Map Images
====================
Two immutable storage strategies over CharmiCell that share one access
pattern (width, height, cell_at):

- FixedImage     dense row-major tuple, every row exactly `width` cells
- FlexibleImage  tuple of rows of any length, nothing padded

Positions outside the stored extent read as the Empty cell for both, so
the compositor and renderers never care which layout they were given.

CellBuffer is the mutable counterpart used as a compositing target.

Module Interface
================
- CellGrid: the shared read capability (width, height, cell_at, rows)
- CharacterMapImage: immutable image base class (clip, fit_to_size,
  apply_effect, wrap)
- FixedImage.new() / FixedImage.from_rows()
- FlexibleImage.from_rows()
- CellBuffer.from_image() / CellBuffer.to_image()
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from charmi_cell import BLANK, EMPTY, CharmiCell, broken_fill
from charmi_color import ColorValue
from charmi_errors import InvalidDimensions

Row = Tuple[CharmiCell, ...]


# ============================================================================
# SHARED GRID CAPABILITY
# ============================================================================

class CellGrid:
    """
    Read access shared by images and buffers.

    Subclasses provide width, height and cell_at(); everything else is
    derived from those three.
    """

    @property
    def width(self) -> int:
        raise NotImplementedError

    @property
    def height(self) -> int:
        raise NotImplementedError

    def cell_at(self, row: int, col: int) -> CharmiCell:
        raise NotImplementedError

    def row(self, index: int) -> Row:
        """Cells of one row, padded to the nominal width"""
        return tuple(self.cell_at(index, col) for col in range(self.width))

    def row_length(self, index: int) -> int:
        """Number of stored cells in a row (0 outside the grid)"""
        return self.width if 0 <= index < self.height else 0

    def stored_row(self, index: int) -> Row:
        """Cells of one row as stored, without padding"""
        return tuple(self.cell_at(index, col) for col in range(self.row_length(index)))

    def rows(self) -> Iterator[Row]:
        for index in range(self.height):
            yield self.row(index)

    def __iter__(self) -> Iterator[Row]:
        return self.rows()

    def cells_equal(self, other: 'CellGrid') -> bool:
        """Compare cell-for-cell over the union of both extents"""
        height = max(self.height, other.height)
        width = max(self.width, other.width)
        for row in range(height):
            for col in range(width):
                if self.cell_at(row, col) != other.cell_at(row, col):
                    return False
        return True

    def debug_string(self) -> str:
        """Plain text of the grid, transparent cells shown as spaces"""
        lines = []
        for row in self.rows():
            chars = []
            for cell in row:
                if cell.obscured:
                    continue
                chars.append(cell.character if cell.character is not None else ' ')
            lines.append(''.join(chars).rstrip())
        return '\n'.join(lines)


def _repair_row(cells: List[CharmiCell], left_neighbor: Optional[CharmiCell],
                fill_char: str) -> List[CharmiCell]:
    """
    Replace halves of wide characters cut off at either end of a slice
    with fill_char in the original colors.
    """
    if cells and cells[0].obscured and left_neighbor is not None and left_neighbor.is_wide:
        cells[0] = broken_fill(left_neighbor, fill_char)
    if cells and cells[-1].is_wide:
        cells[-1] = broken_fill(cells[-1], fill_char)
    return cells


def _units(cells: Sequence[CharmiCell]) -> List[List[CharmiCell]]:
    """Group each cell with the obscured cells that continue it"""
    units: List[List[CharmiCell]] = []
    for cell in cells:
        if cell.obscured and units and units[-1][0].is_wide:
            units[-1].append(cell)
        elif cell.obscured:
            units.append([EMPTY])
        else:
            units.append([cell])
    return units


def _is_word(unit: List[CharmiCell]) -> bool:
    character = unit[0].character
    return character is not None and not character.isspace()


def _wrap_row(cells: Sequence[CharmiCell], width: int) -> List[List[CharmiCell]]:
    # Words are lists of units, everything else is a single unit
    tokens: List[List[List[CharmiCell]]] = []
    for unit in _units(cells):
        if _is_word(unit) and tokens and _is_word(tokens[-1][-1]):
            tokens[-1].append(unit)
        else:
            tokens.append([unit])

    rows: List[List[CharmiCell]] = []
    row: List[CharmiCell] = []
    for token in tokens:
        size = sum(len(unit) for unit in token)
        if len(row) + size <= width:
            for unit in token:
                row.extend(unit)
            continue

        if not _is_word(token[0]):
            if row:
                rows.append(row)
            unit = token[0]
            if unit[0].character is not None and unit[0].character.isspace():
                row = []
            elif len(unit) > width:
                row = [broken_fill(unit[0])]
            else:
                row = list(unit)
            continue

        if size <= width:
            rows.append(row)
            row = [cell for unit in token for cell in unit]
            continue

        hyphen = width > 2
        limit = width - 1 if hyphen else width
        previous = None
        for unit in token:
            if row and len(row) + len(unit) > limit:
                if hyphen and previous is not None:
                    row.append(CharmiCell('-', previous[0].fg, previous[0].bg))
                rows.append(row)
                row = []
            row.extend(unit if len(unit) <= width else [broken_fill(unit[0])])
            previous = unit

    if row or not rows:
        rows.append(row)
    return rows


# ============================================================================
# IMMUTABLE IMAGES
# ============================================================================

class CharacterMapImage(CellGrid):
    """
    Immutable 2-D arrangement of cells.

    Created by the decoder or programmatically and never mutated; callers
    that need a different picture build a new image (or composite into a
    CellBuffer).
    """

    def __eq__(self, other):
        if not isinstance(other, CharacterMapImage):
            return NotImplemented
        return self.cells_equal(other)

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}(width={self.width}, height={self.height})"

    def clip(self, x: int, y: int, width: int, height: int,
             fill_char: str = ' ') -> 'FlexibleImage':
        """
        Cut a rectangle out of the image.

        Wide characters split by the clip edges become fill_char in the
        original colors so the result never starts or ends mid-character.
        """
        if width < 0 or height < 0:
            raise InvalidDimensions(f"Clip size must not be negative, got {width}x{height}")
        rows = []
        for row in range(y, y + height):
            cells = [self.cell_at(row, col) for col in range(x, x + width)]
            left = self.cell_at(row, x - 1) if x > 0 else None
            rows.append(_repair_row(cells, left, fill_char))
        return FlexibleImage.from_rows(rows)

    def apply_effect(self, fg: Optional[ColorValue] = None,
                     bg: Optional[ColorValue] = None) -> 'CharacterMapImage':
        """
        Tint every stored cell, keeping the layout.

        Glyphs and Effects get fg/bg where given; Empty cells become
        Effects. Obscured cells are left alone.
        """
        rows = []
        for index in range(self.height):
            rows.append([cell if cell.obscured else cell.with_colors(fg, bg)
                         for cell in self.stored_row(index)])
        if isinstance(self, FixedImage):
            return FixedImage.from_rows(rows, width=self.width, height=self.height,
                                        allow_empty=True)
        return FlexibleImage.from_rows(rows)

    def wrap(self, width: int) -> 'FlexibleImage':
        """
        Re-flow every row into rows at most `width` columns wide.

        Words (runs of non-whitespace glyphs) move to the next row whole
        when they fit there; longer words are split, with a hyphen when
        width > 2. A whitespace glyph that causes a break is dropped.
        """
        if width <= 0:
            raise InvalidDimensions(f"Wrap width must be positive, got {width}")
        rows = []
        for index in range(self.height):
            rows.extend(_wrap_row(self.stored_row(index), width))
        return FlexibleImage.from_rows(rows)

    def fit_to_size(self, width: int, height: int, fill: Optional[CharmiCell] = None) -> 'FixedImage':
        """
        Clip or pad the image to exactly width x height.

        Args:
            width: Target width
            height: Target height
            fill: Cell used for padding (Empty when None)
        """
        fill = fill if fill is not None else EMPTY
        clipped = self.clip(0, 0, width, height)
        rows = []
        for index in range(height):
            keep = min(self.row_length(index), width)
            cells = [clipped.cell_at(index, col) for col in range(keep)]
            rows.append(cells + [fill] * (width - keep))
        return FixedImage.from_rows(rows, width=width, height=height, allow_empty=True)

    def to_fixed(self) -> 'FixedImage':
        return FixedImage.from_rows(list(self.rows()), width=self.width,
                                    height=self.height, allow_empty=True)

    def to_flexible(self, trim: bool = True) -> 'FlexibleImage':
        """Ragged copy; with trim, trailing Empty cells are dropped per row"""
        rows = []
        for row in self.rows():
            cells = list(row)
            if trim:
                while cells and cells[-1].is_empty:
                    cells.pop()
            rows.append(cells)
        return FlexibleImage.from_rows(rows)


class FixedImage(CharacterMapImage):
    """Dense image: width x height cells stored row-major"""

    def __init__(self, width: int, height: int, cells: Sequence[CharmiCell]):
        if width < 0 or height < 0:
            raise InvalidDimensions(f"Dimensions must not be negative, got {width}x{height}")
        if len(cells) != width * height:
            raise InvalidDimensions(
                f"Expected {width * height} cells for {width}x{height}, got {len(cells)}")
        self._width = width
        self._height = height
        self._grid: Tuple[CharmiCell, ...] = tuple(cells)

    @classmethod
    def new(cls, width: int, height: int, fill: CharmiCell = EMPTY,
            allow_empty: bool = False) -> 'FixedImage':
        """
        Allocate width x height copies of fill.

        Raises:
            InvalidDimensions: width or height is 0 (unless allow_empty) or negative
        """
        _check_size(width, height, allow_empty)
        return cls(width, height, [fill] * (width * height))

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[CharmiCell]], width: Optional[int] = None,
                  height: Optional[int] = None, allow_empty: bool = True) -> 'FixedImage':
        """
        Build a fixed image from rows, padding with Empty cells.

        Args:
            rows: Rows of cells, possibly ragged
            width: Declared width (longest row when None)
            height: Declared height (row count when None)
            allow_empty: Accept a zero width or height

        Raises:
            InvalidDimensions: A row is longer than width, there are more
                rows than height, or the size is zero and not allowed
        """
        rows = [list(row) for row in rows]
        content_width = max((len(row) for row in rows), default=0)
        if width is None:
            width = content_width
        if height is None:
            height = len(rows)
        _check_size(width, height, allow_empty)
        if content_width > width:
            raise InvalidDimensions(f"Row of {content_width} cells exceeds width {width}")
        if len(rows) > height:
            raise InvalidDimensions(f"{len(rows)} rows exceed height {height}")

        cells = []
        for index in range(height):
            row = rows[index] if index < len(rows) else []
            cells.extend(row)
            cells.extend([EMPTY] * (width - len(row)))
        return cls(width, height, cells)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def cell_at(self, row: int, col: int) -> CharmiCell:
        if 0 <= row < self._height and 0 <= col < self._width:
            return self._grid[row * self._width + col]
        return EMPTY

    def row(self, index: int) -> Row:
        if 0 <= index < self._height:
            start = index * self._width
            return self._grid[start:start + self._width]
        return (EMPTY,) * self._width


class FlexibleImage(CharacterMapImage):
    """Ragged image: each row keeps exactly the cells it was given"""

    def __init__(self, rows: Iterable[Iterable[CharmiCell]] = ()):
        self._rows: Tuple[Row, ...] = tuple(tuple(row) for row in rows)
        self._width = max((len(row) for row in self._rows), default=0)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[CharmiCell]]) -> 'FlexibleImage':
        return cls(rows)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return len(self._rows)

    def cell_at(self, row: int, col: int) -> CharmiCell:
        if 0 <= row < len(self._rows):
            stored = self._rows[row]
            if 0 <= col < len(stored):
                return stored[col]
        return EMPTY

    def stored_row(self, index: int) -> Row:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return ()

    def row_length(self, index: int) -> int:
        return len(self.stored_row(index))


def _check_size(width: int, height: int, allow_empty: bool):
    if width < 0 or height < 0:
        raise InvalidDimensions(f"Dimensions must not be negative, got {width}x{height}")
    if not allow_empty and (width == 0 or height == 0):
        raise InvalidDimensions(f"Dimensions must be positive, got {width}x{height}")


# ============================================================================
# MUTABLE BUFFER
# ============================================================================

class CellBuffer(CellGrid):
    """
    Mutable fixed-size grid owned by one caller at a time.

    Used as the destination of composite(); turn it back into an
    immutable image with to_image() once layering is done.
    """

    def __init__(self, width: int, height: int, fill: CharmiCell = EMPTY):
        _check_size(width, height, allow_empty=True)
        self._width = width
        self._height = height
        self._rows: List[List[CharmiCell]] = [[fill] * width for _ in range(height)]

    @classmethod
    def blank(cls, width: int, height: int) -> 'CellBuffer':
        return cls(width, height, BLANK)

    @classmethod
    def empty(cls, width: int, height: int) -> 'CellBuffer':
        return cls(width, height, EMPTY)

    @classmethod
    def from_image(cls, image: CellGrid, width: Optional[int] = None,
                   height: Optional[int] = None) -> 'CellBuffer':
        """Copy an image into a new buffer, optionally resized"""
        width = image.width if width is None else width
        height = image.height if height is None else height
        buffer = cls(width, height)
        for row in range(height):
            for col in range(width):
                buffer._rows[row][col] = image.cell_at(row, col)
        return buffer

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def cell_at(self, row: int, col: int) -> CharmiCell:
        if 0 <= row < self._height and 0 <= col < self._width:
            return self._rows[row][col]
        return EMPTY

    def row(self, index: int) -> Row:
        if 0 <= index < self._height:
            return tuple(self._rows[index])
        return (EMPTY,) * self._width

    def set_cell(self, row: int, col: int, cell: CharmiCell):
        if not (0 <= row < self._height and 0 <= col < self._width):
            raise IndexError(f"Cell ({row}, {col}) outside {self._width}x{self._height} buffer")
        self._rows[row][col] = cell

    def fill(self, cell: CharmiCell = EMPTY):
        for row in self._rows:
            row[:] = [cell] * self._width

    def to_image(self) -> FixedImage:
        return FixedImage.from_rows(self._rows, width=self._width, height=self._height,
                                    allow_empty=True)
