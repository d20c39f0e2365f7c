#!/usr/bin/env python3
"""
🎨 CHARMI - Definition Decoder
==============================
Copyright (c) 2025 PNGN-Tec LLC

Text Format
===========
Images are authored as TOML. The glyph layer holds the characters, and
up to two mask layers color them column by column through a palette:

```toml
text = "AB.C\\n"
fg   = "xy  \\n"
bg   = "  z \\n"

[values]
gap = "."                       # glyph that means "nothing here"
colors = { x = 1, y = [10, 20, 30], z = "dark blue" }
```

Rules
-----
- Glyph rows come from splitlines(). A wide character occupies two
  columns; its second column is stored as an obscured cell.
- A glyph equal to the gap character is transparent (Empty, or an
  Effect when a mask colors it).
- Every mask must have as many rows as the glyph layer, and each mask row
  as many columns as the glyph row is wide. Mask columns under the right
  half of a wide character are ignored.
- In a mask, the gap character and space mean "no color". Any other
  character must be a palette key.
- `width`/`height` request a FixedImage of that size; without them the
  result is a FlexibleImage.

Animations list frames under `f` (each an image definition plus
`timing` in seconds), actors map animation names to animations under `a`:

```toml
[values.colors]
r = "red"

[[a.idle.f]]
text = "o"
fg = "r"
timing = 0.5
```

`values` tables merge from the outside in: actor < animation < frame.

Decoding is all-or-nothing: any problem raises a DecodeError subclass and
no partial image is produced.

Module Interface
================
- decode_image() / decode_actor(): bytes or str -> image / actor
- parse_image_def() / parse_actor_def(): TOML -> definition objects
- image_from_def() / animation_from_def() / actor_from_def()
- image_to_def() / encode_image(), actor_to_def() / encode_actor()
"""

import logging
import string
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

import tomli_w

from charmi_animation import CharmieActor, CharmieAnimation
from charmi_cell import OBSCURED, CharmiCell
from charmi_color import ColorValue, Palette, build_palette, color_to_definition, resolve
from charmi_config import MASK_BLANK_CHAR, get_decoder_config
from charmi_errors import (
    InvalidCharacterStream,
    MalformedDefinition,
    MaskShapeMismatch,
    UnknownColorName,
)
from charmi_grid import CharacterMapImage, FixedImage, FlexibleImage
from charmi_width import char_width

logger = logging.getLogger('charmi.decode')

# Tried in order when encoding; the first one the image does not use wins
GAP_CANDIDATES = (" -_=~*+,./;!#$%&':?@^`|{}[]<>()"
                  + string.digits + string.ascii_uppercase + string.ascii_lowercase)

# Palette keys handed out to colors in order of first use
COLOR_KEY_CANDIDATES = (string.ascii_lowercase + string.ascii_uppercase
                        + "!#$%&'()*+,-./" + string.digits + ":;<=>?@[]^_`{|}~")

RawDefinition = Union[bytes, bytearray, str]


# ============================================================================
# DEFINITIONS
# ============================================================================

@dataclass
class Values:
    """
    Shared decoding values.

    Attributes:
        colors: Palette as authored (key -> raw color definition)
        gap: Gap character, or None to inherit
    """
    colors: Dict[str, Any] = field(default_factory=dict)
    gap: Optional[str] = None

    def merged(self, inner: Optional['Values']) -> 'Values':
        """Values seen by a nested definition; inner keys win"""
        if inner is None:
            return self
        colors = dict(self.colors)
        colors.update(inner.colors)
        return Values(colors=colors, gap=inner.gap if inner.gap is not None else self.gap)

    @classmethod
    def from_dict(cls, raw, where: str) -> 'Values':
        if not isinstance(raw, dict):
            raise MalformedDefinition(f"{where}: values must be a table")
        colors = raw.get('colors', {})
        if not isinstance(colors, dict):
            raise MalformedDefinition(f"{where}: values.colors must be a table")
        gap = raw.get('gap')
        if gap is not None and not isinstance(gap, str):
            raise MalformedDefinition(f"{where}: values.gap must be a string")
        return cls(colors=dict(colors), gap=gap)

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = {}
        if self.gap is not None:
            table['gap'] = self.gap
        if self.colors:
            table['colors'] = dict(self.colors)
        return table


@dataclass
class CharmieDef:
    """Undecoded image: glyph layer, optional masks, size and values"""
    text: str
    fg: Optional[str] = None
    bg: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    values: Optional[Values] = None

    @classmethod
    def from_dict(cls, raw, where: str = "image") -> 'CharmieDef':
        if not isinstance(raw, dict):
            raise MalformedDefinition(f"{where}: expected a table")
        if 'text' not in raw:
            raise MalformedDefinition(f"{where}: missing glyph layer 'text'")
        values = raw.get('values')
        return cls(
            text=_string_field(raw, 'text', where),
            fg=_string_field(raw, 'fg', where),
            bg=_string_field(raw, 'bg', where),
            width=_size_field(raw, 'width', where),
            height=_size_field(raw, 'height', where),
            values=Values.from_dict(values, where) if values is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = {'text': self.text}
        for key in ('fg', 'bg', 'width', 'height'):
            value = getattr(self, key)
            if value is not None:
                table[key] = value
        if self.values is not None:
            values = self.values.to_dict()
            if values:
                table['values'] = values
        return table


@dataclass
class CharmieFrameDef:
    """Image definition plus how long it is shown"""
    charmi: CharmieDef
    timing: float

    @classmethod
    def from_dict(cls, raw, where: str) -> 'CharmieFrameDef':
        charmi = CharmieDef.from_dict(raw, where)
        if 'timing' not in raw:
            raise MalformedDefinition(f"{where}: missing 'timing'")
        timing = raw['timing']
        if isinstance(timing, bool) or not isinstance(timing, (int, float)):
            raise MalformedDefinition(f"{where}: 'timing' must be a number")
        return cls(charmi=charmi, timing=float(timing))

    def to_dict(self) -> Dict[str, Any]:
        table = self.charmi.to_dict()
        table['timing'] = self.timing
        return table


@dataclass
class CharmieAnimationDef:
    frames: List[CharmieFrameDef]
    values: Optional[Values] = None

    @classmethod
    def from_dict(cls, raw, where: str) -> 'CharmieAnimationDef':
        if not isinstance(raw, dict):
            raise MalformedDefinition(f"{where}: expected a table")
        frames = raw.get('f')
        if not isinstance(frames, list):
            raise MalformedDefinition(f"{where}: 'f' must be an array of frame tables")
        values = raw.get('values')
        return cls(
            frames=[CharmieFrameDef.from_dict(frame, f"{where} frame {index}")
                    for index, frame in enumerate(frames)],
            values=Values.from_dict(values, where) if values is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = {'f': [frame.to_dict() for frame in self.frames]}
        if self.values is not None and self.values.to_dict():
            table['values'] = self.values.to_dict()
        return table


@dataclass
class CharmieActorDef:
    animations: Dict[str, CharmieAnimationDef]
    values: Optional[Values] = None

    @classmethod
    def from_dict(cls, raw, where: str = "actor") -> 'CharmieActorDef':
        animations = raw.get('a')
        if not isinstance(animations, dict):
            raise MalformedDefinition(f"{where}: 'a' must be a table of animations")
        values = raw.get('values')
        return cls(
            animations={name: CharmieAnimationDef.from_dict(animation, f"animation {name!r}")
                        for name, animation in animations.items()},
            values=Values.from_dict(values, where) if values is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = {
            'a': {name: animation.to_dict() for name, animation in self.animations.items()}
        }
        if self.values is not None and self.values.to_dict():
            table['values'] = self.values.to_dict()
        return table


def _string_field(raw: dict, key: str, where: str) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedDefinition(f"{where}: '{key}' must be a string")
    return value


def _size_field(raw: dict, key: str, where: str) -> Optional[int]:
    value = raw.get(key)
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise MalformedDefinition(f"{where}: '{key}' must be an integer")
    return value


# ============================================================================
# PARSING
# ============================================================================

def _load_toml(data: RawDefinition) -> Dict[str, Any]:
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidCharacterStream(f"Definition is not valid UTF-8: {e}") from e
    if not isinstance(data, str):
        raise MalformedDefinition(f"Expected bytes or str, got {type(data).__name__}")
    try:
        return tomllib.loads(data)
    except tomllib.TOMLDecodeError as e:
        raise MalformedDefinition(f"Invalid TOML: {e}") from e


def parse_image_def(data: RawDefinition) -> CharmieDef:
    return CharmieDef.from_dict(_load_toml(data))


def parse_actor_def(data: RawDefinition) -> CharmieActorDef:
    return CharmieActorDef.from_dict(_load_toml(data))


# ============================================================================
# DECODING
# ============================================================================

def _gap_char(values: Values) -> str:
    gap = values.gap if values.gap is not None else get_decoder_config().default_gap
    if len(gap) != 1 or char_width(gap) != 1:
        raise MalformedDefinition(f"Gap must be a single one-column character, got {gap!r}")
    return gap


def _glyph_row_width(line: str, row: int) -> int:
    """Display width of a glyph row, rejecting characters a cell cannot hold"""
    width = 0
    for col, ch in enumerate(line):
        ch_width = char_width(ch)
        if ch_width < 0:
            raise InvalidCharacterStream(
                f"Control character U+{ord(ch):04X} in glyph row {row}, position {col}")
        if ch_width == 0:
            raise InvalidCharacterStream(
                f"Zero-width character U+{ord(ch):04X} in glyph row {row}, position {col}")
        width += ch_width
    return width


def _mask_rows(layer: str, text: Optional[str], widths: List[int]) -> Optional[List[str]]:
    """Split a mask layer and check it lines up with the glyph rows"""
    if text is None:
        return None
    lines = text.splitlines()
    if len(lines) != len(widths):
        raise MaskShapeMismatch(layer, f"{len(lines)} rows, glyph layer has {len(widths)}")
    for row, (line, width) in enumerate(zip(lines, widths)):
        for col, ch in enumerate(line):
            if char_width(ch) != 1:
                raise InvalidCharacterStream(
                    f"{layer} mask row {row}, column {col}: U+{ord(ch):04X} is not a "
                    f"one-column character")
        if len(line) != width:
            raise MaskShapeMismatch(
                layer, f"row {row} is {len(line)} columns wide, glyph row is {width}")
    return lines


def _mask_color(mask: Optional[List[str]], row: int, col: int,
                palette: Palette, gap: str) -> Optional[ColorValue]:
    if mask is None:
        return None
    token = mask[row][col]
    if token == gap or token == MASK_BLANK_CHAR:
        return None
    try:
        return resolve(token, palette)
    except UnknownColorName:
        raise UnknownColorName(token, row, col) from None


def image_from_def(definition: CharmieDef, values: Optional[Values] = None) -> CharacterMapImage:
    """
    Decode one image definition.

    Args:
        definition: Parsed image definition
        values: Values inherited from an enclosing animation or actor

    Returns:
        FixedImage when width or height is declared, FlexibleImage otherwise

    Raises:
        DecodeError subclasses for bad content, InvalidDimensions when
        the content does not fit the declared size
    """
    values = (values or Values()).merged(definition.values)
    gap = _gap_char(values)
    palette = build_palette(values.colors)

    lines = definition.text.splitlines()
    widths = [_glyph_row_width(line, row) for row, line in enumerate(lines)]
    fg_mask = _mask_rows('fg', definition.fg, widths)
    bg_mask = _mask_rows('bg', definition.bg, widths)

    rows = []
    for row, line in enumerate(lines):
        cells = []
        for ch in line:
            col = len(cells)
            fg = _mask_color(fg_mask, row, col, palette, gap)
            bg = _mask_color(bg_mask, row, col, palette, gap)
            if ch == gap:
                cells.append(CharmiCell(fg=fg, bg=bg))
                continue
            cell = CharmiCell(ch, fg, bg)
            cells.append(cell)
            cells.extend([OBSCURED] * (cell.width - 1))
        rows.append(cells)

    if definition.width is not None or definition.height is not None:
        image = FixedImage.from_rows(rows, width=definition.width, height=definition.height,
                                     allow_empty=False)
    else:
        if get_decoder_config().trim_flexible_rows:
            for cells in rows:
                while cells and cells[-1].is_empty:
                    cells.pop()
        image = FlexibleImage.from_rows(rows)

    logger.debug(f"Decoded {image!r} with {len(palette)} palette entries, gap {gap!r}")
    return image


def animation_from_def(definition: CharmieAnimationDef,
                       values: Optional[Values] = None) -> CharmieAnimation:
    """Decode every frame; EmptyAnimation / NonPositiveDuration propagate"""
    values = (values or Values()).merged(definition.values)
    frames = [(image_from_def(frame.charmi, values), frame.timing) for frame in definition.frames]
    return CharmieAnimation.from_frames(frames)


def actor_from_def(definition: CharmieActorDef) -> CharmieActor:
    values = Values().merged(definition.values)
    animations = {name: animation_from_def(animation, values)
                  for name, animation in definition.animations.items()}
    logger.debug(f"Decoded actor with animations {sorted(animations)}")
    return CharmieActor(animations)


def decode_image(data: RawDefinition) -> CharacterMapImage:
    """
    Decode an image definition document.

    Example:
        >>> image = decode_image(b'text = "AB"')
        >>> image.cell_at(0, 1).character
        'B'
    """
    return image_from_def(parse_image_def(data))


def decode_actor(data: RawDefinition) -> CharmieActor:
    """Decode an actor definition document (animations under `a`)"""
    return actor_from_def(parse_actor_def(data))


# ============================================================================
# ENCODING
# ============================================================================

def _one_column_chars(first: str) -> Iterator[str]:
    """first, then every printable one-column character above Latin-1 controls"""
    yield from first
    for code in range(0xa1, 0x110000):
        candidate = chr(code)
        if candidate not in first and candidate.isprintable() and char_width(candidate) == 1:
            yield candidate


def _pick_gap(image: CharacterMapImage) -> str:
    used = {cell.character for row in image.rows() for cell in row}
    for candidate in _one_column_chars(GAP_CANDIDATES):
        if candidate not in used:
            return candidate
    raise MalformedDefinition("No unused character left for the gap")


def _assign_color_keys(image: CharacterMapImage, gap: str) -> Dict[ColorValue, str]:
    keys: Dict[ColorValue, str] = {}
    candidates = (ch for ch in _one_column_chars(COLOR_KEY_CANDIDATES)
                  if ch != gap and ch != MASK_BLANK_CHAR)
    for row in image.rows():
        for cell in row:
            for color in (cell.fg, cell.bg):
                if color is not None and color not in keys:
                    try:
                        keys[color] = next(candidates)
                    except StopIteration:
                        raise MalformedDefinition("Too many distinct colors to encode") from None
    return keys


def image_to_def(image: CharacterMapImage) -> CharmieDef:
    """
    Turn an image back into a definition that decodes to an equal image.

    Fixed images keep their declared size. Mask layers are omitted when
    no cell sets that color.
    """
    gap = _pick_gap(image)
    keys = _assign_color_keys(image, gap)

    text_rows, fg_rows, bg_rows = [], [], []
    for row in image.rows():
        cells = list(row)
        while cells and cells[-1].is_empty:
            cells.pop()
        text, fg, bg = [], [], []
        for col, cell in enumerate(cells):
            if cell.obscured:
                # The mask column under a wide character's second half
                fg.append(MASK_BLANK_CHAR)
                bg.append(MASK_BLANK_CHAR)
                continue
            text.append(cell.character if cell.character is not None else gap)
            fg.append(keys[cell.fg] if cell.fg is not None else MASK_BLANK_CHAR)
            bg.append(keys[cell.bg] if cell.bg is not None else MASK_BLANK_CHAR)
        text_rows.append(''.join(text))
        fg_rows.append(''.join(fg))
        bg_rows.append(''.join(bg))

    def layer(rows: List[str]) -> str:
        return ''.join(row + '\n' for row in rows)

    has_fg = any(cell.fg is not None for row in image.rows() for cell in row)
    has_bg = any(cell.bg is not None for row in image.rows() for cell in row)

    values = Values(colors={key: color_to_definition(color) for color, key in keys.items()},
                    gap=gap)
    fixed = isinstance(image, FixedImage) and image.width > 0 and image.height > 0
    return CharmieDef(
        text=layer(text_rows),
        fg=layer(fg_rows) if has_fg else None,
        bg=layer(bg_rows) if has_bg else None,
        width=image.width if fixed else None,
        height=image.height if fixed else None,
        values=values,
    )


def encode_image(image: CharacterMapImage) -> str:
    """TOML document for an image"""
    return tomli_w.dumps(image_to_def(image).to_dict())


def animation_to_def(animation: CharmieAnimation) -> CharmieAnimationDef:
    return CharmieAnimationDef(
        frames=[CharmieFrameDef(charmi=image_to_def(image), timing=duration)
                for duration, image in animation])


def actor_to_def(actor: CharmieActor) -> CharmieActorDef:
    return CharmieActorDef(
        animations={name: animation_to_def(animation) for name, animation in actor.items()})


def encode_actor(actor: CharmieActor) -> str:
    """TOML document for an actor, one palette per frame"""
    return tomli_w.dumps(actor_to_def(actor).to_dict())
