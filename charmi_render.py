#!/usr/bin/env python3
"""
🎨 CHARMI - Terminal Line Rendering
===================================
Copyright (c) 2025 PNGN-Tec LLC

Turns images into lines of text with SGR color escapes, ready to be
written to a terminal one row per line.

Rendering Rules
===============
- Glyph cells print their character; Empty and Effect cells print a space
  (an Effect's background still shows)
- Obscured cells print nothing: the wide character before them already
  covers that column
- Escapes are only emitted when the style changes, and every styled line
  ends with a reset (unless RenderConfig.reset_each_line is off)

Color support levels decide the escape form:

    TRUE_COLOR  38;2;r;g;b for RGB, palette indexes as-is
    ANSI_256    RGB mapped into the 256-color cube / grey ramp
    BASIC       everything mapped onto the 16 system colors
    PLAIN       no escapes at all
"""

from typing import List, Optional, Tuple

from charmi_animation import CharmieActor
from charmi_color import ColorValue, Rgb, to_ansi256, to_basic
from charmi_config import ColorSupportLevel, get_render_config
from charmi_grid import CellGrid


class ANSI:
    RESET = "\033[0m"
    CSI = "\033["


# ============================================================================
# SGR CODES
# ============================================================================

def _ansi_params(index: int, background: bool) -> str:
    if index < 8:
        return str((40 if background else 30) + index)
    if index < 16:
        return str((100 if background else 90) + index - 8)
    return f"{48 if background else 38};5;{index}"


def sgr_params(color: ColorValue, background: bool, level: ColorSupportLevel) -> str:
    """
    SGR parameter string for one color at the given support level.

    Returns an empty string for PLAIN.
    """
    if level == ColorSupportLevel.PLAIN:
        return ""
    if level == ColorSupportLevel.BASIC:
        color = to_basic(color)
    elif level == ColorSupportLevel.ANSI_256:
        color = to_ansi256(color)

    if isinstance(color, Rgb):
        return f"{48 if background else 38};2;{color.r};{color.g};{color.b}"
    return _ansi_params(color.index, background)


def _escape(params: List[str]) -> str:
    return f"{ANSI.CSI}{';'.join(params)}m"


# ============================================================================
# LINE RENDERING
# ============================================================================

Style = Tuple[Optional[ColorValue], Optional[ColorValue]]


def _render_rows(image: CellGrid, level: ColorSupportLevel, reset_each_line: bool) -> List[str]:
    """Render every row, tracking the active style like a terminal would

    Only stored cells are written, so short rows of a flexible image leave
    whatever the terminal already shows to their right untouched.
    """
    lines = []
    current: Style = (None, None)

    for index in range(image.height):
        parts = []
        for cell in image.stored_row(index):
            if cell.obscured:
                continue
            style: Style = (cell.fg, cell.bg)
            if level != ColorSupportLevel.PLAIN and style != current:
                params = []
                # Dropping a channel needs a reset, then re-apply the rest
                if (current[0] is not None and style[0] is None) or \
                        (current[1] is not None and style[1] is None):
                    parts.append(ANSI.RESET)
                    current = (None, None)
                if style[0] is not None and style[0] != current[0]:
                    params.append(sgr_params(style[0], False, level))
                if style[1] is not None and style[1] != current[1]:
                    params.append(sgr_params(style[1], True, level))
                if params:
                    parts.append(_escape(params))
                current = style
            parts.append(cell.character if cell.character is not None else ' ')

        if reset_each_line and current != (None, None):
            parts.append(ANSI.RESET)
            current = (None, None)
        lines.append(''.join(parts))

    if lines and current != (None, None):
        lines[-1] += ANSI.RESET
    return lines


def static_view(image: CellGrid, level: Optional[ColorSupportLevel] = None) -> List[str]:
    """
    Render an image as terminal lines, one per row.

    Args:
        image: Any grid (FixedImage, FlexibleImage or CellBuffer)
        level: Color support level (from RenderConfig when None)

    Returns:
        List of strings with embedded SGR escapes
    """
    config = get_render_config()
    if level is None:
        level = config.color_support
    return _render_rows(image, level, config.reset_each_line)


def animated_view(actor: CharmieActor, name: str, elapsed: float,
                  level: Optional[ColorSupportLevel] = None) -> Optional[List[str]]:
    """
    Render the frame of actor's animation `name` at `elapsed` seconds.

    Returns None when the actor has no such animation or the animation has
    already finished.
    """
    image = actor.image_for(name, elapsed)
    if image is None:
        return None
    return static_view(image, level)


def render_text(image: CellGrid, level: Optional[ColorSupportLevel] = None) -> str:
    """static_view() joined into one printable string"""
    return '\n'.join(static_view(image, level))
