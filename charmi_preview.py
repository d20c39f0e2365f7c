#!/usr/bin/env python3
"""
🎨 CHARMI - Preview Rasterizer
==============================
Copyright (c) 2025 PNGN-Tec LLC

Pixel previews of character map images and animations, for asset
reviews, documentation and bug reports where a terminal is not at hand.

Rendering Pipeline
==================
1. Allocate a numpy RGB buffer of (rows * cell_height, cols * cell_width)
2. Render each visible glyph into a cached cell bitmap with PIL ImageDraw
3. Blit the bitmaps into the buffer (wide glyphs get two cells of room)
4. Convert with Image.fromarray()

Animations are sampled at a fixed frame rate and saved as looping GIFs.

Module Interface
================
- PreviewRenderer: font loading, bitmap cache, render()
- render_image(): one image to a PIL Image
- render_animation_frames(): PIL frames sampled at `fps`
- save_gif(): write an animation preview to disk
"""

import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from charmi_animation import CharmieAnimation
from charmi_cell import CharmiCell
from charmi_color import to_rgb
from charmi_config import PreviewConfig, RGBColor, get_preview_config
from charmi_grid import CellGrid

logger = logging.getLogger('charmi.preview')

# Searched in order when PreviewConfig.font_path is unset
SYSTEM_FONT_PATHS = [
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf'),
    Path('/usr/share/fonts/dejavu/DejaVuSansMono.ttf'),
    Path('/usr/share/fonts/TTF/DejaVuSansMono.ttf'),
    Path('/data/data/com.termux/files/usr/share/fonts/TTF/DejaVuSansMono.ttf'),
]


class PreviewRenderer:
    """
    Rasterizes grids cell by cell.

    Cell bitmaps are cached per (character, fg, bg, columns), so repeated
    frames of an animation mostly reuse earlier work.
    """

    def __init__(self, config: Optional[PreviewConfig] = None):
        self.config = config or get_preview_config()
        self.cell_width = self.config.cell_width
        self.cell_height = self.config.cell_height
        self.font = self._load_font()
        self._bitmaps: Dict[Tuple[str, RGBColor, RGBColor, int], np.ndarray] = {}

    def _load_font(self) -> ImageFont.ImageFont:
        """Load the configured monospace font, falling back to PIL's default"""
        candidates = []
        if self.config.font_path:
            candidates.append(Path(self.config.font_path))
        candidates.extend(SYSTEM_FONT_PATHS)

        for font_path in candidates:
            if font_path.exists():
                try:
                    font = ImageFont.truetype(str(font_path), self.config.font_size)
                except OSError as e:
                    logger.warning(f"Could not load font {font_path}: {e}")
                    continue
                logger.info(f"Loaded font from {font_path}")
                return font

        logger.warning("No monospace font found - using PIL default")
        return ImageFont.load_default()

    def _cell_colors(self, cell: CharmiCell) -> Tuple[RGBColor, RGBColor]:
        fg = to_rgb(cell.fg) if cell.fg is not None else self.config.default_fg
        bg = to_rgb(cell.bg) if cell.bg is not None else self.config.default_bg
        return fg, bg

    def _render_character(self, char: str, fg: RGBColor, bg: RGBColor, columns: int) -> np.ndarray:
        key = (char, fg, bg, columns)
        bitmap = self._bitmaps.get(key)
        if bitmap is None:
            img = Image.new('RGB', (self.cell_width * columns, self.cell_height), bg)
            if char != ' ':
                draw = ImageDraw.Draw(img)
                draw.text((0, 0), char, font=self.font, fill=fg)
            bitmap = np.array(img, dtype=np.uint8)
            self._bitmaps[key] = bitmap
        return bitmap

    def render(self, image: CellGrid, columns: Optional[int] = None,
               rows: Optional[int] = None) -> Image.Image:
        """
        Rasterize a grid.

        Args:
            image: Grid to draw
            columns: Canvas width in cells (image width when None)
            rows: Canvas height in cells (image height when None)

        Returns:
            RGB PIL Image
        """
        columns = image.width if columns is None else columns
        rows = image.height if rows is None else rows
        buffer = np.full((max(rows, 1) * self.cell_height, max(columns, 1) * self.cell_width, 3),
                         self.config.default_bg, dtype=np.uint8)

        for y in range(min(rows, image.height)):
            for x in range(min(columns, image.width)):
                cell = image.cell_at(y, x)
                if cell.obscured or cell.is_empty:
                    continue
                span = min(max(cell.width, 1), columns - x)
                fg, bg = self._cell_colors(cell)
                bitmap = self._render_character(cell.character or ' ', fg, bg, span)
                y_pos = y * self.cell_height
                x_pos = x * self.cell_width
                buffer[y_pos:y_pos + self.cell_height,
                       x_pos:x_pos + bitmap.shape[1]] = bitmap

        return Image.fromarray(buffer)

    def clear_cache(self):
        self._bitmaps.clear()


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def render_image(image: CellGrid, renderer: Optional[PreviewRenderer] = None) -> Image.Image:
    return (renderer or PreviewRenderer()).render(image)


def render_animation_frames(animation: CharmieAnimation, fps: Optional[int] = None,
                            renderer: Optional[PreviewRenderer] = None) -> List[Image.Image]:
    """
    Sample an animation at a fixed rate.

    All frames share one canvas size (the largest frame), as GIF requires.
    """
    renderer = renderer or PreviewRenderer()
    fps = fps or renderer.config.fps
    columns = max(image.width for _, image in animation)
    rows = max(image.height for _, image in animation)

    count = max(1, math.ceil(animation.duration * fps))
    frames = []
    for index in range(count):
        image = animation.frame_for_timing(index / fps)
        if image is None:
            image = animation.frames[-1].image
        frames.append(renderer.render(image, columns, rows))
    return frames


def save_gif(animation: CharmieAnimation, path: Union[str, Path], fps: Optional[int] = None,
             renderer: Optional[PreviewRenderer] = None) -> Path:
    """Write a looping GIF preview of an animation"""
    renderer = renderer or PreviewRenderer()
    fps = fps or renderer.config.fps
    frames = render_animation_frames(animation, fps, renderer)

    path = Path(path)
    frames[0].save(
        path,
        save_all=True,
        append_images=frames[1:],
        duration=round(1000 / fps),
        loop=0,
    )
    logger.info(f"Saved {len(frames)} frame preview to {path}")
    return path
