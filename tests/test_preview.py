"""Tests for charmi_preview."""

import numpy as np
from PIL import Image

from charmi_animation import CharmieAnimation
from charmi_cell import EMPTY, CharmiCell, cells_for_text
from charmi_color import Ansi, Rgb
from charmi_config import PreviewConfig
from charmi_grid import FixedImage, FlexibleImage
from charmi_preview import PreviewRenderer, render_animation_frames, render_image, save_gif

CONFIG = PreviewConfig(cell_width=4, cell_height=6, default_bg=(0, 0, 0))


def _pixel(img: Image.Image, col: int, row: int):
    """Top-left pixel of a cell"""
    return tuple(np.array(img)[row * CONFIG.cell_height, col * CONFIG.cell_width])


class TestRenderImage:
    def test_canvas_size(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("abc"), cells_for_text("d")])
        img = render_image(image, PreviewRenderer(CONFIG))
        assert img.size == (3 * 4, 2 * 6)
        assert img.mode == "RGB"

    def test_backgrounds(self) -> None:
        image = FixedImage.from_rows([[CharmiCell(" ", bg=Rgb(10, 20, 30)), EMPTY,
                                       CharmiCell.effect(bg=Ansi(1))]])
        img = render_image(image, PreviewRenderer(CONFIG))
        assert _pixel(img, 0, 0) == (10, 20, 30)
        assert _pixel(img, 1, 0) == (0, 0, 0)
        assert _pixel(img, 2, 0) == (205, 0, 0)

    def test_wide_glyph_spans_two_cells(self) -> None:
        renderer = PreviewRenderer(CONFIG)
        image = FlexibleImage.from_rows([cells_for_text("你", bg=Rgb(0, 255, 0))])
        img = render_image(image, renderer)
        assert img.size == (2 * 4, 6)
        assert ("你", CONFIG.default_fg, (0, 255, 0), 2) in renderer._bitmaps

    def test_empty_image(self) -> None:
        img = render_image(FlexibleImage(), PreviewRenderer(CONFIG))
        assert img.size == (4, 6)

    def test_bitmaps_are_cached(self) -> None:
        renderer = PreviewRenderer(CONFIG)
        renderer.render(FlexibleImage.from_rows([cells_for_text("aaaa")]))
        assert len(renderer._bitmaps) == 1
        renderer.clear_cache()
        assert renderer._bitmaps == {}


class TestAnimationPreview:
    def _animation(self) -> CharmieAnimation:
        return CharmieAnimation.from_frames([
            (FlexibleImage.from_rows([cells_for_text(" ", bg=Ansi(1))]), 0.5),
            (FlexibleImage.from_rows([cells_for_text("  ", bg=Ansi(2))]), 0.5),
        ])

    def test_frames_sampled_at_fps(self) -> None:
        frames = render_animation_frames(self._animation(), fps=4, renderer=PreviewRenderer(CONFIG))
        assert len(frames) == 4
        assert {frame.size for frame in frames} == {(2 * 4, 6)}
        assert _pixel(frames[0], 0, 0) == (205, 0, 0)
        assert _pixel(frames[3], 0, 0) == (0, 205, 0)

    def test_save_gif(self, tmp_path) -> None:
        path = save_gif(self._animation(), tmp_path / "preview.gif", fps=4,
                        renderer=PreviewRenderer(CONFIG))
        assert path.exists()
        with Image.open(path) as gif:
            assert gif.format == "GIF"
            assert gif.is_animated
