"""Tests for charmi_render."""

import pytest

from charmi_animation import CharmieActor, CharmieAnimation
from charmi_cell import EMPTY, CharmiCell, cells_for_text
from charmi_color import Ansi, Rgb
from charmi_config import CharmiSystemConfig, ColorSupportLevel, RenderConfig, reload_config
from charmi_grid import CellBuffer, FixedImage, FlexibleImage
from charmi_render import ANSI, animated_view, render_text, sgr_params, static_view

RESET = ANSI.RESET


class TestSgrParams:
    @pytest.mark.parametrize("color,background,expected", [
        (Ansi(1), False, "31"),
        (Ansi(1), True, "41"),
        (Ansi(9), False, "91"),
        (Ansi(12), True, "104"),
        (Ansi(200), False, "38;5;200"),
        (Ansi(200), True, "48;5;200"),
        (Rgb(1, 2, 3), False, "38;2;1;2;3"),
        (Rgb(1, 2, 3), True, "48;2;1;2;3"),
    ])
    def test_true_color(self, color, background, expected) -> None:
        assert sgr_params(color, background, ColorSupportLevel.TRUE_COLOR) == expected

    def test_ansi256_downgrades_rgb(self) -> None:
        assert sgr_params(Rgb(255, 0, 0), False, ColorSupportLevel.ANSI_256) == "38;5;196"

    def test_basic_downgrades_everything(self) -> None:
        assert sgr_params(Rgb(255, 0, 0), False, ColorSupportLevel.BASIC) == "91"
        assert sgr_params(Ansi(196), True, ColorSupportLevel.BASIC) == "101"

    def test_plain(self) -> None:
        assert sgr_params(Ansi(1), False, ColorSupportLevel.PLAIN) == ""


class TestStaticView:
    def test_plain_text(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("ab"), cells_for_text("c")])
        assert static_view(image) == ["ab", "c"]

    def test_short_rows_are_not_padded(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("abc"), cells_for_text("d", bg=Ansi(4))])
        assert static_view(image) == ["abc", f"\033[44md{RESET}"]

    def test_fixed_rows_keep_their_width(self) -> None:
        image = FixedImage.from_rows([cells_for_text("a")], width=3, height=1)
        assert static_view(image) == ["a  "]

    def test_colored_line_ends_with_reset(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("ab", fg=Ansi(1))])
        assert static_view(image) == [f"\033[31mab{RESET}"]

    def test_escapes_only_on_change(self) -> None:
        image = FlexibleImage.from_rows([[CharmiCell("a", Ansi(1)), CharmiCell("b", Ansi(1)),
                                          CharmiCell("c", Ansi(2))]])
        assert static_view(image) == [f"\033[31mab\033[32mc{RESET}"]

    def test_dropping_a_color_resets(self) -> None:
        image = FlexibleImage.from_rows([[CharmiCell("a", Ansi(1), Ansi(4)), CharmiCell("b", Ansi(1))]])
        assert static_view(image) == [f"\033[31;44ma{RESET}\033[31mb{RESET}"]

    def test_empty_and_effect_cells_are_spaces(self) -> None:
        image = FixedImage.from_rows([[CharmiCell("a"), EMPTY, CharmiCell.effect(bg=Ansi(4))]])
        assert static_view(image) == [f"a \033[44m {RESET}"]

    def test_obscured_cells_print_nothing(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("你a")])
        assert static_view(image) == ["你a"]

    def test_plain_level(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("ab", fg=Rgb(1, 2, 3))])
        assert static_view(image, ColorSupportLevel.PLAIN) == ["ab"]

    def test_level_from_config(self) -> None:
        reload_config(CharmiSystemConfig(render=RenderConfig(color_support=ColorSupportLevel.ANSI_256)))
        image = FlexibleImage.from_rows([cells_for_text("a", fg=Rgb(255, 0, 0))])
        assert static_view(image) == [f"\033[38;5;196ma{RESET}"]

    def test_style_carries_across_lines_without_reset_each_line(self) -> None:
        reload_config(CharmiSystemConfig(render=RenderConfig(reset_each_line=False)))
        image = FlexibleImage.from_rows([cells_for_text("a", fg=Ansi(1)), cells_for_text("b", fg=Ansi(1))])
        assert static_view(image) == ["\033[31ma", f"b{RESET}"]

    def test_buffers_render_too(self) -> None:
        assert static_view(CellBuffer.blank(2, 1)) == ["  "]

    def test_render_text(self) -> None:
        image = FlexibleImage.from_rows([cells_for_text("ab"), cells_for_text("c")])
        assert render_text(image) == "ab\nc"


class TestAnimatedView:
    def _actor(self) -> CharmieActor:
        frames = [(FlexibleImage.from_rows([cells_for_text("1")]), 1.0),
                  (FlexibleImage.from_rows([cells_for_text("2")]), 1.0)]
        return CharmieActor({"count": CharmieAnimation.from_frames(frames)})

    def test_frames_by_time(self) -> None:
        actor = self._actor()
        assert animated_view(actor, "count", 0.5) == ["1"]
        assert animated_view(actor, "count", 1.5) == ["2"]

    def test_finished(self) -> None:
        assert animated_view(self._actor(), "count", 2.5) is None

    def test_unknown_name(self) -> None:
        assert animated_view(self._actor(), "missing", 0.0) is None
