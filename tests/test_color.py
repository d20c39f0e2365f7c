"""Tests for charmi_color."""

import pytest

from charmi_color import (
    Ansi,
    Rgb,
    build_palette,
    color_from_definition,
    color_to_definition,
    named_color,
    resolve,
    to_ansi256,
    to_basic,
    to_rgb,
)
from charmi_errors import DecodeError, InvalidColorDefinition, UnknownColorName


class TestStructuralDecoding:
    def test_integer_is_ansi(self) -> None:
        assert color_from_definition(1) == Ansi(1)

    def test_triple_is_rgb(self) -> None:
        assert color_from_definition([10, 20, 30]) == Rgb(10, 20, 30)

    def test_tuple_triple_is_rgb(self) -> None:
        assert color_from_definition((0, 0, 255)) == Rgb(0, 0, 255)

    def test_name_is_fixed_ansi(self) -> None:
        assert color_from_definition("dark magenta") == Ansi(5)
        assert color_from_definition("Red") == Ansi(9)
        assert color_from_definition("dark_grey") == Ansi(8)

    def test_aliases(self) -> None:
        assert named_color("navy") == Ansi(4)
        assert named_color("gray") == named_color("grey")
        assert named_color("bright white") == Ansi(15)

    def test_decoded_values_pass_through(self) -> None:
        assert color_from_definition(Rgb(1, 2, 3)) == Rgb(1, 2, 3)

    @pytest.mark.parametrize("raw", [256, -1, [0, 0, 256], [1, 2], [1, 2, 3, 4],
                                     1.5, True, False, "not a color", None, {"r": 1}])
    def test_rejected_shapes(self, raw) -> None:
        with pytest.raises(InvalidColorDefinition):
            color_from_definition(raw)

    def test_out_of_range_is_not_clamped(self) -> None:
        with pytest.raises(InvalidColorDefinition):
            color_from_definition([300, 0, 0])

    def test_invalid_definition_is_a_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            color_from_definition(3.0)

    def test_variants_are_distinct(self) -> None:
        assert Ansi(1) != Rgb(0, 0, 1)


class TestPalette:
    def test_build_palette(self) -> None:
        palette = build_palette({"x": 1, "y": [10, 20, 30]})
        assert palette == {"x": Ansi(1), "y": Rgb(10, 20, 30)}

    def test_multi_character_key_rejected(self) -> None:
        with pytest.raises(InvalidColorDefinition):
            build_palette({"xy": 1})

    def test_resolve_is_deterministic(self) -> None:
        palette = build_palette({"x": 1})
        assert resolve("x", palette) == resolve("x", palette) == Ansi(1)

    def test_resolve_unknown(self) -> None:
        with pytest.raises(UnknownColorName) as info:
            resolve("q", {})
        assert info.value.token == "q"

    def test_definition_round_trip(self) -> None:
        for color in (Ansi(200), Rgb(1, 2, 3)):
            assert color_from_definition(color_to_definition(color)) == color


class TestConversion:
    def test_system_color_rgb(self) -> None:
        assert to_rgb(Ansi(0)) == (0, 0, 0)
        assert to_rgb(Ansi(15)) == (255, 255, 255)

    def test_cube_and_grey_ramp(self) -> None:
        assert to_rgb(Ansi(16)) == (0, 0, 0)
        assert to_rgb(Ansi(231)) == (255, 255, 255)
        assert to_rgb(Ansi(232)) == (8, 8, 8)
        assert to_rgb(Ansi(255)) == (238, 238, 238)

    def test_rgb_passthrough(self) -> None:
        assert to_rgb(Rgb(9, 8, 7)) == (9, 8, 7)

    def test_to_ansi256_exact_cube_color(self) -> None:
        assert to_ansi256(Rgb(255, 0, 0)) == Ansi(196)

    def test_to_ansi256_prefers_grey_ramp(self) -> None:
        assert to_ansi256(Rgb(128, 128, 128)) == Ansi(244)

    def test_to_ansi256_keeps_ansi(self) -> None:
        assert to_ansi256(Ansi(3)) == Ansi(3)

    def test_to_basic(self) -> None:
        assert to_basic(Rgb(0, 0, 0)) == Ansi(0)
        assert to_basic(Rgb(255, 255, 255)) == Ansi(15)
        assert to_basic(Ansi(196)) == Ansi(9)
