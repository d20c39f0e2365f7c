"""Tests for charmi_animation."""

import math

import pytest

from charmi_animation import (
    AnimationPlayer,
    CharmieActor,
    CharmieAnimation,
    CharmieAnimationFrame,
    PlaybackState,
)
from charmi_cell import cells_for_text
from charmi_errors import EmptyAnimation, NonPositiveDuration
from charmi_grid import FlexibleImage


def _image(text: str) -> FlexibleImage:
    return FlexibleImage.from_rows([cells_for_text(text)])


A, B, C = _image("a"), _image("b"), _image("c")


def _animation(*durations) -> CharmieAnimation:
    images = [A, B, C]
    return CharmieAnimation.from_frames([(images[i], d) for i, d in enumerate(durations)])


# ── construction ────────────────────────────────


class TestConstruction:
    def test_zero_frames(self) -> None:
        with pytest.raises(EmptyAnimation):
            CharmieAnimation.from_frames([])

    @pytest.mark.parametrize("duration", [0, -1.0, math.nan, math.inf, "1", True])
    def test_bad_durations(self, duration) -> None:
        with pytest.raises(NonPositiveDuration) as info:
            CharmieAnimation.from_frames([(A, 1.0), (B, duration)])
        assert info.value.index == 1

    def test_accepts_frame_objects(self) -> None:
        animation = CharmieAnimation.from_frames([CharmieAnimationFrame(A, 0.25)])
        assert animation.duration == 0.25

    def test_end_times(self) -> None:
        animation = _animation(1.0, 2.0, 0.5)
        assert animation.timings == ((1.0, 0), (3.0, 1), (3.5, 2))
        assert animation.duration == 3.5

    def test_len_iter_and_frame(self) -> None:
        animation = _animation(1.0, 2.0)
        assert len(animation) == 2
        assert list(animation) == [(1.0, A), (2.0, B)]
        assert animation.frame(1) == B
        assert animation.frame(2) is None

    def test_concatenation(self) -> None:
        joined = _animation(1.0) + _animation(2.0, 3.0)
        assert len(joined) == 3
        assert joined.duration == 6.0
        assert joined.frame(1) == A


# ── frame for timing ────────────────────────────────


class TestFrameForTiming:
    def test_two_frame_scenario(self) -> None:
        animation = _animation(1.0, 2.0)
        assert animation.frame_for_timing(0.5) == A
        assert animation.frame_for_timing(1.5) == B
        assert animation.frame_for_timing(3.5) is None

    def test_interval_boundaries(self) -> None:
        animation = _animation(1.0, 2.0, 0.5)
        assert animation.frame_index_for_timing(0) == 0
        assert animation.frame_index_for_timing(1.0) == 0
        assert animation.frame_index_for_timing(1.0001) == 1
        assert animation.frame_index_for_timing(3.0) == 1
        assert animation.frame_index_for_timing(3.5) == 2
        assert animation.frame_index_for_timing(3.5001) is None

    def test_negative_time_is_start(self) -> None:
        assert _animation(1.0, 2.0).frame_for_timing(-5) == A

    def test_nan_is_none(self) -> None:
        assert _animation(1.0).frame_for_timing(math.nan) is None

    def test_lookup_is_stateless(self) -> None:
        animation = _animation(1.0, 2.0)
        assert animation.frame_for_timing(2.0) == B
        assert animation.frame_for_timing(0.1) == A
        assert animation.frame_for_timing(2.0) == B


# ── actors ────────────────────────────────


class TestActor:
    def test_lookup(self) -> None:
        actor = CharmieActor({"idle": _animation(1.0)})
        assert actor.animation("idle") is not None
        assert actor.animation("walk") is None
        assert "idle" in actor
        assert len(actor) == 1
        assert list(actor) == ["idle"]

    def test_image_for(self) -> None:
        actor = CharmieActor({"walk": _animation(1.0, 1.0)})
        assert actor.image_for("walk", 1.5) == B
        assert actor.image_for("walk", 5.0) is None
        assert actor.image_for("run", 0.0) is None

    def test_actor_is_a_copy(self) -> None:
        animations = {"idle": _animation(1.0)}
        actor = CharmieActor(animations)
        animations["walk"] = _animation(2.0)
        assert "walk" not in actor


# ── playback ────────────────────────────────


class TestAnimationPlayer:
    def test_starts_unloaded(self) -> None:
        player = AnimationPlayer()
        assert player.state == PlaybackState.UNLOADED
        assert player.current_image() is None
        player.advance(1.0)
        assert player.current_image() is None

    def test_load_pauses_at_start(self) -> None:
        player = AnimationPlayer().load(_animation(1.0, 1.0))
        assert player.state == PlaybackState.PAUSED
        player.advance(1.5)
        assert player.current_image() == A

    def test_play_once_stops_on_last_frame(self) -> None:
        player = AnimationPlayer().load(_animation(1.0, 1.0)).play_once()
        player.advance(1.5)
        assert player.current_image() == B
        player.advance(5.0)
        assert player.finished
        assert player.current_image() == B

    def test_unload_when_finished(self) -> None:
        player = AnimationPlayer().load(_animation(1.0)).play_once().unload_when_finished()
        player.advance(2.0)
        assert player.state == PlaybackState.UNLOADED
        assert player.current_image() is None

    def test_loop_wraps(self) -> None:
        player = AnimationPlayer().load(_animation(1.0, 1.0)).loop()
        player.advance(2.5)
        assert player.is_playing
        assert player.timing == pytest.approx(0.5)
        assert player.current_image() == A

    def test_speed_scales_time(self) -> None:
        player = AnimationPlayer(speed=2.0).load(_animation(1.0, 1.0)).play_once()
        player.advance(0.75)
        assert player.current_image() == B

    def test_pause_holds_position(self) -> None:
        player = AnimationPlayer().load(_animation(1.0, 1.0)).loop()
        player.advance(1.5)
        player.pause()
        player.advance(10.0)
        assert player.timing == pytest.approx(1.5)

    def test_transitions_need_an_animation(self) -> None:
        player = AnimationPlayer().loop()
        assert player.state == PlaybackState.UNLOADED
