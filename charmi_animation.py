#!/usr/bin/env python3
"""
🎨 CHARMI - Animation Module
============================
Copyright (c) 2025 PNGN-Tec LLC

Timed Frame Sequences
=====================
A CharmieAnimation is an ordered list of (image, duration) frames. At
construction the cumulative end time of every frame is computed once, so
looking up the frame for an elapsed time is a binary search:

    durations   1.0   2.0   0.5
    end times   1.0   3.0   3.5

    t <= 1.0        -> frame 0
    1.0 < t <= 3.0  -> frame 1
    3.0 < t <= 3.5  -> frame 2
    t > 3.5         -> None (finished)

Lookups are pure. Looping, pausing and speed are playback policy and live
in AnimationPlayer, which callers advance with their own clock.

A CharmieActor groups named animations ("idle", "walk", ...) of one
character.
"""

import bisect
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from charmi_errors import EmptyAnimation, NonPositiveDuration
from charmi_grid import CharacterMapImage

logger = logging.getLogger('charmi.animation')


# ============================================================================
# FRAMES AND ANIMATIONS
# ============================================================================

@dataclass(frozen=True)
class CharmieAnimationFrame:
    """One image shown for `duration` seconds"""
    image: CharacterMapImage
    duration: float


FrameLike = Union[CharmieAnimationFrame, Tuple[CharacterMapImage, float]]


def _checked_duration(index: int, duration) -> float:
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise NonPositiveDuration(index, duration)
    duration = float(duration)
    # NaN fails the comparison
    if not duration > 0 or not math.isfinite(duration):
        raise NonPositiveDuration(index, duration)
    return duration


class CharmieAnimation:
    """
    Immutable sequence of timed frames.

    Build with from_frames(); the constructor assumes validated input.
    """

    def __init__(self, frames: Sequence[CharmieAnimationFrame], end_times: Sequence[float]):
        self._frames: Tuple[CharmieAnimationFrame, ...] = tuple(frames)
        self._end_times: Tuple[float, ...] = tuple(end_times)

    @classmethod
    def from_frames(cls, frames: Iterable[FrameLike]) -> 'CharmieAnimation':
        """
        Validate frames and precompute their cumulative end times.

        Args:
            frames: CharmieAnimationFrame objects or (image, duration) pairs

        Raises:
            EmptyAnimation: No frames were given
            NonPositiveDuration: A duration is zero, negative or not finite
        """
        checked: List[CharmieAnimationFrame] = []
        end_times: List[float] = []
        elapsed = 0.0
        for index, frame in enumerate(frames):
            if isinstance(frame, CharmieAnimationFrame):
                image, duration = frame.image, frame.duration
            else:
                image, duration = frame
            duration = _checked_duration(index, duration)
            elapsed += duration
            checked.append(CharmieAnimationFrame(image, duration))
            end_times.append(elapsed)

        if not checked:
            raise EmptyAnimation("An animation needs at least one frame")

        logger.debug(f"Animation built: {len(checked)} frames, {elapsed:.3f}s")
        return cls(checked, end_times)

    @property
    def duration(self) -> float:
        """Total playing time in seconds"""
        return self._end_times[-1]

    @property
    def frames(self) -> Tuple[CharmieAnimationFrame, ...]:
        return self._frames

    @property
    def timings(self) -> Tuple[Tuple[float, int], ...]:
        """(end_time, frame index) pairs in frame order"""
        return tuple((end, index) for index, end in enumerate(self._end_times))

    def frame(self, index: int) -> Optional[CharacterMapImage]:
        if 0 <= index < len(self._frames):
            return self._frames[index].image
        return None

    def frame_index_for_timing(self, t: float) -> Optional[int]:
        """
        Index of the frame showing at elapsed time t.

        Negative times clamp to the start. Returns None once t is past the
        total duration, and for NaN.
        """
        if math.isnan(t):
            return None
        if t < 0:
            t = 0.0
        if t > self._end_times[-1]:
            return None
        return bisect.bisect_left(self._end_times, t)

    def frame_for_timing(self, t: float) -> Optional[CharacterMapImage]:
        index = self.frame_index_for_timing(t)
        if index is None:
            return None
        return self._frames[index].image

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Tuple[float, CharacterMapImage]]:
        for frame in self._frames:
            yield frame.duration, frame.image

    def __add__(self, other: 'CharmieAnimation') -> 'CharmieAnimation':
        if not isinstance(other, CharmieAnimation):
            return NotImplemented
        return CharmieAnimation.from_frames(self._frames + other._frames)

    def __eq__(self, other):
        if not isinstance(other, CharmieAnimation):
            return NotImplemented
        return self._frames == other._frames

    __hash__ = None

    def __repr__(self):
        return f"CharmieAnimation(frames={len(self._frames)}, duration={self.duration})"


# ============================================================================
# ACTORS
# ============================================================================

class CharmieActor:
    """Read-only collection of named animations"""

    def __init__(self, animations: Mapping[str, CharmieAnimation]):
        self._animations: Dict[str, CharmieAnimation] = dict(animations)

    def animation(self, name: str) -> Optional[CharmieAnimation]:
        """The named animation, or None if the actor has no such animation"""
        return self._animations.get(name)

    def names(self) -> List[str]:
        return sorted(self._animations)

    def items(self) -> Iterator[Tuple[str, CharmieAnimation]]:
        return iter(self._animations.items())

    def image_for(self, name: str, t: float) -> Optional[CharacterMapImage]:
        """Frame of animation `name` at elapsed time t, if any"""
        animation = self._animations.get(name)
        if animation is None:
            logger.debug(f"Actor has no animation named {name!r}")
            return None
        return animation.frame_for_timing(t)

    def __contains__(self, name) -> bool:
        return name in self._animations

    def __len__(self) -> int:
        return len(self._animations)

    def __iter__(self) -> Iterator[str]:
        return iter(self._animations)

    def __eq__(self, other):
        if not isinstance(other, CharmieActor):
            return NotImplemented
        return self._animations == other._animations

    __hash__ = None

    def __repr__(self):
        return f"CharmieActor(animations={self.names()})"


# ============================================================================
# PLAYBACK
# ============================================================================

class PlaybackState(Enum):
    """Playback state of an AnimationPlayer"""
    UNLOADED = "unloaded"
    PAUSED = "paused"
    PLAY_ONCE = "play_once"
    LOOP = "loop"
    FINISHED = "finished"


class AnimationPlayer:
    """
    Caller-driven playback of one animation.

    The player owns no clock: call advance() with the seconds elapsed since
    the previous call. Play-once stops on the last frame, loop wraps
    around the total duration.

    Example:
        player = AnimationPlayer()
        player.load(actor.animation("idle")).loop()
        player.advance(1 / 12)
        image = player.current_image()
    """

    def __init__(self, speed: float = 1.0):
        self.speed = speed
        self.animation: Optional[CharmieAnimation] = None
        self.timing = 0.0
        self.state = PlaybackState.UNLOADED
        self._unload_when_finished = False

    @property
    def is_playing(self) -> bool:
        return self.state in (PlaybackState.PLAY_ONCE, PlaybackState.LOOP)

    @property
    def finished(self) -> bool:
        return self.state == PlaybackState.FINISHED

    def load(self, animation: CharmieAnimation) -> 'AnimationPlayer':
        """Load an animation, paused at its first frame"""
        self.animation = animation
        self.timing = 0.0
        self.state = PlaybackState.PAUSED
        return self

    def play_once(self) -> 'AnimationPlayer':
        if self.animation is not None:
            self.state = PlaybackState.PLAY_ONCE
        return self

    def loop(self) -> 'AnimationPlayer':
        if self.animation is not None:
            self.state = PlaybackState.LOOP
        return self

    def pause(self) -> 'AnimationPlayer':
        if self.animation is not None:
            self.state = PlaybackState.PAUSED
        return self

    def unload(self):
        self.animation = None
        self.timing = 0.0
        self.state = PlaybackState.UNLOADED
        self._unload_when_finished = False

    def unload_when_finished(self) -> 'AnimationPlayer':
        """Drop the animation as soon as a play-once run completes"""
        self._unload_when_finished = True
        return self

    def advance(self, elapsed_seconds: float):
        """Move the playhead by elapsed_seconds scaled by speed"""
        if not self.is_playing:
            return

        duration = self.animation.duration
        self.timing += elapsed_seconds * self.speed
        if self.timing < duration:
            return

        if self.state == PlaybackState.LOOP:
            self.timing %= duration
        elif self._unload_when_finished:
            self.unload()
        else:
            self.timing = duration
            self.state = PlaybackState.FINISHED

    def current_image(self) -> Optional[CharacterMapImage]:
        if self.animation is None:
            return None
        return self.animation.frame_for_timing(self.timing)
