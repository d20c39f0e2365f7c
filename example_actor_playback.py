#!/usr/bin/env python3
"""
🎨 CHARMI - Actor Playback Example
==================================
Copyright (c) 2025 PNGN-Tec LLC

Plays an actor's animation in the terminal, or exports it as a GIF.

    python example_actor_playback.py                      # built-in demo
    python example_actor_playback.py penguin.toml -a walk --loops 3
    python example_actor_playback.py penguin.toml -a walk --gif walk.gif
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from charmi_animation import AnimationPlayer
from charmi_config import get_config
from charmi_decode import decode_actor
from charmi_errors import CharmiError
from charmi_preview import save_gif
from charmi_render import ANSI, static_view

DEMO_ACTOR = '''
[values]
gap = "."

[values.colors]
w = "white"
o = [255, 165, 0]
b = "dark blue"

[[a.wave.f]]
text = """
.(o>.
/|_|\\\\
.^.^.
"""
fg = """
.w.o.
wwwww
.o.o.
"""
timing = 0.4

[[a.wave.f]]
text = """
.<o).
/|_|\\\\
.^.^.
"""
fg = """
.ow..
wwwww
.o.o.
"""
timing = 0.4

[[a.wave.f]]
text = """
\\\\(o>.
.|_|\\\\
.^.^.
"""
fg = """
w.wo.
.wwww
.o.o.
"""
bg = """
b....
.....
.....
"""
timing = 0.4
'''

FRAME_STEP = 1 / 30


def play_in_terminal(actor, name: str, loops: int, speed: float):
    """Draw frames in place until the requested number of loops is done"""
    animation = actor.animation(name)
    player = AnimationPlayer(speed=speed).load(animation)
    if loops > 1:
        player.loop()
    else:
        player.play_once()

    elapsed = 0.0
    total = animation.duration * loops / speed
    drawn = 0
    while elapsed < total and player.current_image() is not None:
        lines = static_view(player.current_image())
        if drawn:
            sys.stdout.write(f"{ANSI.CSI}{drawn}A")
        for line in lines:
            sys.stdout.write(f"{ANSI.CSI}2K{line}\n")
        sys.stdout.flush()
        drawn = len(lines)

        time.sleep(FRAME_STEP)
        player.advance(FRAME_STEP)
        elapsed += FRAME_STEP


def main():
    parser = argparse.ArgumentParser(description='CHARMI actor playback')
    parser.add_argument('actor', nargs='?', help='Actor definition (.toml); demo actor if omitted')
    parser.add_argument('-a', '--animation', default=None, help='Animation name')
    parser.add_argument('--loops', type=int, default=2)
    parser.add_argument('--speed', type=float, default=1.0)
    parser.add_argument('--gif', default=None, help='Write a GIF preview instead of playing')
    parser.add_argument('--fps', type=int, default=None)
    args = parser.parse_args()

    config = get_config()
    logging.basicConfig(level=logging.DEBUG if config.debug_mode else config.log_level)

    source = Path(args.actor).read_bytes() if args.actor else DEMO_ACTOR
    try:
        actor = decode_actor(source)
    except CharmiError as e:
        print(f"✗ Could not load actor: {e}")
        return 1

    if not actor.names():
        print("✗ Actor defines no animations")
        return 1

    name = args.animation or actor.names()[0]
    animation = actor.animation(name)
    if animation is None:
        print(f"✗ No animation {name!r}; available: {', '.join(actor.names())}")
        return 1

    print(f"🎨 {name}: {len(animation)} frames, {animation.duration:.2f}s")
    print("=" * 40)

    if args.gif:
        output = save_gif(animation, args.gif, fps=args.fps)
        print(f"\n✓ Saved {output}")
    else:
        play_in_terminal(actor, name, args.loops, args.speed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
