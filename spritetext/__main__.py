"""A very tiny CLI.

Invoke using e.g. ``python -m spritetext version``, or
``python -m spritetext scan "Hi <sprite=star/>" --sprite star``.
"""

import sys
import argparse

import numpy as np

import spritetext
from spritetext.utils.text import MonospaceShaper, LayoutSettings
from spritetext.objects._anchors import compute_anchor_position


def build_atlas(args):
    if args.atlas:
        atlas = spritetext.load_sprite_atlas(args.atlas)
    else:
        atlas = spritetext.SpriteAtlas("cli")
    for name in args.sprite or ():
        if name not in atlas:
            atlas.add_sprite(name, np.full((16, 16, 4), 255, np.uint8))
    return atlas


def scan(args):
    atlas = build_atlas(args)
    tokens = spritetext.scan_sprite_tokens(args.text)
    display_text, resolutions = spritetext.rewrite_text(
        args.text, tokens, spritetext.AtlasResolver(atlas)
    )
    layout = MonospaceShaper().layout(display_text, LayoutSettings(args.font_size))

    print(repr(display_text))
    for resolution in resolutions:
        token = resolution.token
        position = compute_anchor_position(layout, resolution)
        where = "hidden" if position is None else f"({position[0]:g}, {position[1]:g})"
        print(
            f"{token.name}: offset={resolution.display_offset}"
            f" dx={token.offset_x:g} dy={token.offset_y:g} scale={token.scale:g}"
            f" position={where}"
        )
    unresolved = len(tokens) - len(resolutions)
    if unresolved:
        print(f"{unresolved} unresolved sprite(s) left as text")


def main(argv=None):
    # Get argv so we can massage it
    if argv is None:
        argv = sys.argv[1:]

    # Defaults and aliases
    if not argv:
        argv = ["help"]
    if argv == ["--version"]:
        argv = ["version"]

    # Let the rest to argparse

    parser = argparse.ArgumentParser(
        prog="spritetext",
        description="The (very basic) spritetext CLI",
    )
    parser.add_argument(
        "command", action="store", help="The command to run: 'help', 'version' or 'scan'"
    )
    parser.add_argument("text", nargs="?", default="", help="The text to scan")
    parser.add_argument(
        "--sprite", action="append", help="A sprite name to resolve (repeatable)"
    )
    parser.add_argument("--atlas", help="A directory with sprite images")
    parser.add_argument("--font-size", type=float, default=12, help="The font size")

    args = parser.parse_args(argv)
    command = args.command.lower()

    if command == "help":
        parser.print_help()
    elif command == "version":
        print("spritetext v" + spritetext.__version__)
    elif command == "scan":
        scan(args)
    else:
        print(f"Invalid command '{command}'")


if __name__ == "__main__":
    main()
