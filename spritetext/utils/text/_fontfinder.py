"""
Find a font file on the system, for when the user does not provide one.

We rely fully on finding fonts in certain directories. We do not use the
Windows registry or fontconfig.
"""

import os
import sys

import freetype

from .. import logger


# Families that are tried first, in order, when looking for a default font.
PREFERRED_FAMILIES = ("Noto Sans", "DejaVu Sans", "Liberation Sans", "Arial")

FONT_EXTENSIONS = ".ttf", ".otf"

_font_file_cache = {}


def find_font_file(family=None):
    """Find a font file for the given family name (case-insensitive).

    If family is None, one of the preferred families is selected, falling
    back to any font. Returns None if no (matching) font is found. Results
    are cached.
    """
    key = None if family is None else family.lower()
    try:
        return _font_file_cache[key]
    except KeyError:
        pass

    families = PREFERRED_FAMILIES if family is None else (family,)
    by_family = {}
    for filename in sorted(find_system_fonts()):
        try:
            face = freetype.Face(filename)
        except Exception as err:
            logger.debug(f"Skipping font {filename}: {err}")
            continue
        name = (face.family_name or b"").decode(errors="ignore").lower()
        style = (face.style_name or b"").decode(errors="ignore").lower()
        # Prefer the regular variant of a family
        if name not in by_family or style in ("regular", "book", "normal"):
            by_family[name] = filename

    result = None
    for name in families:
        result = by_family.get(name.lower())
        if result:
            break
    else:
        if family is None and by_family:
            result = by_family[sorted(by_family)[0]]

    _font_file_cache[key] = result
    return result
def find_system_fonts():
    """Get the set of font files in the system font directories."""
    return {
        filename
        for directory in get_system_font_directories()
        for filename in find_fonts_paths(directory)
    }


def find_fonts_paths(directory):
    """Get the set of .ttf and .otf files in the given directory (recursively)."""
    if not os.path.isdir(directory):
        raise OSError(f"Not a directory: {directory}")
    return {
        os.path.join(dirpath, fname)
        for dirpath, _, filenames in os.walk(directory)
        for fname in filenames
        if os.path.splitext(fname)[1].lower() in FONT_EXTENSIONS
    }


def get_system_font_directories():
    """Get the set of font directories that exist on this system."""
    home = os.path.expanduser("~")
    data_home = os.getenv("XDG_DATA_HOME") or os.path.join(home, ".local", "share")
    unix_dirs = [
        "/usr/share/fonts",
        "/usr/local/share/fonts",
        "/usr/X11R6/lib/X11/fonts/TTF",
        os.path.join(data_home, "fonts"),
        os.path.join(home, ".fonts"),
    ]
    if sys.platform.startswith("win"):
        dirs = [
            os.path.join(os.getenv("WINDIR", "C:/Windows"), "Fonts"),
            os.path.join(os.getenv("LOCALAPPDATA", ""), "Microsoft", "Windows", "Fonts"),
        ]
    elif sys.platform.startswith("darwin"):
        dirs = unix_dirs + [
            "/Library/Fonts",
            "/System/Library/Fonts",
            os.path.join(home, "Library", "Fonts"),
        ]
    else:
        dirs = unix_dirs
    return {os.path.abspath(d) for d in dirs if d and os.path.isdir(d)}
