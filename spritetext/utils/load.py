"""
Utilities to load sprite atlases from image files, using imageio.
"""

import os
from importlib.util import find_spec

from . import logger


IMAGE_EXTENSIONS = ".png", ".jpg", ".jpeg", ".bmp", ".gif"


def load_sprite_atlas(directory, name=None):
    """Load the images in a directory into a SpriteAtlas.

    This function requires the imageio library.

    Each image becomes a sprite, named after the file (without extension).
    Images in subdirectories are added as well; each directory becomes a
    packable, named after its path relative to ``directory`` ("default" for
    the directory itself).

    Parameters
    ----------
    directory : str
        The directory to load images from.
    name : str | None
        The name of the atlas. Defaults to the name of the directory.

    Returns
    -------
    atlas : SpriteAtlas
        The atlas with all sprites.

    """
    if not find_spec("imageio"):
        raise ImportError(
            "The `imageio` library is required to load sprites: pip install imageio"
        )

    import imageio.v3 as iio  # noqa

    from ..resources import SpriteAtlas

    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise OSError(f"Not a directory: {directory}")
    if name is None:
        name = os.path.basename(directory)

    atlas = SpriteAtlas(name)
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        packable = os.path.relpath(dirpath, directory).replace(os.sep, "/")
        if packable == ".":
            packable = "default"
        for fname in sorted(filenames):
            stem, ext = os.path.splitext(fname)
            if ext.lower() not in IMAGE_EXTENSIONS:
                continue
            if stem in atlas:
                logger.warning(f"Skipping {fname} in {packable}: duplicate sprite name.")
                continue
            image = iio.imread(os.path.join(dirpath, fname))
            if image.ndim == 4:  # animated formats, take the first frame
                image = image[0]
            try:
                atlas.add_sprite(stem, image, packable)
            except ValueError as err:
                logger.warning(f"Skipping {fname} in {packable}: {err}")

    return atlas
