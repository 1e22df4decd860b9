"""
Utility functions for spritetext.

.. currentmodule:: spritetext.utils

.. autosummary::
    :toctree: utils/
    :template: ../_templates/custom_layout.rst

    clock.Clock
    ticker.Ticker
    transform.AffineTransform
    load.load_sprite_atlas
    enums

"""

import os
import logging


logger = logging.getLogger("spritetext")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("SPRITETEXT_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid spritetext log level: {level}")


_set_log_level()


from . import enums  # noqa: F401, E402
