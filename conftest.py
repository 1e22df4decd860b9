"""Global configuration for pytest"""

import numpy as np
import pytest

import spritetext


@pytest.fixture(autouse=True)
def predictable_random_numbers():
    """
    Called at start of each test, guarantees that calls to random produce the same output over subsequent tests runs,
    see http://docs.scipy.org/doc/numpy-1.10.1/reference/generated/numpy.random.seed.html
    """
    np.random.seed(0)


@pytest.fixture(autouse=True, scope="session")
def numerical_exceptions():
    """
    Ensure any numerical errors raise a warning in our test suite
    The point is that we enforce such cases to be handled explicitly in our code
    Preferably using local `with np.errstate(...)` constructs
    """
    np.seterr(all="raise")


@pytest.fixture
def atlas():
    """A small atlas with a few square sprites of different sizes."""
    atlas = spritetext.SpriteAtlas("icons")
    for name, size in [("star", 8), ("heart", 16), ("coin", 4)]:
        atlas.add_sprite(name, np.full((size, size, 4), 255, np.uint8))
    return atlas
