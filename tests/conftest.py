import random

import pytest

from sudomines.generator import TUTORIAL_REGIONS, TUTORIAL_VALUES, build_tutorial_grid
from sudomines.utils import clone_grid


@pytest.fixture(autouse=True)
def seeded_random():
    # Generation is randomized; pin it so failures reproduce.
    random.seed(20240611)
    yield


@pytest.fixture
def tutorial_values():
    return clone_grid(TUTORIAL_VALUES)


@pytest.fixture
def tutorial_regions():
    return clone_grid(TUTORIAL_REGIONS)


@pytest.fixture
def tutorial_grid():
    # Mines are the 4s at (0,1), (1,2), (2,3), (3,0); nothing revealed.
    return build_tutorial_grid()
