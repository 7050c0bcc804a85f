from __future__ import annotations

from typing import List

import pytest

from HeuristicTSP.core import City
from tests.helpers import random_cities, square_cities


@pytest.fixture
def square() -> List[City]:
    return square_cities()


@pytest.fixture
def eight_cities() -> List[City]:
    return random_cities(8)
