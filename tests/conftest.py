from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 12, 10, 9, 0, 0))
