import pathlib
import sys
from datetime import datetime, timezone

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def frozen(iso: str):
    """Clock pinned to an ISO instant (naive means UTC)."""
    instant = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def clock_at():
    return frozen


@pytest.fixture
def march_20_clock():
    # 12:00 in São Paulo on 2025-03-20 (a Thursday)
    return frozen("2025-03-20T15:00:00")
