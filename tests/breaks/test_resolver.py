from __future__ import annotations

from datetime import datetime

import pytest

from hr_portal.breaks.model import BreakSchedule
from hr_portal.breaks.resolver import is_break_time

LUNCH = BreakSchedule(day_of_week=1, start_hour=15, end_hour=16)


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (14, 59, False),
        (15, 0, True),
        (15, 59, True),
        (16, 0, False),
        (9, 30, False),
    ],
)
def test_window_is_start_inclusive_end_exclusive(hour, minute, expected):
    assert is_break_time(LUNCH, datetime(2026, 1, 5, hour, minute)) is expected


def test_default_window_is_three_to_four():
    default = BreakSchedule.default_for(3)

    assert (default.start_hour, default.end_hour) == (15, 16)
