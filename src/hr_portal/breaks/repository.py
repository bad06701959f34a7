from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import BreakSchedule


class BreakScheduleRepository(Protocol):
    def get_for_day(self, day_of_week: int) -> Optional[BreakSchedule]:
        raise NotImplementedError

    def list_all(self) -> Sequence[BreakSchedule]:
        """Stored rows ordered by day_of_week (days without a row are absent)."""

        raise NotImplementedError

    def upsert(self, *, day_of_week: int, start_hour: int, end_hour: int) -> None:
        raise NotImplementedError
