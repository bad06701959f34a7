from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List

from ..common.datetime_utils import day_of_week
from ..common.validators import require_int_in_range
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import BreakSchedule
from .repository import BreakScheduleRepository

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class BreakScheduleService:
    def __init__(self, breaks: BreakScheduleRepository):
        self._breaks = breaks
        self._listeners: list[Callable[[], None]] = []

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after an admin edits the schedule."""

        self._listeners.append(callback)

    def get_for_day(self, dow: int) -> BreakSchedule:
        return self._breaks.get_for_day(int(dow)) or BreakSchedule.default_for(int(dow))

    def get_for_date(self, moment: date) -> BreakSchedule:
        return self.get_for_day(day_of_week(moment))

    def list_week(self) -> List[dict]:
        stored = {s.day_of_week: s for s in self._breaks.list_all()}
        week = []
        for dow, name in enumerate(DAY_NAMES):
            schedule = stored.get(dow) or BreakSchedule.default_for(dow)
            week.append({"day": name, **schedule.to_dict()})
        return week

    def update(
        self,
        *,
        current_role: Role,
        day_of_week: int,
        start_hour: int,
        end_hour: int,
    ) -> BreakSchedule:
        if not current_role.is_privileged:
            raise AuthorizationError("You do not have permission")

        dow = require_int_in_range(day_of_week, "Day of week", 0, 6)
        start = require_int_in_range(start_hour, "Start hour", 0, 23)
        end = require_int_in_range(end_hour, "End hour", 0, 23)
        if start >= end:
            raise ValidationError("Break must end after it starts")

        self._breaks.upsert(day_of_week=dow, start_hour=start, end_hour=end)
        logger.info("break schedule for %s set to %02d-%02d", DAY_NAMES[dow], start, end)

        for callback in self._listeners:
            callback()
        return BreakSchedule(day_of_week=dow, start_hour=start, end_hour=end)
