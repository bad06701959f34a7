from __future__ import annotations

from ..core.constants import MAX_OVERTIME_HOURS, OVERTIME_HOURS_STEP, REQUIRED_SECONDS
from ..core.exceptions import BusinessRuleError, ValidationError

OVER_LIMIT_MESSAGE = (
    f"Maximum {MAX_OVERTIME_HOURS:g} hours can be requested. For more, contact management directly."
)


class OvertimeEligibilityGate:
    """Overtime can be requested once today's tracked time reaches the daily requirement."""

    def __init__(
        self,
        *,
        required_seconds: int = REQUIRED_SECONDS,
        max_hours: float = MAX_OVERTIME_HOURS,
        step: float = OVERTIME_HOURS_STEP,
    ):
        self._required = int(required_seconds)
        self._max_hours = float(max_hours)
        self._step = float(step)

    @property
    def required_seconds(self) -> int:
        return self._required

    def can_request(self, today_total_seconds: int) -> bool:
        return int(today_total_seconds) >= self._required

    def ensure_can_request(self, today_total_seconds: int) -> None:
        if not self.can_request(today_total_seconds):
            tracked = int(today_total_seconds) / 3600
            raise BusinessRuleError(
                f"You've tracked {tracked:.1f} hours today. "
                f"Complete {self._required / 3600:g} hours to request additional time."
            )

    def validate_hours(self, hours) -> float:
        try:
            value = float(hours)
        except (TypeError, ValueError):
            raise ValidationError("Hours must be a number")

        if value > self._max_hours:
            raise ValidationError(OVER_LIMIT_MESSAGE)
        if value <= 0:
            raise ValidationError("Hours must be greater than 0")
        if not (value / self._step).is_integer():
            raise ValidationError(f"Hours must be in steps of {self._step:g}")
        return value
