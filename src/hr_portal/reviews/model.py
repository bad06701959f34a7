from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

SCORE_FIELDS = (
    "work_performance",
    "quality_results",
    "attendance_behavior",
    "office_policies",
    "team_contribution",
)


@dataclass(frozen=True)
class PerformanceReview:
    review_id: int
    user_id: int
    reviewer_id: int
    work_performance: int
    quality_results: int
    attendance_behavior: int
    office_policies: int
    team_contribution: int
    review_date: date
    comments: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def scores(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in SCORE_FIELDS}

    @property
    def average(self) -> float:
        values = self.scores.values()
        return round(sum(values) / len(SCORE_FIELDS), 1)

    def to_dict(self) -> dict:
        return {
            "review_id": self.review_id,
            "user_id": self.user_id,
            "reviewer_id": self.reviewer_id,
            "scores": self.scores,
            "average": self.average,
            "comments": self.comments,
            "review_date": self.review_date.isoformat(),
        }
