from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import PerformanceReview


class ReviewRepository(Protocol):
    def create_review(
        self,
        *,
        user_id: int,
        reviewer_id: int,
        scores: Mapping[str, int],
        comments: Optional[str],
        review_date: date,
    ) -> int:
        raise NotImplementedError

    def latest_for_user(self, user_id: int) -> Optional[PerformanceReview]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, limit: int = 20) -> Sequence[PerformanceReview]:
        raise NotImplementedError
