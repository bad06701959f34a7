from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional, Sequence

from ..common.validators import require_int_in_range, require_text
from ..core.constants import MAX_REVIEW_SCORE, MIN_REVIEW_SCORE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.repository import UserRepository
from .model import SCORE_FIELDS, PerformanceReview
from .repository import ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """Admins and HR rate employees; employees read their latest review."""

    def __init__(self, reviews: ReviewRepository, users: UserRepository):
        self._reviews = reviews
        self._users = users

    def submit(
        self,
        *,
        current_role: Role,
        reviewer_id: int,
        user_id: int,
        scores: Mapping[str, object],
        comments: Optional[str] = None,
        review_date: date,
    ) -> int:
        if not current_role.is_privileged:
            raise AuthorizationError("Only Admin or HR can submit reviews")

        if not self._users.get_by_id(int(user_id)):
            raise ValidationError("User does not exist")

        checked: dict[str, int] = {}
        for name in SCORE_FIELDS:
            label = name.replace("_", " ").capitalize()
            if name not in scores:
                raise ValidationError(f"{label} score is required")
            checked[name] = require_int_in_range(scores[name], label, MIN_REVIEW_SCORE, MAX_REVIEW_SCORE)

        review_id = self._reviews.create_review(
            user_id=int(user_id),
            reviewer_id=int(reviewer_id),
            scores=checked,
            comments=require_text(comments, "Comments").strip() or None,
            review_date=review_date,
        )
        logger.info("review %s for user %s submitted by %s", review_id, user_id, reviewer_id)
        return review_id

    def latest_for_user(self, user_id: int) -> Optional[PerformanceReview]:
        return self._reviews.latest_for_user(int(user_id))

    def list_for_user(self, user_id: int) -> Sequence[PerformanceReview]:
        return self._reviews.list_for_user(int(user_id))
