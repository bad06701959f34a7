from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.web import current_user, date_field, json_body, login_required, ok, privileged_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reviews/me", methods=["GET"], endpoint="my_reviews")
    @login_required
    def my_reviews():
        user_id = current_user().user_id
        latest = container.review_service.latest_for_user(user_id)
        history = container.review_service.list_for_user(user_id)
        return ok({"latest": latest.to_dict() if latest else None, "reviews": [r.to_dict() for r in history]})

    @app.route("/api/admin/reviews", methods=["POST"], endpoint="submit_review")
    @privileged_required
    def submit_review():
        data = json_body()
        user = current_user()
        try:
            target_id = int(data.get("user_id"))
        except (TypeError, ValueError):
            raise ValidationError("Employee is required")

        scores = data.get("scores")
        if not isinstance(scores, dict):
            raise ValidationError("Scores are required")

        review_date = date_field(data, "review_date", "Review date") if data.get("review_date") else now_local().date()
        review_id = container.review_service.submit(
            current_role=user.role,
            reviewer_id=user.user_id,
            user_id=target_id,
            scores=scores,
            comments=data.get("comments"),
            review_date=review_date,
        )
        return ok({"message": "Review submitted", "review_id": review_id}, 201)
