from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SCORE_FIELDS, PerformanceReview
from .repository import ReviewRepository

_COLUMNS = "review_id, user_id, reviewer_id, " + ", ".join(SCORE_FIELDS) + ", comments, review_date, created_at"


def _to_review(r: dict) -> PerformanceReview:
    return PerformanceReview(
        review_id=int(r["review_id"]),
        user_id=int(r["user_id"]),
        reviewer_id=int(r["reviewer_id"]),
        review_date=r["review_date"],
        comments=r.get("comments"),
        created_at=r.get("created_at"),
        **{name: int(r[name]) for name in SCORE_FIELDS},
    )


class MySQLReviewRepository(ReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_review(
        self,
        *,
        user_id: int,
        reviewer_id: int,
        scores: Mapping[str, int],
        comments: Optional[str],
        review_date: date,
    ) -> int:
        columns = ", ".join(SCORE_FIELDS)
        placeholders = ",".join(["%s"] * len(SCORE_FIELDS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO performance_reviews(user_id, reviewer_id, {columns}, comments, review_date)
                VALUES(%s,%s,{placeholders},%s,%s)
                """,
                (int(user_id), int(reviewer_id), *[int(scores[name]) for name in SCORE_FIELDS], comments, review_date),
            )
            return int(cur.lastrowid)

    def latest_for_user(self, user_id: int) -> Optional[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM performance_reviews
                WHERE user_id=%s
                ORDER BY review_date DESC, review_id DESC
                LIMIT 1
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_review(r) if r else None

    def list_for_user(self, user_id: int, limit: int = 20) -> Sequence[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM performance_reviews
                WHERE user_id=%s
                ORDER BY review_date DESC, review_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_review(r) for r in fetchall(cur)]
