from __future__ import annotations

import logging

from ..core.enums import RequestKind, RequestStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, ValidationError
from .repository import RequestRepository

logger = logging.getLogger(__name__)

DECISIONS = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


class ApprovalWorkflow:
    """Admin/HR decision on a pending leave or overtime request.

    A request is decided once: the update only applies while it is still
    Pending, so a second decision (or a concurrent one) fails loudly.
    """

    def __init__(self, requests: RequestRepository):
        self._requests = requests

    def decide(
        self,
        *,
        kind: RequestKind,
        request_id: int,
        outcome: RequestStatus,
        current_role: Role,
        decided_by: int,
    ) -> None:
        if not current_role.is_privileged:
            raise AuthorizationError("You do not have permission")
        if outcome not in DECISIONS:
            raise ValidationError("Decision must be Approved or Rejected")

        if kind == RequestKind.LEAVE:
            existing = self._requests.get_leave(request_id=int(request_id))
            decide = self._requests.decide_leave
        elif kind == RequestKind.OVERTIME:
            existing = self._requests.get_overtime(request_id=int(request_id))
            decide = self._requests.decide_overtime
        else:
            raise ValidationError("Unknown request type")

        if existing is None:
            raise ValidationError("Request does not exist")
        if existing.status != RequestStatus.PENDING:
            raise ConflictError(f"Request was already {existing.status.value.lower()}")

        if not decide(request_id=int(request_id), status=outcome, decided_by=int(decided_by)):
            raise ConflictError("Request was decided by someone else")

        logger.info("%s request %s %s by user %s", kind.value, request_id, outcome.value.lower(), decided_by)
