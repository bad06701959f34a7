from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email_domain, require_min_length, require_non_empty, require_text
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role
    department: Optional[str]

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            department=user.department,
        )



def _optional_text(value, field_name: str) -> Optional[str]:
    return require_text(value, field_name).strip() or None


class AuthService:
    """Use case: register and authenticate accounts of the organisation's email domain."""

    def __init__(self, users: UserRepository, *, email_domain: str):
        self._users = users
        self._email_domain = email_domain

    def _create(self, *, name, email, password, role: Role, department) -> SessionUser:
        name = require_non_empty(name, "Name")
        email = require_email_domain(email, self._email_domain)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        department = _optional_text(department, "Department")

        if self._users.get_by_email(email):
            raise ValidationError("An account with this email already exists. Please sign in instead.")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=department,
        )
        logger.info("created user %s (%s)", user_id, role.value)
        return SessionUser(user_id=user_id, name=name, email=email, role=role, department=department)

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        department: str = "",
    ) -> SessionUser:
        if role == Role.ADMIN:
            raise ValidationError("Admin accounts are provisioned by an administrator")
        return self._create(name=name, email=email, password=password, role=role, department=department)

    def provision(
        self,
        *,
        current_role: Optional[Role],
        name: str,
        email: str,
        password: str,
        role: Role,
        department: str = "",
    ) -> SessionUser:
        """Create an account of any role on behalf of an administrator.

        ``current_role=None`` is the trusted command line path used to create the first Admin.
        """
        if current_role is not None and current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")
        return self._create(name=name, email=email, password=password, role=role, department=department)

    def authenticate(self, email: str, password: str) -> SessionUser:
        try:
            email = require_email_domain(email, self._email_domain)
        except ValidationError as e:
            raise AuthenticationError(str(e))
        if not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser.from_user(user)


class UserService:
    """Use case: profile self-service and employee administration."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User does not exist")
        return user

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        department: str = "",
        phone_number: str = "",
        birthday: Optional[date] = None,
    ) -> User:
        self.get(user_id)
        name = require_non_empty(name, "Name")
        self._users.update_profile(
            user_id=int(user_id),
            name=name,
            department=_optional_text(department, "Department"),
            phone_number=_optional_text(phone_number, "Phone number"),
            birthday=birthday,
        )
        return self.get(user_id)

    def list_employees(self) -> Sequence[User]:
        return self._users.list_by_role(Role.EMPLOYEE)

    def delete_user(
        self,
        *,
        current_role: Role,
        user_id: int,
        before_delete: Optional[Callable[[User], None]] = None,
    ) -> None:
        """Delete a non-Admin account.

        ``before_delete`` runs once the target passed every check and still exists,
        so callers can close whatever the user has open.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        user = self.get(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        if before_delete is not None:
            before_delete(user)

        if not self._users.delete_by_id(int(user_id)):
            raise ValidationError("Failed to delete user")
        logger.info("deleted user %s", user_id)
