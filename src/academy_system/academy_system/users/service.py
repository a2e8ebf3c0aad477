from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import is_valid_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, VERIFICATION_CODE_DIGITS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    email: str
    full_name: str
    role: Role
    tenant_id: Optional[str]
    registration_complete: bool


class AuthService:
    """Use cases: sign up, verify the emailed code, log in."""

    def __init__(self, users: UserRepository, *, code_factory=None):
        self._users = users
        self._code_factory = code_factory or self._random_code

    @staticmethod
    def _random_code() -> str:
        return "".join(secrets.choice("0123456789") for _ in range(VERIFICATION_CODE_DIGITS))

    def signup(self, *, email: str, password: str, full_name: str) -> int:
        email = require_non_empty(email, "Email").lower()
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        code = self._code_factory()
        user_id = self._users.create_user(
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
            verification_code=code,
        )
        # Delivery is handled outside this service; the code is only logged.
        logger.info("Created user %s, verification code %s", email, code)
        return user_id

    def verify(self, *, email: str, code: str) -> None:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise NotFoundError("User not found")
        if user.verified:
            return
        if not code or (code or "").strip() != (user.verification_code or ""):
            raise ValidationError("Invalid verification code")
        self._users.mark_verified(user.user_id)

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            full_name=user.full_name or user.email,
            role=user.role,
            tenant_id=user.tenant_id,
            registration_complete=user.registration_complete,
        )
