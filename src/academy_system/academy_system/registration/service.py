from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import CompletedRegistration, Registration
from .repository import RegistrationRepository
from .validation import validate_all, validate_step

logger = logging.getLogger(__name__)


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


class RegistrationService:
    """Use case: finish the onboarding wizard for a verified user."""

    def __init__(self, users: UserRepository, registrations: RegistrationRepository):
        self._users = users
        self._registrations = registrations

    @staticmethod
    def validate(payload: Dict[str, Any], step: Optional[int] = None) -> Dict[str, Any]:
        if step is None:
            return validate_all(payload)
        section = {0: "businessInfo", 1: "adminInfo", 2: "preferences"}.get(step)
        data = payload.get(section) if section else payload
        return validate_step(step, data if data is not None else {})

    def get_registration(self, user_email: Optional[str]) -> Registration:
        if not user_email:
            raise AuthenticationError("Unauthorized")
        registration = self._registrations.get_for_email(user_email)
        if not registration:
            raise NotFoundError("Registration not found.")
        return registration

    def complete(self, *, user_email: Optional[str], payload: Dict[str, Any]) -> CompletedRegistration:
        if not user_email:
            raise AuthenticationError("Unauthorized")

        user = self._users.get_by_email(user_email)
        if not user:
            raise NotFoundError("User not found.")
        if not user.verified:
            raise AuthorizationError("Email not verified.")
        if user.registration_complete:
            raise ValidationError("Registration already completed.")

        business_info = _section(payload, "businessInfo")
        admin_info = _section(payload, "adminInfo")
        preferences = _section(payload, "preferences")

        full_name = str(admin_info.get("fullName") or "").strip()
        if not full_name:
            raise ValidationError("Full name is required.")
        if not str(business_info.get("businessName") or "").strip():
            raise ValidationError("Business name is required.")

        phone = str(admin_info.get("phone") or "").strip() or None

        result = self._registrations.complete_registration(
            user_id=user.user_id,
            user_email=user.email,
            full_name=full_name,
            phone=phone,
            business_info=business_info,
            admin_info=admin_info,
            preferences=preferences,
            existing_user_code=user.user_code,
            existing_academy_id=user.academy_id,
        )
        logger.info("User %s registered academy %s", user.email, result.academy_id)
        return result
