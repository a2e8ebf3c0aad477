from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from .model import CompletedRegistration, Registration


class RegistrationRepository(Protocol):
    def get_for_email(self, user_email: str) -> Optional[Registration]:
        raise NotImplementedError

    def complete_registration(
        self,
        *,
        user_id: int,
        user_email: str,
        full_name: str,
        phone: Optional[str],
        business_info: Dict[str, Any],
        admin_info: Dict[str, Any],
        preferences: Dict[str, Any],
        existing_user_code: Optional[str],
        existing_academy_id: Optional[str],
    ) -> CompletedRegistration:
        """Allocate codes, update the user and upsert the registration atomically."""

        raise NotImplementedError
