from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Registration:
    academy_id: str
    user_code: str
    tenant_id: str
    user_email: str
    business_info: Dict[str, Any] = field(default_factory=dict)
    admin_info: Dict[str, Any] = field(default_factory=dict)
    preferences: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "academyId": self.academy_id,
            "userId": self.user_code,
            "tenantId": self.tenant_id,
            "businessInfo": self.business_info,
            "adminInfo": self.admin_info,
            "preferences": self.preferences,
        }


@dataclass(frozen=True)
class CompletedRegistration:
    user_code: str
    academy_id: str


@dataclass(frozen=True)
class ImagePayload:
    """One uploaded image, already read into memory."""

    content: bytes
    content_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)
