from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an academy account holder.

    Plain data object; no DB access here.
    """

    user_id: int
    email: str
    full_name: Optional[str]
    password_hash: str
    role: Role
    verified: bool = False
    registration_complete: bool = False
    phone: Optional[str] = None
    user_code: Optional[str] = None
    academy_id: Optional[str] = None
    tenant_id: Optional[str] = None
    verification_code: Optional[str] = None
