from __future__ import annotations

from dataclasses import replace

import pytest
from werkzeug.security import generate_password_hash

from src.academy_system.academy_system.core.enums import Role
from src.academy_system.academy_system.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.academy_system.academy_system.users.model import User
from src.academy_system.academy_system.users.service import AuthService


class FakeUsersRepo:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email, full_name, password_hash, role, verification_code):
        uid = self._next_id
        self._next_id += 1
        self.users[uid] = User(
            user_id=uid,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            verification_code=verification_code,
        )
        return uid

    def mark_verified(self, user_id):
        self.users[user_id] = replace(self.users[user_id], verified=True)
        return True


def _service():
    repo = FakeUsersRepo()
    return AuthService(repo, code_factory=lambda: "123456"), repo


def test_signup_stores_hashed_password_and_code():
    svc, repo = _service()

    uid = svc.signup(email="Owner@Academy.test", password="secret1", full_name="Olive Owner")

    user = repo.users[uid]
    assert user.email == "owner@academy.test"
    assert user.password_hash != "secret1"
    assert user.verification_code == "123456"
    assert user.role == Role.ADMIN
    assert not user.verified


def test_signup_rejects_bad_input_and_duplicates():
    svc, _ = _service()

    with pytest.raises(ValidationError):
        svc.signup(email="not-an-email", password="secret1", full_name="X")
    with pytest.raises(ValidationError):
        svc.signup(email="a@b.test", password="123", full_name="X")

    svc.signup(email="a@b.test", password="secret1", full_name="X")
    with pytest.raises(ConflictError):
        svc.signup(email="a@b.test", password="secret1", full_name="X")


def test_verify_checks_code():
    svc, repo = _service()
    uid = svc.signup(email="a@b.test", password="secret1", full_name="X")

    with pytest.raises(ValidationError):
        svc.verify(email="a@b.test", code="000000")
    svc.verify(email="a@b.test", code="123456")

    assert repo.users[uid].verified
    with pytest.raises(NotFoundError):
        svc.verify(email="nobody@b.test", code="123456")


def test_authenticate():
    svc, repo = _service()
    repo.users[9] = User(
        user_id=9,
        email="admin@demo-academy.test",
        full_name="Demo Admin",
        password_hash=generate_password_hash("admin123"),
        role=Role.ADMIN,
        verified=True,
        registration_complete=True,
        tenant_id="AC000001",
    )

    user = svc.authenticate("Admin@Demo-Academy.test", "admin123")

    assert user.tenant_id == "AC000001"
    assert user.registration_complete
    with pytest.raises(AuthenticationError):
        svc.authenticate("admin@demo-academy.test", "wrong")
    with pytest.raises(AuthenticationError):
        svc.authenticate("ghost@demo-academy.test", "admin123")
