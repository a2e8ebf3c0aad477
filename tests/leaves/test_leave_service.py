from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.academy_system.academy_system.core.enums import RequestStatus, Role
from src.academy_system.academy_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.academy_system.academy_system.leaves.model import LeaveRequest
from src.academy_system.academy_system.leaves.service import LeaveService

TENANT = "AC000001"


class FakeLeavesRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, LeaveRequest] = {}

    def create_leave(self, *, tenant_id, instructor_id, instructor_name, start_date, end_date, reason, leave_type=None):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = LeaveRequest(
            request_id=rid,
            tenant_id=tenant_id,
            instructor_id=instructor_id,
            instructor_name=instructor_name,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2026, 2, 1, 10, 0, 0),
            leave_type=leave_type,
        )
        return rid

    def get_leave(self, tenant_id, request_id):
        return self.rows.get(int(request_id))

    def list_leaves(self, tenant_id, *, status=None, instructor_id=None):
        return [
            r for r in self.rows.values()
            if (status is None or r.status == status) and (instructor_id is None or r.instructor_id == instructor_id)
        ]

    def decide_leave(self, tenant_id, *, request_id, status, decided_by, admin_note=None):
        row = self.rows.get(int(request_id))
        if not row or row.status != RequestStatus.PENDING:
            return False
        self.rows[int(request_id)] = replace(
            row, status=status, decided_by=decided_by, decided_at=datetime(2026, 2, 1, 11, 0), admin_note=admin_note
        )
        return True


def _create(svc, start=date(2026, 3, 2), end=date(2026, 3, 4)):
    return svc.create_leave(
        tenant_id=TENANT,
        instructor_id="INS001",
        instructor_name="Ana Lee",
        start_date=start,
        end_date=end,
        reason="Family trip",
        leave_type="Vacation",
    )


def test_create_leave_validates_range_and_reason():
    svc = LeaveService(FakeLeavesRepo())

    with pytest.raises(ValidationError, match="End date"):
        _create(svc, start=date(2026, 3, 4), end=date(2026, 3, 2))
    with pytest.raises(ValidationError):
        svc.create_leave(
            tenant_id=TENANT, instructor_id="INS001", instructor_name="Ana Lee",
            start_date=date(2026, 3, 2), end_date=date(2026, 3, 2), reason="",
        )


def test_admin_approves_pending_leave():
    repo = FakeLeavesRepo()
    svc = LeaveService(repo)
    rid = _create(svc)

    svc.approve_leave(tenant_id=TENANT, current_role=Role.ADMIN, decided_by="Dana", request_id=rid, admin_note=" ok ")

    assert repo.rows[rid].status == RequestStatus.APPROVED
    assert repo.rows[rid].admin_note == "ok"
    assert [l.request_id for l in svc.approved_leaves(TENANT)] == [rid]


def test_staff_cannot_decide():
    svc = LeaveService(FakeLeavesRepo())
    rid = _create(svc)

    with pytest.raises(AuthorizationError):
        svc.reject_leave(tenant_id=TENANT, current_role=Role.STAFF, decided_by="Sam", request_id=rid)


def test_decided_or_missing_leave_cannot_be_decided_again():
    svc = LeaveService(FakeLeavesRepo())
    rid = _create(svc)
    svc.reject_leave(tenant_id=TENANT, current_role=Role.ADMIN, decided_by="Dana", request_id=rid)

    with pytest.raises(ValidationError, match="already been decided"):
        svc.approve_leave(tenant_id=TENANT, current_role=Role.ADMIN, decided_by="Dana", request_id=rid)
    with pytest.raises(NotFoundError):
        svc.approve_leave(tenant_id=TENANT, current_role=Role.ADMIN, decided_by="Dana", request_id=99)


def test_approved_between_overlaps_window():
    svc = LeaveService(FakeLeavesRepo())
    rid = _create(svc)
    svc.approve_leave(tenant_id=TENANT, current_role=Role.ADMIN, decided_by="Dana", request_id=rid)

    assert len(svc.approved_between(TENANT, date(2026, 3, 4), date(2026, 3, 10))) == 1
    assert svc.approved_between(TENANT, date(2026, 3, 5), date(2026, 3, 10)) == []
