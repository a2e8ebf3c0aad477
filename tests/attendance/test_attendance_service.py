from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.academy_system.academy_system.attendance.model import InstructorAttendance
from src.academy_system.academy_system.attendance.query import AttendanceQuery
from src.academy_system.academy_system.attendance.service import AttendanceService
from src.academy_system.academy_system.core.enums import InstructorAttendanceStatus, RequestStatus
from src.academy_system.academy_system.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.academy_system.academy_system.leaves.model import LeaveRequest

TENANT = "AC000001"
TODAY = date(2026, 3, 10)


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self._next_draft = 1
        self.records = {}
        self.drafts = {}

    def list_records(self, tenant_id):
        return sorted(self.records.values(), key=lambda r: r.date, reverse=True)

    def get_record(self, tenant_id, record_id):
        return self.records.get(record_id)

    def find_for_day(self, tenant_id, instructor_id, day):
        return next(
            (r for r in self.records.values() if r.instructor_id == instructor_id and r.date == day), None
        )

    def create_record(self, record):
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = replace(record, record_id=rid)
        return rid

    def update_record(self, record):
        self.records[record.record_id] = record
        return True

    def delete_record(self, tenant_id, record_id):
        return self.records.pop(record_id, None) is not None

    def insert_planned(self, tenant_id, rows, *, notes):
        inserted = 0
        for instructor_id, name, day in rows:
            if self.find_for_day(tenant_id, instructor_id, day):
                continue
            rid = self._next_id
            self._next_id += 1
            self.records[rid] = InstructorAttendance(
                record_id=rid,
                tenant_id=tenant_id,
                instructor_id=instructor_id,
                instructor_name=name,
                date=day,
                status=InstructorAttendanceStatus.PLANNED,
                notes=notes,
            )
            inserted += 1
        return inserted

    def list_drafts(self, tenant_id):
        return list(self.drafts.values())

    def get_draft(self, tenant_id, draft_id):
        return self.drafts.get(draft_id)

    def save_draft(self, draft):
        draft_id = draft.draft_id
        if not draft_id:
            draft_id = self._next_draft
            self._next_draft += 1
        self.drafts[draft_id] = replace(draft, draft_id=draft_id)
        return draft_id

    def delete_draft(self, tenant_id, draft_id):
        return self.drafts.pop(draft_id, None) is not None


class FakeLeavesRepo:
    def __init__(self, leaves=()):
        self.leaves = list(leaves)

    def list_leaves(self, tenant_id, *, status=None, instructor_id=None):
        return [l for l in self.leaves if status is None or l.status == status]


def _leave(start, end, status=RequestStatus.APPROVED):
    return LeaveRequest(
        request_id=1,
        tenant_id=TENANT,
        instructor_id="INS001",
        instructor_name="Ana Lee",
        start_date=start,
        end_date=end,
        reason="Trip",
        status=status,
        created_at=datetime(2026, 3, 1),
    )


def _service(leaves=()):
    repo = FakeAttendanceRepo()
    return AttendanceService(repo, FakeLeavesRepo(leaves), today=lambda: TODAY), repo


def _payload(**kw):
    data = {"instructorId": "INS002", "instructorName": "Ben Cruz", "date": "2026-03-09", "status": "present"}
    data.update(kw)
    return data


def test_sync_planned_leaves_fills_remaining_days_only():
    svc, repo = _service([
        _leave(date(2026, 3, 8), date(2026, 3, 12)),
        _leave(date(2026, 2, 1), date(2026, 2, 3)),
        _leave(date(2026, 3, 20), date(2026, 3, 21), status=RequestStatus.PENDING),
    ])
    svc.create_record(TENANT, _payload(instructorId="INS001", instructorName="Ana Lee", date="2026-03-11"))

    inserted = svc.sync_planned_leaves(TENANT)

    assert inserted == 2
    planned = sorted(r.date for r in repo.records.values() if r.status == InstructorAttendanceStatus.PLANNED)
    assert planned == [date(2026, 3, 10), date(2026, 3, 12)]
    assert svc.sync_planned_leaves(TENANT) == 0


def test_create_record_normalizes_and_rejects_duplicates():
    svc, _ = _service()

    record = svc.create_record(TENANT, _payload(status="ABSENT", startTime="9:05", endTime="17:00"))
    assert record.status == InstructorAttendanceStatus.ABSENT
    assert record.start_time == "09:05"

    with pytest.raises(ConflictError, match="Attendance record already exists for Ben Cruz on 2026-03-09"):
        svc.create_record(TENANT, _payload())


def test_create_record_validation():
    svc, _ = _service()

    with pytest.raises(ValidationError, match="Missing required fields"):
        svc.create_record(TENANT, {"instructorId": "INS002"})
    with pytest.raises(ValidationError):
        svc.create_record(TENANT, _payload(date="09-03-2026"))
    with pytest.raises(ValidationError, match="End time"):
        svc.create_record(TENANT, _payload(startTime="10:00", endTime="09:00"))


def test_update_and_delete_record():
    svc, _ = _service()
    first = svc.create_record(TENANT, _payload())
    svc.create_record(TENANT, _payload(date="2026-03-08"))

    updated = svc.update_record(TENANT, first.record_id, {"notes": "Late train"})
    assert updated.notes == "Late train"
    assert updated.date == date(2026, 3, 9)

    with pytest.raises(ConflictError):
        svc.update_record(TENANT, first.record_id, {"date": "2026-03-08"})

    svc.delete_record(TENANT, first.record_id)
    with pytest.raises(NotFoundError):
        svc.update_record(TENANT, first.record_id, {})
    with pytest.raises(NotFoundError):
        svc.delete_record(TENANT, first.record_id)


def test_list_records_applies_query():
    svc, _ = _service()
    svc.create_record(TENANT, _payload())
    svc.create_record(TENANT, _payload(instructorId="INS003", instructorName="Cy Dee", status="absent"))

    rows = svc.list_records(TENANT, query=AttendanceQuery.from_args({"status": "absent"}))

    assert [r.instructor_id for r in rows] == ["INS003"]


def test_draft_lifecycle_and_conversion():
    svc, repo = _service()

    draft = svc.save_draft(TENANT, {"instructorName": "Ben Cruz"})
    assert draft.draft_id == 1
    draft = svc.save_draft(TENANT, _payload(), draft_id=draft.draft_id)
    assert draft.date == date(2026, 3, 9)

    record = svc.convert_draft(TENANT, draft.draft_id)

    assert record.instructor_name == "Ben Cruz"
    assert repo.drafts == {}
    with pytest.raises(NotFoundError):
        svc.convert_draft(TENANT, draft.draft_id)
    with pytest.raises(NotFoundError):
        svc.save_draft(TENANT, {}, draft_id=42)


def test_export_selected_ids_in_given_order():
    svc, _ = _service()
    a = svc.create_record(TENANT, _payload())
    b = svc.create_record(TENANT, _payload(date="2026-03-08"))

    filename, text = svc.export_csv(TENANT, ids=[a.record_id, b.record_id])

    assert filename == "attendance-selected-2026-03-10.csv"
    lines = text.splitlines()
    assert len(lines) == 3
    assert "09-Mar-2026" in lines[1]
    assert "08-Mar-2026" in lines[2]


def test_import_counts_inserted_duplicates_and_invalid():
    svc, _ = _service()
    svc.create_record(TENANT, _payload())
    content = (
        "Instructor ID,Instructor Name,Date,Status,Remarks\n"
        "INS002,Ben Cruz,09-Mar-2026,Present,dup\n"
        "INS004,Dee Eve,2026-03-09,Unplanned Leave,\n"
        "INS005,,2026-03-09,Present,\n"
        "INS006,Fay Gee,someday,Present,\n"
    ).encode("utf-8")

    stats = svc.import_csv(TENANT, filename="attendance.csv", content=content)

    assert (stats.processed, stats.inserted, stats.duplicates, stats.invalid) == (4, 1, 1, 2)
    assert stats.errors[0].startswith("Row 4:")


def test_import_rejects_other_file_types():
    svc, _ = _service()

    with pytest.raises(ValidationError, match=".csv"):
        svc.import_csv(TENANT, filename="attendance.xlsx", content=b"")
