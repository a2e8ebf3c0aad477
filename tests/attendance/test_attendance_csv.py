from datetime import date

from src.academy_system.academy_system.attendance.csv_io import (
    export_csv,
    export_filename,
    parse_import_date,
    read_csv,
    status_from_label,
    status_label,
)
from src.academy_system.academy_system.attendance.model import InstructorAttendance
from src.academy_system.academy_system.core.enums import InstructorAttendanceStatus


def test_status_labels_both_ways():
    assert status_label("planned") == "Planned leave"
    assert status_label("absent") == "Unplanned Leave"
    assert status_label("present") == "Present"
    assert status_from_label("Planned leave") == "planned"
    assert status_from_label("Unplanned Leave") == "absent"
    assert status_from_label("") == "present"


def test_export_csv_uses_display_dates_and_labels():
    records = [
        InstructorAttendance(
            record_id=1,
            tenant_id="AC000001",
            instructor_id="INS001",
            instructor_name="Lee, Ana",
            date=date(2026, 10, 5),
            status=InstructorAttendanceStatus.PLANNED,
            notes="Planned leave",
        )
    ]

    lines = export_csv(records).splitlines()

    assert lines[0] == "Instructor ID,Instructor Name,Date,Start Time,End Time,Status,Remarks"
    assert lines[1] == 'INS001,"Lee, Ana",05-Oct-2026,,,Planned leave,Planned leave'


def test_export_filename():
    assert export_filename(selected=True, today=date(2026, 10, 5)) == "attendance-selected-2026-10-05.csv"
    assert export_filename(selected=False, today=date(2026, 10, 5)) == "attendance-all-2026-10-05.csv"


def test_parse_import_date_formats():
    assert parse_import_date("2026-10-05") == date(2026, 10, 5)
    assert parse_import_date("05-Oct-2026") == date(2026, 10, 5)
    assert parse_import_date("05/10/2026") == date(2026, 10, 5)
    assert parse_import_date("yesterday") is None


def test_read_csv_maps_legacy_headers_and_skips_blank_rows():
    text = "\ufeffStudent ID,Student Name,Date,Status,Remarks\nINS001,Ana Lee,05-Oct-2026,Unplanned Leave,Flu\n,,,,\n"

    rows = read_csv(text)

    assert len(rows) == 1
    assert rows[0]["instructorId"] == "INS001"
    assert rows[0]["instructorName"] == "Ana Lee"
    assert rows[0]["status"] == "absent"
    assert rows[0]["notes"] == "Flu"
