from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_optional_date
from ..common.web import current_actor, current_tenant, domain_errors, json_body, tenant_required
from ..container import Container
from ..core.enums import SessionStatus
from ..core.exceptions import ValidationError
from .model import ScheduleEvent
from .status import status_badge, validate_schedule_consistency
from .views import SessionFilter, filter_sessions, month_calendar, paginate, sort_sessions, week_grid

_BASE = "/api/dashboard/services"


def _event_json(event: ScheduleEvent) -> dict:
    out = event.to_dict()
    out["badge"] = status_badge(event.course_status, event.cohort_status, event.status).to_dict()
    return out


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route(f"{_BASE}/schedules", methods=["GET"], endpoint="schedules_list")
    @tenant_required
    @domain_errors("Failed to fetch schedules")
    def schedules_list():
        events = service.build_schedule(current_tenant())
        flt = SessionFilter.from_args(request.args)
        today = service.now().date()
        if request.args.get("upcoming") == "true":
            events = [e for e in events if e.date >= today and e.status == SessionStatus.UPCOMING]
        if request.args.get("sessionId"):
            events = [e for e in events if e.session_id == request.args["sessionId"]]
        events = filter_sessions(events, flt)
        events = sort_sessions(events, request.args.get("sortBy", "date"), request.args.get("sortOrder", "asc"))

        view = request.args.get("view", "list")
        if view == "grid":
            try:
                anchor = parse_optional_date(request.args.get("weekStart")) or today
            except ValueError:
                raise ValidationError("weekStart must be a date (YYYY-MM-DD)")
            days = week_grid(events, anchor)
            return jsonify(
                {
                    "success": True,
                    "view": "grid",
                    "days": [
                        {
                            "date": d["date"].isoformat(),
                            "weekday": d["weekday"],
                            "sessions": [_event_json(e) for e in d["sessions"]],
                        }
                        for d in days
                    ],
                }
            )
        if view == "calendar":
            year = _int_arg("year", today.year)
            month = _int_arg("month", today.month)
            if not 1 <= month <= 12:
                raise ValidationError("month must be between 1 and 12")
            weeks = month_calendar(events, year, month)
            return jsonify(
                {
                    "success": True,
                    "view": "calendar",
                    "year": year,
                    "month": month,
                    "weeks": [
                        [
                            {
                                "date": cell["date"].isoformat(),
                                "inMonth": cell["inMonth"],
                                "sessions": [_event_json(e) for e in cell["sessions"]],
                            }
                            for cell in week
                        ]
                        for week in weeks
                    ],
                }
            )
        if view != "list":
            raise ValidationError("view must be list, grid or calendar")

        page = paginate(events, _int_arg("page", 1), _int_arg("limit", 100))
        return jsonify(
            {
                "success": True,
                "view": "list",
                "schedules": [_event_json(e) for e in page["items"]],
                "pagination": page["pagination"],
            }
        )

    @app.route(f"{_BASE}/schedules", methods=["POST"], endpoint="schedules_create")
    @tenant_required
    @domain_errors("Failed to create schedule")
    def schedules_create():
        data = json_body()
        if isinstance(data.get("sessions"), list):
            count = service.sync_sessions(current_tenant(), data["sessions"])
            return jsonify({"success": True, "count": count})
        event = service.create_session(current_tenant(), data)
        return jsonify({"success": True, "schedule": _event_json(event)}), 201

    @app.route(f"{_BASE}/schedules/sync", methods=["POST"], endpoint="schedules_sync")
    @tenant_required
    @domain_errors("Failed to sync schedules")
    def schedules_sync():
        sessions = json_body().get("sessions")
        if not isinstance(sessions, list):
            raise ValidationError("sessions must be a list")
        count = service.sync_sessions(current_tenant(), sessions)
        return jsonify({"success": True, "count": count})

    @app.route(f"{_BASE}/schedules", methods=["PUT"], endpoint="schedules_update")
    @tenant_required
    @domain_errors("Failed to update schedule")
    def schedules_update():
        data = json_body()
        session_id = data.get("id") or data.get("sessionId")
        if not session_id:
            raise ValidationError("Schedule ID is required")
        event = service.update_session(current_tenant(), str(session_id), data)
        return jsonify({"success": True, "schedule": _event_json(event)})

    @app.route(f"{_BASE}/schedules", methods=["DELETE"], endpoint="schedules_delete")
    @tenant_required
    @domain_errors("Failed to delete schedule")
    def schedules_delete():
        session_id = request.args.get("id") or json_body().get("id")
        if not session_id:
            raise ValidationError("Schedule ID is required")
        service.delete_session(current_tenant(), str(session_id))
        return jsonify({"success": True})

    @app.route(f"{_BASE}/schedules/modified", methods=["GET"], endpoint="schedules_modified")
    @tenant_required
    @domain_errors("Failed to fetch modified sessions")
    def schedules_modified():
        events = service.list_modified(current_tenant())
        return jsonify({"success": True, "sessions": [_event_json(e) for e in events]})

    @app.route(f"{_BASE}/schedules/consistency", methods=["GET"], endpoint="schedules_consistency")
    @tenant_required
    @domain_errors("Failed to check schedule consistency")
    def schedules_consistency():
        report = validate_schedule_consistency(service.build_schedule(current_tenant()))
        return jsonify(
            {
                "success": True,
                "isValid": report.is_valid,
                "inconsistentSessions": report.inconsistent_session_ids,
                "warnings": report.warnings,
            }
        )

    @app.route(f"{_BASE}/schedules/<session_id>/qr", methods=["GET"], endpoint="schedules_qr")
    @tenant_required
    @domain_errors("Failed to render QR code")
    def schedules_qr(session_id: str):
        png = service.session_qr_png(current_tenant(), session_id)
        return send_file(io.BytesIO(png), mimetype="image/png")

    # Session management
    _SM = f"{_BASE}/session-management"

    @app.route(f"{_SM}/session-reschedules", methods=["GET"], endpoint="session_reschedules_list")
    @tenant_required
    @domain_errors("Failed to fetch reschedules")
    def session_reschedules_list():
        records = service.list_reschedules(current_tenant(), request.args.get("sessionId") or None)
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route(f"{_SM}/session-reschedules", methods=["POST"], endpoint="session_reschedules_create")
    @tenant_required
    @domain_errors("Failed to reschedule session")
    def session_reschedules_create():
        data = json_body()
        event = service.reschedule(
            current_tenant(),
            session_id=data.get("sessionId", ""),
            new_date=data.get("newDate"),
            new_start_time=data.get("newStartTime"),
            new_end_time=data.get("newEndTime"),
            reason=data.get("reason", ""),
            rescheduled_by=data.get("rescheduledBy") or current_actor(),
        )
        return jsonify({"success": True, "session": _event_json(event)}), 201

    @app.route(f"{_SM}/session-reschedules", methods=["PUT"], endpoint="session_reschedules_slot_check")
    @tenant_required
    @domain_errors("Failed to check instructor availability")
    def session_reschedules_slot_check():
        data = json_body()
        result = service.check_instructor_slot(
            current_tenant(),
            instructor_id=data.get("instructorId"),
            day=data.get("date"),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            exclude_session_id=data.get("sessionId") or None,
        )
        return jsonify({"success": True, **result})

    @app.route(f"{_SM}/session-cancellations", methods=["GET"], endpoint="session_cancellations_list")
    @tenant_required
    @domain_errors("Failed to fetch cancellations")
    def session_cancellations_list():
        records = service.list_cancellations(current_tenant(), request.args.get("sessionId") or None)
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route(f"{_SM}/session-cancellations", methods=["POST"], endpoint="session_cancellations_create")
    @tenant_required
    @domain_errors("Failed to cancel session")
    def session_cancellations_create():
        data = json_body()
        event = service.cancel(
            current_tenant(),
            session_id=data.get("sessionId", ""),
            reason=data.get("reason", ""),
            cancelled_by=data.get("cancelledBy") or current_actor(),
        )
        return jsonify({"success": True, "session": _event_json(event)}), 201

    @app.route(f"{_SM}/instructor-reassignments", methods=["GET"], endpoint="instructor_reassignments_list")
    @tenant_required
    @domain_errors("Failed to fetch reassignments")
    def instructor_reassignments_list():
        records = service.list_reassignments(
            current_tenant(),
            request.args.get("sessionId") or None,
            cohort_id=request.args.get("cohortId") or None,
            course_id=request.args.get("courseId") or None,
            instructor_id=request.args.get("instructorId") or None,
        )
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route(f"{_SM}/instructor-reassignments", methods=["POST"], endpoint="instructor_reassignments_create")
    @tenant_required
    @domain_errors("Failed to reassign instructor")
    def instructor_reassignments_create():
        data = json_body()
        event = service.reassign(
            current_tenant(),
            session_id=data.get("sessionId", ""),
            new_instructor_id=data.get("newInstructorId", ""),
            new_instructor_name=data.get("newInstructor", ""),
            reason=data.get("reason"),
            reassigned_by=data.get("reassignedBy") or data.get("modifiedBy"),
        )
        return jsonify({"success": True, "session": _event_json(event)}), 201
