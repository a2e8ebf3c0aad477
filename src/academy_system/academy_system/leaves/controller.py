from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_actor, current_tenant, domain_errors, json_body, tenant_required
from ..container import Container
from ..core.enums import RequestStatus, Role
from ..core.exceptions import ValidationError

_BASE = "/api/dashboard/staff/instructor/leave-requests"


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _parse_date(value, field_name: str):
        try:
            return parse_iso_date(str(value or ""))
        except ValueError:
            raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")

    def _role() -> Role:
        try:
            return Role(session.get("role"))
        except ValueError:
            return Role.STAFF

    @app.route(_BASE, methods=["GET"], endpoint="leave_requests_list")
    @tenant_required
    @domain_errors("Failed to fetch leave requests")
    def leave_requests_list():
        status = request.args.get("status")
        try:
            status_filter = RequestStatus(status.upper()) if status else None
        except ValueError:
            raise ValidationError("status must be PENDING, APPROVED or REJECTED")
        leaves = service.list_leaves(current_tenant(), status=status_filter)
        return jsonify({"success": True, "data": [leave.to_dict() for leave in leaves]})

    @app.route(_BASE, methods=["POST"], endpoint="leave_requests_create")
    @tenant_required
    @domain_errors("Failed to create leave request")
    def leave_requests_create():
        data = json_body()
        request_id = service.create_leave(
            tenant_id=current_tenant(),
            instructor_id=data.get("instructorId", ""),
            instructor_name=data.get("instructorName", ""),
            start_date=_parse_date(data.get("startDate"), "startDate"),
            end_date=_parse_date(data.get("endDate"), "endDate"),
            reason=data.get("reason", ""),
            leave_type=data.get("leaveType"),
        )
        return jsonify({"success": True, "id": request_id}), 201

    @app.route(f"{_BASE}/<int:request_id>/approve", methods=["POST"], endpoint="leave_requests_approve")
    @tenant_required
    @domain_errors("Failed to approve leave request")
    def leave_requests_approve(request_id: int):
        service.approve_leave(
            tenant_id=current_tenant(),
            current_role=_role(),
            decided_by=current_actor(),
            request_id=request_id,
            admin_note=json_body().get("adminNote", ""),
        )
        return jsonify({"success": True})

    @app.route(f"{_BASE}/<int:request_id>/reject", methods=["POST"], endpoint="leave_requests_reject")
    @tenant_required
    @domain_errors("Failed to reject leave request")
    def leave_requests_reject(request_id: int):
        service.reject_leave(
            tenant_id=current_tenant(),
            current_role=_role(),
            decided_by=current_actor(),
            request_id=request_id,
            admin_note=json_body().get("adminNote", ""),
        )
        return jsonify({"success": True})
