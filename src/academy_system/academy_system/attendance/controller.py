from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_tenant, domain_errors, json_body, tenant_required
from ..container import Container
from ..core.exceptions import ValidationError
from .query import AttendanceQuery

_BASE = "/api/dashboard/staff/instructor"


def _ids_arg():
    raw = request.args.get("ids") or ""
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError("ids must be a comma separated list of numbers")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route(f"{_BASE}/attendance", methods=["GET"], endpoint="instructor_attendance_list")
    @tenant_required
    @domain_errors("Failed to fetch attendance records")
    def instructor_attendance_list():
        records = service.list_records(current_tenant(), query=AttendanceQuery.from_args(request.args))
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route(f"{_BASE}/attendance", methods=["POST"], endpoint="instructor_attendance_create")
    @tenant_required
    @domain_errors("Failed to create attendance record")
    def instructor_attendance_create():
        record = service.create_record(current_tenant(), json_body())
        return jsonify({"success": True, "data": record.to_dict()}), 201

    @app.route(f"{_BASE}/attendance/<int:record_id>", methods=["PUT"], endpoint="instructor_attendance_update")
    @tenant_required
    @domain_errors("Failed to update attendance record")
    def instructor_attendance_update(record_id: int):
        record = service.update_record(current_tenant(), record_id, json_body())
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route(f"{_BASE}/attendance/<int:record_id>", methods=["DELETE"], endpoint="instructor_attendance_delete")
    @tenant_required
    @domain_errors("Failed to delete attendance record")
    def instructor_attendance_delete(record_id: int):
        service.delete_record(current_tenant(), record_id)
        return jsonify({"success": True})

    @app.route(f"{_BASE}/attendance/export", methods=["GET"], endpoint="instructor_attendance_export")
    @tenant_required
    @domain_errors("Failed to export attendance")
    def instructor_attendance_export():
        filename, text = service.export_csv(
            current_tenant(),
            ids=_ids_arg(),
            query=AttendanceQuery.from_args(request.args),
        )
        return app.response_class(
            text.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route(f"{_BASE}/attendance/import", methods=["POST"], endpoint="instructor_attendance_import")
    @tenant_required
    @domain_errors("Failed to import attendance")
    def instructor_attendance_import():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("A CSV file is required")
        stats = service.import_csv(current_tenant(), filename=upload.filename, content=upload.read())
        return jsonify({"success": True, "data": stats.to_dict()})

    # Drafts
    @app.route(f"{_BASE}/attendance-drafts", methods=["GET"], endpoint="attendance_drafts_list")
    @tenant_required
    @domain_errors("Failed to fetch drafts")
    def attendance_drafts_list():
        drafts = service.list_drafts(current_tenant())
        return jsonify({"success": True, "data": [d.to_dict() for d in drafts]})

    @app.route(f"{_BASE}/attendance-drafts", methods=["POST"], endpoint="attendance_drafts_create")
    @tenant_required
    @domain_errors("Failed to save draft")
    def attendance_drafts_create():
        draft = service.save_draft(current_tenant(), json_body())
        return jsonify({"success": True, "data": draft.to_dict()}), 201

    @app.route(f"{_BASE}/attendance-drafts/<int:draft_id>", methods=["PUT"], endpoint="attendance_drafts_update")
    @tenant_required
    @domain_errors("Failed to save draft")
    def attendance_drafts_update(draft_id: int):
        draft = service.save_draft(current_tenant(), json_body(), draft_id=draft_id)
        return jsonify({"success": True, "data": draft.to_dict()})

    @app.route(f"{_BASE}/attendance-drafts/<int:draft_id>", methods=["DELETE"], endpoint="attendance_drafts_delete")
    @tenant_required
    @domain_errors("Failed to delete draft")
    def attendance_drafts_delete(draft_id: int):
        service.delete_draft(current_tenant(), draft_id)
        return jsonify({"success": True})

    @app.route(
        f"{_BASE}/attendance-drafts/<int:draft_id>/convert", methods=["POST"], endpoint="attendance_drafts_convert"
    )
    @tenant_required
    @domain_errors("Failed to convert draft")
    def attendance_drafts_convert(draft_id: int):
        record = service.convert_draft(current_tenant(), draft_id)
        return jsonify({"success": True, "data": record.to_dict()}), 201
