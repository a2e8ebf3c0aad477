from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_tenant, domain_errors, json_body, tenant_required
from ..container import Container

_BASE = "/api/dashboard/services"


def register(app: Flask, container: Container) -> None:
    service = container.course_service

    @app.route(f"{_BASE}/courses", methods=["GET"], endpoint="courses_list")
    @tenant_required
    @domain_errors("Failed to fetch courses")
    def courses_list():
        courses = service.list_courses(current_tenant())
        return jsonify({"success": True, "courses": [c.to_dict() for c in courses]})

    @app.route(f"{_BASE}/courses", methods=["POST"], endpoint="courses_create")
    @tenant_required
    @domain_errors("Failed to create course")
    def courses_create():
        course = service.create_course(current_tenant(), json_body())
        return jsonify({"success": True, "course": course.to_dict()}), 201

    @app.route(f"{_BASE}/courses/<course_id>", methods=["PUT"], endpoint="courses_update")
    @tenant_required
    @domain_errors("Failed to update course")
    def courses_update(course_id: str):
        course = service.update_course(current_tenant(), course_id, json_body())
        return jsonify({"success": True, "course": course.to_dict()})

    @app.route(f"{_BASE}/courses/<course_id>", methods=["DELETE"], endpoint="courses_delete")
    @tenant_required
    @domain_errors("Failed to delete course")
    def courses_delete(course_id: str):
        service.delete_course(current_tenant(), course_id)
        return jsonify({"success": True})

    @app.route(f"{_BASE}/cohorts", methods=["GET"], endpoint="cohorts_list")
    @tenant_required
    @domain_errors("Failed to fetch cohorts")
    def cohorts_list():
        cohorts = service.list_cohorts(current_tenant(), request.args.get("courseId") or None)
        return jsonify({"success": True, "cohorts": [c.to_dict() for c in cohorts]})

    @app.route(f"{_BASE}/cohorts", methods=["POST"], endpoint="cohorts_create")
    @tenant_required
    @domain_errors("Failed to create cohort")
    def cohorts_create():
        cohort = service.create_cohort(current_tenant(), json_body())
        return jsonify({"success": True, "cohort": cohort.to_dict()}), 201

    @app.route(f"{_BASE}/cohorts/<cohort_id>", methods=["PUT"], endpoint="cohorts_update")
    @tenant_required
    @domain_errors("Failed to update cohort")
    def cohorts_update(cohort_id: str):
        cohort = service.update_cohort(current_tenant(), cohort_id, json_body())
        return jsonify({"success": True, "cohort": cohort.to_dict()})

    @app.route(f"{_BASE}/cohorts/<cohort_id>", methods=["DELETE"], endpoint="cohorts_delete")
    @tenant_required
    @domain_errors("Failed to delete cohort")
    def cohorts_delete(cohort_id: str):
        service.delete_cohort(current_tenant(), cohort_id)
        return jsonify({"success": True})
