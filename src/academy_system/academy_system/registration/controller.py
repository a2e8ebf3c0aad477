from __future__ import annotations

from flask import Flask, jsonify, request, send_file, session
from werkzeug.datastructures import FileStorage

from ..common.web import domain_errors, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from .storage import IMAGE_FIELDS, decode_data_url, read_file_storage


def register(app: Flask, container: Container) -> None:
    @app.route("/api/register/validate", methods=["POST"], endpoint="register_validate")
    @domain_errors("Validation failed.")
    def register_validate():
        data = json_body()
        step = data.get("step")
        if step is not None:
            try:
                step = int(step)
            except (TypeError, ValueError):
                raise ValidationError("step must be 0, 1 or 2")
        errors = container.registration_service.validate(data, step)
        return jsonify({"valid": not errors, "errors": errors})

    @app.route("/api/register", methods=["POST"], endpoint="register_submit")
    @domain_errors("Registration failed.")
    def register_submit():
        result = container.registration_service.complete(user_email=session.get("email"), payload=json_body())
        session["tenant_id"] = result.academy_id
        return jsonify({"success": True, "userId": result.user_code, "academyId": result.academy_id})

    @app.route("/api/register", methods=["GET"], endpoint="register_current")
    @domain_errors("Could not load registration.")
    def register_current():
        registration = container.registration_service.get_registration(session.get("email"))
        return jsonify({"success": True, "registration": registration.to_dict()})

    @app.route("/api/business-upload", methods=["POST"], endpoint="business_upload")
    @domain_errors("Upload failed.")
    def business_upload():
        user_email = session.get("email") or (request.form.get("userEmail") or "").strip()
        if not user_email:
            raise ValidationError("Email is required for image upload")

        images = {}
        for field_name in IMAGE_FIELDS:
            file = request.files.get(field_name)
            if isinstance(file, FileStorage):
                payload = read_file_storage(file)
            else:
                raw = request.form.get(field_name) or ""
                payload = decode_data_url(raw) if raw.startswith("data:") else None
            if payload is not None:
                images[field_name] = payload

        urls = container.upload_storage.save_business_images(
            user_email=user_email,
            business_name=request.form.get("businessName") or "business",
            images=images,
        )
        return jsonify({"success": True, **urls})

    @app.route("/uploads/<path:key>", methods=["GET"], endpoint="uploaded_file")
    @domain_errors("Could not read file.")
    def uploaded_file(key: str):
        return send_file(container.upload_storage.resolve(key))
