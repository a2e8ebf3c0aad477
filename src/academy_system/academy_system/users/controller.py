from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import domain_errors, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/signup", methods=["POST"], endpoint="auth_signup")
    @domain_errors("Sign up failed.")
    def signup():
        data = json_body()
        user_id = container.auth_service.signup(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("fullName", ""),
        )
        return jsonify({"success": True, "userId": user_id}), 201

    @app.route("/api/auth/verify", methods=["POST"], endpoint="auth_verify")
    @domain_errors("Verification failed.")
    def verify():
        data = json_body()
        container.auth_service.verify(email=data.get("email", ""), code=str(data.get("code", "")))
        return jsonify({"success": True})

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @domain_errors("Login failed.")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        session.clear()
        session["user_id"] = user.user_id
        session["email"] = user.email
        session["name"] = user.full_name
        session["role"] = user.role.value
        if user.tenant_id:
            session["tenant_id"] = user.tenant_id
        return jsonify(
            {
                "success": True,
                "user": {
                    "email": user.email,
                    "fullName": user.full_name,
                    "role": user.role.value,
                    "tenantId": user.tenant_id,
                    "registrationComplete": user.registration_complete,
                },
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        return jsonify(
            {
                "email": session.get("email"),
                "fullName": session.get("name"),
                "role": session.get("role"),
                "tenantId": session.get("tenant_id"),
            }
        )
