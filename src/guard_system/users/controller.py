from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import (
    Identity,
    current_identity,
    forget_identity,
    json_endpoint,
    login_required,
    read_json,
    remember_identity,
    to_json,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        body = read_json()
        user = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))
        remember_identity(Identity(user_id=user.id, organization_id=user.organization_id))
        profile = container.auth_service.profile(user.id)
        return jsonify({"success": True, "user": to_json(profile)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @json_endpoint
    def logout():
        forget_identity()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @json_endpoint
    @login_required
    def me():
        identity = current_identity()
        profile = container.auth_service.profile(identity.user_id)
        return jsonify({"success": True, "user": to_json(profile)})

    @app.route("/api/guards", methods=["GET"], endpoint="list_guards")
    @json_endpoint
    @login_required
    def list_guards():
        identity = current_identity()
        guards = container.guard_service.list_guards(identity.organization_id)
        return jsonify({"success": True, "guards": to_json(list(guards))})

    @app.route("/api/guards/<guard_id>/status", methods=["PATCH"], endpoint="update_guard_status")
    @json_endpoint
    @login_required
    def update_guard_status(guard_id: str):
        identity = current_identity()
        body = read_json()
        is_active = body.get("is_active")
        guard = container.guard_service.set_status(identity.organization_id, guard_id, is_active=is_active)
        message = f"Guard {'activated' if is_active else 'deactivated'} successfully"
        return jsonify({"success": True, "guard": to_json(guard), "message": message})

    @app.route("/api/guards/<guard_id>/role", methods=["PATCH"], endpoint="update_guard_role")
    @json_endpoint
    @login_required
    def update_guard_role(guard_id: str):
        identity = current_identity()
        body = read_json()
        guard, role_name = container.guard_service.set_role(
            identity.organization_id, guard_id, role_id=body.get("role_id")
        )
        return jsonify({"success": True, "guard": to_json(guard), "message": f"Guard role updated to {role_name}"})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @json_endpoint
    @login_required
    def list_users():
        identity = current_identity()
        users = container.user_service.get_users(identity.organization_id, request.args.get("ids"))
        return jsonify({"success": True, "users": to_json(list(users))})

    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="get_user")
    @json_endpoint
    @login_required
    def get_user(user_id: str):
        identity = current_identity()
        user = container.user_service.get_user(identity.organization_id, user_id)
        return jsonify({"success": True, "user": to_json(user)})
