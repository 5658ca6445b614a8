from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.qr_image import qr_png
from ..common.urls import registration_url
from ..common.web import (
    Identity,
    current_identity,
    json_endpoint,
    login_required,
    read_json,
    remember_identity,
    request_base_url,
    to_json,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="register_user")
    @json_endpoint
    def register_user():
        body = read_json()
        user = container.signup_service.register(
            email=body.get("email"),
            password=body.get("password"),
            first_name=body.get("first_name"),
            last_name=body.get("last_name"),
            phone=body.get("phone"),
            token=body.get("token"),
            organization_name=body.get("organization_name"),
        )
        remember_identity(Identity(user_id=user.id, organization_id=user.organization_id))
        profile = container.auth_service.profile(user.id)
        return jsonify({"success": True, "user": to_json(profile)}), 201

    @app.route("/api/registration/tokens", methods=["GET"], endpoint="list_registration_tokens")
    @json_endpoint
    @login_required
    def list_registration_tokens():
        identity = current_identity()
        tokens = container.token_service.list_tokens(identity.organization_id)
        return jsonify({"success": True, "tokens": to_json(list(tokens))})

    @app.route("/api/registration/tokens", methods=["POST"], endpoint="create_registration_token")
    @json_endpoint
    @login_required
    def create_registration_token():
        identity = current_identity()
        body = read_json()
        token = container.token_service.create_token(
            identity.organization_id,
            created_by=identity.user_id,
            token_type=body.get("token_type"),
            role_id=body.get("role_id"),
            department_id=body.get("department_id"),
            expires_in_hours=body.get("expires_in_hours"),
            usage_limit=body.get("usage_limit"),
            metadata=body.get("metadata"),
        )
        return jsonify({"success": True, "token": to_json(token)}), 201

    @app.route("/api/registration/tokens/<token_id>", methods=["PATCH"], endpoint="update_registration_token")
    @json_endpoint
    @login_required
    def update_registration_token(token_id: str):
        identity = current_identity()
        token = container.token_service.update_token(identity.organization_id, token_id, read_json())
        return jsonify({"success": True, "token": to_json(token)})

    @app.route("/api/registration/tokens/<token_id>", methods=["DELETE"], endpoint="delete_registration_token")
    @json_endpoint
    @login_required
    def delete_registration_token(token_id: str):
        identity = current_identity()
        container.token_service.delete_token(identity.organization_id, token_id)
        return jsonify({"success": True, "message": "Token deleted successfully"})

    @app.route("/api/registration/validate", methods=["POST"], endpoint="validate_registration_token")
    @json_endpoint
    def validate_registration_token():
        token = container.token_service.validate(read_json().get("token"))
        return jsonify({"success": True, "token": to_json(token)})

    @app.route("/api/registration/increment-usage", methods=["POST"], endpoint="increment_token_usage")
    @json_endpoint
    def increment_token_usage():
        token = container.token_service.increment_usage(read_json().get("token"))
        return jsonify({"success": True, "data": to_json(token)})

    @app.route("/api/registration/qr-url", methods=["GET"], endpoint="registration_qr_url")
    @json_endpoint
    def registration_qr_url():
        token = container.token_service.active_token(request.args.get("token"))
        fmt = request.args.get("format", "url")

        base_url = request_base_url()
        url = registration_url(base_url, token.token)

        if fmt == "png":
            return send_file(qr_png(url), mimetype="image/png")
        if fmt == "qr":
            return jsonify({"success": True, "qrData": url, "displayUrl": url, "token": token.token})
        return jsonify({"success": True, "url": url, "token": token.token, "baseUrl": base_url})
