from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/roles", methods=["GET"], endpoint="list_roles")
    @json_endpoint
    @login_required
    def list_roles():
        identity = current_identity()
        roles = container.role_service.list_roles(identity.organization_id)
        return jsonify({"success": True, "roles": to_json(list(roles))})

    @app.route("/api/admin/roles", methods=["POST"], endpoint="create_role")
    @json_endpoint
    @login_required
    def create_role():
        identity = current_identity()
        body = read_json()
        role = container.role_service.create_role(
            identity.organization_id,
            name=body.get("name"),
            permissions=body.get("permissions"),
        )
        return jsonify({"success": True, "role": to_json(role)}), 201
