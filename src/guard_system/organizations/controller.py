from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/departments", methods=["GET"], endpoint="list_departments")
    @json_endpoint
    @login_required
    def list_departments():
        identity = current_identity()
        departments = container.department_service.list_departments(identity.organization_id)
        return jsonify({"success": True, "departments": to_json(list(departments))})

    @app.route("/api/admin/departments", methods=["POST"], endpoint="create_department")
    @json_endpoint
    @login_required
    def create_department():
        identity = current_identity()
        body = read_json()
        department = container.department_service.create_department(
            identity.organization_id,
            name=body.get("name"),
            description=body.get("description"),
        )
        return jsonify({"success": True, "department": to_json(department)}), 201
