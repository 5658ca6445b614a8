from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/backup-requests", methods=["GET"], endpoint="list_backup_requests")
    @json_endpoint
    @login_required
    def list_backup_requests():
        identity = current_identity()
        requests_ = container.backup_request_service.list_active(identity.organization_id)
        return jsonify({"success": True, "backup_requests": to_json(list(requests_))})

    @app.route("/api/backup-requests", methods=["POST"], endpoint="create_backup_request")
    @json_endpoint
    @login_required
    def create_backup_request():
        identity = current_identity()
        body = read_json()
        backup, closest = container.backup_request_service.request_backup(
            identity,
            current_latitude=body.get("current_latitude"),
            current_longitude=body.get("current_longitude"),
            patrol_id=body.get("patrol_id"),
            emergency_type=body.get("emergency_type"),
            notes=body.get("notes"),
        )
        return jsonify(
            {"success": True, "backup_request": to_json(backup), "closest_checkpoint": to_json(closest)}
        ), 201

    @app.route("/api/backup-requests/<request_id>", methods=["PUT"], endpoint="update_backup_request")
    @json_endpoint
    @login_required
    def update_backup_request(request_id: str):
        identity = current_identity()
        body = read_json()
        backup = container.backup_request_service.update_status(
            identity,
            request_id,
            status=body.get("status"),
            response_time=body.get("response_time"),
            resolution_notes=body.get("resolution_notes"),
        )
        return jsonify({"success": True, "backup_request": to_json(backup)})
