from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/incidents", methods=["GET"], endpoint="list_incidents")
    @json_endpoint
    @login_required
    def list_incidents():
        identity = current_identity()
        incidents = container.incident_service.list_incidents(
            identity.organization_id, status=request.args.get("status")
        )
        return jsonify({"success": True, "incidents": to_json(list(incidents))})

    @app.route("/api/incidents", methods=["POST"], endpoint="report_incident")
    @json_endpoint
    @login_required
    def report_incident():
        identity = current_identity()
        body = read_json()
        incident = container.incident_service.report(
            identity,
            incident_type=body.get("incident_type"),
            title=body.get("title"),
            description=body.get("description"),
            severity=body.get("severity"),
            incident_date=body.get("incident_date"),
            location_latitude=body.get("location_latitude"),
            location_longitude=body.get("location_longitude"),
            location_address=body.get("location_address"),
            patrol_id=body.get("patrol_id"),
        )
        return jsonify({"success": True, "incident": to_json(incident)}), 201

    @app.route("/api/incidents/<incident_id>", methods=["PUT"], endpoint="update_incident")
    @json_endpoint
    @login_required
    def update_incident(incident_id: str):
        identity = current_identity()
        incident = container.incident_service.update_status(
            identity.organization_id, incident_id, status=read_json().get("status")
        )
        return jsonify({"success": True, "incident": to_json(incident)})
