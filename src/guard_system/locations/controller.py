from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/locations", methods=["GET"], endpoint="list_locations")
    @json_endpoint
    @login_required
    def list_locations():
        identity = current_identity()
        locations = container.location_service.list_locations(
            identity.organization_id, location_type=request.args.get("type")
        )
        return jsonify({"success": True, "locations": to_json(list(locations))})

    @app.route("/api/locations", methods=["POST"], endpoint="create_location")
    @json_endpoint
    @login_required
    def create_location():
        identity = current_identity()
        body = read_json()
        location = container.location_service.create_location(
            identity.organization_id,
            name=body.get("name"),
            location_type=body.get("location_type"),
            address=body.get("address"),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            radius_meters=body.get("radius_meters"),
            require_gps_validation=body.get("require_gps_validation", False),
        )
        return jsonify({"success": True, "location": to_json(location)}), 201

    @app.route("/api/locations/<location_id>", methods=["GET"], endpoint="get_location")
    @json_endpoint
    @login_required
    def get_location(location_id: str):
        identity = current_identity()
        location = container.location_service.get_location(identity.organization_id, location_id)
        return jsonify({"success": True, "location": to_json(location)})
