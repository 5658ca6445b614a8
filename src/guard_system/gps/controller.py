from __future__ import annotations

from flask import Flask, Response, jsonify, request, stream_with_context

from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container
from .stream import position_events


def register(app: Flask, container: Container) -> None:
    @app.route("/api/gps/update", methods=["POST"], endpoint="gps_update")
    @json_endpoint
    @login_required
    def gps_update():
        identity = current_identity()
        body = read_json()
        sample = container.tracking_service.update_position(
            identity,
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            accuracy=body.get("accuracy"),
            altitude=body.get("altitude"),
            speed=body.get("speed"),
            heading=body.get("heading"),
            battery_level=body.get("battery_level"),
        )
        return jsonify({"success": True, "data": to_json(sample)})

    @app.route("/api/gps/active", methods=["GET"], endpoint="gps_active")
    @json_endpoint
    @login_required
    def gps_active():
        identity = current_identity()
        positions = container.tracking_service.active_positions(identity.organization_id)
        return jsonify({"success": True, "count": len(positions), "positions": to_json(positions)})

    @app.route("/api/gps/stream", methods=["GET"], endpoint="gps_stream")
    @json_endpoint
    @login_required
    def gps_stream():
        organization_id = current_identity().organization_id

        def fetch():
            return to_json(container.tracking_service.active_positions(organization_id))

        events = position_events(fetch, interval=float(app.config.get("STREAM_INTERVAL_SECONDS", 10)))
        return Response(
            stream_with_context(events),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    @app.route("/api/gps/history/<user_id>", methods=["GET"], endpoint="gps_history")
    @json_endpoint
    @login_required
    def gps_history(user_id: str):
        identity = current_identity()
        trail = container.tracking_service.trail(
            identity.organization_id, user_id, minutes=request.args.get("minutes")
        )
        return jsonify({"success": True, "count": len(trail), "positions": to_json(list(trail))})
