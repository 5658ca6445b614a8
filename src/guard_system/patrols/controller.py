from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_day
from ..common.web import current_identity, json_endpoint, login_required, read_json, to_json
from ..container import Container


def _flag(value) -> bool:
    return str(value or "").lower() in ("1", "true", "yes")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/patrols/routes", methods=["GET"], endpoint="list_patrol_routes")
    @json_endpoint
    @login_required
    def list_patrol_routes():
        identity = current_identity()
        routes = container.route_service.list_routes(
            identity.organization_id, include_checkpoints=_flag(request.args.get("include_checkpoints"))
        )
        return jsonify({"success": True, "routes": to_json(list(routes))})

    @app.route("/api/patrols/routes", methods=["POST"], endpoint="create_patrol_route")
    @json_endpoint
    @login_required
    def create_patrol_route():
        identity = current_identity()
        body = read_json()
        route = container.route_service.create_route(
            identity,
            name=body.get("name"),
            checkpoints=body.get("checkpoints"),
            description=body.get("description"),
            estimated_duration=body.get("estimated_duration"),
            is_active=body.get("is_active", True),
        )
        return jsonify({"success": True, "route": to_json(route)}), 201

    @app.route("/api/patrols/routes/<route_id>", methods=["PUT"], endpoint="update_patrol_route")
    @json_endpoint
    @login_required
    def update_patrol_route(route_id: str):
        identity = current_identity()
        route = container.route_service.update_route(identity, route_id, read_json())
        return jsonify({"success": True, "route": to_json(route)})

    @app.route("/api/patrols/routes/<route_id>", methods=["DELETE"], endpoint="delete_patrol_route")
    @json_endpoint
    @login_required
    def delete_patrol_route(route_id: str):
        identity = current_identity()
        container.route_service.delete_route(identity, route_id)
        return jsonify({"success": True, "message": "Patrol route deleted"})

    @app.route("/api/patrols", methods=["GET"], endpoint="list_patrols")
    @json_endpoint
    @login_required
    def list_patrols():
        identity = current_identity()
        patrols = container.patrol_service.list_patrols(
            identity.organization_id,
            status=request.args.get("status"),
            guard_id=request.args.get("guard_id"),
            limit=request.args.get("limit"),
        )
        return jsonify({"success": True, "patrols": to_json(list(patrols))})

    @app.route("/api/patrols", methods=["POST"], endpoint="create_patrol")
    @json_endpoint
    @login_required
    def create_patrol():
        identity = current_identity()
        body = read_json()
        patrol = container.patrol_service.create_patrol(
            identity,
            guard_id=body.get("guard_id"),
            route_id=body.get("route_id"),
            start_time=body.get("start_time"),
            total_checkpoints=body.get("total_checkpoints"),
            notes=body.get("notes"),
        )
        return jsonify({"success": True, "patrol": to_json(patrol)}), 201

    @app.route("/api/patrols/statistics", methods=["GET"], endpoint="patrol_statistics")
    @json_endpoint
    @login_required
    def patrol_statistics():
        identity = current_identity()
        stats = container.patrol_service.statistics(identity.organization_id, days=request.args.get("days"))
        return jsonify({"success": True, "statistics": to_json(stats)})

    @app.route("/api/patrols/performance", methods=["GET"], endpoint="patrol_performance")
    @json_endpoint
    @login_required
    def patrol_performance():
        identity = current_identity()
        kpis = container.patrol_performance_service.guard_kpis(
            identity.organization_id,
            request.args.get("guard_id"),
            start=optional_day(request.args.get("start"), "start"),
            end=optional_day(request.args.get("end"), "end"),
        )
        return jsonify({"success": True, "performance": to_json(kpis)})

    @app.route("/api/patrols/<patrol_id>/start", methods=["POST"], endpoint="start_patrol")
    @json_endpoint
    @login_required
    def start_patrol(patrol_id: str):
        identity = current_identity()
        patrol = container.patrol_service.start_patrol(identity, patrol_id)
        return jsonify({"success": True, "patrol": to_json(patrol)})

    @app.route("/api/patrols/<patrol_id>/complete", methods=["POST"], endpoint="complete_patrol")
    @json_endpoint
    @login_required
    def complete_patrol(patrol_id: str):
        identity = current_identity()
        patrol = container.patrol_service.complete_patrol(identity, patrol_id)
        return jsonify({"success": True, "patrol": to_json(patrol)})

    @app.route("/api/patrols/<patrol_id>/checkpoints", methods=["POST"], endpoint="record_checkpoint_visit")
    @json_endpoint
    @login_required
    def record_checkpoint_visit(patrol_id: str):
        identity = current_identity()
        body = read_json()
        visit = container.patrol_service.record_checkpoint_visit(
            identity,
            patrol_id,
            location_id=body.get("location_id"),
            verification_method=body.get("verification_method"),
            verification_data=body.get("verification_data"),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            notes=body.get("notes"),
        )
        return jsonify({"success": True, "visit": to_json(visit), "message": "Checkpoint visit recorded"}), 201
