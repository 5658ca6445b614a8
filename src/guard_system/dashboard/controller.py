from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity, json_endpoint, login_required, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @json_endpoint
    @login_required
    def dashboard_stats():
        identity = current_identity()
        stats = container.dashboard_service.stats(identity.organization_id)
        return jsonify({"success": True, "data": to_json(stats)})
