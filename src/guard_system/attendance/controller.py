from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.qr_image import qr_png
from ..common.urls import scan_url
from ..common.validators import optional_day
from ..common.web import current_identity, json_endpoint, login_required, read_json, request_base_url, to_json
from ..container import Container
from ..core.enums import ShiftAction
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _record(shift_type):
        identity = current_identity()
        body = read_json()
        result = container.attendance_service.record_shift(
            identity,
            shift_type=shift_type,
            qr_code=body.get("qr_code"),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            accuracy=body.get("accuracy"),
            device_info=body.get("device_info"),
        )
        checked_in = result.record.shift_type == ShiftAction.CHECK_IN
        attendance = to_json(result.record)
        attendance.update({"user_name": result.user_name, "user_email": result.user_email})
        return jsonify(
            {
                "success": True,
                "message": "Successfully checked in" if checked_in else "Successfully checked out",
                "attendance": attendance,
                "shift_duration": result.shift_duration,
            }
        )

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @json_endpoint
    @login_required
    def attendance_check_in():
        return _record(read_json().get("shift_type") or ShiftAction.CHECK_IN.value)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @json_endpoint
    @login_required
    def attendance_check_out():
        return _record(ShiftAction.CHECK_OUT.value)

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @json_endpoint
    @login_required
    def attendance_status():
        identity = current_identity()
        status = container.attendance_service.current_status(identity.user_id)
        return jsonify({"success": True, "status": to_json(status)})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @json_endpoint
    @login_required
    def attendance_history():
        identity = current_identity()
        records = container.attendance_service.history(
            identity.user_id,
            start=optional_day(request.args.get("start"), "start"),
            end=optional_day(request.args.get("end"), "end"),
        )
        return jsonify({"success": True, "records": to_json(list(records))})

    @app.route("/api/attendance/offline-sync", methods=["POST"], endpoint="attendance_offline_sync")
    @json_endpoint
    @login_required
    def attendance_offline_sync():
        identity = current_identity()
        body = read_json()
        result = container.attendance_service.offline_sync(
            identity,
            record_id=body.get("record_id"),
            qr_code=body.get("qr_code"),
            action=body.get("action"),
            timestamp=body.get("timestamp"),
            location=body.get("location"),
            device_info=body.get("device_info"),
        )
        message = "Record already synced" if result.already_synced else "Attendance record synced successfully"
        return jsonify({"success": True, "attendance_id": result.attendance_id, "message": message})

    @app.route("/api/attendance/offline-sync", methods=["GET"], endpoint="attendance_sync_history")
    @json_endpoint
    @login_required
    def attendance_sync_history():
        identity = current_identity()
        records = container.attendance_service.synced_records(identity.user_id)
        return jsonify({"success": True, "synced_records": to_json(list(records))})

    @app.route("/api/attendance/analytics", methods=["GET"], endpoint="attendance_analytics")
    @json_endpoint
    @login_required
    def attendance_analytics():
        identity = current_identity()
        analytics = container.attendance_analytics_service
        kind = request.args.get("type", "metrics")
        start = optional_day(request.args.get("start"), "start")
        end = optional_day(request.args.get("end"), "end")

        if kind == "metrics":
            data = analytics.metrics(identity.organization_id, start=start, end=end)
        elif kind == "performance":
            data = analytics.guard_performance(
                identity.organization_id, start=start, end=end, limit=request.args.get("limit")
            )
        elif kind == "trends":
            data = analytics.trends(identity.organization_id, days=request.args.get("days"))
        elif kind == "live":
            data = analytics.live_status(identity.organization_id)
        else:
            raise ValidationError("Invalid analytics type")
        return jsonify({"success": True, "type": kind, "data": to_json(data)})

    @app.route("/api/attendance/qr-codes", methods=["GET"], endpoint="list_qr_codes")
    @json_endpoint
    @login_required
    def list_qr_codes():
        identity = current_identity()
        codes = container.qr_code_service.list_active(identity.organization_id, site_id=request.args.get("site_id"))
        return jsonify({"success": True, "qr_codes": to_json(list(codes))})

    @app.route("/api/attendance/qr-codes", methods=["POST"], endpoint="create_qr_code")
    @json_endpoint
    @login_required
    def create_qr_code():
        identity = current_identity()
        body = read_json()
        qr = container.qr_code_service.create_qr_code(
            identity,
            qr_type=body.get("type"),
            site_id=body.get("site_id"),
            valid_hours=body.get("valid_hours"),
        )
        payload = to_json(qr)
        payload["scan_url"] = scan_url(request_base_url(), qr.code)
        return jsonify({"success": True, "qr_code": payload}), 201

    @app.route("/api/attendance/qr-codes/<code>/image", methods=["GET"], endpoint="qr_code_image")
    @json_endpoint
    @login_required
    def qr_code_image(code: str):
        identity = current_identity()
        qr = container.qr_code_service.get_active(identity.organization_id, code)
        return send_file(qr_png(scan_url(request_base_url(), qr.code)), mimetype="image/png")
