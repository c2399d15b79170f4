from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_utc
from ..common.http import current_identity, json_body, login_required, manager_required
from ..common.validators import require_non_negative
from ..container import TenantContainers
from ..core.exceptions import AuthorizationError, ValidationError
from ..geo.model import GeoPoint


def _position(data: dict):
    if data.get("latitude") is None and data.get("longitude") is None:
        return None
    return GeoPoint.from_raw(data.get("latitude"), data.get("longitude"))


def register(app: Flask, containers: TenantContainers) -> None:
    def service():
        return containers.for_tenant(current_identity().tenant).punch_service

    def owned_punch(punch_id: str):
        """Load a punch the caller may act on: their own, or any for managers."""
        identity = current_identity()
        punch = service().get_punch(punch_id)
        if punch.worker_id != identity.user_id and not identity.is_manager:
            raise AuthorizationError("Punch belongs to another worker")
        return punch

    @app.route("/api/punches/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def clock_in():
        identity = current_identity()
        data = json_body()
        punch = service().clock_in(
            worker_id=identity.user_id,
            applicant_id=identity.applicant_id,
            job_id=data.get("job_id"),
            shift_slug=data.get("shift_slug"),
            position=_position(data),
            accuracy=require_non_negative(data.get("accuracy"), "accuracy"),
            user_note=data.get("user_note"),
        )
        return jsonify({"success": True, "punch": punch.to_dict()}), 201

    @app.route("/api/punches/<punch_id>/location", methods=["POST"], endpoint="api_punch_location")
    @login_required
    def record_location(punch_id: str):
        owned_punch(punch_id)
        data = json_body()
        position = _position(data)
        if position is None:
            raise ValidationError("latitude and longitude are required")
        result = service().record_location(
            punch_id,
            position,
            accuracy=require_non_negative(data.get("accuracy"), "accuracy"),
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/punches/<punch_id>/clock-out", methods=["POST"], endpoint="api_clock_out")
    @login_required
    def clock_out(punch_id: str):
        owned_punch(punch_id)
        punch = service().clock_out(punch_id)
        return jsonify({"success": True, "punch": punch.to_dict()})

    @app.route("/api/punches/<punch_id>", methods=["GET"], endpoint="api_get_punch")
    @login_required
    def get_punch(punch_id: str):
        return jsonify({"success": True, "punch": owned_punch(punch_id).to_dict()})

    @app.route("/api/punches/<punch_id>", methods=["PUT"], endpoint="api_edit_punch")
    @login_required
    def edit_punch(punch_id: str):
        owned_punch(punch_id)
        data = json_body()
        time_in = parse_iso_utc(data.get("time_in"))
        if time_in is None:
            raise ValidationError("time_in is required")
        punch = service().edit_times(
            punch_id,
            time_in=time_in,
            time_out=parse_iso_utc(data.get("time_out")),
            editor_id=current_identity().user_id,
            user_note=data.get("user_note"),
            manager_note=data.get("manager_note") if current_identity().is_manager else None,
        )
        return jsonify({"success": True, "punch": punch.to_dict()})

    @app.route("/api/punches/<punch_id>/approve", methods=["POST"], endpoint="api_approve_punch")
    @manager_required
    def approve(punch_id: str):
        data = json_body()
        punch = service().approve(punch_id, manager_id=current_identity().user_id, manager_note=data.get("manager_note"))
        return jsonify({"success": True, "punch": punch.to_dict()})

    @app.route("/api/punches/<punch_id>/reject", methods=["POST"], endpoint="api_reject_punch")
    @manager_required
    def reject(punch_id: str):
        data = json_body()
        punch = service().reject(punch_id, manager_id=current_identity().user_id, manager_note=data.get("manager_note"))
        return jsonify({"success": True, "punch": punch.to_dict()})

    @app.route("/api/punches/<punch_id>/cancel", methods=["POST"], endpoint="api_cancel_punch")
    @login_required
    def cancel(punch_id: str):
        punch = service().cancel(punch_id, worker_id=current_identity().user_id)
        return jsonify({"success": True, "punch": punch.to_dict()})
