from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shops/<int:shop_id>/consent", methods=["POST"], endpoint="api_record_consent")
    def api_record_consent(shop_id: int):
        """Answer the location-tracking prompt; ``granted`` false blocks clocking."""
        data = request.get_json(silent=True) or {}
        if "granted" not in data:
            return jsonify({"success": False, "message": "Please agree or decline to continue"}), 400
        try:
            employee = container.clock_service.resolve_employee_by_pin(shop_id, data.get("pin", ""))
            consent = container.consent_gate.record_consent(employee.employee_id, granted=bool(data["granted"]))
            return jsonify(
                {
                    "success": True,
                    "consent": consent.value,
                    "policy_version": container.consent_gate.policy_version,
                }
            ), 200
        except DomainError as e:
            return error_response(e)
