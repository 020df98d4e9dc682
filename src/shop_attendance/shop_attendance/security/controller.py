from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import error_response, unexpected_error_response
from ..container import Container
from ..core.exceptions import DomainError
from .decorators import owner_required
from .owner_session import OwnerSession


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shops/<int:shop_id>/owner/unlock", methods=["POST"], endpoint="api_owner_unlock")
    def api_owner_unlock(shop_id: int):
        data = request.get_json(silent=True) or {}
        try:
            result = container.owner_pin_service.verify_owner_pin(
                shop_id,
                data.get("pin", ""),
                device_info=request.headers.get("User-Agent"),
                ip_address=request.remote_addr,
            )
            OwnerSession(session).unlock(shop_id, at=result.unlocked_at)
            # shown as the reviewer on approval decisions
            owner_name = (data.get("owner_name") or "").strip()[:100]
            if owner_name:
                session[f"owner_name_{shop_id}"] = owner_name
            return jsonify({"success": True, "message": "Owner console unlocked"}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("verifying the owner PIN")

    @app.route("/api/shops/<int:shop_id>/owner/lock", methods=["POST"], endpoint="api_owner_lock")
    def api_owner_lock(shop_id: int):
        OwnerSession(session).lock(shop_id)
        return jsonify({"success": True}), 200

    @app.route("/api/shops/<int:shop_id>/owner/status", methods=["GET"], endpoint="api_owner_status")
    def api_owner_status(shop_id: int):
        return jsonify({"success": True, "unlocked": OwnerSession(session).is_unlocked(shop_id)}), 200

    @app.route("/api/shops/<int:shop_id>/owner/pin", methods=["POST"], endpoint="api_owner_set_pin")
    @owner_required
    def api_owner_set_pin(shop_id: int):
        data = request.get_json(silent=True) or {}
        try:
            container.owner_pin_service.set_owner_pin(shop_id, data.get("new_pin", ""), data.get("confirm_pin", ""))
            return jsonify({"success": True, "message": "Owner PIN updated"}), 200
        except DomainError as e:
            return error_response(e)
