from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import to_json
from ..container import Container
from ..geo.distance import maps_link
from ..security.decorators import owner_required


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shops/<int:shop_id>/notifications", methods=["GET"], endpoint="api_notifications")
    @owner_required
    def api_notifications(shop_id: int):
        unread_only = request.args.get("unread") in {"1", "true"}
        rows = []
        for n in container.notifier.list_recent(shop_id, unread_only=unread_only):
            row = to_json(n)
            row["maps_link"] = maps_link(n.latitude, n.longitude)
            rows.append(row)
        return jsonify({"success": True, "notifications": rows}), 200

    @app.route(
        "/api/shops/<int:shop_id>/notifications/<int:notification_id>/read",
        methods=["POST"],
        endpoint="api_notification_read",
    )
    @owner_required
    def api_notification_read(shop_id: int, notification_id: int):
        if not container.notifier.mark_read(shop_id, notification_id):
            return jsonify({"success": False, "message": "Notification not found"}), 404
        return jsonify({"success": True}), 200
