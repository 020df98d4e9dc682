from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, to_json
from ..container import Container
from ..core.enums import ApprovalStatus
from ..core.exceptions import DomainError, ValidationError
from ..security.decorators import owner_required


def register(app: Flask, container: Container) -> None:
    def _reviewer(shop_id: int) -> str:
        return session.get(f"owner_name_{shop_id}") or "Shop owner"

    def _parse_date(value) -> date | None:
        if not value:
            return None
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("Dates must be YYYY-MM-DD")

    @app.route("/api/shops/<int:shop_id>/approvals", methods=["GET"], endpoint="api_list_approvals")
    @owner_required
    def api_list_approvals(shop_id: int):
        status_s = request.args.get("status")
        try:
            status = ApprovalStatus(status_s) if status_s else None
        except ValueError:
            return jsonify({"success": False, "message": "Unknown status"}), 400
        rows = container.approval_service.list_requests(shop_id=shop_id, status=status)
        return jsonify(
            {
                "success": True,
                "pending_count": container.approval_service.pending_count(shop_id),
                "requests": to_json(list(rows)),
            }
        ), 200

    @app.route(
        "/api/shops/<int:shop_id>/approvals/<int:request_id>/approve",
        methods=["POST"],
        endpoint="api_approve_request",
    )
    @owner_required
    def api_approve_request(shop_id: int, request_id: int):
        try:
            req = container.approval_service.approve(request_id, shop_id=shop_id, reviewer=_reviewer(shop_id))
            return jsonify({"success": True, "message": "Clock-in approved", "request": to_json(req)}), 200
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/shops/<int:shop_id>/approvals/<int:request_id>/reject",
        methods=["POST"],
        endpoint="api_reject_request",
    )
    @owner_required
    def api_reject_request(shop_id: int, request_id: int):
        data = request.get_json(silent=True) or {}
        try:
            outcome = container.approval_service.reject(
                request_id,
                shop_id=shop_id,
                reviewer=_reviewer(shop_id),
                reason=data.get("reason"),
            )
            return jsonify(
                {
                    "success": True,
                    "message": "Clock-in rejected and staff clocked out",
                    "request": to_json(outcome.request),
                    "closed_entry": to_json(outcome.closed_entry) if outcome.closed_entry else None,
                }
            ), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/shops/<int:shop_id>/standing-approvals", methods=["GET"], endpoint="api_list_standing")
    @owner_required
    def api_list_standing(shop_id: int):
        rows = container.approval_service.list_standing_approvals(shop_id=shop_id)
        return jsonify({"success": True, "approvals": to_json(list(rows))}), 200

    @app.route("/api/shops/<int:shop_id>/standing-approvals", methods=["POST"], endpoint="api_create_standing")
    @owner_required
    def api_create_standing(shop_id: int):
        data = request.get_json(silent=True) or {}
        try:
            approval_id = container.approval_service.create_standing_approval(
                employee_id=int(data.get("employee_id") or 0),
                shop_id=shop_id,
                days_of_week=data.get("days_of_week") or [],
                start_date=_parse_date(data.get("start_date")),
                end_date=_parse_date(data.get("end_date")),
                notes=data.get("notes") or "",
                created_by=_reviewer(shop_id),
            )
            return jsonify({"success": True, "approval_id": approval_id}), 201
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "Invalid approval data"}), 400
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/shops/<int:shop_id>/standing-approvals/<int:approval_id>/active",
        methods=["POST"],
        endpoint="api_toggle_standing",
    )
    @owner_required
    def api_toggle_standing(shop_id: int, approval_id: int):
        data = request.get_json(silent=True) or {}
        try:
            container.approval_service.set_standing_approval_active(
                approval_id, shop_id=shop_id, is_active=bool(data.get("is_active"))
            )
            return jsonify({"success": True}), 200
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/shops/<int:shop_id>/standing-approvals/<int:approval_id>",
        methods=["DELETE"],
        endpoint="api_delete_standing",
    )
    @owner_required
    def api_delete_standing(shop_id: int, approval_id: int):
        try:
            container.approval_service.delete_standing_approval(approval_id, shop_id=shop_id)
            return jsonify({"success": True}), 200
        except DomainError as e:
            return error_response(e)
