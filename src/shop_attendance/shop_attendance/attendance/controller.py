from __future__ import annotations

import io
from datetime import date, timedelta

import qrcode
from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, to_json, unexpected_error_response
from ..common.validators import optional_float, optional_int
from ..container import Container
from ..core.enums import Channel
from ..core.exceptions import DomainError, ValidationError
from ..geo.location import SubmittedLocationProvider
from ..security.decorators import owner_required
from .service import ClockOptions, ClockResult

SHOP_CODE_PREFIX = "SHOPCLOCK"


def shop_code_payload(shop_id: int) -> str:
    return f"{SHOP_CODE_PREFIX}:{int(shop_id)}"


def register(app: Flask, container: Container) -> None:
    def _client_ip() -> str | None:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.remote_addr

    def _options_from(data: dict) -> ClockOptions:
        return ClockOptions(
            location_provider=SubmittedLocationProvider(
                latitude=optional_float(data.get("latitude"), "Latitude"),
                longitude=optional_float(data.get("longitude"), "Longitude"),
                accuracy=optional_float(data.get("accuracy"), "Accuracy"),
            ),
            tag_id=(data.get("tag_id") or "").strip() or None,
            require_gps=bool(data.get("require_gps", False)),
            device_info=request.headers.get("User-Agent"),
            ip_address=_client_ip(),
        )

    def _result_json(result: ClockResult):
        return jsonify(
            {
                "success": True,
                "action": result.action.value,
                "message": result.message,
                "needs_review": result.needs_review,
                "distance_meters": round(result.distance_meters) if result.distance_meters is not None else None,
                "entry": to_json(result.entry),
            }
        ), 200

    def _parse_channel(value: str | None) -> Channel:
        try:
            return Channel(value or Channel.TERMINAL.value)
        except ValueError:
            raise ValidationError("Unknown clock method")

    @app.route("/api/shops/<int:shop_id>/clock", methods=["POST"], endpoint="api_clock")
    def api_clock(shop_id: int):
        """Clock in or out, whichever is next for the employee with this PIN."""
        data = request.get_json(silent=True) or {}
        try:
            channel = _parse_channel(data.get("method"))
            result = container.clock_service.clock_toggle_by_pin(
                shop_id,
                data.get("pin", ""),
                channel,
                _options_from(data),
            )
            return _result_json(result)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("clocking in/out")

    @app.route("/api/shops/<int:shop_id>/clock/code-image", methods=["POST"], endpoint="api_clock_code_image")
    def api_clock_code_image(shop_id: int):
        """Fallback for devices without a camera scanner: decode an uploaded photo of the shop code."""
        from PIL import Image
        from pyzbar.pyzbar import decode as pyzbar_decode

        try:
            upload = request.files.get("image")
            if not upload:
                raise ValidationError("Please upload a photo of the shop QR code")

            try:
                decoded = pyzbar_decode(Image.open(upload.stream))
            except OSError:
                raise ValidationError("Could not read the uploaded image")
            payloads = {d.data.decode("utf-8", errors="ignore") for d in decoded}
            if shop_code_payload(shop_id) not in payloads:
                raise ValidationError("This QR code does not belong to this shop")

            result = container.clock_service.clock_toggle_by_pin(
                shop_id,
                request.form.get("pin", ""),
                Channel.CODE,
                _options_from(request.form.to_dict()),
            )
            return _result_json(result)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("clocking in/out from a code image")

    @app.route("/api/shops/<int:shop_id>/code.png", methods=["GET"], endpoint="shop_code_image")
    @owner_required
    def shop_code_image(shop_id: int):
        """Printable QR code staff scan to clock in at this shop."""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=2,
        )
        qr.add_data(shop_code_payload(shop_id))
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")

    @app.route("/api/shops/<int:shop_id>/status", methods=["POST"], endpoint="api_clock_status")
    def api_clock_status(shop_id: int):
        data = request.get_json(silent=True) or {}
        try:
            employee = container.clock_service.resolve_employee_by_pin(shop_id, data.get("pin", ""))
            entry = container.clock_service.get_clock_status(employee.employee_id, shop_id)
            return jsonify(
                {
                    "success": True,
                    "employee": {"employee_id": employee.employee_id, "first_name": employee.first_name},
                    "clocked_in": entry is not None,
                    "entry": to_json(entry) if entry else None,
                }
            ), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/shops/<int:shop_id>/history", methods=["POST"], endpoint="api_clock_history")
    def api_clock_history(shop_id: int):
        data = request.get_json(silent=True) or {}
        try:
            employee = container.clock_service.resolve_employee_by_pin(shop_id, data.get("pin", ""))
            limit = optional_int(data.get("limit"), "limit", default=30)
            rows = container.clock_service.get_history_ui(employee.employee_id, limit=limit)
            return jsonify({"success": True, "rows": rows}), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/shops/<int:shop_id>/working", methods=["GET"], endpoint="api_currently_working")
    @owner_required
    def api_currently_working(shop_id: int):
        return jsonify({"success": True, "rows": container.clock_service.list_currently_working(shop_id)}), 200

    @app.route("/api/shops/<int:shop_id>/payroll", methods=["GET"], endpoint="api_payroll_summary")
    @owner_required
    def api_payroll_summary(shop_id: int):
        today = date.today()
        try:
            start = parse_iso_date(request.args.get("start") or (today - timedelta(days=13)).strftime("%Y-%m-%d"))
            end = parse_iso_date(request.args.get("end") or today.strftime("%Y-%m-%d"))
        except ValueError:
            return jsonify({"success": False, "message": "Dates must be YYYY-MM-DD"}), 400
        try:
            summary = container.payroll_report_service.build_payroll_summary(shop_id, start=start, end=end)
            return jsonify({"success": True, **to_json(summary)}), 200
        except DomainError as e:
            return error_response(e)
