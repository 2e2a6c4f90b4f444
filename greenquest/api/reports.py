"""Waste report API endpoints."""

from flask import request

from greenquest.api import api_bp
from greenquest.errors import GreenQuestError, NotFound
from greenquest.models import UserRole
from greenquest.services import ReportService
from greenquest.utils import (
    domain_error,
    result_response,
    success_response,
    validation_error,
)
from greenquest.utils.auth import admin_required, current_user, login_required


@api_bp.route("/reports", methods=["POST"])
@login_required
def create_report():
    """
    Submit a waste report.

    Request body:
    {
        "location": "Main St & 5th Ave",
        "waste_type": "plastic",
        "amount": "12.5",
        "image_url": "https://...",         // optional
        "verification_result": {...}        // optional
    }
    """
    data = request.get_json(silent=True)
    if not data:
        return validation_error({"body": "Request body is required"})

    result = ReportService().create_report(
        current_user().id,
        data.get("location", ""),
        data.get("waste_type", ""),
        data.get("amount"),
        image_url=data.get("image_url"),
        verification_result=data.get("verification_result"),
    )
    return result_response(
        result, lambda report: {"report": report.to_dict()}, status_code=201
    )


@api_bp.route("/reports", methods=["GET"])
@login_required
def get_my_reports():
    """Get the current user's reports, newest first."""
    reports = ReportService().get_user_reports(current_user().id)
    return success_response({"reports": [r.to_dict() for r in reports]})


@api_bp.route("/reports/<int:report_id>", methods=["GET"])
@login_required
def get_report(report_id: int):
    """Get a single report. Users only see their own; staff see all."""
    user = current_user()
    try:
        report = ReportService().get_report(report_id)
    except GreenQuestError as e:
        return domain_error(e)

    if report.user_id != user.id and user.role == UserRole.USER.value:
        return domain_error(NotFound(f"Report with ID {report_id} not found."))

    return success_response({"report": report.to_dict()})


@api_bp.route("/reports/<int:report_id>/status", methods=["PUT"])
@admin_required
def update_report_status(report_id: int):
    """
    Change a report's status.

    Request body:
    {
        "status": "pending|assigned|in_progress|completed|cancelled",
        "collector_id": 7   // optional
    }
    """
    data = request.get_json(silent=True) or {}
    if "status" not in data:
        return validation_error({"status": "status is required"})

    result = ReportService().update_report_status(
        report_id, data["status"], collector_id=data.get("collector_id")
    )
    return result_response(result, lambda report: {"report": report.to_dict()})


@api_bp.route("/admin/reports", methods=["GET"])
@admin_required
def get_all_reports():
    """All reports, optionally filtered by ?status=."""
    try:
        reports = ReportService().get_all_reports(request.args.get("status"))
    except GreenQuestError as e:
        return domain_error(e)
    return success_response({"reports": [r.to_dict() for r in reports]})


@api_bp.route("/admin/reports/recent", methods=["GET"])
@admin_required
def get_recent_reports():
    limit = min(int(request.args.get("limit", 10)), 100)
    return success_response({"reports": ReportService().get_recent_reports(limit)})


@api_bp.route("/admin/reports/trends", methods=["GET"])
@admin_required
def get_report_trends():
    """Completed reports per period. Query params: interval (weekly|monthly)."""
    try:
        trends = ReportService().get_report_trends(
            request.args.get("interval", "weekly")
        )
    except GreenQuestError as e:
        return domain_error(e)
    return success_response(trends)


@api_bp.route("/admin/reports/<int:report_id>", methods=["DELETE"])
@admin_required
def delete_report(report_id: int):
    result = ReportService().delete_report(report_id)
    return result_response(result, lambda _: {"deleted": True})
