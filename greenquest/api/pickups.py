"""Pickup (waste collection) API endpoints."""

from flask import request

from greenquest.api import api_bp
from greenquest.services import PickupService, ReportService
from greenquest.utils import result_response, success_response, validation_error
from greenquest.utils.auth import admin_required, agent_required, current_user


@api_bp.route("/pickups", methods=["GET"])
@agent_required
def get_pickups():
    """All pickup requests, optionally filtered by ?status=."""
    pickups = PickupService().get_all_pickup_requests(request.args.get("status"))
    return success_response({"pickups": [p.to_dict() for p in pickups]})


@api_bp.route("/pickups/tasks", methods=["GET"])
@agent_required
def get_collection_tasks():
    limit = min(int(request.args.get("limit", 20)), 100)
    return success_response(
        {"tasks": PickupService().get_waste_collection_tasks(limit)}
    )


@api_bp.route("/pickups/<int:pickup_id>/assign", methods=["POST"])
@admin_required
def assign_pickup(pickup_id: int):
    """
    Assign a collector to a pickup.

    Request body:
    {
        "collector_id": 7
    }
    """
    data = request.get_json(silent=True) or {}
    collector_id = data.get("collector_id")
    if not isinstance(collector_id, int):
        return validation_error({"collector_id": "collector_id is required"})

    result = ReportService().assign_collector(pickup_id, collector_id)
    return result_response(result, lambda report: {"pickup": report.to_dict()})


@api_bp.route("/pickups/<int:pickup_id>/unassign", methods=["POST"])
@admin_required
def unassign_pickup(pickup_id: int):
    result = ReportService().unassign_collector(pickup_id)
    return result_response(result, lambda report: {"pickup": report.to_dict()})


@api_bp.route("/pickups/<int:pickup_id>/status", methods=["PUT"])
@agent_required
def update_pickup_status(pickup_id: int):
    """
    Update the status of a pickup assigned to the current agent.

    Request body:
    {
        "status": "in_progress|completed|cancelled"
    }
    """
    data = request.get_json(silent=True) or {}
    if "status" not in data:
        return validation_error({"status": "status is required"})

    # Domain errors raised here are rendered by the app error handler
    pickup = PickupService().update_pickup_status(
        pickup_id, data["status"], agent_id=current_user().id
    )
    return success_response({"pickup": pickup.to_dict()})


@api_bp.route("/agent/profile", methods=["GET"])
@agent_required
def get_agent_profile():
    return success_response(PickupService().get_agent_profile(current_user().id))
