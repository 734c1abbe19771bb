# backend/moftrack/routes/mofs.py
"""
MOF API routes: creation, picker scans, requester verification,
progress and administrative status changes.
"""
from flask import Blueprint, current_app, jsonify, request

from ..errors import MofTrackError, NotFoundError
from ..models import Mof
from ..services import lifecycle_service, progress_service, scan_service, verification_service
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_mof,
    validate_payload,
    validate_scan_payload,
)


mofs_bp = Blueprint("mofs", __name__, url_prefix="/api/mofs")

# serial_number and status are server-assigned
MOF_POLICY = ModelValidationPolicy(
    writable_fields={
        "part_number",
        "quantity_requested",
        "expected_receiving_date",
        "requester_name",
        "department",
        "project",
        "created_by",
    },
    required_on_create={
        "part_number",
        "quantity_requested",
        "expected_receiving_date",
        "requester_name",
        "department",
        "project",
        "created_by",
    },
)


def _error(e: Exception, action: str):
    if isinstance(e, ValidationError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, MofTrackError):
        return jsonify(e.to_dict()), e.http_status
    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "Internal server error"}), 500


@mofs_bp.post("")
def create_mof_route():
    """
    Create a MOF. The serial number is generated and status starts Pending.

    Request body:
    {
        "part_number": str,
        "quantity_requested": int,
        "expected_receiving_date": str,  // ISO-8601
        "requester_name": str,
        "department": str,
        "project": str,
        "created_by": int
    }

    Returns:
        201: MOF created
        400: Invalid request
        404: created_by user not found
    """
    try:
        patch = validate_payload(model=Mof, payload=request.get_json(silent=True), policy=MOF_POLICY, partial=False)
        enforce_rules_mof(patch)

        mof = lifecycle_service.create_mof(**patch)
        return jsonify(mof.to_dict()), 201
    except Exception as e:
        return _error(e, "create MOF")


@mofs_bp.get("")
def list_mofs_route():
    """All MOFs, newest first."""
    mofs = lifecycle_service.get_all_mofs()
    return jsonify({"items": [m.to_dict() for m in mofs], "count": len(mofs)}), 200


@mofs_bp.get("/summary")
def status_summary_route():
    return jsonify(progress_service.get_status_summary()), 200


@mofs_bp.get("/serial/<string:serial_number>")
def get_mof_by_serial_route(serial_number: str):
    mof = lifecycle_service.get_mof_by_serial(serial_number)
    if mof is None:
        return jsonify(NotFoundError("mof", serial_number, by="serial number").to_dict()), 404
    return jsonify(mof.to_dict()), 200


@mofs_bp.get("/<int:mof_id>/progress")
def get_mof_progress_route(mof_id: int):
    progress = progress_service.get_mof_progress(mof_id)
    if progress is None:
        return jsonify(NotFoundError("mof", mof_id).to_dict()), 404
    return jsonify(progress.to_dict()), 200


@mofs_bp.get("/<int:mof_id>/history")
def get_mof_history_route(mof_id: int):
    history = progress_service.get_mof_history(mof_id)
    if history is None:
        return jsonify(NotFoundError("mof", mof_id).to_dict()), 404
    return jsonify(history), 200


@mofs_bp.patch("/<int:mof_id>/status")
def update_mof_status_route(mof_id: int):
    """
    Administrative status override.

    Request body:
    {
        "status": str  // Pending | In Progress | MOF siap Supply | Completed
    }

    Returns:
        200: Updated MOF
        400: Unknown status
        404: MOF not found
    """
    data = request.get_json(silent=True)

    try:
        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON payload")
        if "status" not in data:
            raise ValidationError("Missing required fields: status")
        mof = lifecycle_service.update_mof_status(mof_id, data["status"])
        return jsonify(mof.to_dict()), 200
    except Exception as e:
        return _error(e, "update MOF status")


@mofs_bp.post("/scan")
def scan_item_route():
    """
    Picker scans an item against a MOF.

    Request body:
    {
        "mof_serial_number": str,
        "item_serial_number": str,
        "picked_by": int
    }

    Returns:
        200: Updated item
        400: Invalid request
        404: MOF, item or user not found
        409: Item already picked
        422: Part number mismatch
    """
    try:
        data = validate_scan_payload(request.get_json(silent=True), actor_field="picked_by")
        item = scan_service.scan_item(**data)
        return jsonify(item.to_dict()), 200
    except Exception as e:
        return _error(e, "scan item")


@mofs_bp.post("/verify")
def verify_item_route():
    """
    Requester verifies receipt of a picked item.

    Request body:
    {
        "mof_serial_number": str,
        "item_serial_number": str,
        "verified_by": int
    }

    Returns:
        200: Updated item
        400: Invalid request
        404: MOF, item or user not found
        409: Wrong MOF, not yet picked, or already verified
    """
    try:
        data = validate_scan_payload(request.get_json(silent=True), actor_field="verified_by")
        item = verification_service.verify_item(**data)
        return jsonify(item.to_dict()), 200
    except Exception as e:
        return _error(e, "verify item")
