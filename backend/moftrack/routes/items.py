# backend/moftrack/routes/items.py
from flask import Blueprint, current_app, jsonify, request

from ..errors import MofTrackError
from ..models import Item
from ..services import lifecycle_service
from ..validation import ModelValidationPolicy, ValidationError, validate_payload


items_bp = Blueprint("items", __name__, url_prefix="/api/items")

# Scan state (picked/verified flags, mof_id) is only ever set by the scan
# and verification endpoints.
ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"part_number", "supplier", "serial_number"},
    required_on_create={"part_number", "supplier", "serial_number"},
)


@items_bp.post("")
def create_item_route():
    """
    Register a serialized item.

    Request body:
    {
        "part_number": str,
        "supplier": str,
        "serial_number": str
    }

    Returns:
        201: Item created
        400: Invalid request
        409: Serial number already exists
    """
    try:
        patch = validate_payload(model=Item, payload=request.get_json(silent=True), policy=ITEM_POLICY, partial=False)

        item = lifecycle_service.create_item(**patch)
        return jsonify(item.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except MofTrackError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.get("")
def list_items_route():
    items = lifecycle_service.get_all_items()
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200
