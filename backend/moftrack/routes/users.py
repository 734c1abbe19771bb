# backend/moftrack/routes/users.py
from flask import Blueprint, current_app, jsonify, request

from ..errors import MofTrackError
from ..models import User
from ..services import lifecycle_service
from ..validation import ModelValidationPolicy, ValidationError, enforce_rules_user, validate_payload


users_bp = Blueprint("users", __name__, url_prefix="/api/users")

USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "email", "full_name", "role"},
    required_on_create={"username", "email", "full_name", "role"},
)


@users_bp.post("")
def create_user_route():
    """
    Create a user.

    Request body:
    {
        "username": str,
        "email": str,
        "full_name": str,
        "role": str  // "Admin", "Picking" or "Requester"
    }

    Returns:
        201: User created
        400: Invalid request
        409: Username or email already exists
    """
    try:
        patch = validate_payload(model=User, payload=request.get_json(silent=True), policy=USER_POLICY, partial=False)
        enforce_rules_user(patch)

        user = lifecycle_service.create_user(**patch)
        return jsonify(user.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except MofTrackError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("")
def list_users_route():
    users = lifecycle_service.get_all_users()
    return jsonify({"items": [u.to_dict() for u in users], "count": len(users)}), 200


@users_bp.get("/<int:user_id>/mofs")
def list_user_mofs_route(user_id: int):
    """MOFs created by one user, newest first."""
    mofs = lifecycle_service.get_user_mofs(user_id)
    return jsonify({"items": [m.to_dict() for m in mofs], "count": len(mofs)}), 200
