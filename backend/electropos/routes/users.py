# Overview: Flask API routes for the user directory and screen permissions.

"""
User Routes

The login endpoint only verifies credentials and reports which screens the
user may open; session handling belongs to the dashboard.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..models.auth import DEFAULT_ROLE, SCREEN_PATHS
from ..services import user_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _with_screens(user) -> dict:
    return {
        **user.to_dict(),
        "screens": [path for path in SCREEN_PATHS if user_service.has_access(user, path)],
    }


@users_bp.get("")
def list_users_route():
    try:
        users = user_service.list_users(get_data_store())
        return jsonify({"items": [u.to_dict() for u in users], "count": len(users)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@users_bp.post("")
def create_user_route():
    """
    Request body:
    {
        "username": "cashier1",       // stored upper-cased
        "password": "Passw0rd!",
        "name": "Front desk",
        "role": "CASHIER",
        "permissions": ["/billing", "/invoices"]   // optional, ["/"] by default
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.add_user(
            get_data_store(),
            username=data.get("username"),
            password=data.get("password"),
            name=data.get("name") or "",
            role=data.get("role") or DEFAULT_ROLE,
            permissions=data.get("permissions"),
        )
        return jsonify(user.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.delete("/<user_id>")
def delete_user_route(user_id: str):
    try:
        user_service.delete_user(get_data_store(), user_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)


@users_bp.put("/<user_id>/permissions")
def update_permissions_route(user_id: str):
    """
    Request body:
    {"permissions": ["/billing", "/inventory"]}
    """
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.update_permissions(get_data_store(), user_id, data.get("permissions"))
        return jsonify(_with_screens(user))
    except DOMAIN_ERRORS as e:
        return error_response(e)


@users_bp.post("/login")
def login_route():
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.authenticate(get_data_store(), data.get("username"), data.get("password"))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    if not user:
        return jsonify({"error": "Invalid username or password"}), 401
    return jsonify(_with_screens(user))
