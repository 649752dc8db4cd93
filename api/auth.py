"""
Authentication blueprint:
- POST /refresh  exchange a registered refresh token for a new access token

Refresh tokens are issued by the login flow and tracked in the refresh
registry; this endpoint never rotates them. A token that is registered but
fails verification is evicted before the 403 is returned.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import get_registry
from utils.refresh_flow import RefreshFlow

bp = Blueprint("auth", __name__)


@bp.post("/refresh")
def refresh():
    """
    Obtain a new access token from a refresh token.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [refreshToken]
          properties:
            refreshToken: { type: string }
    responses:
      200:
        description: New access token
        schema:
          type: object
          properties:
            token: { type: string }
      400:
        description: Refresh token missing
      403:
        description: Refresh token unknown, revoked or invalid
    """
    payload = request.get_json(silent=True) or {}
    token = payload.get("refreshToken") if isinstance(payload, dict) else None

    access_token = RefreshFlow(get_registry()).refresh(token)
    return jsonify({"token": access_token}), 200
