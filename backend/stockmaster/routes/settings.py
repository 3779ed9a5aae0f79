# backend/stockmaster/routes/settings.py
"""Per-user settings. The row is created with defaults on first access."""
from flask import Blueprint, current_app, g, request

from ..errors import json_error
from ..services import settings_service
from ..validation import ValidationError
from ..decorators import require_auth

settings_bp = Blueprint("settings", __name__, url_prefix="/api/user-settings")


@settings_bp.get("")
@require_auth
def get_user_settings():
    return settings_service.get_settings(g.current_user_id), 200


@settings_bp.put("")
@require_auth
def update_user_settings():
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    try:
        settings = settings_service.update_settings(user_id=g.current_user_id, payload=payload)
    except ValidationError as e:
        return {"message": str(e)}, 400
    except Exception as e:
        current_app.logger.exception("Failed to update user settings")
        return json_error(e)
    return {"message": "Settings updated successfully", "settings": settings}, 200
