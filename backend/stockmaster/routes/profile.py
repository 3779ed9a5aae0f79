# backend/stockmaster/routes/profile.py
"""Profile routes for the signed-in user, including the profile picture upload."""

from flask import Blueprint, current_app, g, request

from ..errors import json_error
from ..services import profile_service
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import require_auth

profile_bp = Blueprint("profile", __name__, url_prefix="/api")


@profile_bp.get("/profile")
@require_auth
def get_profile():
    try:
        user = profile_service.get_user(g.current_user_id)
    except NotFoundError as e:
        return {"message": str(e)}, 404
    return {"user": user.to_dict()}, 200


@profile_bp.put("/profile")
@require_auth
def update_profile():
    data = request.get_json(silent=True) or {}
    try:
        user = profile_service.update_profile(
            user_id=g.current_user_id,
            name=data.get("name"),
            email=data.get("email"),
            company_name=data.get("company_name"),
        )
    except (ValidationError, ConflictError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to update profile")
        return json_error(e)
    return {"message": "Profile updated successfully", "user": user.to_dict()}, 200


@profile_bp.post("/upload-profile-picture")
@require_auth
def upload_profile_picture():
    """Multipart upload; the file field is "profile_picture" (images only, 5MB max)."""
    try:
        user = profile_service.set_profile_picture(
            user_id=g.current_user_id,
            file=request.files.get("profile_picture"),
        )
    except (ValidationError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to upload profile picture")
        return json_error(e)
    return {"message": "Profile picture uploaded successfully", "user": user.to_dict()}, 200


@profile_bp.delete("/profile/picture")
@require_auth
def remove_profile_picture():
    try:
        user = profile_service.remove_profile_picture(user_id=g.current_user_id)
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except Exception as e:
        current_app.logger.exception("Failed to remove profile picture")
        return json_error(e)
    return {"message": "Profile picture removed successfully", "user": user.to_dict()}, 200
