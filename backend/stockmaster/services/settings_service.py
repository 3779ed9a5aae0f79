# Overview: Service-layer operations for per-user settings; rows are created lazily.

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import UserSettings
from ..models.settings import USER_SETTINGS_DEFAULTS
from ..validation import ValidationError
from . import audit_service

THEMES = {"light", "dark", "system"}
VIEWS = {"grid", "list", "table"}
BOOLEAN_KEYS = {"email_notifications", "low_stock_alerts", "push_notifications", "auto_refresh"}

# key -> (minimum, maximum); None means unbounded
INTEGER_RANGES = {
    "items_per_page": (5, 100),
    "low_stock_threshold": (0, None),
    "refresh_interval": (10, 3600),
}


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{key} must be true or false")


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(f"{key} must be an integer")
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f"{key} must be an integer")
    low, high = INTEGER_RANGES[key]
    if low is not None and number < low:
        raise ValidationError(f"{key} must be >= {low}")
    if high is not None and number > high:
        raise ValidationError(f"{key} must be <= {high}")
    return number


def validate_settings_patch(payload: dict) -> dict:
    """Normalize a settings update; unknown keys are rejected."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    patch: dict[str, Any] = {}
    for key, value in payload.items():
        if key in ("id", "user_id", "updated_at"):
            continue
        if key not in USER_SETTINGS_DEFAULTS:
            raise ValidationError(f"Unknown setting: {key}")
        if key in BOOLEAN_KEYS:
            patch[key] = _coerce_bool(key, value)
        elif key in INTEGER_RANGES:
            patch[key] = _coerce_int(key, value)
        elif key == "theme":
            if value not in THEMES:
                raise ValidationError(f"theme must be one of {', '.join(sorted(THEMES))}")
            patch[key] = value
        elif key == "default_view":
            if value not in VIEWS:
                raise ValidationError(f"default_view must be one of {', '.join(sorted(VIEWS))}")
            patch[key] = value
        elif key == "language":
            language = str(value or "").strip().lower()
            if not (2 <= len(language) <= 8):
                raise ValidationError("language must be a 2-8 character code")
            patch[key] = language
    return patch


def get_or_create_settings(user_id: int) -> UserSettings:
    settings = db.session.query(UserSettings).filter_by(user_id=user_id).first()
    if settings is not None:
        return settings

    settings = UserSettings(user_id=user_id, **USER_SETTINGS_DEFAULTS)
    db.session.add(settings)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created the row first
        db.session.rollback()
        settings = db.session.query(UserSettings).filter_by(user_id=user_id).one()
    return settings


def get_settings(user_id: int) -> dict:
    return get_or_create_settings(user_id).to_dict()


def update_settings(*, user_id: int, payload: dict) -> dict:
    patch = validate_settings_patch(payload)
    settings = get_or_create_settings(user_id)
    for key, value in patch.items():
        setattr(settings, key, value)
    db.session.commit()

    if patch:
        audit_service.record_activity(
            "SETTINGS_UPDATED",
            "Updated user settings",
            user_id=user_id,
            metadata={"changed": sorted(patch)},
        )
    return settings.to_dict()
