# Overview: Service-layer operations for the signed-in user's profile and profile picture.

from __future__ import annotations

import os
import secrets
import time

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..extensions import db
from ..models import User
from ..validation import ConflictError, NotFoundError, ValidationError
from . import audit_service
from .auth_service import email_taken, normalize_email

UPLOAD_URL_PREFIX = "/uploads/"


class UploadError(ValidationError):
    """Rejected profile picture upload (wrong type, too large, missing)."""


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(*, user_id: int, name, email, company_name=None) -> User:
    name = str(name or "").strip()
    email = normalize_email(email)
    if not name or not email:
        raise ValidationError("Name and email are required")

    user = get_user(user_id)
    if email_taken(email, exclude_user_id=user_id):
        raise ConflictError("Email already exists", status_code=400)

    user.name = name
    user.email = email
    user.company_name = str(company_name or "").strip()
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already exists", status_code=400)

    audit_service.record_activity("PROFILE_UPDATED", "Updated profile information", user_id=user_id)
    return user


def _file_size(file: FileStorage) -> int:
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _stored_path(public_path: str | None) -> str | None:
    if not public_path or not public_path.startswith(UPLOAD_URL_PREFIX):
        return None
    filename = os.path.basename(public_path[len(UPLOAD_URL_PREFIX):])
    return os.path.join(current_app.config["UPLOAD_FOLDER"], filename)


def _discard_file(public_path: str | None) -> None:
    path = _stored_path(public_path)
    if path is None:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        current_app.logger.warning("Could not remove old profile picture %s", path, exc_info=True)


def save_profile_picture(file: FileStorage | None) -> str:
    """Store an uploaded image and return its public /uploads/... path."""
    if file is None or not file.filename:
        raise UploadError("No file uploaded")
    if not (file.mimetype or "").startswith("image/"):
        raise UploadError("Only image files are allowed!")
    if _file_size(file) > current_app.config["MAX_UPLOAD_BYTES"]:
        raise UploadError("File too large. Maximum size is 5MB.")

    _, ext = os.path.splitext(secure_filename(file.filename))
    unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    filename = f"profile-{unique_suffix}{ext.lower()}"

    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    file.save(os.path.join(folder, filename))
    return UPLOAD_URL_PREFIX + filename


def set_profile_picture(*, user_id: int, file: FileStorage | None) -> User:
    user = get_user(user_id)
    public_path = save_profile_picture(file)

    previous = user.profile_picture
    user.profile_picture = public_path
    db.session.commit()
    _discard_file(previous)

    audit_service.record_activity("PROFILE_UPDATED", "Updated profile picture", user_id=user_id)
    return user


def remove_profile_picture(*, user_id: int) -> User:
    user = get_user(user_id)
    previous = user.profile_picture
    user.profile_picture = None
    db.session.commit()
    _discard_file(previous)

    audit_service.record_activity("PROFILE_UPDATED", "Removed profile picture", user_id=user_id)
    return user
