# Overview: Service-layer operations for auth; password hashing, registration and bearer tokens.

"""
Authentication Service

Passwords are hashed with bcrypt. Access tokens are HS256 JWTs carrying
userId and email, valid for JWT_EXPIRE_HOURS (24h by default). Tokens are
stateless: there is no server-side session table to revoke them.
"""

from __future__ import annotations

from datetime import timedelta

import bcrypt
from flask import current_app
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User, UserSettings
from ..time_utils import utcnow
from ..validation import ConflictError, ValidationError
from . import audit_service

MIN_PASSWORD_LENGTH = 6


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost comes from BCRYPT_ROUNDS (12 outside tests)."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def normalize_email(email) -> str:
    return str(email or "").strip().lower()


def email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    q = db.session.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        q = q.filter(User.id != exclude_user_id)
    return q.first() is not None


def register_user(*, name, email, password, company_name=None) -> User:
    """
    Create a user with default settings.

    Raises:
        ValidationError: missing fields or short password
        ConflictError: email already registered (400)
    """
    name = str(name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email, and password are required")
    if "@" not in email:
        raise ValidationError("Email address is invalid")

    password_hash = hash_password(password)

    if email_taken(email):
        raise ConflictError("Email already exists", status_code=400)

    user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        company_name=str(company_name or "").strip(),
    )
    user.settings = UserSettings()
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already exists", status_code=400)

    current_app.logger.info("User registered: id=%s", user.id)
    audit_service.record_activity(
        "USER_REGISTERED",
        f"New user registered: {name} ({email})",
        user_id=user.id,
    )
    return user


def authenticate(email, password) -> User | None:
    """Return the user when the credentials match, else None."""
    email = normalize_email(email)
    if not email or not password:
        return None
    user = db.session.query(User).filter_by(email=email).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def login(email, password) -> User | None:
    user = authenticate(email, password)
    if user is None:
        return None
    current_app.logger.info("User logged in: id=%s", user.id)
    audit_service.record_activity("USER_LOGIN", "User logged in successfully", user_id=user.id)
    return user


def create_access_token(user: User) -> str:
    expires = utcnow() + timedelta(hours=current_app.config["JWT_EXPIRE_HOURS"])
    payload = {
        "userId": user.id,
        "email": user.email,
        "exp": expires,
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_access_token(token: str) -> dict | None:
    """Verify signature and expiry; None when the token is unusable."""
    try:
        claims = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError:
        return None
    if not isinstance(claims.get("userId"), int):
        return None
    return claims
