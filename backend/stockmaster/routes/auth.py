# backend/stockmaster/routes/auth.py
"""
Authentication API routes.

Register and login are the only unauthenticated API routes besides /api/health.
Both answer with a bearer token valid for 24 hours.
"""

from flask import Blueprint, current_app, request

from ..errors import json_error
from ..services import auth_service
from ..validation import ConflictError, ValidationError

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Create an account and sign it in.

    Body: {"name", "email", "password", "company_name"?}
    - 201 {message, token, user}
    - 400 on missing fields, short password or duplicate email
    """
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.register_user(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            company_name=data.get("company_name"),
        )
    except (ValidationError, ConflictError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to register user")
        return json_error(e)

    return {
        "message": "User created successfully",
        "token": auth_service.create_access_token(user),
        "user": user.to_dict(),
    }, 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password.

    Unknown email and wrong password answer the same 400 so the response does
    not reveal which accounts exist.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return {"message": "Email and password are required"}, 400

    try:
        user = auth_service.login(email, password)
    except Exception as e:
        current_app.logger.exception("Failed to login user")
        return json_error(e)

    if user is None:
        return {"message": "Invalid email or password"}, 400

    return {
        "message": "Login successful",
        "token": auth_service.create_access_token(user),
        "user": user.to_dict(),
    }, 200
