# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/sweetshop/routes/auth.py
"""
Authentication API routes

- signup: username, email, password (>= 8 characters)
- login: email or username + password -> bearer token
- logout: revokes the presented token
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import bearer_token, require_auth
from ..extensions import db
from ..services import auth_service
from ..services import session_service
from ..services.auth_service import InvalidCredentialsError
from ..validation import ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/signup")
def signup_route():
    data = request.get_json(silent=True) or {}

    try:
        user = auth_service.create_user(
            username=data.get("username"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify({"user": user.to_dict(), "message": "User created successfully"}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Returns user info and a session token. The token goes in the
    Authorization header ("Bearer <token>") of every protected request.
    """
    data = request.get_json(silent=True) or {}
    identifier = data.get("email") or data.get("username") or data.get("identifier")
    password = data.get("password")

    if not identifier or not password:
        return jsonify({"error": "email/username and password required"}), 400

    try:
        user = auth_service.authenticate(identifier, password)
        session, token = session_service.create_session(user.id)
        return jsonify({
            "user": user.to_dict(),
            "token": token,
            "expires_at": session.expires_at.isoformat() + "Z",
            "message": "Login successful",
        }), 200
    except InvalidCredentialsError:
        return jsonify({"error": "Invalid credentials"}), 401
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(bearer_token())
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()})
