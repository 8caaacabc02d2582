# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Staff accounts with bcrypt password hashes. Bearer sessions are handled
separately in session_service.py.

- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, 12 by default)
- Minimum 8 characters, no further strength rules
- Username and email are each unique
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app
from sqlalchemy import or_, select

from ..extensions import db
from ..models import User
from ..validation import ValidationError
from sweetshop.time_utils import utcnow


MIN_PASSWORD_LENGTH = 8
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(ValidationError):
    """Raised when a password is too short."""
    pass


class InvalidCredentialsError(Exception):
    """Wrong identifier/password pair or inactive account (401)."""
    pass


def validate_password(password) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def hash_password(password: str) -> str:
    validate_password(password)
    rounds = int(current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """bcrypt.checkpw is constant-time; a malformed stored hash is a mismatch."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_user(username: str, email: str, password: str) -> User:
    """
    Raises:
        ValidationError: missing/invalid fields or a duplicate username/email
        PasswordValidationError: password shorter than 8 characters
    """
    username = (username or "").strip() if isinstance(username, str) else ""
    email = (email or "").strip().lower() if isinstance(email, str) else ""

    if not username:
        raise ValidationError("username is required")
    if len(username) > 64:
        raise ValidationError("username exceeds max length 64")
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required")

    password_hash = hash_password(password)

    existing = db.session.execute(
        select(User).where(or_(User.username == username, User.email == email))
    ).scalars().first()
    if existing:
        raise ValidationError("Username or email already exists")

    user = User(username=username, email=email, password_hash=password_hash, is_active=True)
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(identifier: str, password: str) -> User:
    """
    Look the user up by email or username and check the password.

    Raises InvalidCredentialsError without saying which half was wrong.
    """
    if not identifier or not password:
        raise InvalidCredentialsError("Invalid credentials")

    identifier = identifier.strip()
    user = db.session.execute(
        select(User).where(or_(User.email == identifier.lower(), User.username == identifier))
    ).scalars().first()

    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid credentials")

    user.last_login_at = utcnow()
    db.session.commit()
    return user
