# Overview: Bearer session tokens for staff logins.

"""
Sessions

A login issues a random 64-hex-character token. The client keeps the
plaintext; the database keeps only its SHA-256 digest, an absolute expiry
(24 hours after login) and a revoked flag set by logout.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete, select

from ..extensions import db
from ..models import SessionToken, User
from sweetshop.time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
TOKEN_BYTES = 32


@dataclass
class SessionContext:
    user: User
    session: SessionToken


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _find(token: str) -> SessionToken | None:
    return db.session.execute(
        select(SessionToken).where(SessionToken.token_hash == hash_token(token))
    ).scalars().first()


def create_session(user_id: int) -> tuple[SessionToken, str]:
    """Returns (session_record, plaintext_token)."""
    token = generate_token()
    issued_at = utcnow()
    record = SessionToken(
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=issued_at,
        last_used_at=issued_at,
        expires_at=issued_at + SESSION_ABSOLUTE_TIMEOUT,
        is_revoked=False,
    )
    db.session.add(record)
    db.session.commit()
    return record, token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a presented token to its user.

    None for unknown, revoked or expired tokens and for deactivated users.
    A hit refreshes last_used_at.
    """
    if not token:
        return None

    record = _find(token)
    current = utcnow()
    if record is None or record.is_revoked or record.expires_at < current:
        return None
    if record.user is None or not record.user.is_active:
        return None

    record.last_used_at = current
    db.session.commit()
    return SessionContext(user=record.user, session=record)


def revoke_session(token: str) -> bool:
    """Logout. False when the token was unknown or already revoked."""
    record = _find(token)
    if record is None or record.is_revoked:
        return False
    record.is_revoked = True
    record.revoked_at = utcnow()
    db.session.commit()
    return True


def purge_expired_sessions() -> int:
    result = db.session.execute(
        delete(SessionToken)
        .where(SessionToken.expires_at < utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount or 0
