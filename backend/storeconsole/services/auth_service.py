# Overview: Service-layer operations for the identity provider; encapsulates business logic and database work.

"""
Identity Provider Service

Email/password accounts for console sign-in. Any enabled identity may sign
in; its console role is resolved separately by access_service.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters required
- Failed attempts are throttled (see login_throttle_service)
- Password reset tokens are single-use, hashed, and expire after 1 hour
- Session tokens managed separately (see session_service.py)
"""
from __future__ import annotations

import hashlib
import re
import secrets
from datetime import timedelta

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Identity, PasswordResetToken
from ..time_utils import utcnow
from ..validation import optional_str
from . import login_throttle_service, session_service


MIN_PASSWORD_LENGTH = 6
PASSWORD_RESET_TTL = timedelta(hours=1)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AUTH_ERROR_MESSAGES = {
    "user-not-found": "No account found with this email address.",
    "wrong-password": "Incorrect password.",
    "invalid-email": "Invalid email address.",
    "user-disabled": "This account has been disabled.",
    "too-many-requests": "Too many failed attempts. Please try again later.",
    "email-already-in-use": "An account with this email address already exists.",
    "weak-password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
    "invalid-reset-token": "This password reset link is invalid or has expired.",
}
DEFAULT_AUTH_ERROR_MESSAGE = "Login failed. Please check your credentials."


class IdentityError(Exception):
    """Identity provider failure carrying a stable error code."""

    def __init__(self, code: str):
        super().__init__(auth_error_message(code))
        self.code = code
        self.message = auth_error_message(code)


def auth_error_message(code: str | None) -> str:
    """User-facing text for an identity error code."""
    return AUTH_ERROR_MESSAGES.get(code or "", DEFAULT_AUTH_ERROR_MESSAGE)


def normalize_email(email: str | None) -> str:
    if not isinstance(email, str):
        raise IdentityError("invalid-email")
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise IdentityError("invalid-email")
    return email


def validate_password_strength(password: str | None) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise IdentityError("weak-password")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    if not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def get_identity(identity_id: str) -> Identity | None:
    return db.session.get(Identity, identity_id)


def find_identity_by_email(email: str) -> Identity | None:
    return db.session.query(Identity).filter_by(email=email.strip().lower()).first()


def create_identity(email: str, password: str, display_name: str | None = None) -> Identity:
    """
    Create an email/password identity.
    Raises IdentityError with code invalid-email, weak-password or
    email-already-in-use, and ValidationError for a non-string display name.
    """
    email = normalize_email(email)
    password_hash = hash_password(password)
    display_name = optional_str(display_name, "name", max_length=120)

    if find_identity_by_email(email) is not None:
        raise IdentityError("email-already-in-use")

    identity = Identity(
        email=email,
        password_hash=password_hash,
        display_name=display_name,
        created_at=utcnow(),
    )
    db.session.add(identity)
    db.session.commit()

    current_app.logger.info("Created identity id=%s email=%s", identity.id, identity.email)
    return identity


def sign_in(
    email: str,
    password: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Identity:
    """
    Check credentials and return the identity.

    Updates last_login_at on success. Every failure is recorded for throttling
    and raised as IdentityError with the matching code.
    """
    email = normalize_email(email)

    is_locked, _ = login_throttle_service.is_account_locked(email)
    if is_locked:
        raise IdentityError("too-many-requests")

    identity = find_identity_by_email(email)
    if identity is None:
        login_throttle_service.record_failed_attempt(
            email, ip_address=ip_address, user_agent=user_agent, reason="Unknown email"
        )
        raise IdentityError("user-not-found")

    if not verify_password(password or "", identity.password_hash):
        login_throttle_service.record_failed_attempt(
            email, ip_address=ip_address, user_agent=user_agent, reason="Invalid password"
        )
        raise IdentityError("wrong-password")

    if identity.is_disabled:
        raise IdentityError("user-disabled")

    identity.last_login_at = utcnow()
    db.session.commit()

    login_throttle_service.record_successful_login(
        identity.id, email, ip_address=ip_address, user_agent=user_agent
    )
    return identity


def set_disabled(identity_id: str, disabled: bool) -> Identity | None:
    """Disable or re-enable an identity; disabling revokes its sessions."""
    identity = get_identity(identity_id)
    if identity is None:
        return None
    identity.is_disabled = disabled
    db.session.commit()
    if disabled:
        session_service.revoke_all_sessions(identity_id, reason="Account disabled")
    return identity


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def send_password_reset(email: str) -> str | None:
    """
    Issue a reset token and dispatch the reset link.

    Returns the plaintext token (for the caller's mail transport), or None
    when no account matches. Callers must not reveal which case occurred.
    """
    email = normalize_email(email)
    identity = find_identity_by_email(email)
    if identity is None:
        current_app.logger.info("Password reset requested for unknown email")
        return None

    token = secrets.token_urlsafe(32)
    now = utcnow()
    db.session.add(PasswordResetToken(
        identity_id=identity.id,
        token_hash=_hash_reset_token(token),
        created_at=now,
        expires_at=now + PASSWORD_RESET_TTL,
    ))
    db.session.commit()

    link = current_app.config["PASSWORD_RESET_URL"].format(token=token)
    current_app.logger.info("Password reset link for identity id=%s: %s", identity.id, link)
    return token


def confirm_password_reset(token: str, new_password: str) -> Identity:
    """
    Set a new password using a reset token; the token is consumed and all
    sessions of the identity are revoked.
    """
    validate_password_strength(new_password)

    record = db.session.query(PasswordResetToken).filter_by(
        token_hash=_hash_reset_token(token or ""),
        used_at=None,
    ).first()
    now = utcnow()
    if record is None or record.expires_at < now:
        raise IdentityError("invalid-reset-token")

    identity = record.identity
    identity.password_hash = hash_password(new_password)
    record.used_at = now
    db.session.commit()

    session_service.revoke_all_sessions(identity.id, reason="Password reset")
    current_app.logger.info("Password reset completed for identity id=%s", identity.id)
    return identity
