# Overview: Service-layer operations for login throttling; counts failed sign-ins and locks emails.

"""
Login Throttling Service

WHY: Prevent brute-force password attacks by limiting failed sign-ins.
After too many failures, the email is temporarily locked and sign-in
answers "too-many-requests".

- Tracks failed attempts per email in the security_events table
- Lockout after MAX_FAILED_ATTEMPTS failures within LOCKOUT_WINDOW
- Lockout lasts LOCKOUT_DURATION from the most recent failure
"""

from datetime import timedelta
from ..extensions import db
from ..models import SecurityEvent
from ..time_utils import utcnow


# Configuration constants
MAX_FAILED_ATTEMPTS = 10  # Lock after 10 failed attempts
LOCKOUT_WINDOW = timedelta(minutes=15)  # Within 15 minutes
LOCKOUT_DURATION = timedelta(minutes=15)  # Lockout for 15 minutes

LOGIN_RESOURCE = "/api/auth/login"


def get_recent_failed_attempts(identifier: str) -> int:
    """Count LOGIN_FAILED events for this email within LOCKOUT_WINDOW."""
    cutoff = utcnow() - LOCKOUT_WINDOW

    # The email is stored in the 'action' field of security events
    return db.session.query(SecurityEvent).filter(
        SecurityEvent.event_type == "LOGIN_FAILED",
        SecurityEvent.action == identifier,
        SecurityEvent.occurred_at >= cutoff
    ).count()


def is_account_locked(identifier: str) -> tuple[bool, int | None]:
    """
    Returns:
    - (True, seconds_remaining) if locked
    - (False, None) if not locked
    """
    if get_recent_failed_attempts(identifier) < MAX_FAILED_ATTEMPTS:
        return False, None

    most_recent = db.session.query(SecurityEvent).filter(
        SecurityEvent.event_type == "LOGIN_FAILED",
        SecurityEvent.action == identifier
    ).order_by(SecurityEvent.occurred_at.desc()).first()

    if most_recent:
        lockout_end = most_recent.occurred_at + LOCKOUT_DURATION
        now = utcnow()
        if now < lockout_end:
            return True, int((lockout_end - now).total_seconds())

    return False, None


def record_failed_attempt(
    identifier: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
    reason: str = "Invalid credentials"
) -> int:
    """Record a failed sign-in. Returns the number of recent failures."""
    event = SecurityEvent(
        identity_id=None,
        event_type="LOGIN_FAILED",
        resource=LOGIN_RESOURCE,
        action=identifier,
        success=False,
        reason=reason,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return get_recent_failed_attempts(identifier)


def record_successful_login(
    identity_id: str,
    identifier: str,
    ip_address: str | None = None,
    user_agent: str | None = None
) -> None:
    """
    Record a successful sign-in.

    Old failures are kept; they age out of LOCKOUT_WINDOW on their own.
    """
    db.session.add(SecurityEvent(
        identity_id=identity_id,
        event_type="LOGIN_SUCCESS",
        resource=LOGIN_RESOURCE,
        action=identifier,
        success=True,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
        occurred_at=utcnow()
    ))
    db.session.commit()
