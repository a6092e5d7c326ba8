# Overview: Service-layer operations for console access; resolves admin roles and manages admin records.

"""
Access Control Service

Sign-in and admin role are decoupled: any valid identity can use the
console. The role comes from the `admins` table:

- active admin row      -> its role (admin or super_admin)
- missing/inactive row  -> transient "admin" context, never persisted
- lookup failure        -> same transient context, error logged

Admin management (list/create/toggle/delete) and app settings edits are
super_admin only. Callers pass the acting AdminContext explicitly as
`actor`; nothing here reads request globals.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import AccessDeniedError, BackendError, NotFoundError, SelfProtectionError, ValidationError
from ..extensions import db
from ..models import ADMIN_ROLES, ROLE_ADMIN, ROLE_SUPER_ADMIN, AdminUser, Identity, SecurityEvent, SessionToken
from ..time_utils import to_utc_z, utcnow
from ..validation import clean_str
from . import auth_service


CREATED_BY_SELF_SETUP = "self-setup"
CREATED_BY_SYSTEM = "system"


@dataclass(frozen=True)
class AdminContext:
    """Resolved console role for one identity."""
    id: str
    email: str
    name: str
    role: str = ROLE_ADMIN
    is_active: bool = True
    created_at: datetime | None = None
    created_by: str = CREATED_BY_SYSTEM
    persisted: bool = False

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at) if self.created_at else None,
            "created_by": self.created_by,
            "persisted": self.persisted,
        }


@dataclass(frozen=True)
class SessionContext:
    """
    Per-request auth state built by @require_auth.

    - identity: the signed-in identity
    - admin: its resolved AdminContext
    - session: the validated session token row
    """
    identity: Identity
    admin: AdminContext
    session: SessionToken

    def to_dict(self) -> dict:
        return {
            "identity": self.identity.to_dict(),
            "admin": self.admin.to_dict(),
            "session": self.session.to_dict(),
        }


def _display_name(identity: Identity) -> str:
    if identity.display_name:
        return identity.display_name
    return identity.email.split("@", 1)[0]


def _transient_admin(identity: Identity) -> AdminContext:
    return AdminContext(
        id=identity.id,
        email=identity.email,
        name=_display_name(identity),
        role=ROLE_ADMIN,
        created_at=utcnow(),
        created_by=CREATED_BY_SYSTEM,
        persisted=False,
    )


def _context_from_record(record: AdminUser) -> AdminContext:
    return AdminContext(
        id=record.id,
        email=record.email,
        name=record.name,
        role=record.role,
        is_active=record.is_active,
        created_at=record.created_at,
        created_by=record.created_by,
        persisted=True,
    )


def resolve_admin(identity: Identity) -> AdminContext:
    """
    Role lookup performed after every successful sign-in / token validation.

    Never raises for a missing or unreadable admin record.
    """
    try:
        record = db.session.get(AdminUser, identity.id)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load admin record for identity id=%s", identity.id)
        return _transient_admin(identity)

    if record is None or not record.is_active:
        return _transient_admin(identity)
    return _context_from_record(record)


def log_security_event(
    actor_id: str | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Append an audit row.

    event_type examples:
    - ADMIN_CREATED
    - ADMIN_STATUS_CHANGED
    - ADMIN_DELETED
    - ADMIN_SELF_SETUP
    - APP_SETTINGS_CHANGED
    - STORE_SETTINGS_CHANGED
    - ACCESS_DENIED
    """
    event = SecurityEvent(
        identity_id=actor_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
        occurred_at=utcnow(),
    )
    db.session.add(event)
    db.session.commit()
    return event


def require_super_admin(actor: AdminContext) -> None:
    if actor is None or not actor.is_super_admin:
        raise AccessDeniedError("Super admin access required")


def _commit(action: str, message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise BackendError(message)


def _newest_first_key(record: AdminUser):
    # Records without a timestamp sort last and keep their relative order
    created = record.created_at
    return (created is not None, created or datetime.min)


def list_admin_users(actor: AdminContext) -> list[AdminUser]:
    """All admin records, newest first."""
    require_super_admin(actor)
    records = db.session.query(AdminUser).all()
    return sorted(records, key=_newest_first_key, reverse=True)


def create_admin_user(actor: AdminContext, payload) -> AdminUser:
    """
    Create an identity and its admin record.

    payload: email, password, name, role ("admin" or "super_admin").
    Identity errors (email in use, weak password) propagate as IdentityError.
    """
    require_super_admin(actor)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    name = clean_str(payload.get("name"), "name", required=True, max_length=120)
    role = clean_str(payload.get("role"), "role") or ROLE_ADMIN
    if role not in ADMIN_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ADMIN_ROLES)}", field="role")

    identity = auth_service.create_identity(payload.get("email"), payload.get("password"), display_name=name)

    record = AdminUser(
        id=identity.id,
        email=identity.email,
        name=name,
        role=role,
        is_active=True,
        created_at=utcnow(),
        created_by=actor.id,
    )
    db.session.add(record)
    _commit("create admin user", "Failed to create user")

    log_security_event(actor.id, "ADMIN_CREATED", True, resource="admins", action=record.id, reason=role)
    current_app.logger.info("Admin user created id=%s role=%s by=%s", record.id, role, actor.id)
    return record


def toggle_user_status(actor: AdminContext, user_id: str, current_status: bool) -> AdminUser:
    """
    Set is_active to `not current_status` (upsert of the single field).

    Raises SelfProtectionError before touching the database when the actor
    targets their own record.
    """
    if actor is not None and user_id == actor.id:
        raise SelfProtectionError("You cannot deactivate your own account")
    require_super_admin(actor)

    new_status = not current_status
    record = db.session.get(AdminUser, user_id)
    if record is None:
        identity = auth_service.get_identity(user_id)
        if identity is None:
            raise NotFoundError("User not found")
        record = AdminUser(
            id=identity.id,
            email=identity.email,
            name=_display_name(identity),
            role=ROLE_ADMIN,
            created_by=actor.id,
        )
        db.session.add(record)
    record.is_active = new_status
    _commit("toggle admin status", "Failed to update user status")

    log_security_event(
        actor.id, "ADMIN_STATUS_CHANGED", True, resource="admins", action=user_id,
        reason="activated" if new_status else "deactivated",
    )
    current_app.logger.info("Admin user id=%s is_active=%s by=%s", user_id, new_status, actor.id)
    return record


def delete_user(actor: AdminContext, user_id: str) -> None:
    """
    Remove the admin record. The identity itself stays and can still sign in
    (with a transient admin context).
    """
    if actor is not None and user_id == actor.id:
        raise SelfProtectionError("You cannot delete your own account")
    require_super_admin(actor)

    record = db.session.get(AdminUser, user_id)
    if record is None:
        raise NotFoundError("User not found")
    db.session.delete(record)
    _commit("delete admin user", "Failed to delete user")

    log_security_event(actor.id, "ADMIN_DELETED", True, resource="admins", action=user_id)
    current_app.logger.info("Admin user deleted id=%s by=%s", user_id, actor.id)


def make_super_admin(identity: Identity, *, created_by: str = CREATED_BY_SELF_SETUP) -> AdminUser:
    """
    Write a super_admin record for the identity (setup page / CLI).

    Existing records are promoted and re-activated in place.
    """
    record = db.session.get(AdminUser, identity.id)
    if record is None:
        record = AdminUser(
            id=identity.id,
            email=identity.email,
            name=_display_name(identity),
            created_at=utcnow(),
            created_by=created_by,
        )
        db.session.add(record)
    record.role = ROLE_SUPER_ADMIN
    record.is_active = True
    _commit("promote super admin", "Failed to set up super admin")

    log_security_event(identity.id, "ADMIN_SELF_SETUP", True, resource="admins", action=identity.id, reason=created_by)
    current_app.logger.info("Identity id=%s promoted to super_admin (%s)", identity.id, created_by)
    return record
