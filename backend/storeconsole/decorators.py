# Overview: Request decorators for API routes; authentication and role gates.

from functools import wraps
from flask import request, jsonify, g

from .services import access_service, session_service
from .services.access_service import SessionContext


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


def require_auth(f):
    """
    Require a valid session and resolve the console role.

    Sets the following Flask g attributes:
    - g.session_context: SessionContext (identity, admin, session)
    - g.actor: the resolved AdminContext, passed to services explicitly

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - Identity disabled
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        session = session_service.validate_session(token)
        if not session:
            return jsonify({"error": "Invalid or expired token"}), 401

        identity = session.identity
        context = SessionContext(
            identity=identity,
            admin=access_service.resolve_admin(identity),
            session=session,
        )
        g.session_context = context
        g.actor = context.admin

        return f(*args, **kwargs)

    return decorated_function


def require_super_admin(f):
    """
    Require the super_admin role. Must be applied after @require_auth.

    Denials are written to security_events.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, "session_context"):
            return jsonify({"error": "Authentication required"}), 401

        actor = g.actor
        if not actor.is_super_admin:
            access_service.log_security_event(
                actor.id,
                "ACCESS_DENIED",
                False,
                resource=request.path,
                action=request.method,
                reason="Super admin access required",
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent"),
            )
            return jsonify({"error": "Super admin access required"}), 403

        return f(*args, **kwargs)

    return decorated_function
