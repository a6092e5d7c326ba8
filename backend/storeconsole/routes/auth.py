# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storeconsole/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Login throttling to prevent brute-force attacks
- Session management with token-based auth
- Password reset answers the same way whether or not the account exists
- Self sign-up only while AppSettings.show_sign_up is on
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import access_service, auth_service, session_service, settings_service
from ..errors import ConsoleError, error_response
from ..services.auth_service import IdentityError
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

IDENTITY_ERROR_STATUS = {
    "invalid-email": 400,
    "weak-password": 400,
    "email-already-in-use": 409,
    "invalid-reset-token": 400,
    "user-disabled": 403,
    "too-many-requests": 429,
}


def identity_error_response(exc: IdentityError):
    status = IDENTITY_ERROR_STATUS.get(exc.code, 401)
    return jsonify({"error": exc.message, "code": exc.code}), status


@auth_bp.post("/login")
def login_route():
    """
    Authenticate an identity and create a session token.

    Returns the token, the identity and its resolved admin context. Any
    identity may sign in; without an admin record it gets a transient
    "admin" context.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    user_agent = request.headers.get("User-Agent")
    ip_address = request.remote_addr

    try:
        identity = auth_service.sign_in(email, password, ip_address=ip_address, user_agent=user_agent)
        session, token = session_service.create_session(
            identity_id=identity.id,
            user_agent=user_agent,
            ip_address=ip_address
        )
        admin = access_service.resolve_admin(identity)
    except IdentityError as e:
        return identity_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "identity": identity.to_dict(),
        "admin": admin.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful"
    }), 200


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    try:
        revoked = session_service.revoke_session(token, reason="User logout")
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    if not revoked:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current identity, admin context and session."""
    return jsonify(g.session_context.to_dict()), 200


@auth_bp.post("/signup")
def signup_route():
    """
    Self sign-up. Creates an identity only (no admin record).

    Closed with 403 while show_sign_up is off.
    """
    if not settings_service.sign_up_enabled():
        return jsonify({"error": "Sign up is currently disabled"}), 403

    data = request.get_json(silent=True) or {}
    try:
        identity = auth_service.create_identity(
            data.get("email"), data.get("password"), display_name=data.get("name")
        )
    except IdentityError as e:
        return identity_error_response(e)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"identity": identity.to_dict(), "message": "Account created"}), 201


@auth_bp.post("/password-reset")
def password_reset_route():
    """
    Send a password reset link.

    Always 200 for a well-formed email, so accounts cannot be enumerated.
    """
    data = request.get_json(silent=True) or {}
    try:
        auth_service.send_password_reset(data.get("email"))
    except IdentityError as e:
        return identity_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to send password reset")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "If an account exists for this email, a reset link has been sent."}), 200


@auth_bp.post("/password-reset/confirm")
def password_reset_confirm_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.confirm_password_reset(data.get("token"), data.get("password"))
    except IdentityError as e:
        return identity_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to reset password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Password has been reset"}), 200
