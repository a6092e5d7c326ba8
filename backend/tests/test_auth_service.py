"""
Identity provider and session tests.

Verifies:
- Sign-in error codes and last_login_at
- Login throttling after repeated failures
- Password reset flow
- Session validation, idle timeout and revocation
"""

from datetime import timedelta

import pytest

from storeconsole.errors import ValidationError
from storeconsole.models import Identity, SessionToken
from storeconsole.services import auth_service, login_throttle_service, session_service
from storeconsole.services.auth_service import IdentityError


def _code(callable_, *args, **kwargs):
    with pytest.raises(IdentityError) as exc:
        callable_(*args, **kwargs)
    return exc.value.code


class TestIdentityCreation:
    def test_email_is_normalized(self, db_session):
        identity = auth_service.create_identity("  Owner@Store.TEST ", "secret123")
        assert identity.email == "owner@store.test"
        assert identity.password_hash != "secret123"

    def test_invalid_email(self, db_session):
        assert _code(auth_service.create_identity, "not-an-email", "secret123") == "invalid-email"

    def test_weak_password(self, db_session):
        assert _code(auth_service.create_identity, "a@store.test", "12345") == "weak-password"

    def test_non_string_credentials(self, db_session):
        assert _code(auth_service.create_identity, 42, "secret123") == "invalid-email"
        assert _code(auth_service.create_identity, "a@store.test", 12345678) == "weak-password"
        assert auth_service.verify_password(12345678, auth_service.hash_password("secret123")) is False

    def test_non_string_display_name(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.create_identity("a@store.test", "secret123", display_name=["Asha"])
        assert db_session.query(Identity).count() == 0

    def test_duplicate_email(self, db_session, identity_factory):
        identity_factory("a@store.test")
        assert _code(auth_service.create_identity, "A@store.test", "secret123") == "email-already-in-use"


class TestSignIn:
    def test_success_updates_last_login(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        assert identity.last_login_at is None

        signed_in = auth_service.sign_in("a@store.test", "secret123")

        assert signed_in.id == identity.id
        assert db_session.get(Identity, identity.id).last_login_at is not None

    def test_error_codes(self, db_session, identity_factory):
        identity_factory("a@store.test")
        assert _code(auth_service.sign_in, "nobody@store.test", "secret123") == "user-not-found"
        assert _code(auth_service.sign_in, "a@store.test", "wrong-pass") == "wrong-password"
        assert _code(auth_service.sign_in, "bad email", "secret123") == "invalid-email"

    def test_disabled_identity(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        auth_service.set_disabled(identity.id, True)
        assert _code(auth_service.sign_in, "a@store.test", "secret123") == "user-disabled"

    def test_messages(self):
        assert auth_service.auth_error_message("wrong-password") == "Incorrect password."
        assert auth_service.auth_error_message("something-new") == auth_service.DEFAULT_AUTH_ERROR_MESSAGE
        assert auth_service.auth_error_message(None) == auth_service.DEFAULT_AUTH_ERROR_MESSAGE


class TestThrottling:
    def test_lock_after_max_failures(self, db_session, identity_factory):
        identity_factory("a@store.test")
        for _ in range(login_throttle_service.MAX_FAILED_ATTEMPTS):
            assert _code(auth_service.sign_in, "a@store.test", "wrong-pass") == "wrong-password"

        locked, seconds = login_throttle_service.is_account_locked("a@store.test")
        assert locked is True
        assert 0 < seconds <= login_throttle_service.LOCKOUT_DURATION.total_seconds()

        # Correct password is refused while locked
        assert _code(auth_service.sign_in, "a@store.test", "secret123") == "too-many-requests"

    def test_fewer_failures_do_not_lock(self, db_session):
        for _ in range(login_throttle_service.MAX_FAILED_ATTEMPTS - 1):
            login_throttle_service.record_failed_attempt("a@store.test")
        assert login_throttle_service.is_account_locked("a@store.test") == (False, None)


class TestPasswordReset:
    def test_unknown_email_returns_none(self, db_session):
        assert auth_service.send_password_reset("nobody@store.test") is None

    def test_reset_flow(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        _, token = session_service.create_session(identity.id)

        reset_token = auth_service.send_password_reset("a@store.test")
        auth_service.confirm_password_reset(reset_token, "newsecret")

        assert auth_service.sign_in("a@store.test", "newsecret").id == identity.id
        assert session_service.validate_session(token) is None

    def test_token_is_single_use(self, db_session, identity_factory):
        identity_factory("a@store.test")
        reset_token = auth_service.send_password_reset("a@store.test")
        auth_service.confirm_password_reset(reset_token, "newsecret")

        assert _code(auth_service.confirm_password_reset, reset_token, "another1") == "invalid-reset-token"

    def test_weak_new_password(self, db_session, identity_factory):
        identity_factory("a@store.test")
        reset_token = auth_service.send_password_reset("a@store.test")
        assert _code(auth_service.confirm_password_reset, reset_token, "123") == "weak-password"


class TestSessions:
    def test_token_is_stored_hashed(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        session, token = session_service.create_session(identity.id)
        assert session.token_hash == session_service.hash_token(token)
        assert session.token_hash != token

    def test_validate_and_revoke(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        _, token = session_service.create_session(identity.id)

        assert session_service.validate_session(token).identity_id == identity.id
        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session(token) is False

    def test_idle_timeout_revokes(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        session, token = session_service.create_session(identity.id)
        session.last_used_at = session.last_used_at - session_service.SESSION_IDLE_TIMEOUT - timedelta(minutes=1)
        db_session.commit()

        assert session_service.validate_session(token) is None
        assert db_session.get(SessionToken, session.id).revoked_reason == "Idle timeout"

    def test_disabling_identity_revokes_sessions(self, db_session, identity_factory):
        identity = identity_factory("a@store.test")
        _, token = session_service.create_session(identity.id)

        auth_service.set_disabled(identity.id, True)

        assert session_service.validate_session(token) is None
