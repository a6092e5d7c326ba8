"""
Console access tests.

Verifies:
- Role resolution (persisted, transient, lookup failure)
- Super admin gate on admin management
- Self-protection happens before any database work
- List ordering with missing timestamps
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from storeconsole.errors import AccessDeniedError, NotFoundError, SelfProtectionError, ValidationError
from storeconsole.models import AdminUser, ROLE_ADMIN, ROLE_SUPER_ADMIN, SecurityEvent
from storeconsole.services import access_service, auth_service
from storeconsole.services.access_service import AdminContext


class TestResolveAdmin:
    def test_persisted_super_admin(self, super_admin):
        ctx = access_service.resolve_admin(super_admin)
        assert ctx.is_super_admin
        assert ctx.persisted is True
        assert ctx.name == "Owner"

    def test_identity_without_record_gets_transient_admin(self, db_session, identity_factory):
        identity = identity_factory("walkin@store.test")

        ctx = access_service.resolve_admin(identity)

        assert ctx.role == ROLE_ADMIN
        assert ctx.persisted is False
        assert ctx.name == "walkin"
        assert db_session.get(AdminUser, identity.id) is None

    def test_inactive_record_gets_transient_admin(self, db_session, super_admin):
        db_session.get(AdminUser, super_admin.id).is_active = False
        db_session.commit()

        ctx = access_service.resolve_admin(super_admin)
        assert ctx.role == ROLE_ADMIN
        assert ctx.persisted is False

    def test_lookup_failure_falls_back(self, db_session, super_admin, monkeypatch):
        def broken_get(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "get", broken_get)

        ctx = access_service.resolve_admin(super_admin)
        assert ctx.role == ROLE_ADMIN
        assert ctx.persisted is False


class TestSuperAdminGate:
    def test_plain_admin_cannot_list(self, plain_admin):
        actor = access_service.resolve_admin(plain_admin)
        with pytest.raises(AccessDeniedError) as exc:
            access_service.list_admin_users(actor)
        assert exc.value.message == "Super admin access required"

    def test_plain_admin_cannot_create(self, plain_admin):
        actor = access_service.resolve_admin(plain_admin)
        with pytest.raises(AccessDeniedError):
            access_service.create_admin_user(actor, {"email": "x@store.test", "password": "secret123", "name": "X"})


class TestSelfProtection:
    def _actor(self):
        return AdminContext(id="me", email="me@store.test", name="Me", role=ROLE_SUPER_ADMIN, persisted=True)

    def test_toggle_self_rejected_without_database(self, monkeypatch):
        monkeypatch.setattr(access_service, "db", None)
        with pytest.raises(SelfProtectionError) as exc:
            access_service.toggle_user_status(self._actor(), "me", True)
        assert exc.value.message == "You cannot deactivate your own account"

    def test_delete_self_rejected_without_database(self, monkeypatch):
        monkeypatch.setattr(access_service, "db", None)
        with pytest.raises(SelfProtectionError) as exc:
            access_service.delete_user(self._actor(), "me")
        assert exc.value.message == "You cannot delete your own account"


class TestAdminManagement:
    def test_create_admin_user(self, db_session, super_admin_actor):
        record = access_service.create_admin_user(super_admin_actor, {
            "email": "New@Store.test", "password": "secret123", "name": "New Staff", "role": "admin",
        })

        assert record.email == "new@store.test"
        assert record.created_by == super_admin_actor.id
        assert auth_service.sign_in("new@store.test", "secret123").id == record.id
        assert db_session.query(SecurityEvent).filter_by(event_type="ADMIN_CREATED").count() == 1

    def test_create_with_non_string_role(self, db_session, super_admin_actor):
        with pytest.raises(ValidationError) as exc:
            access_service.create_admin_user(super_admin_actor, {
                "email": "new@store.test", "password": "secret123", "name": "New Staff", "role": 5,
            })
        assert exc.value.field == "role"
        assert auth_service.find_identity_by_email("new@store.test") is None

    def test_create_duplicate_email(self, db_session, super_admin_actor, plain_admin):
        with pytest.raises(auth_service.IdentityError) as exc:
            access_service.create_admin_user(super_admin_actor, {
                "email": plain_admin.email, "password": "secret123", "name": "Dup",
            })
        assert exc.value.code == "email-already-in-use"

    def test_list_newest_first_with_missing_timestamps_last(self, db_session, super_admin_actor, plain_admin, identity_factory):
        owner = db_session.get(AdminUser, super_admin_actor.id)
        staff = db_session.get(AdminUser, plain_admin.id)
        staff.created_at = owner.created_at + timedelta(minutes=5)
        undated = identity_factory("undated@store.test", role=ROLE_ADMIN)
        db_session.get(AdminUser, undated.id).created_at = None
        db_session.commit()

        ids = [r.id for r in access_service.list_admin_users(super_admin_actor)]
        assert ids == [plain_admin.id, super_admin_actor.id, undated.id]

    def test_toggle_deactivates_and_reactivates(self, db_session, super_admin_actor, plain_admin):
        record = access_service.toggle_user_status(super_admin_actor, plain_admin.id, True)
        assert record.is_active is False

        record = access_service.toggle_user_status(super_admin_actor, plain_admin.id, False)
        assert record.is_active is True

    def test_toggle_creates_missing_record(self, db_session, super_admin_actor, identity_factory):
        identity = identity_factory("walkin@store.test")

        record = access_service.toggle_user_status(super_admin_actor, identity.id, True)

        assert record.is_active is False
        assert db_session.get(AdminUser, identity.id).role == ROLE_ADMIN

    def test_toggle_unknown_user(self, db_session, super_admin_actor):
        with pytest.raises(NotFoundError):
            access_service.toggle_user_status(super_admin_actor, "ghost", True)

    def test_delete_keeps_identity(self, db_session, super_admin_actor, plain_admin):
        access_service.delete_user(super_admin_actor, plain_admin.id)

        assert db_session.get(AdminUser, plain_admin.id) is None
        identity = auth_service.sign_in(plain_admin.email, "secret123")
        assert access_service.resolve_admin(identity).persisted is False

    def test_delete_unknown_user(self, db_session, super_admin_actor):
        with pytest.raises(NotFoundError) as exc:
            access_service.delete_user(super_admin_actor, "ghost")
        assert exc.value.message == "User not found"


class TestMakeSuperAdmin:
    def test_promotes_existing_record(self, db_session, plain_admin):
        record = access_service.make_super_admin(plain_admin)
        assert record.role == ROLE_SUPER_ADMIN
        assert record.created_by == access_service.CREATED_BY_SYSTEM

    def test_creates_record(self, db_session, identity_factory):
        identity = identity_factory("first@store.test")
        record = access_service.make_super_admin(identity)
        assert record.role == ROLE_SUPER_ADMIN
        assert record.created_by == access_service.CREATED_BY_SELF_SETUP
