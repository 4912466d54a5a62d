"""
Tests for account_service: registration, sign-in checks and admin
actions on worker and admin accounts.
"""

import pytest

from logistics.models.account import Worker
from logistics.services import account_service
from logistics.services.account_service import (
    AccountNotApprovedError,
    AccountNotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
)


def _register_worker(email="jane@example.com", password="s3cret-pass"):
    return account_service.register_worker(
        first_name="Jane",
        second_name="Njeri",
        email=email,
        phone_no="0700111222",
        branch="Eldoret",
        password=password,
    )


def _register_admin(email="boss@example.com", password="b0ss-pass"):
    return account_service.register_admin(
        first_name="Peter",
        second_name="Kiptoo",
        email=email,
        password=password,
    )


class TestPasswords:
    """bcrypt hashing."""

    def test_hash_is_not_plaintext_and_verifies(self, db_session):
        hashed = account_service.hash_password("hunter22")
        assert hashed != "hunter22"
        assert account_service.verify_password(hashed, "hunter22")
        assert not account_service.verify_password(hashed, "hunter23")

    def test_same_password_hashes_differently(self, db_session):
        assert account_service.hash_password("x" * 8) != account_service.hash_password("x" * 8)

    def test_empty_password_is_rejected(self, db_session):
        with pytest.raises(ValueError):
            account_service.hash_password("")


class TestRegistration:
    """Worker and admin registration."""

    def test_worker_starts_unapproved_with_prefixed_code(self, db_session):
        worker = _register_worker()
        assert worker.approved is False
        assert worker.role == "STAFF"
        assert worker.worker_code == f"ABC-{worker.id[:6]}"
        assert worker.password_hash != "s3cret-pass"

    def test_admin_is_approved_with_short_code(self, db_session):
        admin = _register_admin()
        assert admin.approved is True
        assert admin.role == "ADMIN"
        assert admin.admin_code == admin.id[:6]

    def test_duplicate_worker_email_is_rejected(self, db_session):
        _register_worker()
        with pytest.raises(DuplicateEmailError):
            _register_worker(email="JANE@example.com")
        assert Worker.query.count() == 1

    def test_email_is_unique_across_workers_and_admins(self, db_session):
        _register_admin(email="shared@example.com")
        with pytest.raises(DuplicateEmailError):
            _register_worker(email="shared@example.com")

    def test_concurrent_signup_hits_unique_index(self, db_session, monkeypatch):
        """A second insert that skipped the lookup is still refused."""
        _register_worker()
        monkeypatch.setattr(account_service, "email_in_use", lambda email: False)

        with pytest.raises(DuplicateEmailError):
            _register_worker(email="Jane@Example.com")

        assert Worker.query.count() == 1

    def test_welcome_email_carries_display_id(self, db_session, outbox):
        worker = _register_worker()

        assert len(outbox) == 1
        assert outbox[0].subject == "Welcome New Worker"
        assert outbox[0].recipients == ["jane@example.com"]
        assert worker.worker_code in outbox[0].html

    def test_admin_welcome_email(self, db_session, outbox):
        admin = _register_admin()
        assert outbox[0].subject == "Welcome to the Management Team"
        assert admin.admin_code in outbox[0].html


class TestAuthenticate:
    """Sign-in credential checks."""

    def test_unapproved_worker_is_refused(self, db_session):
        _register_worker()
        with pytest.raises(AccountNotApprovedError):
            account_service.authenticate("jane@example.com", "s3cret-pass")

    def test_approved_worker_signs_in(self, db_session):
        worker = _register_worker()
        account_service.approve_worker(worker.id)
        assert account_service.authenticate("jane@example.com", "s3cret-pass").id == worker.id

    def test_wrong_password_is_refused(self, db_session):
        worker = _register_worker()
        account_service.approve_worker(worker.id)
        with pytest.raises(InvalidCredentialsError):
            account_service.authenticate("jane@example.com", "wrong-pass")

    def test_admin_signs_in(self, db_session):
        admin = _register_admin()
        assert account_service.authenticate("BOSS@example.com", "b0ss-pass").id == admin.id

    def test_unknown_email_is_refused(self, db_session):
        with pytest.raises(InvalidCredentialsError):
            account_service.authenticate("nobody@example.com", "whatever")


class TestAdminActions:
    """Approval, removal, password reset and principal loading."""

    def test_approve_missing_worker_raises(self, db_session):
        with pytest.raises(AccountNotFoundError):
            account_service.approve_worker("missing")

    def test_delete_worker(self, db_session):
        worker = _register_worker()
        assert account_service.delete_worker(worker.id) is True
        assert account_service.delete_worker(worker.id) is False

    def test_admin_cannot_delete_self(self, db_session):
        admin = _register_admin()
        with pytest.raises(ValueError):
            account_service.delete_admin(admin.id, deleted_by=admin.id)
        assert account_service.admin_exists()

    def test_admin_deletes_other_admin(self, db_session):
        first = _register_admin()
        second = _register_admin(email="second@example.com")
        assert account_service.delete_admin(second.id, deleted_by=first.id) is True

    def test_reset_worker_password(self, db_session):
        worker = _register_worker()
        account_service.approve_worker(worker.id)

        account_service.reset_worker_password("jane@example.com", "brand-new-pass")

        assert account_service.authenticate("jane@example.com", "brand-new-pass").id == worker.id
        with pytest.raises(InvalidCredentialsError):
            account_service.authenticate("jane@example.com", "s3cret-pass")

    def test_reset_unknown_worker_raises(self, db_session):
        with pytest.raises(AccountNotFoundError):
            account_service.reset_worker_password("ghost@example.com", "whatever-1")

    def test_load_principal_round_trip(self, db_session):
        worker = _register_worker()
        admin = _register_admin()
        assert account_service.load_principal(worker.get_id()) is worker
        assert account_service.load_principal(admin.get_id()) is admin

    def test_load_principal_ignores_garbage(self, db_session):
        assert account_service.load_principal("root:1") is None
        assert account_service.load_principal("no-separator") is None
        assert account_service.load_principal(None) is None
