"""
Route tests for sign-up, sign-in, sign-out and the admin-only
password reset.
"""

from sqlalchemy.exc import OperationalError

from logistics.models.account import Admin, Worker
from logistics.services import account_service

SIGNUP_FORM = {
    "first_name": "Jane",
    "second_name": "Njeri",
    "email": "jane@example.com",
    "phone_no": "0700111222",
    "branch": "Eldoret",
    "password": "s3cret-pass",
    "confirm_password": "s3cret-pass",
}


class TestSignup:
    """Worker self-registration."""

    def test_signup_page_renders(self, client):
        assert client.get("/signup").status_code == 200

    def test_signup_creates_unapproved_worker(self, app, client, outbox):
        response = client.post("/signup", data=SIGNUP_FORM)

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/")
        with app.app_context():
            worker = account_service.get_worker_by_email("jane@example.com")
            assert worker is not None
            assert worker.approved is False
        assert outbox[0].subject == "Welcome New Worker"

    def test_duplicate_signup_is_refused(self, app, client):
        client.post("/signup", data=SIGNUP_FORM)
        response = client.post("/signup", data=SIGNUP_FORM, follow_redirects=True)

        assert b"Worker already exists." in response.data
        with app.app_context():
            assert Worker.query.count() == 1

    def test_mismatched_passwords_are_flashed(self, client):
        data = dict(SIGNUP_FORM, confirm_password="something-else")
        response = client.post("/signup", data=data, follow_redirects=True)
        assert b"Passwords must match" in response.data


class TestSignin:
    """Sign-in and sign-out."""

    def test_unapproved_worker_cannot_sign_in(self, client, make_worker):
        account = make_worker(approved=False)
        response = client.post(
            "/signin",
            data={"email": account["email"], "password": account["password"]},
            follow_redirects=True,
        )
        assert b"has not been approved" in response.data
        assert client.get("/services").status_code == 302

    def test_worker_lands_on_home(self, client, make_worker):
        account = make_worker()
        response = client.post(
            "/signin", data={"email": account["email"], "password": account["password"]}
        )
        assert response.headers["Location"].endswith("/")
        assert client.get("/services").status_code == 200

    def test_admin_lands_on_dashboard(self, client, make_admin):
        account = make_admin()
        response = client.post(
            "/signin", data={"email": account["email"], "password": account["password"]}
        )
        assert response.headers["Location"].endswith("/dashboard")

    def test_wrong_password(self, client, make_worker):
        account = make_worker()
        response = client.post(
            "/signin",
            data={"email": account["email"], "password": "not-the-password"},
            follow_redirects=True,
        )
        assert b"Email or password incorrect." in response.data

    def test_next_is_honoured(self, client, make_worker):
        account = make_worker()
        response = client.post(
            "/signin?next=/form",
            data={"email": account["email"], "password": account["password"]},
        )
        assert response.headers["Location"].endswith("/form")

    def test_external_next_is_ignored(self, client, make_worker):
        account = make_worker()
        response = client.post(
            "/signin?next=//evil.example.com/",
            data={"email": account["email"], "password": account["password"]},
        )
        assert "evil.example.com" not in response.headers["Location"]

    def test_database_error_is_flashed(self, client, make_worker, monkeypatch):
        account = make_worker()

        def _db_down(email, password):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(account_service, "authenticate", _db_down)
        response = client.post(
            "/signin",
            data={"email": account["email"], "password": account["password"]},
            follow_redirects=True,
        )

        assert response.status_code == 200
        assert b"Sign-in is unavailable right now." in response.data

    def test_logout_ends_session(self, worker_client):
        response = worker_client.post("/logout")
        assert response.headers["Location"].endswith("/signin")
        assert worker_client.get("/services").status_code == 302


class TestAdminRegistration:
    """/adminReg is open only until the first admin exists."""

    def test_first_admin_can_register_anonymously(self, app, client):
        response = client.post(
            "/adminReg",
            data={
                "first_name": "Peter",
                "second_name": "Kiptoo",
                "email": "boss@example.com",
                "password": "b0ss-pass",
                "confirm_password": "b0ss-pass",
            },
        )
        assert response.headers["Location"].endswith("/signin")
        with app.app_context():
            assert Admin.query.count() == 1

    def test_later_admins_need_an_admin(self, client, make_admin):
        make_admin()
        response = client.get("/adminReg")
        assert response.status_code == 302
        assert "/signin" in response.headers["Location"]

    def test_worker_cannot_register_admin(self, worker_client, make_admin):
        make_admin()
        response = worker_client.get("/adminReg")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/")

    def test_admin_registers_another_admin(self, app, admin_client):
        assert admin_client.get("/adminReg").status_code == 200


class TestPasswordReset:
    """/forgetPassword is admin-only."""

    def test_worker_is_refused(self, worker_client):
        response = worker_client.get("/forgetPassword")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/")

    def test_admin_resets_worker_password(self, app, admin_client, make_worker):
        account = make_worker(email="reset-me@example.com")
        response = admin_client.post(
            "/forgetPassword",
            data={"email": account["email"], "new_password": "fresh-pass-1"},
        )

        assert response.headers["Location"].endswith("/clerks")
        with app.app_context():
            assert account_service.authenticate(account["email"], "fresh-pass-1")

    def test_database_error_is_flashed(self, admin_client, monkeypatch):
        def _db_down(email, new_password, reset_by=None):
            raise OperationalError("UPDATE", {}, Exception("database is locked"))

        monkeypatch.setattr(account_service, "reset_worker_password", _db_down)
        response = admin_client.post(
            "/forgetPassword",
            data={"email": "anyone@example.com", "new_password": "fresh-pass-1"},
            follow_redirects=True,
        )

        assert response.status_code == 200
        assert b"Password reset failed." in response.data

    def test_unknown_worker_is_reported(self, admin_client):
        response = admin_client.post(
            "/forgetPassword",
            data={"email": "ghost@example.com", "new_password": "fresh-pass-1"},
            follow_redirects=True,
        )
        assert b"Worker does not exist." in response.data
