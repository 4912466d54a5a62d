"""
Route tests for the admin blueprint: staff list, approval, removal
and profiles.
"""

from logistics.services import account_service


class TestClerks:
    """Staff list."""

    def test_admin_sees_workers_and_admins(self, admin_client, make_worker):
        make_worker(email="listed@example.com", approved=False)
        response = admin_client.get("/clerks")

        assert response.status_code == 200
        assert b"listed@example.com" in response.data
        assert b"admin@example.com" in response.data
        assert b"Pending" in response.data

    def test_worker_is_refused(self, worker_client):
        assert worker_client.get("/clerks").status_code == 302


class TestApproval:
    """Approving and deleting accounts."""

    def test_approve_worker(self, app, admin_client, make_worker):
        account = make_worker(email="new@example.com", approved=False)
        response = admin_client.post(f"/admin/approve-worker/{account['id']}")

        assert response.headers["Location"].endswith("/clerks")
        with app.app_context():
            assert account_service.get_worker_by_email("new@example.com").approved

    def test_approve_missing_worker(self, admin_client):
        response = admin_client.put("/admin/approve-worker/missing", follow_redirects=True)
        assert b"Worker not found." in response.data

    def test_delete_worker(self, app, admin_client, make_worker):
        account = make_worker(email="gone@example.com")
        admin_client.delete(f"/admin/delete-worker/{account['id']}")
        with app.app_context():
            assert account_service.get_worker_by_email("gone@example.com") is None

    def test_admin_cannot_delete_self(self, app, client, make_admin):
        account = make_admin()
        client.post(
            "/signin", data={"email": account["email"], "password": account["password"]}
        )
        response = client.post(
            f"/admin/delete-admin/{account['id']}/delete", follow_redirects=True
        )

        assert b"You cannot delete your own account." in response.data
        with app.app_context():
            assert account_service.admin_exists()

    def test_delete_other_admin(self, app, admin_client, make_admin):
        other = make_admin(email="other@example.com")
        admin_client.post(f"/admin/delete-admin/{other['id']}/delete")
        with app.app_context():
            assert account_service.get_admin_by_email("other@example.com") is None


class TestProfile:
    """Staff profile pages."""

    def test_worker_profile(self, admin_client, make_worker):
        account = make_worker(email="profile@example.com")
        response = admin_client.get(f"/staff/worker/{account['id']}")

        assert response.status_code == 200
        assert b"profile@example.com" in response.data
        assert b"ABC-" in response.data

    def test_unknown_type_goes_to_dashboard(self, admin_client):
        response = admin_client.get("/staff/robot/123")
        assert response.headers["Location"].endswith("/dashboard")

    def test_missing_photo_redirects(self, admin_client, make_worker):
        account = make_worker(email="nophoto@example.com")
        response = admin_client.get(f"/staff/image/worker/{account['id']}")
        assert response.status_code == 302
