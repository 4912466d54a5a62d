"""
Smoke tests for the main blueprint routes.

These verify that the application starts up correctly and the
landing, about and health check endpoints respond.
"""


class TestHome:
    """Tests for the public landing page."""

    def test_home_returns_200(self, client):
        """The home page should return HTTP 200."""
        response = client.get("/")
        assert response.status_code == 200

    def test_home_contains_company_name(self, client):
        """The home page should display the company name."""
        response = client.get("/")
        assert b"ABC Logistics Company" in response.data

    def test_about_page(self, client):
        response = client.get("/abtus")
        assert response.status_code == 200
        assert b"About Us" in response.data


class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_reports_database(self, client):
        """The health check should return HTTP 200 with a JSON body."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "database": "connected"}


class TestErrorPages:
    """Unknown routes render the error page."""

    def test_unknown_route_is_404(self, client):
        response = client.get("/no/such/page")
        assert response.status_code == 404
        assert b"Page not found" in response.data
