class TestService:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_unknown_route_uses_error_body(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_process_time_header(self, client):
        response = client.get("/api/v1/info")
        assert "X-Process-Time" in response.headers
