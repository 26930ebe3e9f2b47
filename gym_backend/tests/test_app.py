import unittest

from fastapi.testclient import TestClient
from google.api_core import exceptions as google_exceptions

from gym_backend.app import create_app
from gym_backend.store import InMemoryDocumentStore

from testing_utils import ApiTestCase


class FailingStore(InMemoryDocumentStore):
    def __init__(self, error):
        super().__init__()
        self.error = error

    def query(self, collection, **kwargs):
        raise self.error


class AppTests(ApiTestCase, unittest.TestCase):
    def test_service_info(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["endpoints"]["devices"], "/api/devices")

    def test_unknown_route(self):
        response = self.client.get("/api/nowhere")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(),
            {
                "success": False,
                "error": "Route not found",
                "method": "GET",
                "path": "/api/nowhere",
            },
        )

    def test_malformed_json_body(self):
        self.sign_in()
        response = self.client.post(
            "/api/organizations",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Validation failed")

    def test_cors_allows_frontend_with_credentials(self):
        response = self.client.options(
            "/api/organizations",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.headers["access-control-allow-origin"], "http://localhost:3000"
        )
        self.assertEqual(response.headers["access-control-allow-credentials"], "true")

    def test_no_stack_outside_development(self):
        self.sign_in()
        response = self.client.get("/api/devices/nope")
        self.assertNotIn("stack", response.json())


class DevelopmentModeTests(ApiTestCase, unittest.TestCase):
    settings_overrides = {"app_env": "development"}

    def test_errors_include_stack(self):
        self.sign_in()
        response = self.client.get("/api/devices/nope")
        self.assertEqual(response.status_code, 404)
        self.assertIn("stack", response.json())


class StoreFailureTests(ApiTestCase, unittest.TestCase):
    raise_server_exceptions = False

    def _client_with_failing_store(self, error):
        store = FailingStore(error)
        app = create_app(self.settings, store=store, identity=self.identity)
        return TestClient(app, raise_server_exceptions=False)

    def test_store_outage_is_a_500(self):
        client = self._client_with_failing_store(
            google_exceptions.ServiceUnavailable("backend down")
        )
        response = client.get("/api/devices", headers=self.bearer())
        self.assertEqual(response.status_code, 500)
        payload = response.json()
        self.assertFalse(payload["success"])
        self.assertEqual(payload["error"], "Store request failed")
        self.assertEqual(payload["message"], "backend down")

    def test_unexpected_exception_is_a_500(self):
        client = self._client_with_failing_store(RuntimeError("boom"))
        response = client.get("/api/devices", headers=self.bearer())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "Internal server error", "message": "boom"},
        )


if __name__ == "__main__":
    unittest.main()
