import unittest

from gym_backend.collection_names import USERS_COLLECTION

from testing_utils import ApiTestCase


class AuthApiTests(ApiTestCase, unittest.TestCase):
    def signup(self, **fields):
        body = {"name": "Robin", "email": "robin@example.com", "password": "secret1"}
        body.update(fields)
        return self.client.post("/api/auth/signup", json=body)

    def test_signup_creates_user_and_profile(self):
        response = self.signup(phone="555-0100")
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertIn("robin@example.com", payload["verificationLink"])

        profile = self.store.get(USERS_COLLECTION, payload["uid"])
        self.assertEqual(profile["name"], "Robin")
        self.assertEqual(profile["phone"], "555-0100")
        self.assertEqual(profile["provider"], "password")

    def test_signup_requires_fields(self):
        response = self.client.post("/api/auth/signup", json={"email": "a@b.test"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["details"], ["name is required", "password is required"]
        )

    def test_signup_duplicate_email(self):
        self.signup()
        response = self.signup()
        self.assertEqual(response.status_code, 400)
        self.assertIn("already in use", response.json()["error"])

    def test_login_sets_session_cookie(self):
        uid = self.signup().json()["uid"]
        response = self.client.post(
            "/api/auth/login",
            json={"email": "robin@example.com", "password": "secret1"},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["user"]["uid"], uid)
        self.assertEqual(payload["user"]["displayName"], "Robin")
        self.assertIn("idToken", payload)

        set_cookie = response.headers["set-cookie"]
        self.assertIn("session=", set_cookie)
        self.assertIn("HttpOnly", set_cookie)
        self.assertIn("Max-Age=432000", set_cookie)
        self.assertIn("lastLogin", self.store.get(USERS_COLLECTION, uid))

        profile = self.client.get("/api/auth/profile")
        self.assertEqual(profile.status_code, 200)
        self.assertEqual(profile.json()["user"]["uid"], uid)
        self.assertEqual(profile.json()["profile"]["email"], "robin@example.com")

    def test_login_with_wrong_password(self):
        self.signup()
        response = self.client.post(
            "/api/auth/login",
            json={"email": "robin@example.com", "password": "wrong-password"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "INVALID_PASSWORD")

    def test_login_without_api_key(self):
        self.identity.api_key = None
        response = self.client.post(
            "/api/auth/login", json={"email": "a@b.test", "password": "secret1"}
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Server configuration error")

    def test_login_survives_session_cookie_failure(self):
        uid = self.signup().json()["uid"]
        self.identity.fail_session_cookie_creation = True
        response = self.client.post(
            "/api/auth/login",
            json={"email": "robin@example.com", "password": "secret1"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["warning"], "Session cookie not created")
        self.assertNotIn("set-cookie", response.headers)
        self.assertNotIn("lastLogin", self.store.get(USERS_COLLECTION, uid))

    def test_google_login_creates_profile_once(self):
        token = self.identity.issue_id_token(
            "g-1", email="casey@example.com", picture="https://img.test/c.png"
        )
        response = self.client.post("/api/auth/google-login", json={"idToken": token})
        self.assertEqual(response.status_code, 200)
        self.assertIn("session=", response.headers["set-cookie"])

        profile = self.store.get(USERS_COLLECTION, "g-1")
        self.assertEqual(profile["name"], "casey")
        self.assertEqual(profile["provider"], "google")
        self.assertEqual(profile["photoURL"], "https://img.test/c.png")
        self.assertNotIn("lastLogin", profile)

        self.client.post("/api/auth/google-login", json={"idToken": token})
        profile = self.store.get(USERS_COLLECTION, "g-1")
        self.assertEqual(profile["provider"], "google")
        self.assertIn("lastLogin", profile)

    def test_google_login_session_failure_warning(self):
        self.identity.fail_session_cookie_creation = True
        token = self.identity.issue_id_token("g-1", email="casey@example.com")
        response = self.client.post("/api/auth/google-login", json={"idToken": token})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["warning"],
            "Session cookie not created - authentication still valid",
        )

    def test_google_login_rejects_bad_token(self):
        response = self.client.post("/api/auth/google-login", json={"idToken": "bogus"})
        self.assertEqual(response.status_code, 401)
        response = self.client.post("/api/auth/google-login", json={})
        self.assertEqual(response.status_code, 400)

    def test_profile_requires_session_cookie(self):
        response = self.client.get("/api/auth/profile", headers=self.bearer())
        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookie(self):
        self.sign_in()
        response = self.client.post("/api/auth/logout")
        self.assertEqual(response.status_code, 200)
        self.assertIn("session=", response.headers["set-cookie"])
        self.assertIn("Max-Age=0", response.headers["set-cookie"])

    def test_status_route(self):
        response = self.client.get("/api/auth/test")
        payload = response.json()
        self.assertTrue(payload["firebaseConfigured"])
        self.assertIn("POST /auth/login", payload["routes"])


if __name__ == "__main__":
    unittest.main()
