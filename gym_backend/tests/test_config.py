import json
import os
import tempfile
import unittest
from unittest import mock

from gym_backend.config import Settings
from gym_backend.firebase import CredentialsNotFoundError, load_credentials

from testing_utils import make_settings


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.api_prefix, "/api")
        self.assertEqual(settings.port, 5000)
        self.assertEqual(settings.frontend_url, "http://localhost:3000")
        self.assertEqual(settings.session_expires_in_days, 5)
        self.assertFalse(settings.include_stack_traces)

    def test_reads_environment(self):
        env = {
            "PORT": "8080",
            "APP_ENV": "Development",
            "FIREBASE_PRIVATE_KEY": "line1\\nline2",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.port, 8080)
        self.assertTrue(settings.include_stack_traces)
        self.assertEqual(settings.firebase_private_key, "line1\nline2")

    def test_session_lifetime_is_bounded(self):
        with self.assertRaises(ValueError):
            make_settings(session_expires_in_days=30)


class ServiceAccountTests(unittest.TestCase):
    @mock.patch("gym_backend.firebase.credentials.Certificate")
    def test_discrete_credentials_take_precedence(self, certificate):
        settings = make_settings(
            firebase_project_id="demo",
            firebase_private_key="key",
            firebase_client_email="svc@demo.test",
            firebase_credentials_file="/does/not/exist.json",
        )
        self.assertIs(load_credentials(settings), certificate.return_value)
        (info,), _ = certificate.call_args
        self.assertEqual(info["project_id"], "demo")
        self.assertEqual(info["client_email"], "svc@demo.test")
        self.assertEqual(info["type"], "service_account")

    @mock.patch("gym_backend.firebase.credentials.Certificate")
    def test_key_file_path_is_passed_through(self, certificate):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "key.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"type": "service_account", "project_id": "from-file"}, f)
            load_credentials(make_settings(firebase_credentials_file=path))
        certificate.assert_called_once_with(path)

    def test_missing_credentials(self):
        settings = make_settings(firebase_credentials_file="/does/not/exist.json")
        with self.assertRaises(CredentialsNotFoundError):
            load_credentials(settings)

    def test_unreadable_key_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "key.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertRaises(CredentialsNotFoundError):
                load_credentials(make_settings(firebase_credentials_file=path))

    def test_key_file_for_wrong_account_type(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "key.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"type": "authorized_user"}, f)
            with self.assertRaises(CredentialsNotFoundError):
                load_credentials(make_settings(firebase_credentials_file=path))


if __name__ == "__main__":
    unittest.main()
