import os
import unittest
from unittest import mock

from pydantic import ValidationError

from tempo_tray.config import DEFAULT_API_BASE_URL, Settings


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            s = Settings()
        self.assertEqual(s.api_base_url, DEFAULT_API_BASE_URL)
        self.assertEqual(s.request_timeout_seconds, 10.0)
        self.assertEqual(s.cache_ttl_seconds, 1800)
        self.assertIsNone(s.timezone)
        self.assertEqual(s.refresh_workers, 3)

    def test_env_override_and_trailing_slash(self):
        env = {
            "TEMPO_API_BASE_URL": "http://localhost:8080/api/",
            "TEMPO_CACHE_TTL_SECONDS": "60",
            "TEMPO_TIMEZONE": "Europe/Paris",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            s = Settings()
        self.assertEqual(s.api_base_url, "http://localhost:8080/api")
        self.assertEqual(s.cache_ttl_seconds, 60)
        self.assertEqual(s.timezone, "Europe/Paris")

    def test_rejects_non_positive_durations(self):
        with self.assertRaises(ValidationError):
            Settings(request_timeout_seconds=0)
        with self.assertRaises(ValidationError):
            Settings(cache_ttl_seconds=-5)
        with self.assertRaises(ValidationError):
            Settings(refresh_workers=0)


if __name__ == "__main__":
    unittest.main()
