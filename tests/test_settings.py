"""Tests for environment-driven settings"""
import os
import sys
import unittest
from unittest.mock import patch

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.settings import Settings

MISSING_ENV_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "no-such.env")


class TestSettings(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = Settings.from_env(MISSING_ENV_FILE)
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.default_provider, "gitee")
        self.assertEqual(settings.backend_timeout, 120.0)

    @patch.dict(os.environ, {
        "DEFAULT_PROVIDER": "huggingface",
        "CORS_ORIGINS": "https://app.example.com, https://staging.example.com",
        "BACKEND_TIMEOUT_SECONDS": "45.5",
        "MAX_PROMPT_LENGTH": "2000",
        "DIMENSION_ALIGNMENT": "64",
        "STRICT_MODELS": "true",
        "LOG_LEVEL": "debug",
    }, clear=True)
    def test_overrides(self):
        settings = Settings.from_env(MISSING_ENV_FILE)
        self.assertEqual(settings.default_provider, "huggingface")
        self.assertEqual(settings.cors_origins, ("https://app.example.com", "https://staging.example.com"))
        self.assertEqual(settings.backend_timeout, 45.5)
        self.assertEqual(settings.max_prompt_length, 2000)
        self.assertEqual(settings.dimension_alignment, 64)
        self.assertTrue(settings.strict_models)
        self.assertEqual(settings.log_level, "DEBUG")

    @patch.dict(os.environ, {"MAX_STEPS": "lots", "BACKEND_TIMEOUT_SECONDS": "soon"}, clear=True)
    def test_bad_numbers_fall_back(self):
        with self.assertLogs("services.settings", level="WARNING"):
            settings = Settings.from_env(MISSING_ENV_FILE)
        self.assertEqual(settings.max_steps, 50)
        self.assertEqual(settings.backend_timeout, 120.0)

    def test_frozen(self):
        with self.assertRaises(Exception):
            Settings().port = 1


if __name__ == '__main__':
    unittest.main()
