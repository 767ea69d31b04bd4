# User value: This file verifies feature-flag and startup config safety so a bad deploy fails fast instead of misbehaving.
import importlib
import os
import unittest
from unittest.mock import patch

import startup_env


class FeatureFlagsUnitTests(unittest.TestCase):
    def setUp(self):
        self._old = os.environ.get("FEATURE_INTAKE_PRECHECK")

    def tearDown(self):
        if self._old is None:
            os.environ.pop("FEATURE_INTAKE_PRECHECK", None)
        else:
            os.environ["FEATURE_INTAKE_PRECHECK"] = self._old
        import services.feature_flags as ff

        importlib.reload(ff)

    def test_intake_precheck_enabled_by_default(self):
        os.environ.pop("FEATURE_INTAKE_PRECHECK", None)
        import services.feature_flags as ff

        ff = importlib.reload(ff)
        self.assertTrue(ff.is_intake_precheck_enabled())

    # User value: operators can switch the precheck off without a code change.
    def test_intake_precheck_flag_disabled(self):
        os.environ["FEATURE_INTAKE_PRECHECK"] = "off"
        import services.feature_flags as ff

        ff = importlib.reload(ff)
        self.assertFalse(ff.is_intake_precheck_enabled())

    def test_validate_bool_flag_env_rejects_invalid(self):
        errors = []
        os.environ["FEATURE_INTAKE_PRECHECK"] = "maybe"
        startup_env._validate_bool_flag_env("FEATURE_INTAKE_PRECHECK", errors)
        self.assertTrue(errors)
        self.assertIn("FEATURE_INTAKE_PRECHECK must be one of", errors[0])

    def test_positive_number_and_ratio_checks(self):
        errors = []
        with patch.dict(os.environ, {"POLL_INTERVAL_SEC": "0", "API_TIMEOUT_SEC": "soon", "ADMISSION_WARN_RATIO": "1.5"}):
            startup_env._validate_positive_number_env("POLL_INTERVAL_SEC", errors)
            startup_env._validate_positive_number_env("API_TIMEOUT_SEC", errors)
            startup_env._validate_ratio_env("ADMISSION_WARN_RATIO", errors)
        self.assertEqual(
            errors,
            [
                "POLL_INTERVAL_SEC must be greater than 0",
                "API_TIMEOUT_SEC must be a number",
                "ADMISSION_WARN_RATIO must be in (0, 1]",
            ],
        )

    # User value: a wildcard CORS origin or a non-http API URL stops the service at startup.
    def test_validate_startup_env_raises_on_errors(self):
        with patch.dict(os.environ, {"MEDIA_API_URL": "ftp://api", "CORS_ALLOW_ORIGINS": "*"}):
            with self.assertRaises(RuntimeError) as ctx:
                startup_env.validate_startup_env()
        self.assertIn("MEDIA_API_URL must start with http:// or https://", str(ctx.exception))
        self.assertIn("must not contain '*'", str(ctx.exception))

    def test_validate_startup_env_accepts_clean_config(self):
        env = {"MEDIA_API_URL": "https://api.example.com/api/v1", "CORS_ALLOW_ORIGINS": "https://app.example.com"}
        with patch.dict(os.environ, env):
            startup_env.validate_startup_env()


if __name__ == "__main__":
    unittest.main()
