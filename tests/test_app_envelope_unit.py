# User value: This test makes sure every error the service returns can be read back by the client's error parser.
import unittest

from fastapi.testclient import TestClient

from app import app
from services.api_errors import format_api_validation_errors, parse_api_validation_errors


class AppEnvelopeUnitTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def test_health_and_request_id(self):
        res = self.client.get("/health", headers={"X-Request-ID": "req-test-0001"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "OK")
        self.assertEqual(res.headers["X-Request-ID"], "req-test-0001")

    # User value: a bad form field comes back named, so the UI can show the message next to it.
    def test_request_validation_envelope_round_trips(self):
        res = self.client.post("/intake/precheck", json={"filename": "", "file_size_bytes": 5})
        self.assertEqual(res.status_code, 422)
        body = res.json()
        parsed = parse_api_validation_errors(body)
        self.assertEqual(parsed.code, "VALIDATION_ERROR")
        self.assertEqual(parsed.errors[0].field, "filename")
        self.assertEqual(format_api_validation_errors(parsed), parsed.errors[0].message)
        self.assertEqual(body["path"], "/intake/precheck")
        self.assertTrue(body["request_id"])

    def test_http_exception_envelope_keeps_error_code(self):
        res = self.client.post("/intake/file-check", data={"accepted_media_types": "hologram"}, files={"file": ("a.mp4", b"x", "video/mp4")})
        self.assertEqual(res.status_code, 400)
        parsed = parse_api_validation_errors(res.json())
        self.assertEqual(parsed.code, "INVALID_MEDIA_TYPE")
        self.assertEqual(parsed.message, "Unknown media type: hologram")
        self.assertEqual(parsed.errors, [])

    def test_unknown_route_is_resource_not_found(self):
        res = self.client.get("/nope")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["error"]["code"], "RESOURCE_NOT_FOUND")

    def test_parameter_validation_endpoint(self):
        operation = {
            "operation_name": "audio_convert",
            "media_type": "audio",
            "parameters": [{"param_name": "bitrate", "type": "choice", "choices": ["128k", "320k"], "required": True}],
        }
        res = self.client.post("/operations/validate", json={"operation": operation, "parameters": {"bitrate": "64k"}})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"valid": False, "errors": {"bitrate": "bitrate must be one of: 128k, 320k"}})

        res = self.client.post("/operations/defaults", json={"operation": operation})
        self.assertEqual(res.json()["parameters"], {"bitrate": "128k"})

    def test_classify_endpoint_checks_transition(self):
        res = self.client.post("/jobs/classify", json={"status": "queued", "previous_status": "completed"})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["should_poll"])
        self.assertFalse(body["transition_allowed"])

    def test_metrics_exposition(self):
        self.client.get("/health")
        res = self.client.get("/metrics")
        self.assertEqual(res.status_code, 200)
        self.assertIn("api_http_requests_total", res.text)


if __name__ == "__main__":
    unittest.main()
