# User value: This test protects users from intake contract drift before UI integration.
import unittest

from pydantic import ValidationError

from routes.contract import job_status_contract
from schemas.requests import IntakePrecheckRequest, JobClassifyRequest
from schemas.responses import FileValidationResult, IntakePrecheckResponse


class TestIntakeContract(unittest.TestCase):
    def test_request_schema_minimal(self):
        req = IntakePrecheckRequest(filename="clip.mp4", file_size_bytes=0)
        self.assertEqual(req.accepted_media_types, [])
        self.assertIsNone(req.custom_max_size)

    # User value: Prevents invalid empty filenames from entering precheck flow.
    def test_request_schema_rejects_empty_filename(self):
        with self.assertRaises(ValidationError):
            IntakePrecheckRequest(filename="", file_size_bytes=1)

    def test_request_schema_rejects_unknown_media_type(self):
        with self.assertRaises(ValidationError):
            IntakePrecheckRequest(filename="a.mp4", file_size_bytes=1, accepted_media_types=["document"])

    def test_request_schema_rejects_negative_size(self):
        with self.assertRaises(ValidationError):
            IntakePrecheckRequest(filename="a.mp4", file_size_bytes=-1)

    # User value: Protects users from invalid confidence ranges in precheck output.
    def test_response_schema_rejects_invalid_confidence(self):
        with self.assertRaises(ValidationError):
            IntakePrecheckResponse(result=FileValidationResult(is_valid=True), max_size_bytes=1, confidence=1.5)

    def test_verdicts_are_immutable(self):
        result = FileValidationResult(is_valid=True)
        with self.assertRaises(ValidationError):
            result.is_valid = False

    def test_classify_request_rejects_unknown_status(self):
        with self.assertRaises(ValidationError):
            JobClassifyRequest(status="cancelled")

    # User value: Clients read statuses, limits and capabilities from one stable document.
    def test_job_status_contract_shape(self):
        out = job_status_contract()
        self.assertEqual(out["job_statuses"], ["pending", "queued", "processing", "completed", "failed"])
        self.assertEqual(out["active_statuses"], ["pending", "queued", "processing"])
        self.assertEqual(out["final_statuses"], ["completed", "failed"])
        self.assertEqual(out["file_size_limits"]["video"], 500 * 1024 * 1024)
        self.assertEqual(out["file_size_limits"]["default"], 100 * 1024 * 1024)
        self.assertIn("INVALID_TYPE", out["file_validation_error_codes"])
        self.assertEqual(out["file_size_limit_labels"], {"video": "500 MB", "image": "50 MB", "audio": "100 MB"})
        self.assertIn("has_output", out["job_status_fields"])
        self.assertEqual(
            set(out["capabilities"]),
            {"intake_precheck_enabled", "parameter_validation_api_enabled", "job_classify_api_enabled"},
        )


if __name__ == "__main__":
    unittest.main()
