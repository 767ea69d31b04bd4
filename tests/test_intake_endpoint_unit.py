# User value: This test validates intake endpoint behavior so users get predictable pre-upload guidance.
import asyncio
import io
import unittest
from unittest.mock import patch

from fastapi import HTTPException, UploadFile

from routes.intake import intake_file_check, intake_precheck
from schemas.common import MediaType
from schemas.requests import IntakePrecheckRequest

MIB = 1024 * 1024


class IntakeEndpointUnitTests(unittest.TestCase):
    # User value: ensures disabled feature gate does not change user flow unexpectedly.
    def test_precheck_disabled_returns_404(self):
        payload = IntakePrecheckRequest(filename="clip.mp4", mime_type="video/mp4", file_size_bytes=10)

        async def run_case():
            with patch("routes.intake.is_intake_precheck_enabled", return_value=False):
                with self.assertRaises(HTTPException) as ctx:
                    await intake_precheck(payload=payload)
                self.assertEqual(ctx.exception.status_code, 404)
                self.assertEqual(ctx.exception.detail["error_code"], "FEATURE_DISABLED")

        asyncio.run(run_case())

    def test_precheck_reports_detection_verdict_and_limits(self):
        payload = IntakePrecheckRequest(filename="movie.mp4", mime_type="video/mp4", file_size_bytes=600 * MIB)

        async def run_case():
            with patch("routes.intake.is_intake_precheck_enabled", return_value=True):
                with patch("routes.intake.incr") as mock_incr:
                    out = await intake_precheck(payload=payload)
                    self.assertEqual(out.detected_media_type, MediaType.VIDEO)
                    self.assertEqual(out.confidence, 0.99)
                    self.assertFalse(out.result.is_valid)
                    self.assertEqual(out.result.error.code, "FILE_TOO_LARGE")
                    self.assertEqual(out.max_size_bytes, 500 * MIB)
                    self.assertEqual(out.requirements_hint, "Maximum video file size: 500.0 MB")
                    self.assertEqual(mock_incr.call_count, 1)

        asyncio.run(run_case())

    # User value: a real upload is checked against the accepted media kinds the picker offered.
    def test_file_check_on_upload(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 2048), filename="song.mp3", size=2048)

        async def run_case():
            out = await intake_file_check(file=upload, accepted_media_types=["video,image"], custom_max_size=None)
            self.assertFalse(out.is_valid)
            self.assertEqual(out.error.code, "MEDIA_TYPE_MISMATCH")
            self.assertEqual(out.error.details.expected_types, [MediaType.VIDEO, MediaType.IMAGE])

        asyncio.run(run_case())

    def test_file_check_rejects_unknown_media_type(self):
        upload = UploadFile(file=io.BytesIO(b"x"), filename="a.mp4", size=1)

        async def run_case():
            with self.assertRaises(HTTPException) as ctx:
                await intake_file_check(file=upload, accepted_media_types=["hologram"], custom_max_size=None)
            self.assertEqual(ctx.exception.status_code, 400)

        asyncio.run(run_case())


if __name__ == "__main__":
    unittest.main()
