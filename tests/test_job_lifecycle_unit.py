# User value: This test keeps job badges, polling and download buttons in agreement about a job's state.
import unittest
from datetime import datetime, timezone

from schemas.common import OperationStatus
from schemas.jobs import Job, JobFile, JobListItem, JobStatus
from services.job_lifecycle import (
    StatusBearing,
    classify_job,
    has_downloadable_output,
    is_job_active,
    is_job_failed,
    is_job_final,
    is_job_successful,
    should_poll_job,
)

NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def _output_file():
    return JobFile(id="f1", file_type="output", file_name="out.mp4", file_size=10, mime_type="video/mp4")


class JobLifecycleUnitTests(unittest.TestCase):
    def test_active_and_final_classes(self):
        self.assertFalse(is_job_active(JobStatus(id="j", status="completed")))
        self.assertTrue(is_job_active(JobStatus(id="j", status="processing")))
        self.assertTrue(is_job_final(JobStatus(id="j", status="failed")))
        self.assertTrue(is_job_failed(JobStatus(id="j", status="failed")))
        self.assertTrue(is_job_successful(JobStatus(id="j", status="completed")))

    # User value: the poller stops exactly when the job badge stops spinning.
    def test_should_poll_matches_active_for_every_status(self):
        for status in OperationStatus:
            job = JobStatus(id="j", status=status)
            self.assertEqual(should_poll_job(job), is_job_active(job), status)
            self.assertNotEqual(is_job_active(job), is_job_final(job), status)

    def test_projections_share_the_status_capability(self):
        item = JobListItem(id="j", operation="op", status="queued", created_at=NOW)
        self.assertIsInstance(item, StatusBearing)
        self.assertIsInstance(JobStatus(id="j", status="queued"), StatusBearing)

    def test_downloadable_output_agrees_across_projections(self):
        item = JobListItem(id="j", operation="op", status="completed", created_at=NOW, has_output=True)
        job = Job(id="j", operation="op", status="completed", created_at=NOW, output_file=_output_file())
        self.assertTrue(has_downloadable_output(item))
        self.assertTrue(has_downloadable_output(job))

        no_item = JobListItem(id="j", operation="op", status="completed", created_at=NOW, has_output=False)
        no_job = Job(id="j", operation="op", status="completed", created_at=NOW)
        self.assertFalse(has_downloadable_output(no_item))
        self.assertFalse(has_downloadable_output(no_job))

    # User value: a failed job never offers a download even if a stale file is attached.
    def test_failed_job_is_never_downloadable(self):
        job = Job(id="j", operation="op", status="failed", created_at=NOW, output_file=_output_file())
        self.assertFalse(has_downloadable_output(job))

    def test_classify_job_flags(self):
        flags = classify_job(JobStatus(id="j", status="completed", has_output=True))
        self.assertEqual(
            flags,
            {
                "status": "completed",
                "is_active": False,
                "is_final": True,
                "is_successful": True,
                "is_failed": False,
                "should_poll": False,
                "has_downloadable_output": True,
            },
        )


if __name__ == "__main__":
    unittest.main()
