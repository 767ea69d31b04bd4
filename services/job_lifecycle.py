# User value: This file tells every screen and the poller whether a job is still running, done, failed or downloadable.
from typing import Any, Dict, Protocol, Union, runtime_checkable

from schemas.common import (
    OperationStatus,
    is_active_status,
    is_failure_status,
    is_final_status,
    is_success_status,
    normalize_status,
)


@runtime_checkable
class StatusBearing(Protocol):
    """Anything carrying a job status: ``Job``, ``JobListItem`` or ``JobStatus``."""

    status: Union[OperationStatus, str]


def is_job_active(job: StatusBearing) -> bool:
    return is_active_status(job.status)


def is_job_final(job: StatusBearing) -> bool:
    return is_final_status(job.status)


def is_job_successful(job: StatusBearing) -> bool:
    return is_success_status(job.status)


def is_job_failed(job: StatusBearing) -> bool:
    return is_failure_status(job.status)


# User value: the single stop signal for status polling, shared by the UI and background pollers.
def should_poll_job(job: StatusBearing) -> bool:
    return is_job_active(job)


def has_downloadable_output(job: StatusBearing) -> bool:
    """True when the job completed and produced an output.

    List and status projections carry ``has_output``; full jobs carry ``output_file``.
    """
    if not is_success_status(job.status):
        return False
    has_output = getattr(job, "has_output", None)
    if has_output is not None:
        return bool(has_output)
    return getattr(job, "output_file", None) is not None


def classify_job(job: StatusBearing) -> Dict[str, Any]:
    status = normalize_status(job.status)
    return {
        "status": status.value if status else str(job.status),
        "is_active": is_job_active(job),
        "is_final": is_job_final(job),
        "is_successful": is_job_successful(job),
        "is_failed": is_job_failed(job),
        "should_poll": should_poll_job(job),
        "has_downloadable_output": has_downloadable_output(job),
    }
