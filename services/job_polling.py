# User value: This file follows submitted jobs until they finish, riding out brief network hiccups instead of reporting false failures.
import logging
import time
from typing import Callable, Dict, Iterable, Optional

import config
from schemas.jobs import JobStatus
from services.api_client import ApiRequestError
from services.job_lifecycle import is_job_successful, should_poll_job
from utils.metrics import incr
from utils.stage_logging import log_stage
from utils.status_machine import check_observed_transition

logger = logging.getLogger("core.job_polling")

TRANSIENT_STATUSES = {408, 429, 500, 502, 503, 504}


class JobPollingTimeout(Exception):
    def __init__(self, job_id: str, attempts: int, last_status: Optional[JobStatus] = None):
        super().__init__(f"Job polling timed out after {attempts} attempts (job_id={job_id})")
        self.job_id = job_id
        self.attempts = attempts
        self.last_status = last_status


# User value: a dropped connection or a busy server is not the user's job failing.
def is_transient_error(exc: Exception) -> bool:
    if not isinstance(exc, ApiRequestError):
        return False
    # Unknown statuses and malformed bodies are not retried.
    if exc.code == "INVALID_RESPONSE":
        return False
    return exc.is_network_error or exc.is_timeout or exc.status in TRANSIENT_STATUSES


def _fetch(client, job_id: str, attempt: int) -> Optional[JobStatus]:
    try:
        return client.get_job_status(job_id)
    except ApiRequestError as exc:
        if not is_transient_error(exc):
            raise
        incr("core_poll_transient_errors_total", code=exc.code)
        logger.warning(
            "job_poll_transient_error job_id=%s attempt=%s status=%s code=%s",
            job_id,
            attempt,
            exc.status,
            exc.code,
        )
        return None


def poll_job_until_complete(
    client,
    job_id: str,
    *,
    interval_sec: Optional[float] = None,
    max_attempts: Optional[int] = None,
    on_status_change: Optional[Callable[[JobStatus], None]] = None,
    on_progress: Optional[Callable[[float, Optional[float]], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> JobStatus:
    """Fetch the job status until it stops being active and return that status.

    The first fetch happens immediately. Every fetch, successful or not, uses
    one attempt. Transient errors are retried on the next tick; anything else
    (a 404, an unreadable or unknown status body) propagates. Raises ``JobPollingTimeout`` once
    ``max_attempts`` fetches have gone by without a final status.
    """
    interval = config.POLL_INTERVAL_SEC if interval_sec is None else interval_sec
    attempts_allowed = config.POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts

    previous: Optional[JobStatus] = None
    log_stage(job_id=job_id, stage="POLL", event="STARTED", max_attempts=attempts_allowed)

    for attempt in range(1, attempts_allowed + 1):
        current = _fetch(client, job_id, attempt)

        if current is not None:
            prev_status = previous.status if previous else None
            if prev_status != current.status:
                check_observed_transition(
                    job_id=job_id,
                    previous=prev_status,
                    current=current.status,
                    context="poll",
                )
                if on_status_change:
                    on_status_change(current)
            if on_progress and (previous is None or previous.progress != current.progress):
                on_progress(current.progress, current.eta_seconds)
            previous = current

            if not should_poll_job(current):
                outcome = "success" if is_job_successful(current) else "failed"
                incr("core_poll_completed_total", outcome=outcome)
                log_stage(
                    job_id=job_id,
                    stage="POLL",
                    event="COMPLETED",
                    status=current.status,
                    attempts=attempt,
                    error=current.error_message if outcome == "failed" else None,
                )
                return current

        if attempt < attempts_allowed:
            sleep(interval)

    incr("core_poll_completed_total", outcome="timeout")
    log_stage(job_id=job_id, stage="POLL", event="TIMEOUT", attempts=attempts_allowed)
    raise JobPollingTimeout(job_id, attempts_allowed, previous)


def poll_jobs(
    client,
    job_ids: Iterable[str],
    *,
    interval_sec: Optional[float] = None,
    max_rounds: Optional[int] = None,
    on_status_change: Optional[Callable[[str, JobStatus], None]] = None,
    on_job_complete: Optional[Callable[[str, JobStatus], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, JobStatus]:
    # Finished jobs drop out of later rounds.
    interval = config.POLL_INTERVAL_SEC if interval_sec is None else interval_sec
    rounds = config.POLL_MAX_ATTEMPTS if max_rounds is None else max_rounds

    pending = list(dict.fromkeys(job_ids))
    statuses: Dict[str, JobStatus] = {}

    for round_no in range(1, rounds + 1):
        if not pending:
            return statuses

        still_active = []
        for job_id in pending:
            current = _fetch(client, job_id, round_no)
            if current is None:
                still_active.append(job_id)
                continue

            prior = statuses.get(job_id)
            if prior is None or prior.status != current.status:
                check_observed_transition(
                    job_id=job_id,
                    previous=prior.status if prior else None,
                    current=current.status,
                    context="poll_many",
                )
                if on_status_change:
                    on_status_change(job_id, current)
            statuses[job_id] = current

            if should_poll_job(current):
                still_active.append(job_id)
            elif on_job_complete:
                on_job_complete(job_id, current)

        pending = still_active
        if pending and round_no < rounds:
            sleep(interval)

    if pending:
        raise JobPollingTimeout(pending[0], rounds, statuses.get(pending[0]))
    return statuses
