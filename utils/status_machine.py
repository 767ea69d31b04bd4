# User value: This file knows which job status changes are legal so odd server updates are flagged instead of trusted blindly.
import logging
from typing import Optional, Union

from schemas.common import OperationStatus, normalize_status

logger = logging.getLogger("core.status_machine")

PENDING = OperationStatus.PENDING
QUEUED = OperationStatus.QUEUED
PROCESSING = OperationStatus.PROCESSING
COMPLETED = OperationStatus.COMPLETED
FAILED = OperationStatus.FAILED

_ALLOWED = {
    None: {PENDING, QUEUED, PROCESSING, COMPLETED, FAILED},
    PENDING: {PENDING, QUEUED, PROCESSING, COMPLETED, FAILED},
    QUEUED: {QUEUED, PROCESSING, COMPLETED, FAILED},
    PROCESSING: {PROCESSING, COMPLETED, FAILED},
    COMPLETED: {COMPLETED},
    # retry puts a failed job back in line
    FAILED: {FAILED, PENDING, QUEUED},
}


def is_allowed_transition(
    current: Union[OperationStatus, str, None],
    target: Union[OperationStatus, str, None],
) -> bool:
    target_n = normalize_status(target)
    if target_n is None:
        return True
    current_n = normalize_status(current)
    allowed = _ALLOWED.get(current_n, _ALLOWED[None])
    return target_n in allowed


# User value: keeps a trace of out-of-order status reports without interrupting the user's job view.
def check_observed_transition(
    *,
    job_id: str,
    previous: Union[OperationStatus, str, None],
    current: Union[OperationStatus, str, None],
    context: str,
) -> bool:
    ok = is_allowed_transition(previous, current)
    if not ok:
        logger.warning(
            "status_transition_unexpected context=%s job_id=%s previous=%s current=%s",
            context,
            job_id,
            _label(previous),
            _label(current),
        )
    elif previous is not None and normalize_status(previous) == normalize_status(current) and normalize_status(current) in (COMPLETED, FAILED):
        logger.info(
            "status_transition_idempotent_terminal context=%s job_id=%s status=%s",
            context,
            job_id,
            _label(current),
        )
    return ok


def _label(status: Union[OperationStatus, str, None]) -> Optional[str]:
    norm = normalize_status(status)
    if norm is not None:
        return norm.value
    return None if status is None else str(status)
