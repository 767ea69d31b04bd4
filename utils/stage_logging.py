import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger("core.stage")


def _norm(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return value
    return str(value)


def log_stage(
    *,
    job_id: str | None,
    stage: str,
    event: str,
    operation: str | None = None,
    media_type: Any = None,
    status: Any = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "stage": stage,
        "event": event.upper(),
    }

    if job_id:
        payload["job_id"] = job_id
    if operation:
        payload["operation"] = operation
    if media_type is not None:
        payload["media_type"] = _norm(media_type)
    if status is not None:
        payload["status"] = _norm(status)
    if error:
        payload["error"] = error

    for key, value in extra.items():
        norm = _norm(value)
        if norm is not None:
            payload[key] = norm

    msg = json.dumps(payload, ensure_ascii=False)
    if error or payload["event"] == "FAILED":
        logger.error("stage_event %s", msg)
    else:
        logger.info("stage_event %s", msg)
