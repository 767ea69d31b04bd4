import re
import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{8,128}$")


def normalize_request_id(raw: str | None) -> str:
    value = (raw or "").strip()
    if value and _REQUEST_ID_RE.match(value):
        return value
    return f"req-{uuid.uuid4().hex}"


def set_request_id(value: str | None) -> None:
    _REQUEST_ID_CTX.set(value)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


# Session ids come back from the processing API; anything malformed is ignored rather than replayed.
def normalize_session_id(raw: str | None) -> str | None:
    value = (raw or "").strip()
    if value and _REQUEST_ID_RE.match(value):
        return value
    return None


def session_id_preview(value: str | None) -> str:
    if not value:
        return ""
    return f"{value[:8]}..."
