# User value: This file talks to the media processing API so users can browse operations, submit files, follow their jobs and download the results.
import json
import logging
import mimetypes
import os
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import requests
from pydantic import ValidationError

import config
from schemas.common import MediaType, OperationStatus
from schemas.jobs import (
    CancelJobResponse,
    CreateJobParams,
    DeleteJobResponse,
    Job,
    JobListItem,
    JobStatus,
    PaginatedResponse,
)
from schemas.operations import GroupedOperations, OperationDefinition, OperationDefinitionListItem
from schemas.responses import ApiValidationError
from services.api_errors import (
    extract_error_code,
    extract_error_message,
    extract_field_errors,
    extract_validation_errors,
    get_error_message,
)
from services.job_lifecycle import has_downloadable_output
from services.operations import group_operations_by_media_type
from utils.formatting import format_download_progress, round_half_up
from utils.metrics import incr, observe_ms
from utils.request_id import normalize_session_id, session_id_preview

logger = logging.getLogger("core.api_client")

HEALTH = "/health/"
OPERATION_DEFINITIONS = "/operation-definitions/"
OPERATIONS = "/operations/"

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def operation_definition_detail(name: str) -> str:
    return f"/operation-definitions/{name}/"


def operation_detail(job_id: str) -> str:
    return f"/operations/{job_id}/"


def operation_status(job_id: str) -> str:
    return f"/operations/{job_id}/status/"


def operation_retry(job_id: str) -> str:
    return f"/operations/{job_id}/retry/"


def operation_cancel(job_id: str) -> str:
    return f"/operations/{job_id}/cancel/"


def operation_download(job_id: str) -> str:
    return f"/operations/{job_id}/download/"


class ApiRequestError(Exception):
    """A failed call to the processing API, already reduced to user-facing pieces.

    ``status`` is 0 when no response arrived (network failure or timeout).
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "UNKNOWN_ERROR",
        status: int = 0,
        validation_errors: Optional[List[ApiValidationError]] = None,
        field_errors: Optional[Dict[str, List[str]]] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.validation_errors = validation_errors or []
        self.field_errors = field_errors or {}
        self.payload = payload

    @property
    def is_network_error(self) -> bool:
        return self.status == 0 and self.code == "ERR_NETWORK"

    @property
    def is_timeout(self) -> bool:
        return self.code == "TIMEOUT" or self.status == 408

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_validation_error(self) -> bool:
        return self.code == "VALIDATION_ERROR" or self.status == 400

    # User value: one readable sentence for the toast/banner, whatever went wrong.
    def display_message(self) -> str:
        if self.validation_errors:
            return self.validation_errors[0].message
        return get_error_message(self.status, self.message)

    def all_validation_messages(self) -> List[str]:
        if self.validation_errors:
            return [err.message for err in self.validation_errors]
        messages: List[str] = []
        for field, errors in self.field_errors.items():
            messages.extend(f"{field}: {msg}" for msg in errors)
        return messages or [self.display_message()]

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiRequestError":
        try:
            data = response.json()
        except ValueError:
            data = None
        return cls(
            extract_error_message(data) if data is not None else (response.reason or f"HTTP {response.status_code}"),
            code=extract_error_code(data, fallback=f"HTTP_{response.status_code}"),
            status=response.status_code,
            validation_errors=extract_validation_errors(data),
            field_errors=extract_field_errors(data),
            payload=data,
        )


class DownloadError(ApiRequestError):
    """A failed output download. ``retryable`` tells the UI whether to offer a retry."""

    def __init__(self, message: str, *, code: str = "DOWNLOAD_ERROR", status: int = 0, retryable: bool = False):
        super().__init__(message, code=code, status=status)
        self.retryable = retryable


_DOWNLOAD_STATUS_ERRORS = {
    400: ("Job is not complete or has no output file", "JOB_NOT_COMPLETE", False),
    403: ("You don't have permission to download this file", "PERMISSION_DENIED", False),
    404: ("File not found. It may have expired or been deleted", "FILE_NOT_FOUND", False),
    410: ("File has expired and is no longer available", "FILE_EXPIRED", False),
}


def _download_error_for_status(status_code: int) -> DownloadError:
    if status_code in _DOWNLOAD_STATUS_ERRORS:
        message, code, retryable = _DOWNLOAD_STATUS_ERRORS[status_code]
        return DownloadError(message, code=code, status=status_code, retryable=retryable)
    if status_code >= 500:
        return DownloadError(
            "Server error. Please try again later",
            code="SERVER_ERROR",
            status=status_code,
            retryable=True,
        )
    return DownloadError("Download failed", code="DOWNLOAD_FAILED", status=status_code, retryable=True)


def filename_from_content_disposition(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    match = re.search(r"filename\*=(?:UTF-8|utf-8)''([^;]+)", header)
    if match:
        return unquote(match.group(1).strip())
    match = re.search(r'filename="([^"]+)"', header, re.IGNORECASE)
    if match:
        return match.group(1)
    match = re.search(r"filename=([^;\s]+)", header, re.IGNORECASE)
    if match:
        return match.group(1)
    return None


# User value: a download with no name from the server still lands as e.g. processed_3f2a9c1d_2026-10-19.mp4.
def fallback_download_filename(job_id: str, content_type: Optional[str]) -> str:
    mime = (content_type or "").split(";")[0].strip().lower()
    extension = (mimetypes.guess_extension(mime) or "") if mime else ""
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return f"processed_{job_id[:8]}_{stamp}{extension}"


def _unwrap(data: Any) -> Any:
    if isinstance(data, dict) and "success" in data and "data" in data:
        return data["data"]
    return data


def _parse_model(model, data: Any, status_code: int):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "api_response_invalid model=%s status=%s errors=%s",
            getattr(model, "__name__", model),
            status_code,
            exc.error_count(),
        )
        raise ApiRequestError(
            "The server returned an unexpected response.",
            code="INVALID_RESPONSE",
            status=status_code,
            payload=data,
        ) from exc


class MediaApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        session_id: Optional[str] = None,
    ):
        self.base_url = (base_url or config.MEDIA_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT_SEC
        self.upload_timeout = upload_timeout if upload_timeout is not None else config.UPLOAD_TIMEOUT_SEC
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        self.session_id = normalize_session_id(session_id)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(extra or {})
        if self.session_id:
            headers[config.SESSION_ID_HEADER] = self.session_id
        return headers

    def _capture_session_id(self, response: requests.Response) -> None:
        incoming = normalize_session_id(response.headers.get(config.SESSION_ID_HEADER))
        if incoming and incoming != self.session_id:
            self.session_id = incoming
            logger.info("api_session_id_stored session=%s", session_id_preview(incoming))

    def _send(self, method: str, path: str, *, timeout: Optional[float] = None, **kwargs):
        headers = self._headers(kwargs.pop("headers", None))

        started = time.perf_counter()
        try:
            response = self.session.request(
                method,
                self._url(path),
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("api_request_timeout method=%s path=%s", method, path)
            raise ApiRequestError("The request timed out. Please try again.", code="TIMEOUT") from exc
        except requests.ConnectionError as exc:
            logger.warning("api_request_network_error method=%s path=%s error=%s", method, path, exc)
            raise ApiRequestError(get_error_message(0), code="ERR_NETWORK") from exc
        finally:
            duration_ms = (time.perf_counter() - started) * 1000.0
            observe_ms("core_api_request_latency_ms", duration_ms, method=method)

        status_code = response.status_code
        self._capture_session_id(response)
        incr("core_api_requests_total", method=method, status_class=f"{status_code // 100}xx")

        if not response.ok:
            err = ApiRequestError.from_response(response)
            logger.warning(
                "api_request_failed method=%s path=%s status=%s code=%s message=%s",
                method,
                path,
                status_code,
                err.code,
                err.message,
            )
            raise err

        if status_code == 204 or not response.content:
            return status_code, None
        try:
            return status_code, response.json()
        except ValueError as exc:
            raise ApiRequestError(
                "The server returned an unreadable response.",
                code="INVALID_RESPONSE",
                status=status_code,
            ) from exc

    def _request(self, method: str, path: str, **kwargs) -> Any:
        return self._send(method, path, **kwargs)[1]

    def _request_model(self, model, method: str, path: str, **kwargs):
        status_code, data = self._send(method, path, **kwargs)
        return _parse_model(model, _unwrap(data), status_code)

    def _request_list(self, model, method: str, path: str, **kwargs) -> list:
        status_code, data = self._send(method, path, **kwargs)
        items = _unwrap(data) or []
        if not isinstance(items, list):
            raise ApiRequestError(
                "The server returned an unexpected response.",
                code="INVALID_RESPONSE",
                status=status_code,
                payload=data,
            )
        return [_parse_model(model, item, status_code) for item in items]

    # health

    def health(self) -> Dict[str, Any]:
        return _unwrap(self._request("GET", HEALTH)) or {}

    def check_connection(self) -> Dict[str, Any]:
        """Call ``/health/`` and report reachability instead of raising."""
        started = time.perf_counter()
        try:
            health = self.health()
        except ApiRequestError as exc:
            return {
                "connected": False,
                "latency_ms": round_half_up((time.perf_counter() - started) * 1000.0),
                "health": None,
                "error": exc.display_message(),
            }
        return {
            "connected": True,
            "latency_ms": round_half_up((time.perf_counter() - started) * 1000.0),
            "health": health,
            "error": None,
        }

    # User value: scripts started alongside the backend wait for it instead of failing on the first refused connection.
    def wait_for_backend(
        self,
        max_attempts: int = 10,
        interval_sec: float = 2.0,
        on_attempt: Optional[Callable[[int, int], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Dict[str, Any]:
        last_error: Optional[str] = None
        for attempt in range(1, max_attempts + 1):
            if on_attempt:
                on_attempt(attempt, max_attempts)
            status = self.check_connection()
            if status["connected"]:
                logger.info("api_backend_ready attempt=%s latency_ms=%s", attempt, status["latency_ms"])
                return status
            last_error = status["error"]
            if attempt < max_attempts:
                sleep(interval_sec)

        logger.warning("api_backend_unavailable attempts=%s error=%s", max_attempts, last_error)
        raise ApiRequestError(last_error or "Failed to connect to backend", code="BACKEND_UNAVAILABLE")

    # operation definitions

    def list_operations(self, media_type: Optional[MediaType] = None) -> List[OperationDefinition]:
        params = {"media_type": MediaType(media_type).value} if media_type else None
        return self._request_list(OperationDefinition, "GET", OPERATION_DEFINITIONS, params=params)

    def list_operation_summaries(self, media_type: Optional[MediaType] = None) -> List[OperationDefinitionListItem]:
        params = {"media_type": MediaType(media_type).value} if media_type else None
        return self._request_list(OperationDefinitionListItem, "GET", OPERATION_DEFINITIONS, params=params)

    def get_operation(self, operation_name: str) -> OperationDefinition:
        return self._request_model(OperationDefinition, "GET", operation_definition_detail(operation_name))

    def grouped_operations(self) -> GroupedOperations:
        return group_operations_by_media_type(self.list_operations())

    def operation_exists(self, operation_name: str) -> bool:
        try:
            self.get_operation(operation_name)
        except ApiRequestError as exc:
            if exc.status == 404:
                return False
            raise
        return True

    # jobs

    def list_jobs(
        self,
        *,
        status: Optional[OperationStatus] = None,
        operation: Optional[str] = None,
        ordering: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> PaginatedResponse[JobListItem]:
        params: Dict[str, Any] = {}
        if status:
            params["status"] = OperationStatus(status).value
        if operation:
            params["operation"] = operation
        if ordering:
            params["ordering"] = ordering
        if page is not None:
            params["page"] = page
        if page_size is not None:
            params["page_size"] = page_size
        status_code, data = self._send("GET", OPERATIONS, params=params or None)
        return _parse_model(PaginatedResponse[JobListItem], _unwrap(data) or {}, status_code)

    # User value: shows a user's whole history without hammering the API (at most max_pages requests).
    def list_all_jobs(
        self,
        *,
        status: Optional[OperationStatus] = None,
        operation: Optional[str] = None,
        ordering: Optional[str] = None,
        max_pages: int = 5,
    ) -> List[JobListItem]:
        jobs: List[JobListItem] = []
        page = 1
        has_more = True
        while has_more and page <= max_pages:
            response = self.list_jobs(
                status=status,
                operation=operation,
                ordering=ordering,
                page=page,
                page_size=50,
            )
            jobs.extend(response.results)
            has_more = response.next is not None
            page += 1
        return jobs

    def list_recent_jobs(self, limit: int = 10) -> List[JobListItem]:
        return self.list_jobs(page_size=limit, ordering="-created_at").results

    def get_job(self, job_id: str) -> Job:
        return self._request_model(Job, "GET", operation_detail(job_id))

    def get_job_status(self, job_id: str) -> JobStatus:
        return self._request_model(JobStatus, "GET", operation_status(job_id))

    def create_job(self, params: CreateJobParams) -> Job:
        candidate = params.file
        form = {
            "operation": params.operation,
            "parameters": json.dumps(params.parameters or {}),
        }
        content_type = candidate.content_type or "application/octet-stream"

        if candidate.stream is not None:
            files = {"file": (candidate.filename, candidate.stream, content_type)}
            job = self._request_model(Job, "POST", OPERATIONS, data=form, files=files, timeout=self.upload_timeout)
        elif candidate.path:
            with open(candidate.path, "rb") as fh:
                files = {"file": (candidate.filename, fh, content_type)}
                job = self._request_model(Job, "POST", OPERATIONS, data=form, files=files, timeout=self.upload_timeout)
        else:
            raise ApiRequestError("No file content to upload.", code="EMPTY_FILE")

        logger.info("api_job_created job_id=%s operation=%s", job.id, job.operation)
        return job

    def retry_job(self, job_id: str) -> Job:
        return self._request_model(Job, "POST", operation_retry(job_id))

    def delete_job(self, job_id: str) -> DeleteJobResponse:
        data = self._request("DELETE", operation_detail(job_id))
        if isinstance(data, dict) and data.get("message"):
            return DeleteJobResponse(message=str(data["message"]))
        return DeleteJobResponse()

    def cancel_job(self, job_id: str) -> CancelJobResponse:
        data = self._request("POST", operation_cancel(job_id))
        if isinstance(data, dict) and data.get("message"):
            return CancelJobResponse(message=str(data["message"]))
        return CancelJobResponse()

    # downloads

    def can_download(self, job_id: str) -> bool:
        try:
            self._request("HEAD", operation_download(job_id))
        except ApiRequestError:
            return False
        return True

    def _open_download(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        try:
            response = self.session.request(
                "GET",
                url,
                headers=headers or {},
                timeout=self.upload_timeout,
                stream=True,
            )
        except requests.Timeout as exc:
            raise DownloadError("The download timed out. Please try again", code="TIMEOUT", retryable=True) from exc
        except requests.ConnectionError as exc:
            raise DownloadError(
                "Network error. Please check your connection and try again",
                code="NETWORK_ERROR",
                retryable=True,
            ) from exc

        if not response.ok:
            response.close()
            raise _download_error_for_status(response.status_code)
        return response

    def download_job_output(
        self,
        job_id: str,
        dest: str,
        on_progress: Optional[Callable[[int, int, int], None]] = None,
        *,
        filename: Optional[str] = None,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    ) -> Dict[str, Any]:
        """Stream a completed job's output to disk.

        ``dest`` is a file path, or a directory the file is named into.
        The API either streams the file itself or answers with JSON pointing at
        a storage URL, which is then streamed. ``on_progress(loaded, total,
        percentage)`` gets ``total == 0`` and ``percentage == -1`` when the size
        is unknown. Returns ``{"filename", "path", "size"}``.
        """
        status = self.get_job_status(job_id)
        if not has_downloadable_output(status):
            raise DownloadError(
                "Job is not complete or has no output file",
                code="JOB_NOT_COMPLETE",
                status=0,
            )

        response = self._open_download(self._url(operation_download(job_id)), headers=self._headers())
        content_type = response.headers.get("Content-Type") or ""
        expected_size = 0
        name = filename

        if "application/json" in content_type:
            try:
                payload = _unwrap(response.json())
            except ValueError:
                payload = None
            finally:
                response.close()
            if not isinstance(payload, dict) or not payload.get("download_url"):
                raise DownloadError("Invalid download response", code="INVALID_RESPONSE", retryable=True)
            name = name or payload.get("file_name")
            expected_size = int(payload.get("file_size") or 0)
            response = self._open_download(str(payload["download_url"]))
            content_type = payload.get("mime_type") or response.headers.get("Content-Type") or ""
        else:
            name = name or filename_from_content_disposition(response.headers.get("Content-Disposition"))

        name = os.path.basename(name or fallback_download_filename(job_id, content_type))
        target = os.path.join(dest, name) if os.path.isdir(dest) else dest

        length = response.headers.get("Content-Length")
        total = int(length) if length and str(length).isdigit() else expected_size

        loaded = 0
        try:
            with open(target, "wb") as fh:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    fh.write(chunk)
                    loaded += len(chunk)
                    if on_progress:
                        percentage = round_half_up(loaded / total * 100) if total > 0 else -1
                        on_progress(loaded, total, percentage)
        except requests.RequestException as exc:
            raise DownloadError(
                "Network error. Please check your connection and try again",
                code="NETWORK_ERROR",
                retryable=True,
            ) from exc
        finally:
            response.close()

        incr("core_downloads_total", outcome="success")
        logger.info(
            "api_job_output_downloaded job_id=%s filename=%s size=%s",
            job_id,
            name,
            format_download_progress(loaded, total),
        )
        return {"filename": name, "path": target, "size": loaded}
