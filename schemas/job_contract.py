# User value: This file pins the job/operation wire contract so clients and the intake service agree on field names.
from schemas.common import (
    ACTIVE_STATUSES,
    FINAL_STATUSES,
    FileType,
    MediaType,
    OperationStatus,
    ParameterType,
)

CONTRACT_VERSION = "2026-10-19-konvrt-003"

JOB_STATUSES = tuple(s.value for s in OperationStatus)

ACTIVE_JOB_STATUSES = tuple(s.value for s in OperationStatus if s in ACTIVE_STATUSES)

FINAL_JOB_STATUSES = tuple(s.value for s in OperationStatus if s in FINAL_STATUSES)

MEDIA_TYPES = tuple(m.value for m in MediaType)

PARAMETER_TYPES = tuple(p.value for p in ParameterType)

FILE_TYPES = tuple(f.value for f in FileType)

FILE_VALIDATION_ERROR_CODES = (
    "EMPTY_FILE",
    "UNKNOWN_TYPE",
    "MEDIA_TYPE_MISMATCH",
    "FILE_TOO_LARGE",
    "INVALID_TYPE",
)

JOB_FILE_FIELDS = (
    "id",
    "file_type",
    "file_name",
    "file_size",
    "mime_type",
    "created_at",
    "file_size_formatted",
    "download_url",
)

JOB_LIST_ITEM_FIELDS = (
    "id",
    "operation",
    "status",
    "progress",
    "created_at",
    "completed_at",
    "is_expired",
    "has_output",
)

JOB_STATUS_FIELDS = (
    "id",
    "status",
    "progress",
    "error_message",
    "eta_seconds",
    "is_complete",
    "has_output",
)

CANONICAL_JOB_FIELDS = (
    "id",
    "operation",
    "status",
    "progress",
    "parameters",
    "error_message",
    "created_at",
    "started_at",
    "completed_at",
    "expires_at",
    "processing_time",
    "processing_time_formatted",
    "is_expired",
    "is_processing",
    "can_be_deleted",
    "input_file",
    "output_file",
)

CREATE_JOB_FORM_FIELDS = (
    "operation",
    "parameters",
    "file",
)
