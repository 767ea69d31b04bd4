# User value: This file defines the shared vocabulary (statuses, media kinds, parameter kinds) every intake check speaks.
from enum import Enum
from typing import Optional, Union


class OperationStatus(str, Enum):
    PENDING = "pending"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FileType(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class MediaType(str, Enum):
    VIDEO = "video"
    IMAGE = "image"
    AUDIO = "audio"


class ParameterType(str, Enum):
    INTEGER = "integer"
    STRING = "string"
    BOOLEAN = "boolean"
    FLOAT = "float"
    CHOICE = "choice"


ACTIVE_STATUSES = frozenset(
    {
        OperationStatus.PENDING,
        OperationStatus.QUEUED,
        OperationStatus.PROCESSING,
    }
)
FINAL_STATUSES = frozenset({OperationStatus.COMPLETED, OperationStatus.FAILED})

_MEDIA_DISPLAY_NAMES = {
    MediaType.VIDEO: "Video",
    MediaType.IMAGE: "Image",
    MediaType.AUDIO: "Audio",
}

_MEDIA_ICONS = {
    MediaType.VIDEO: "Video",
    MediaType.IMAGE: "Image",
    MediaType.AUDIO: "Music",
}


# User value: accepts enum members and raw API strings alike so status checks never depend on casing.
def normalize_status(status: Union[OperationStatus, str, None]) -> Optional[OperationStatus]:
    if status is None:
        return None
    if isinstance(status, OperationStatus):
        return status
    raw = str(status).strip().lower()
    try:
        return OperationStatus(raw)
    except ValueError:
        return None


def normalize_media_type(media_type: Union[MediaType, str, None]) -> Optional[MediaType]:
    if media_type is None:
        return None
    if isinstance(media_type, MediaType):
        return media_type
    try:
        return MediaType(str(media_type).strip().lower())
    except ValueError:
        return None


# User value: tells the UI a job is still moving so it keeps showing progress.
def is_active_status(status: Union[OperationStatus, str, None]) -> bool:
    return normalize_status(status) in ACTIVE_STATUSES


def is_final_status(status: Union[OperationStatus, str, None]) -> bool:
    return normalize_status(status) in FINAL_STATUSES


def is_success_status(status: Union[OperationStatus, str, None]) -> bool:
    return normalize_status(status) == OperationStatus.COMPLETED


def is_failure_status(status: Union[OperationStatus, str, None]) -> bool:
    return normalize_status(status) == OperationStatus.FAILED


# User value: gives every media kind a readable name so labels never show raw identifiers.
def get_media_type_display_name(media_type: Union[MediaType, str, None]) -> str:
    media = normalize_media_type(media_type)
    if media is None:
        return "Unknown"
    return _MEDIA_DISPLAY_NAMES[media]


def get_media_type_icon(media_type: Union[MediaType, str, None]) -> str:
    media = normalize_media_type(media_type)
    if media is None:
        return "File"
    return _MEDIA_ICONS[media]
