# User value: This file rejects empty, unknown, mismatched or oversized uploads before they cost the user an upload.
import os
from typing import Dict, Iterable, List, Optional, Sequence

from schemas.common import MediaType, normalize_media_type
from schemas.responses import (
    FileValidationDetails,
    FileValidationError,
    FileValidationResult,
    ParsedApiError,
)
from services.media_detection import detect_media_type_for_file
from utils.formatting import format_file_size, format_size_mb_label, round_half_up

MIB = 1024 * 1024

MAX_VIDEO_FILE_SIZE_MB = int(os.getenv("MAX_VIDEO_FILE_SIZE_MB", "500"))
MAX_AUDIO_FILE_SIZE_MB = int(os.getenv("MAX_AUDIO_FILE_SIZE_MB", "100"))
MAX_IMAGE_FILE_SIZE_MB = int(os.getenv("MAX_IMAGE_FILE_SIZE_MB", "50"))
DEFAULT_MAX_FILE_SIZE_MB = int(os.getenv("DEFAULT_MAX_FILE_SIZE_MB", "100"))

WARN_RATIO = float(os.getenv("ADMISSION_WARN_RATIO", "0.80"))

FILE_SIZE_LIMITS: Dict[MediaType, int] = {
    MediaType.VIDEO: MAX_VIDEO_FILE_SIZE_MB * MIB,
    MediaType.AUDIO: MAX_AUDIO_FILE_SIZE_MB * MIB,
    MediaType.IMAGE: MAX_IMAGE_FILE_SIZE_MB * MIB,
}

DEFAULT_MAX_FILE_SIZE = DEFAULT_MAX_FILE_SIZE_MB * MIB


def get_upload_size_bytes(file_obj) -> int:
    pos = file_obj.tell()
    file_obj.seek(0, os.SEEK_END)
    size = file_obj.tell()
    file_obj.seek(pos, os.SEEK_SET)
    return int(size)


# User value: reads the size FastAPI/our candidates report, or measures the stream when it is missing.
def resolve_file_size(file) -> int:
    size = getattr(file, "size", None)
    if size is not None:
        return int(size)
    stream = getattr(file, "file", None)
    if stream is not None:
        return get_upload_size_bytes(stream)
    path = getattr(file, "path", None)
    if path and os.path.isfile(path):
        return os.path.getsize(path)
    return 0


def get_max_file_size(media_type: Optional[MediaType]) -> int:
    media = normalize_media_type(media_type)
    return FILE_SIZE_LIMITS.get(media, DEFAULT_MAX_FILE_SIZE)


def get_max_file_size_for_types(media_types: Sequence[MediaType]) -> int:
    """Largest ceiling among the accepted types.

    This is an advisory upper bound for multi-type pickers; a file under it can
    still exceed the limit of its own detected type in ``validate_file``.
    """
    if not media_types:
        return DEFAULT_MAX_FILE_SIZE
    return max(get_max_file_size(media_type) for media_type in media_types)


def get_file_size_limit_label(media_type: Optional[MediaType]) -> str:
    media = normalize_media_type(media_type)
    if media in FILE_SIZE_LIMITS:
        return format_size_mb_label(FILE_SIZE_LIMITS[media])
    return format_file_size(DEFAULT_MAX_FILE_SIZE)


def _invalid(
    code: str,
    message: str,
    *,
    field: Optional[str] = None,
    details: Optional[FileValidationDetails] = None,
    media_type: Optional[MediaType] = None,
    file_size: Optional[int] = None,
) -> FileValidationResult:
    return FileValidationResult(
        is_valid=False,
        error=FileValidationError(code=code, message=message, field=field, details=details),
        media_type=media_type,
        file_size=file_size,
    )


# User value: warns when a file is close to its limit so users expect a slower upload.
def _size_warnings(file_size: int, max_size: int) -> List[str]:
    if max_size <= 0:
        return []
    percentage = (file_size / max_size) * 100
    if percentage > WARN_RATIO * 100:
        return [f"File is {round_half_up(percentage)}% of the maximum allowed size."]
    return []


def validate_file(
    file,
    accepted_media_types: Optional[Sequence[MediaType]] = None,
    custom_max_size: Optional[int] = None,
) -> FileValidationResult:
    """Admission check for one upload candidate.

    Checks run in a fixed order and the first failure wins: empty file,
    undetectable type, media type mismatch, size ceiling. A valid result may
    still carry a near-limit warning.
    """
    file_size = resolve_file_size(file)

    if file_size == 0:
        return _invalid("EMPTY_FILE", "The file is empty. Please select a valid file")

    detected = detect_media_type_for_file(file)
    if detected is None:
        return _invalid(
            "UNKNOWN_TYPE",
            "Could not determine file type. Please select a valid file",
            details=FileValidationDetails(detected_type=None),
        )

    # Entries that are not a media type stay in the list and never match.
    requested = list(accepted_media_types or [])
    accepted = [normalize_media_type(t) for t in requested]
    if requested and detected not in accepted:
        expected = ", ".join(m.value if m is not None else str(t) for t, m in zip(requested, accepted))
        return _invalid(
            "MEDIA_TYPE_MISMATCH",
            f"Expected a {expected} file, but got a {detected.value} file.",
            details=FileValidationDetails(
                expected_types=[m for m in accepted if m is not None],
                detected_type=detected,
            ),
        )

    max_size = custom_max_size if custom_max_size is not None else get_max_file_size(detected)

    if file_size > max_size:
        return _invalid(
            "FILE_TOO_LARGE",
            f"File size ({format_file_size(file_size)}) exceeds the maximum allowed size "
            f"({format_file_size(max_size)}) for {detected.value} files.",
            field="file",
            details=FileValidationDetails(file_size=file_size, max_size=max_size, detected_type=detected),
            media_type=detected,
            file_size=file_size,
        )

    warnings = _size_warnings(file_size, max_size)
    return FileValidationResult(
        is_valid=True,
        media_type=detected,
        file_size=file_size,
        warnings=warnings or None,
    )


def validate_files(
    files: Iterable,
    accepted_media_types: Optional[Sequence[MediaType]] = None,
    custom_max_size: Optional[int] = None,
) -> dict:
    results = {}
    for file in files:
        results[file] = validate_file(file, accepted_media_types, custom_max_size)
    return results


def get_validation_error_message(result: FileValidationResult) -> Optional[str]:
    if result.is_valid or result.error is None:
        return None
    return result.error.message


# User value: tells users the size ceilings up front, per accepted media kind.
def get_file_requirements_hint(
    accepted_media_types: Sequence[MediaType],
    custom_max_size: Optional[int] = None,
) -> str:
    media_types = [m for m in (normalize_media_type(t) for t in accepted_media_types) if m is not None]
    parts: List[str] = []

    if len(media_types) == 1:
        media = media_types[0]
        max_size = custom_max_size if custom_max_size is not None else get_max_file_size(media)
        parts.append(f"Maximum {media.value} file size: {format_file_size(max_size)}")
    elif len(media_types) > 1:
        parts.append("Maximum file sizes:")
        for media in media_types:
            max_size = custom_max_size if custom_max_size is not None else get_max_file_size(media)
            parts.append(f"  • {media.value}: {format_file_size(max_size)}")

    return "\n".join(parts)


def is_file_size_error(error) -> bool:
    if isinstance(error, (FileValidationError, ParsedApiError)):
        return error.code in ("FILE_TOO_LARGE", "VALIDATION_ERROR")
    return False
