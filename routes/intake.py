# User value: This endpoint tells users whether a file will be admitted (type, size, limits) before they spend time uploading it.
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from schemas.common import normalize_media_type
from schemas.files import UploadCandidate
from schemas.requests import IntakePrecheckRequest
from schemas.responses import FileValidationResult, IntakePrecheckResponse
from services.feature_flags import is_intake_precheck_enabled
from services.file_admission import (
    get_file_requirements_hint,
    get_max_file_size,
    get_max_file_size_for_types,
    validate_file,
)
from services.media_detection import detect_media_type_from_metadata
from utils.metrics import incr
from utils.request_id import get_request_id
from utils.stage_logging import log_stage

router = APIRouter()


def _outcome(result: FileValidationResult) -> str:
    if result.is_valid:
        return "warned" if result.warnings else "admitted"
    return result.error.code if result.error else "rejected"


def _parse_media_types(raw: Optional[List[str]]) -> List:
    # Form clients send either repeated fields or one comma-separated value.
    values = []
    for item in raw or []:
        values.extend(x.strip() for x in str(item).split(",") if x.strip())
    media_types = []
    for value in values:
        media = normalize_media_type(value)
        if media is None:
            raise HTTPException(
                status_code=400,
                detail={
                    "error_code": "INVALID_MEDIA_TYPE",
                    "error_message": f"Unknown media type: {value}",
                },
            )
        if media not in media_types:
            media_types.append(media)
    return media_types


@router.post("/intake/precheck", response_model=IntakePrecheckResponse)
# User value: metadata-only admission check so users fix type or size problems before uploading.
async def intake_precheck(payload: IntakePrecheckRequest):
    if not is_intake_precheck_enabled():
        raise HTTPException(
            status_code=404,
            detail={
                "error_code": "FEATURE_DISABLED",
                "error_message": "Intake precheck is disabled",
            },
        )

    candidate = UploadCandidate(
        filename=payload.filename,
        content_type=payload.mime_type,
        size=payload.file_size_bytes,
    )
    detected = detect_media_type_from_metadata(payload.filename, payload.mime_type)
    result = validate_file(candidate, payload.accepted_media_types, payload.custom_max_size)

    media = detected.get("detected_media_type")
    if payload.custom_max_size is not None:
        max_size = payload.custom_max_size
    elif media is not None:
        max_size = get_max_file_size(media)
    else:
        max_size = get_max_file_size_for_types(payload.accepted_media_types)

    hint_types = payload.accepted_media_types or ([media] if media is not None else [])
    outcome = _outcome(result)

    log_stage(
        job_id=None,
        stage="INTAKE_PRECHECK_DECISION",
        event="COMPLETED",
        request_id=get_request_id() or "",
        media_type=media,
        confidence=detected.get("confidence", 0.0),
        outcome=outcome,
        file_size_bytes=payload.file_size_bytes,
        max_size_bytes=max_size,
    )
    incr("intake_precheck_decisions_total", outcome=outcome, media_type=media.value if media else "unknown")

    return IntakePrecheckResponse(
        detected_media_type=media,
        confidence=float(detected.get("confidence", 0.0)),
        reasons=list(detected.get("reasons") or []),
        result=result,
        max_size_bytes=max_size,
        requirements_hint=get_file_requirements_hint(hint_types, payload.custom_max_size),
    )


@router.post("/intake/file-check", response_model=FileValidationResult)
# User value: checks a real upload with the exact rules the processor applies.
async def intake_file_check(
    file: UploadFile = File(...),
    accepted_media_types: Optional[List[str]] = Form(default=None),
    custom_max_size: Optional[int] = Form(default=None, gt=0),
):
    media_types = _parse_media_types(accepted_media_types)
    result = validate_file(file, media_types, custom_max_size)
    outcome = _outcome(result)

    log_stage(
        job_id=None,
        stage="INTAKE_FILE_CHECK",
        event="COMPLETED",
        request_id=get_request_id() or "",
        media_type=result.media_type,
        outcome=outcome,
        filename=file.filename,
    )
    incr(
        "intake_file_check_total",
        outcome=outcome,
        media_type=result.media_type.value if result.media_type else "unknown",
    )
    return result
