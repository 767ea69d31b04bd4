# User value: This file publishes the shared job/operation vocabulary so every client renders statuses and limits the same way.
from fastapi import APIRouter

from schemas.common import MediaType
from schemas.job_contract import (
    ACTIVE_JOB_STATUSES,
    CANONICAL_JOB_FIELDS,
    CONTRACT_VERSION,
    CREATE_JOB_FORM_FIELDS,
    FILE_TYPES,
    FILE_VALIDATION_ERROR_CODES,
    FINAL_JOB_STATUSES,
    JOB_FILE_FIELDS,
    JOB_LIST_ITEM_FIELDS,
    JOB_STATUS_FIELDS,
    JOB_STATUSES,
    MEDIA_TYPES,
    PARAMETER_TYPES,
)
from services.feature_flags import (
    is_intake_precheck_enabled,
    is_job_classify_api_enabled,
    is_parameter_validation_api_enabled,
)
from services.file_admission import DEFAULT_MAX_FILE_SIZE, get_file_size_limit_label, get_max_file_size

router = APIRouter()


@router.get("/contract/job-status")
# User value: keeps status names, size limits and field names consistent across clients.
def job_status_contract():
    return {
        "contract_version": CONTRACT_VERSION,
        "job_statuses": list(JOB_STATUSES),
        "active_statuses": list(ACTIVE_JOB_STATUSES),
        "final_statuses": list(FINAL_JOB_STATUSES),
        "media_types": list(MEDIA_TYPES),
        "parameter_types": list(PARAMETER_TYPES),
        "file_validation_error_codes": list(FILE_VALIDATION_ERROR_CODES),
        "file_size_limits": {
            **{media.value: get_max_file_size(media) for media in MediaType},
            "default": DEFAULT_MAX_FILE_SIZE,
        },
        "file_size_limit_labels": {media.value: get_file_size_limit_label(media) for media in MediaType},
        "file_types": list(FILE_TYPES),
        "canonical_fields": list(CANONICAL_JOB_FIELDS),
        "job_list_item_fields": list(JOB_LIST_ITEM_FIELDS),
        "job_status_fields": list(JOB_STATUS_FIELDS),
        "job_file_fields": list(JOB_FILE_FIELDS),
        "create_job_form_fields": list(CREATE_JOB_FORM_FIELDS),
        "capabilities": {
            "intake_precheck_enabled": is_intake_precheck_enabled(),
            "parameter_validation_api_enabled": is_parameter_validation_api_enabled(),
            "job_classify_api_enabled": is_job_classify_api_enabled(),
        },
    }
