# User value: This file runs every parameter and file check before a job is sent, so users never wait on an upload that will be rejected.
from typing import Any, Dict, Mapping, Optional

from schemas.jobs import CreateJobParams, Job
from schemas.operations import OperationDefinition
from services.file_admission import validate_file
from services.parameter_validation import build_default_parameters, validate_parameters
from utils.metrics import incr
from utils.stage_logging import log_stage


def merge_with_defaults(operation: OperationDefinition, values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Overlay the caller's values on the operation's defaults.

    Every declared parameter ends up present, so a required parameter the
    caller never set picks up its default (an integer's ``min`` or 0) and
    passes the required check. Values the caller did set always win.
    """
    merged = build_default_parameters(operation)
    for key, value in (values or {}).items():
        merged[key] = value
    return merged


def prepare_job_submission(operation: OperationDefinition, values: Optional[Mapping[str, Any]], file) -> Dict[str, Any]:
    """Validate parameters and file together and build the request payload.

    ``ok`` is True only when both checks pass; ``params`` is None otherwise.
    """
    parameters = merge_with_defaults(operation, values)
    parameter_result = validate_parameters(operation, parameters)
    file_result = validate_file(file, [operation.media_type])

    ok = parameter_result["valid"] and file_result.is_valid
    params = CreateJobParams(operation=operation.operation_name, file=file, parameters=parameters) if ok else None

    if not ok:
        incr("core_submission_rejected_total", operation=operation.operation_name)
        log_stage(
            job_id=None,
            stage="SUBMIT",
            event="REJECTED",
            operation=operation.operation_name,
            media_type=operation.media_type,
            parameter_errors=len(parameter_result["errors"]),
            file_error=file_result.error.code if file_result.error else None,
        )

    return {
        "ok": ok,
        "parameter_errors": parameter_result["errors"],
        "file_result": file_result,
        "params": params,
    }


def submit_job(client, operation: OperationDefinition, values: Optional[Mapping[str, Any]], file) -> Dict[str, Any]:
    prepared = prepare_job_submission(operation, values, file)
    job: Optional[Job] = None
    if prepared["ok"]:
        job = client.create_job(prepared["params"])
        incr("core_submission_accepted_total", operation=operation.operation_name)
        log_stage(
            job_id=job.id,
            stage="SUBMIT",
            event="ACCEPTED",
            operation=operation.operation_name,
            media_type=operation.media_type,
            status=job.status,
        )
    prepared["job"] = job
    return prepared
