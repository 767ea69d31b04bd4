# User value: This file lets other services check a parameter form or fetch its defaults using the same rules as the UI.
from fastapi import APIRouter, HTTPException

from schemas.operations import GroupedOperations
from schemas.requests import DefaultParametersRequest, GroupOperationsRequest, ParameterValidationRequest
from schemas.responses import DefaultParametersResponse, ParameterValidationResponse
from services.feature_flags import is_parameter_validation_api_enabled
from services.operations import group_operations_by_media_type
from services.parameter_validation import build_default_parameters, validate_parameters
from utils.metrics import incr

router = APIRouter(prefix="/operations", tags=["operations"])


def _require_enabled() -> None:
    if not is_parameter_validation_api_enabled():
        raise HTTPException(
            status_code=404,
            detail={
                "error_code": "FEATURE_DISABLED",
                "error_message": "Parameter validation API is disabled",
            },
        )


@router.post("/validate", response_model=ParameterValidationResponse)
def validate_operation_parameters(payload: ParameterValidationRequest):
    _require_enabled()
    result = validate_parameters(payload.operation, payload.parameters)
    incr(
        "operations_parameter_checks_total",
        operation=payload.operation.operation_name,
        valid=result["valid"],
    )
    return ParameterValidationResponse(valid=result["valid"], errors=result["errors"])


@router.post("/defaults", response_model=DefaultParametersResponse)
# User value: pre-fills a form so users start from values the processor accepts.
def operation_defaults(payload: DefaultParametersRequest):
    _require_enabled()
    return DefaultParametersResponse(
        operation_name=payload.operation.operation_name,
        parameters=build_default_parameters(payload.operation),
    )


@router.post("/group", response_model=GroupedOperations)
def group_operations(payload: GroupOperationsRequest):
    _require_enabled()
    return group_operations_by_media_type(payload.operations)
