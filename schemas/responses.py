# User value: This file fixes the shape of every validation verdict so users get the same messages from the UI and the API.
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import MediaType

FileValidationErrorCode = Literal[
    "FILE_TOO_LARGE",
    "INVALID_TYPE",
    "UNKNOWN_TYPE",
    "MEDIA_TYPE_MISMATCH",
    "EMPTY_FILE",
]


class FileValidationDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_size: Optional[int] = None
    max_size: Optional[int] = None
    expected_types: Optional[List[MediaType]] = None
    detected_type: Optional[MediaType] = None


class FileValidationError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: FileValidationErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[FileValidationDetails] = None


class FileValidationResult(BaseModel):
    # User value: one immutable verdict per file so a later check can never rewrite an earlier answer.
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: Optional[FileValidationError] = None
    warnings: Optional[List[str]] = None
    media_type: Optional[MediaType] = None
    file_size: Optional[int] = None


class ApiValidationError(BaseModel):
    field: str = "unknown"
    message: str


class ParsedApiError(BaseModel):
    code: str
    message: str
    errors: List[ApiValidationError] = Field(default_factory=list)


class ParameterValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class DefaultParametersResponse(BaseModel):
    operation_name: str
    parameters: Dict[str, object] = Field(default_factory=dict)


class IntakePrecheckResponse(BaseModel):
    # User value: combines detection, admission verdict and limits so users fix a file before uploading it.
    detected_media_type: Optional[MediaType] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasons: List[str] = Field(default_factory=list)
    result: FileValidationResult
    max_size_bytes: int = Field(..., ge=0)
    requirements_hint: str = ""


class JobClassificationResponse(BaseModel):
    status: str
    is_active: bool
    is_final: bool
    is_successful: bool
    is_failed: bool
    should_poll: bool
    has_downloadable_output: bool
    transition_allowed: Optional[bool] = None
