# User value: This file validates inbound intake requests so malformed payloads are rejected with field-level messages.
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from schemas.common import MediaType, OperationStatus
from schemas.jobs import JobFile
from schemas.operations import OperationDefinition


class IntakePrecheckRequest(BaseModel):
    # User value: metadata-only precheck so users learn about size/type problems before sending bytes.
    filename: str = Field(..., min_length=1)
    mime_type: Optional[str] = None
    file_size_bytes: int = Field(..., ge=0)
    accepted_media_types: List[MediaType] = Field(default_factory=list)
    custom_max_size: Optional[int] = Field(default=None, gt=0)


class ParameterValidationRequest(BaseModel):
    operation: OperationDefinition
    parameters: Dict[str, Any] = Field(default_factory=dict)


class DefaultParametersRequest(BaseModel):
    operation: OperationDefinition


class GroupOperationsRequest(BaseModel):
    operations: List[OperationDefinition] = Field(default_factory=list)


class JobClassifyRequest(BaseModel):
    # Any job projection fits: full jobs send output_file, list/status projections send has_output.
    status: OperationStatus
    has_output: Optional[bool] = None
    output_file: Optional[JobFile] = None
    previous_status: Optional[OperationStatus] = None
