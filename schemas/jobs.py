# User value: This file mirrors the job read models the processing API returns so status screens parse them safely.
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from schemas.common import FileType, OperationStatus
from schemas.files import UploadCandidate

T = TypeVar("T")


class JobFile(BaseModel):
    id: str
    file_type: FileType
    file_name: str
    file_size: int = Field(..., ge=0)
    mime_type: str = ""
    created_at: Optional[datetime] = None
    file_size_formatted: str = ""
    download_url: str = ""


class Job(BaseModel):
    # User value: full job detail, including submitted parameters and attached files.
    id: str
    operation: str
    status: OperationStatus
    progress: float = Field(default=0, ge=0, le=100)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    processing_time: Optional[float] = None
    processing_time_formatted: Optional[str] = None
    is_expired: bool = False
    is_processing: bool = False
    can_be_deleted: bool = False
    input_file: Optional[JobFile] = None
    output_file: Optional[JobFile] = None


class JobListItem(BaseModel):
    id: str
    operation: str
    status: OperationStatus
    progress: float = Field(default=0, ge=0, le=100)
    created_at: datetime
    completed_at: Optional[datetime] = None
    is_expired: bool = False
    has_output: bool = False


class JobStatus(BaseModel):
    # User value: the minimal projection the poller reads on every tick.
    id: str
    status: OperationStatus
    progress: float = Field(default=0, ge=0, le=100)
    error_message: Optional[str] = None
    eta_seconds: Optional[float] = None
    is_complete: bool = False
    has_output: bool = False


@dataclass
class CreateJobParams:
    # parameters are JSON-encoded into a single form field at submit time.
    operation: str
    file: UploadCandidate
    parameters: Dict[str, Any] = field(default_factory=dict)


class DeleteJobResponse(BaseModel):
    success: bool = True
    message: str = "Job deleted successfully"


class CancelJobResponse(BaseModel):
    success: bool = True
    message: str = "Job cancelled successfully"


class PaginatedResponse(BaseModel, Generic[T]):
    count: int = Field(default=0, ge=0)
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[T] = Field(default_factory=list)
