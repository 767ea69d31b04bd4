# User value: This file answers "is this job still running, done, or downloadable?" the same way for every client.
from fastapi import APIRouter, HTTPException

from schemas.requests import JobClassifyRequest
from schemas.responses import JobClassificationResponse
from services.feature_flags import is_job_classify_api_enabled
from services.job_lifecycle import classify_job
from utils.metrics import incr
from utils.status_machine import check_observed_transition

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/classify", response_model=JobClassificationResponse)
def classify(payload: JobClassifyRequest):
    if not is_job_classify_api_enabled():
        raise HTTPException(
            status_code=404,
            detail={
                "error_code": "FEATURE_DISABLED",
                "error_message": "Job classification API is disabled",
            },
        )

    flags = classify_job(payload)
    transition_allowed = None
    if payload.previous_status is not None:
        transition_allowed = check_observed_transition(
            job_id="classify",
            previous=payload.previous_status,
            current=payload.status,
            context="classify_api",
        )

    incr("jobs_classify_total", status=flags["status"])
    return JobClassificationResponse(**flags, transition_allowed=transition_allowed)
