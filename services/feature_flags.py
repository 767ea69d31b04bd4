# User value: This file lets operators switch intake helpers on or off without a redeploy.
import os


def _flag(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "1" if default else "0")).strip().lower()
    return raw in {"1", "true", "yes", "on"}


FEATURE_INTAKE_PRECHECK = _flag("FEATURE_INTAKE_PRECHECK", True)
FEATURE_PARAMETER_VALIDATION_API = _flag("FEATURE_PARAMETER_VALIDATION_API", True)
FEATURE_JOB_CLASSIFY_API = _flag("FEATURE_JOB_CLASSIFY_API", True)

BOOL_FLAG_NAMES = (
    "FEATURE_INTAKE_PRECHECK",
    "FEATURE_PARAMETER_VALIDATION_API",
    "FEATURE_JOB_CLASSIFY_API",
)


# User value: users only see the metadata precheck when operators have it turned on.
def is_intake_precheck_enabled() -> bool:
    return FEATURE_INTAKE_PRECHECK


def is_parameter_validation_api_enabled() -> bool:
    return FEATURE_PARAMETER_VALIDATION_API


def is_job_classify_api_enabled() -> bool:
    return FEATURE_JOB_CLASSIFY_API
