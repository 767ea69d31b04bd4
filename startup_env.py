import logging
import os
from typing import List

from services.feature_flags import BOOL_FLAG_NAMES

logger = logging.getLogger("api.startup")

_BOOL_VALUES = {"1", "0", "true", "false", "yes", "no", "on", "off"}

POSITIVE_NUMBER_KEYS = (
    "API_TIMEOUT_SEC",
    "UPLOAD_TIMEOUT_SEC",
    "POLL_INTERVAL_SEC",
    "POLL_MAX_ATTEMPTS",
    "MAX_VIDEO_FILE_SIZE_MB",
    "MAX_AUDIO_FILE_SIZE_MB",
    "MAX_IMAGE_FILE_SIZE_MB",
    "DEFAULT_MAX_FILE_SIZE_MB",
)


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _validate_http_url(value: str | None, key: str, errors: List[str]) -> None:
    if _is_blank(value):
        return
    if not (value.startswith("http://") or value.startswith("https://")):
        errors.append(f"{key} must start with http:// or https://")


def _validate_cors_allow_origins(value: str | None, errors: List[str], warnings: List[str]) -> None:
    if _is_blank(value):
        warnings.append("CORS_ALLOW_ORIGINS is not set; browser clients on other origins will be blocked")
        return

    origins = [x.strip() for x in str(value).split(",") if x.strip()]
    if not origins:
        errors.append("CORS_ALLOW_ORIGINS must contain at least one origin")
        return

    for origin in origins:
        if origin == "*":
            errors.append("CORS_ALLOW_ORIGINS must not contain '*' in strict allowlist mode")
            continue
        if not (origin.startswith("http://") or origin.startswith("https://")):
            errors.append(f"CORS origin must start with http:// or https://: {origin}")


def _validate_bool_flag_env(name: str, errors: List[str]) -> None:
    raw = os.getenv(name)
    if raw is None:
        return
    if str(raw).strip().lower() not in _BOOL_VALUES:
        errors.append(f"{name} must be one of {sorted(_BOOL_VALUES)}")


def _validate_positive_number_env(name: str, errors: List[str]) -> None:
    raw = os.getenv(name)
    if _is_blank(raw):
        return
    try:
        value = float(raw)
    except ValueError:
        errors.append(f"{name} must be a number")
        return
    if value <= 0:
        errors.append(f"{name} must be greater than 0")


def _validate_ratio_env(name: str, errors: List[str]) -> None:
    raw = os.getenv(name)
    if _is_blank(raw):
        return
    try:
        value = float(raw)
    except ValueError:
        errors.append(f"{name} must be a number")
        return
    if not 0 < value <= 1:
        errors.append(f"{name} must be in (0, 1]")


def validate_startup_env() -> None:
    errors: List[str] = []
    warnings: List[str] = []

    _validate_http_url(os.getenv("MEDIA_API_URL"), "MEDIA_API_URL", errors)
    _validate_cors_allow_origins(os.getenv("CORS_ALLOW_ORIGINS"), errors, warnings)

    for name in BOOL_FLAG_NAMES:
        _validate_bool_flag_env(name, errors)
    for name in POSITIVE_NUMBER_KEYS:
        _validate_positive_number_env(name, errors)
    _validate_ratio_env("ADMISSION_WARN_RATIO", errors)

    if _is_blank(os.getenv("MEDIA_API_URL")):
        warnings.append("MEDIA_API_URL is not set; using http://localhost:8000/api/v1")

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise RuntimeError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info(
        "startup_env_validated keys=%s",
        ["MEDIA_API_URL", "CORS_ALLOW_ORIGINS", *BOOL_FLAG_NAMES],
    )
