# User value: This file turns whatever error body the processing API sends back into one readable message for the user.
from typing import Any, Dict, List, Optional

from schemas.responses import ApiValidationError, ParsedApiError

UNKNOWN_ERROR_CODE = "UNKNOWN_ERROR"
DEFAULT_ERROR_MESSAGE = "An error occurred"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

_STATUS_MESSAGES = {
    0: "Unable to connect to the server. Please check your internet connection.",
    401: "Your session has expired. Please refresh the page.",
    403: "You do not have permission to perform this action",
    404: "The requested resource was not found.",
    408: "The request timed out. Please try again.",
    413: "The file is too large to upload.",
    429: "Too many requests. Please wait a moment and try again.",
    500: "A server error occurred. Please try again later.",
    502: "The service is temporarily unavailable. Please try again later.",
    503: "The service is temporarily unavailable. Please try again later.",
    504: "The service is temporarily unavailable. Please try again later.",
}


def parse_api_validation_errors(response_data: Any) -> Optional[ParsedApiError]:
    """Normalise ``{"error": {"code", "message", "errors": [...]}}``.

    Returns None for anything that is not that envelope; never raises.
    Entries without a message are dropped and a missing field becomes ``unknown``.
    """
    if not isinstance(response_data, dict) or not response_data:
        return None

    error_obj = response_data.get("error")
    if not isinstance(error_obj, dict):
        return None

    code = error_obj.get("code")
    message = error_obj.get("message")
    raw_errors = error_obj.get("errors")

    errors: List[ApiValidationError] = []
    if isinstance(raw_errors, list):
        for item in raw_errors:
            if isinstance(item, dict) and item.get("message"):
                field = item.get("field")
                errors.append(
                    ApiValidationError(
                        field=str(field) if field is not None else "unknown",
                        message=str(item["message"]),
                    )
                )

    return ParsedApiError(
        code=str(code) if code is not None else UNKNOWN_ERROR_CODE,
        message=str(message) if message is not None else DEFAULT_ERROR_MESSAGE,
        errors=errors,
    )


# User value: a single error reads exactly as the server wrote it; several are shown together.
def format_api_validation_errors(parsed: ParsedApiError) -> str:
    if not parsed.errors:
        return parsed.message
    if len(parsed.errors) == 1:
        return parsed.errors[0].message
    return " ".join(err.message for err in parsed.errors)


def is_paginated_response(response: Any) -> bool:
    return isinstance(response, dict) and "count" in response and isinstance(response.get("results"), list)


def is_api_error(response: Any) -> bool:
    if not isinstance(response, dict):
        return False
    return any(key in response for key in ("error", "message", "detail", "errors"))


def extract_validation_errors(data: Any) -> List[ApiValidationError]:
    if not isinstance(data, dict):
        return []

    candidates = None
    nested = data.get("error")
    if isinstance(nested, dict) and isinstance(nested.get("errors"), list):
        candidates = nested["errors"]
    elif isinstance(data.get("errors"), list):
        candidates = data["errors"]

    out: List[ApiValidationError] = []
    for item in candidates or []:
        if isinstance(item, dict) and isinstance(item.get("message"), str):
            field = item.get("field")
            out.append(ApiValidationError(field=str(field) if field else "unknown", message=item["message"]))
    return out


# User value: picks the most specific message out of the many error body shapes the API has used.
def extract_error_message(data: Any) -> str:
    if not isinstance(data, dict) or not data:
        return UNKNOWN_ERROR_MESSAGE

    validation_errors = extract_validation_errors(data)
    if validation_errors:
        return validation_errors[0].message

    for key in ("message", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value

    error = data.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])

    errors = data.get("errors")
    if isinstance(errors, dict) and errors:
        first_field = next(iter(errors))
        first = errors[first_field]
        if isinstance(first, list) and first:
            return f"{first_field}: {first[0]}"
        if isinstance(first, str) and first:
            return f"{first_field}: {first}"

    return UNKNOWN_ERROR_MESSAGE


def extract_field_errors(data: Any) -> Dict[str, List[str]]:
    if not isinstance(data, dict):
        return {}

    validation_errors = extract_validation_errors(data)
    if validation_errors:
        result: Dict[str, List[str]] = {}
        for err in validation_errors:
            field = err.field if err.field and err.field != "unknown" else "general"
            result.setdefault(field, []).append(err.message)
        return result

    errors = data.get("errors")
    if isinstance(errors, dict):
        return {str(k): (list(v) if isinstance(v, list) else [str(v)]) for k, v in errors.items()}
    return {}


def extract_error_code(data: Any, fallback: Optional[str] = None) -> str:
    code = None
    if isinstance(data, dict):
        code = data.get("code")
        nested = data.get("error")
        if isinstance(nested, dict) and nested.get("code"):
            code = nested["code"]
    return str(code or fallback or UNKNOWN_ERROR_CODE)


def get_error_message(status: int, message: Optional[str] = None) -> str:
    """Map an HTTP status to the message shown to the user.

    400 keeps the server's own message; unmapped statuses fall back to it too.
    """
    if status == 400:
        return message or "Invalid request. Please check your input."
    if status in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status]
    return message or UNKNOWN_ERROR_MESSAGE
