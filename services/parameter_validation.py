# User value: This file checks operation parameters and fills defaults so users only submit forms the processor accepts.
import math
from typing import Any, Callable, Dict, Mapping, Optional, Union

from schemas.common import ParameterType
from schemas.operations import OperationDefinition, ParameterSchemaBase


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# Marks a parameter the user never touched; None and "" are explicit values.
UNSET: Any = _Unset()


def _ok() -> Dict[str, Any]:
    return {"valid": True}


def _fail(message: str) -> Dict[str, Any]:
    return {"valid": False, "error": message}


# User value: required-field checks treat "never set", null and empty text the same way.
def _is_blank(value: Any) -> bool:
    if value is UNSET or value is None:
        return True
    return isinstance(value, str) and value == ""


def _to_number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _is_integral(number: Union[int, float]) -> bool:
    if isinstance(number, int):
        return True
    return math.isfinite(number) and float(number).is_integer()


def _format_bound(bound: Union[int, float]) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


# User value: min is reported before max so users fix one clear problem at a time.
def _check_bounds(schema: ParameterSchemaBase, number: Union[int, float]) -> Dict[str, Any]:
    minimum = getattr(schema, "min", None)
    maximum = getattr(schema, "max", None)
    if minimum is not None and number < minimum:
        return _fail(f"{schema.param_name} must be at least {_format_bound(minimum)}")
    if maximum is not None and number > maximum:
        return _fail(f"{schema.param_name} must be at most {_format_bound(maximum)}")
    return _ok()


def _validate_integer(schema: ParameterSchemaBase, value: Any) -> Dict[str, Any]:
    number = _to_number(value)
    if number is None or not _is_integral(number):
        return _fail(f"{schema.param_name} must be an integer")
    return _check_bounds(schema, number)


def _validate_float(schema: ParameterSchemaBase, value: Any) -> Dict[str, Any]:
    number = _to_number(value)
    if number is None or math.isnan(number):
        return _fail(f"{schema.param_name} must be a number")
    return _check_bounds(schema, number)


def _validate_boolean(schema: ParameterSchemaBase, value: Any) -> Dict[str, Any]:
    if not isinstance(value, bool):
        return _fail(f"{schema.param_name} must be true or false")
    return _ok()


def _validate_choice(schema: ParameterSchemaBase, value: Any) -> Dict[str, Any]:
    choices = list(getattr(schema, "choices", None) or [])
    candidate = str(value).lower() if isinstance(value, bool) else str(value)
    if candidate not in choices:
        return _fail(f"{schema.param_name} must be one of: {', '.join(choices)}")
    return _ok()


def _validate_string(schema: ParameterSchemaBase, value: Any) -> Dict[str, Any]:
    if not isinstance(value, str):
        return _fail(f"{schema.param_name} must be a string")
    return _ok()


def _default_integer(schema: ParameterSchemaBase) -> Any:
    minimum = getattr(schema, "min", None)
    return minimum if minimum is not None else 0


def _default_float(schema: ParameterSchemaBase) -> Any:
    minimum = getattr(schema, "min", None)
    return float(minimum) if minimum is not None else 0.0


def _default_choice(schema: ParameterSchemaBase) -> Any:
    choices = getattr(schema, "choices", None) or []
    return choices[0] if choices else ""


VALIDATORS: Dict[ParameterType, Callable[[ParameterSchemaBase, Any], Dict[str, Any]]] = {
    ParameterType.INTEGER: _validate_integer,
    ParameterType.FLOAT: _validate_float,
    ParameterType.BOOLEAN: _validate_boolean,
    ParameterType.CHOICE: _validate_choice,
    ParameterType.STRING: _validate_string,
}

DEFAULT_FACTORIES: Dict[ParameterType, Callable[[ParameterSchemaBase], Any]] = {
    ParameterType.INTEGER: _default_integer,
    ParameterType.FLOAT: _default_float,
    ParameterType.BOOLEAN: lambda schema: False,
    ParameterType.CHOICE: _default_choice,
    ParameterType.STRING: lambda schema: "",
}


def validate_parameter(schema: ParameterSchemaBase, value: Any = UNSET) -> Dict[str, Any]:
    """Validate one value against its parameter schema.

    Returns ``{"valid": True}`` or ``{"valid": False, "error": "<message>"}``.
    Never raises; optional parameters left blank are always valid.
    """
    if _is_blank(value):
        if schema.required:
            return _fail(f"{schema.param_name} is required")
        return _ok()

    return VALIDATORS[ParameterType(schema.type)](schema, value)


def validate_parameters(operation: OperationDefinition, values: Mapping[str, Any]) -> Dict[str, Any]:
    errors: Dict[str, str] = {}
    values = values or {}

    for schema in operation.parameters:
        result = validate_parameter(schema, values.get(schema.param_name, UNSET))
        if not result["valid"]:
            errors[schema.param_name] = result.get("error") or f"{schema.param_name} is invalid"

    return {"valid": not errors, "errors": errors}


def get_parameter_default(schema: ParameterSchemaBase) -> Any:
    if schema.has_default:
        return schema.default
    return DEFAULT_FACTORIES[ParameterType(schema.type)](schema)


# User value: every field starts filled in, so forms never mix "missing" and "empty" states.
def build_default_parameters(operation: OperationDefinition) -> Dict[str, Any]:
    return {schema.param_name: get_parameter_default(schema) for schema in operation.parameters}


def is_numeric_parameter(schema: ParameterSchemaBase) -> bool:
    return ParameterType(schema.type) in (ParameterType.INTEGER, ParameterType.FLOAT)


def has_range_constraints(schema: ParameterSchemaBase) -> bool:
    if not is_numeric_parameter(schema):
        return False
    return getattr(schema, "min", None) is not None or getattr(schema, "max", None) is not None


def parameter_label(schema: ParameterSchemaBase) -> str:
    return schema.label
