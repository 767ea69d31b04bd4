# User value: This file organizes fetched operations so users browse them by video, image and audio.
from typing import Iterable, List, Optional

from schemas.common import MediaType, get_media_type_display_name
from schemas.operations import GroupedOperations, OperationDefinition
from utils.formatting import get_operation_display_name


# User value: every operation lands in exactly one media tab, in the order the API listed it.
def group_operations_by_media_type(operations: Iterable[OperationDefinition]) -> GroupedOperations:
    groups = {media.value: [] for media in MediaType}
    for operation in operations:
        groups[MediaType(operation.media_type).value].append(operation)
    return GroupedOperations(**groups)


def find_operation(operations: Iterable[OperationDefinition], operation_name: str) -> Optional[OperationDefinition]:
    for operation in operations:
        if operation.operation_name == operation_name:
            return operation
    return None


# User value: simple case-insensitive search across name and description for the operation picker.
def search_operations(operations: Iterable[OperationDefinition], query: str) -> List[OperationDefinition]:
    needle = str(query or "").strip().lower()
    ops = list(operations)
    if not needle:
        return ops
    out = []
    for operation in ops:
        haystack = " ".join(
            [
                operation.operation_name.lower(),
                get_operation_display_name(operation.operation_name).lower(),
                (operation.description or "").lower(),
            ]
        )
        if needle in haystack:
            out.append(operation)
    return out


def describe_formats(operation: OperationDefinition) -> dict:
    return {
        "media_type": get_media_type_display_name(operation.media_type),
        "input_formats": ", ".join(operation.input_formats) if operation.input_formats else "Any",
        "output_formats": ", ".join(operation.output_formats) if operation.output_formats else "Same as input",
    }
