# User value: This file models operations and their typed parameters so any new operation gets a working form without new code.
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from schemas.common import MediaType

Number = Union[int, float]


class ParameterSchemaBase(BaseModel):
    # Fields that do not belong to the variant (e.g. choices on an integer) are dropped.
    model_config = ConfigDict(extra="ignore")

    param_name: str = Field(..., min_length=1)
    required: bool = False
    description: str = ""
    default: Any = None

    # User value: distinguishes "no default declared" from "default is null" so form state stays predictable.
    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def label(self) -> str:
        return self.param_name.replace("_", " ")


class IntegerParameterSchema(ParameterSchemaBase):
    type: Literal["integer"] = "integer"
    default: Optional[int] = None
    min: Optional[Number] = None
    max: Optional[Number] = None


class FloatParameterSchema(ParameterSchemaBase):
    type: Literal["float"] = "float"
    default: Optional[Number] = None
    min: Optional[Number] = None
    max: Optional[Number] = None


class StringParameterSchema(ParameterSchemaBase):
    type: Literal["string"] = "string"
    default: Optional[str] = None


class BooleanParameterSchema(ParameterSchemaBase):
    type: Literal["boolean"] = "boolean"
    default: Optional[bool] = None


class ChoiceParameterSchema(ParameterSchemaBase):
    type: Literal["choice"] = "choice"
    default: Optional[str] = None
    choices: List[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _default_is_a_choice(self):
        if self.has_default and self.default is not None and self.default not in self.choices:
            raise ValueError(f"default {self.default!r} is not one of choices {self.choices}")
        return self


ParameterSchema = Annotated[
    Union[
        IntegerParameterSchema,
        FloatParameterSchema,
        StringParameterSchema,
        BooleanParameterSchema,
        ChoiceParameterSchema,
    ],
    Field(discriminator="type"),
]

PARAMETER_SCHEMA_ADAPTER = TypeAdapter(ParameterSchema)


def parse_parameter_schema(data: dict) -> ParameterSchemaBase:
    return PARAMETER_SCHEMA_ADAPTER.validate_python(data)


class OperationDefinitionListItem(BaseModel):
    operation_name: str = Field(..., min_length=1)
    media_type: MediaType
    description: str = ""


class OperationDefinition(OperationDefinitionListItem):
    parameters: List[ParameterSchema] = Field(default_factory=list)
    # Empty input_formats means "any"; empty output_formats means "same as input".
    input_formats: List[str] = Field(default_factory=list)
    output_formats: List[str] = Field(default_factory=list)

    @field_validator("parameters")
    @classmethod
    def _unique_param_names(cls, parameters):
        seen = set()
        for param in parameters:
            if param.param_name in seen:
                raise ValueError(f"duplicate parameter name: {param.param_name}")
            seen.add(param.param_name)
        return parameters

    def get_parameter(self, param_name: str) -> Optional[ParameterSchemaBase]:
        for param in self.parameters:
            if param.param_name == param_name:
                return param
        return None


class GroupedOperations(BaseModel):
    video: List[OperationDefinition] = Field(default_factory=list)
    image: List[OperationDefinition] = Field(default_factory=list)
    audio: List[OperationDefinition] = Field(default_factory=list)

    def for_media_type(self, media_type: MediaType) -> List[OperationDefinition]:
        return getattr(self, MediaType(media_type).value)
