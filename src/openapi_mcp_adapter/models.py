"""Internal models for operations, request plans and compiled tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union


Envelope = Dict[str, List[Dict[str, str]]]
ToolHandler = Callable[[Mapping[str, Any]], Awaitable[Envelope]]


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


class DataType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def from_schema(cls, schema: Optional[Dict[str, Any]]) -> "DataType":
        # anyOf/oneOf/allOf and unknown types fall back to string
        schema_type = (schema or {}).get("type")
        if isinstance(schema_type, list):
            # OpenAPI 3.1 nullable form: ["integer", "null"]
            candidates = [item for item in schema_type if item != "null"]
            schema_type = candidates[0] if len(candidates) == 1 else None
        try:
            return cls(schema_type)
        except ValueError:
            return cls.STRING


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    location: ParameterLocation
    data_type: DataType = DataType.STRING
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class OperationDescriptor:
    operation_id: str
    method: str
    path: str
    summary: str = ""
    description: str = ""
    parameters: Tuple[ParameterDescriptor, ...] = ()


@dataclass(frozen=True)
class BoundParameters:
    path_params: Dict[str, Any] = field(default_factory=dict)
    query_params: Dict[str, Any] = field(default_factory=dict)
    body_params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestPlan:
    method: str
    endpoint: str
    query_params: Dict[str, Any] = field(default_factory=dict)
    body_params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Success:
    message: str = ""
    data: Any = None


@dataclass(frozen=True)
class Failure:
    message: str


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    schema: Dict[str, Any]
    handler: ToolHandler
