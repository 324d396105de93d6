"""
core.schema.descriptor

Declarative description of the structured JSON shape expected from a
one-shot generation call.

The descriptor is a small tagged-variant tree (discriminated on ``kind``):

    ObjectSchema  -> named fields, each another node
    StringSchema  -> any JSON string
    NumberSchema  -> any JSON number (booleans excluded), optional bounds
    ArraySchema   -> JSON array of primitive items
    EnumSchema    -> JSON string restricted to a fixed set of values

The same tree is used twice:
  - ``to_json_schema()`` renders the provider instruction
    (``response_format`` of type ``json_schema``)
  - ``check(value)`` validates the decoded reply

so the instruction sent to the model and the validation applied to its
answer can never drift apart.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from exceptions.exceptions import SchemaViolationError


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class StringSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    description: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "string"}
        if self.description:
            out["description"] = self.description
        return out

    def check(self, value: Any, path: str = "$") -> Any:
        if not isinstance(value, str):
            raise SchemaViolationError(path, f"expected string, got {_type_name(value)}")
        return value


class NumberSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "number"}
        if self.description:
            out["description"] = self.description
        if self.minimum is not None:
            out["minimum"] = self.minimum
        if self.maximum is not None:
            out["maximum"] = self.maximum
        return out

    def check(self, value: Any, path: str = "$") -> Any:
        # bool is an int subclass in Python but not a JSON number.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SchemaViolationError(path, f"expected number, got {_type_name(value)}")
        if not math.isfinite(value):
            raise SchemaViolationError(path, "expected a finite number")
        if self.minimum is not None and value < self.minimum:
            raise SchemaViolationError(path, f"{value} is below minimum {self.minimum}")
        if self.maximum is not None and value > self.maximum:
            raise SchemaViolationError(path, f"{value} is above maximum {self.maximum}")
        return value


class EnumSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    values: Tuple[str, ...]
    description: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "string", "enum": list(self.values)}
        if self.description:
            out["description"] = self.description
        return out

    def check(self, value: Any, path: str = "$") -> Any:
        if not isinstance(value, str):
            raise SchemaViolationError(path, f"expected string, got {_type_name(value)}")
        if value not in self.values:
            allowed = ", ".join(self.values)
            raise SchemaViolationError(path, f"{value!r} is not one of: {allowed}")
        return value


PrimitiveNode = Annotated[
    Union[StringSchema, NumberSchema, EnumSchema],
    Field(discriminator="kind"),
]


class ArraySchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    items: PrimitiveNode = Field(default_factory=StringSchema)
    description: Optional[str] = None
    min_items: Optional[int] = None

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "array", "items": self.items.to_json_schema()}
        if self.description:
            out["description"] = self.description
        if self.min_items is not None:
            out["minItems"] = self.min_items
        return out

    def check(self, value: Any, path: str = "$") -> Any:
        if not isinstance(value, list):
            raise SchemaViolationError(path, f"expected array, got {_type_name(value)}")
        if self.min_items is not None and len(value) < self.min_items:
            raise SchemaViolationError(
                path, f"expected at least {self.min_items} item(s), got {len(value)}"
            )
        for idx, item in enumerate(value):
            self.items.check(item, f"{path}[{idx}]")
        return value


SchemaNode = Annotated[
    Union[StringSchema, NumberSchema, EnumSchema, ArraySchema, "ObjectSchema"],
    Field(discriminator="kind"),
]


class ObjectSchema(BaseModel):
    """Root (or nested) object node; every declared field is required."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    name: str = "result"
    fields: Dict[str, SchemaNode]
    description: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": "object",
            "properties": {
                field_name: node.to_json_schema()
                for field_name, node in self.fields.items()
            },
            "required": list(self.fields),
        }
        if self.description:
            out["description"] = self.description
        return out

    def to_response_format(self) -> Dict[str, Any]:
        """Provider instruction for schema-constrained output."""
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.name,
                "schema": self.to_json_schema(),
            },
        }

    def check(self, value: Any, path: str = "$") -> Any:
        if not isinstance(value, dict):
            raise SchemaViolationError(path, f"expected object, got {_type_name(value)}")
        for field_name, node in self.fields.items():
            field_path = f"{path}.{field_name}" if path != "$" else field_name
            if field_name not in value:
                raise SchemaViolationError(field_path, "required field is missing")
            node.check(value[field_name], field_path)
        return value


ObjectSchema.model_rebuild()


# ---------------------------------------------------------------------------
# Small constructors so schemas read declaratively at the call site
# ---------------------------------------------------------------------------


def string(description: Optional[str] = None) -> StringSchema:
    return StringSchema(description=description)


def number(
    description: Optional[str] = None,
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> NumberSchema:
    return NumberSchema(description=description, minimum=minimum, maximum=maximum)


def enum(*values: str, description: Optional[str] = None) -> EnumSchema:
    return EnumSchema(values=tuple(values), description=description)


def array_of(
    items: Optional[Union[StringSchema, NumberSchema, EnumSchema]] = None,
    *,
    description: Optional[str] = None,
    min_items: Optional[int] = None,
) -> ArraySchema:
    return ArraySchema(
        items=items if items is not None else StringSchema(),
        description=description,
        min_items=min_items,
    )


def object_of(name: str, description: Optional[str] = None, **fields: Any) -> ObjectSchema:
    return ObjectSchema(name=name, fields=fields, description=description)
