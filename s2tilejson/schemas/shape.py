"""Shape grammar for layer property schemas.

Shapes exist solely to deconstruct and rebuild feature property bags.
Every key is a string and every value is one of:

- a primitive type tag: ``string``, ``f32``, ``f64``, ``u64``, ``i64``,
  ``bool`` or ``null``
- a nested shape
- a single-element list describing a homogeneous array whose elements
  are either a primitive tag or a flat object of primitive tags

The grammar is published two ways: ``SHAPE_SCHEMA`` is the JSON-Schema
document that external validators consume, and ``validate_shape`` checks
a shape in-process with a pydantic ``TypeAdapter`` over the same grammar.

Example:
    Check a layer shape before handing it to the builder:
        >>> from s2tilejson.schemas import shape
        >>> shape.validate_shape({
        ...     "class": "string",
        ...     "offset": "f64",
        ...     "info": {"name": "string", "value": "i64"},
        ...     "tags": ["string"],
        ... })
        True
        >>> shape.validate_shape({"offset": "float"})
        False
"""

from __future__ import annotations

import logging
import typing
from typing import Annotated, Any, Literal

import pydantic
from typing_extensions import TypeAliasType

logger = logging.getLogger(__name__)

PrimitiveShape = Literal["string", "f32", "f64", "u64", "i64", "bool", "null"]
PRIMITIVE_SHAPES: tuple[str, ...] = typing.get_args(PrimitiveShape)

# Arrays may only hold a primitive or an object whose values are primitives.
ShapePrimitive = dict[str, PrimitiveShape]
ShapePrimitiveType = PrimitiveShape | ShapePrimitive
ShapeArray = Annotated[
    list[ShapePrimitiveType],
    pydantic.Field(min_length=1, max_length=1),
]

ShapeType = TypeAliasType(
    "ShapeType", PrimitiveShape | ShapeArray | dict[str, "ShapeType"]
)
Shape = TypeAliasType("Shape", dict[str, ShapeType])

SHAPE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Shape",
    "description": "Describes how a layer's feature properties are typed.",
    "type": "object",
    "additionalProperties": {"$ref": "#/definitions/shapeType"},
    "definitions": {
        "primitive": {
            "type": "string",
            "enum": list(PRIMITIVE_SHAPES),
        },
        "primitiveShape": {
            "type": "object",
            "additionalProperties": {"$ref": "#/definitions/primitive"},
        },
        "arrayShape": {
            "type": "array",
            "minItems": 1,
            "maxItems": 1,
            "items": {
                "anyOf": [
                    {"$ref": "#/definitions/primitive"},
                    {"$ref": "#/definitions/primitiveShape"},
                ]
            },
        },
        "nestedShape": {
            "type": "object",
            "additionalProperties": {"$ref": "#/definitions/shapeType"},
        },
        "shapeType": {
            "anyOf": [
                {"$ref": "#/definitions/primitive"},
                {"$ref": "#/definitions/arrayShape"},
                {"$ref": "#/definitions/nestedShape"},
            ]
        },
    },
}

_SHAPE_ADAPTER: pydantic.TypeAdapter[Any] = pydantic.TypeAdapter(Shape)


def shape_errors(shape: Any) -> list[str]:
    """List the problems that keep ``shape`` from matching the grammar.

    Args:
        shape: Candidate shape, typically parsed from JSON.

    Returns:
        Human-readable messages of the form ``"<path>: <reason>"``. An
        empty list means the shape is valid.
    """
    try:
        _SHAPE_ADAPTER.validate_python(shape, strict=True)
    except pydantic.ValidationError as exc:
        return [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
    return []


def validate_shape(shape: Any) -> bool:
    """Check whether ``shape`` matches the shape grammar.

    Args:
        shape: Candidate shape, typically parsed from JSON.

    Returns:
        True if the shape is valid, False otherwise. Never raises.
    """
    errors = shape_errors(shape)
    if errors:
        logger.debug("Shape rejected with %d error(s): %s", len(errors), errors)
    return not errors
