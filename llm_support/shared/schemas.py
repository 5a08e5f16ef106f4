"""JSON Schema derivation for structured LLM outputs.

## Structured Outputs

Models follow a JSON Schema embedded in the prompt far more reliably than a
prose description of the answer. The schema should be minimal: root-level
metadata ($schema, title) is noise to the model, and "accept anything"
placeholders tell it nothing, so every opaque-value field is lowered to an
explicit {"type": "object"} node. Callers that need arbitrary JSON (arrays,
scalars) in such a field should model it more precisely instead.

## Library Usage

Two sources of result shapes are accepted:
- TypeDescriptor trees (Primitive, ObjectShape, OptionalField, ArrayOf,
  OpaqueValue, Ref), hand-written or generated, built by _SchemaBuilder
- Pydantic v2 BaseModel subclasses, via model_json_schema() with references
  rewritten to #/definitions/<Name>

## Data Flow

1. derive_schema() builds the raw schema tree from the shape
2. fix_opaque_values() lowers placeholders at every level
3. serialize_schema() drops root metadata and pretty-prints with 2 spaces
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from pydantic import BaseModel, PydanticUserError

from llm_support.config import (
    SCHEMA_DEFINITIONS_KEY,
    SCHEMA_INDENT,
    SCHEMA_STRIPPED_ROOT_KEYS,
)

PRIMITIVE_KINDS = frozenset({"string", "integer", "number", "boolean"})

# Keys that describe a schema node without constraining its values
ANNOTATION_KEYS = frozenset({
    "title", "description", "default", "examples",
    "deprecated", "readOnly", "writeOnly",
})

# Without a "type", these do not restrict which JSON values are accepted
NON_CONSTRAINING_KEYS = ANNOTATION_KEYS | {"format", "$comment"}

REF_PREFIX = f"#/{SCHEMA_DEFINITIONS_KEY}/"


# ============================================================================
# ERRORS
# ============================================================================


class SchemaError(Exception):
    """Base exception for schema derivation errors."""
    pass


class SchemaDerivationError(SchemaError):
    """Raised when a shape cannot be turned into a schema tree."""
    pass


class SchemaSerializationError(SchemaError):
    """Raised when a schema tree cannot be serialized to JSON."""
    pass


# ============================================================================
# TYPE DESCRIPTORS
# ============================================================================


@dataclass(frozen=True)
class Primitive:
    """JSON primitive: one of "string", "integer", "number", "boolean"."""

    kind: str


@dataclass(frozen=True)
class ObjectShape:
    """Named object with fields in declaration order.

    The root shape is emitted inline; nested shapes go under "definitions"
    once and are referenced by name wherever they occur.

    Example:
        >>> ObjectShape("SimpleStruct", {
        ...     "id": Primitive("integer"),
        ...     "name": Primitive("string"),
        ... })
    """

    name: str
    fields: Mapping[str, "TypeDescriptor"] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class OptionalField:
    """Field that may be missing or null; never listed in "required"."""

    inner: "TypeDescriptor"


@dataclass(frozen=True)
class ArrayOf:
    items: "TypeDescriptor"


@dataclass(frozen=True)
class OpaqueValue:
    """Any valid JSON value. Presented to the model as a JSON object."""


@dataclass(frozen=True)
class Ref:
    """Reference to an ObjectShape defined elsewhere in the same tree."""

    name: str


TypeDescriptor = Union[Primitive, ObjectShape, OptionalField, ArrayOf, OpaqueValue, Ref]


# ============================================================================
# DESCRIPTOR -> SCHEMA TREE
# ============================================================================


class _SchemaBuilder:
    """Lowers one descriptor tree; not reusable across roots."""

    def __init__(self, root: ObjectShape):
        self.root = root
        self.shapes: dict[str, ObjectShape] = {}
        self.definitions: dict[str, Any] = {}
        self._collect(root)

    def build(self) -> dict[str, Any]:
        schema = self._object_schema(self.root)
        if self.definitions:
            schema[SCHEMA_DEFINITIONS_KEY] = dict(sorted(self.definitions.items()))
        return schema

    def _collect(self, descriptor: TypeDescriptor) -> None:
        if isinstance(descriptor, ObjectShape):
            if not isinstance(descriptor.name, str) or not descriptor.name:
                raise SchemaDerivationError(f"Object shape needs a name: {descriptor!r}")
            known = self.shapes.get(descriptor.name)
            if known is not None:
                if known != descriptor:
                    raise SchemaDerivationError(
                        f"Two different shapes are named '{descriptor.name}'"
                    )
                return
            self.shapes[descriptor.name] = descriptor
            for child in descriptor.fields.values():
                self._collect(child)
        elif isinstance(descriptor, OptionalField):
            self._collect(descriptor.inner)
        elif isinstance(descriptor, ArrayOf):
            self._collect(descriptor.items)

    def _object_schema(self, shape: ObjectShape) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for field_name, descriptor in shape.fields.items():
            if not isinstance(field_name, str):
                raise SchemaDerivationError(
                    f"Field names must be strings, got {field_name!r} in '{shape.name}'"
                )
            if isinstance(descriptor, OptionalField):
                properties[field_name] = {
                    "anyOf": [self._node(descriptor.inner), {"type": "null"}]
                }
            else:
                properties[field_name] = self._node(descriptor)
                required.append(field_name)

        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema

    def _node(self, descriptor: TypeDescriptor) -> Any:
        if isinstance(descriptor, Primitive):
            if not isinstance(descriptor.kind, str) or descriptor.kind not in PRIMITIVE_KINDS:
                raise SchemaDerivationError(f"Unknown primitive kind {descriptor.kind!r}")
            return {"type": descriptor.kind}
        if isinstance(descriptor, ObjectShape):
            return self._reference(descriptor.name)
        if isinstance(descriptor, Ref):
            if not isinstance(descriptor.name, str) or descriptor.name not in self.shapes:
                raise SchemaDerivationError(f"Reference to undefined shape {descriptor.name!r}")
            return self._reference(descriptor.name)
        if isinstance(descriptor, OptionalField):
            return {"anyOf": [self._node(descriptor.inner), {"type": "null"}]}
        if isinstance(descriptor, ArrayOf):
            return {"type": "array", "items": self._node(descriptor.items)}
        if isinstance(descriptor, OpaqueValue):
            # Lowered to an object node by fix_opaque_values()
            return True
        raise SchemaDerivationError(f"Not a type descriptor: {descriptor!r}")

    def _reference(self, name: str) -> dict[str, str]:
        if name == self.root.name:
            return {"$ref": "#"}
        if name not in self.definitions:
            # Reserve the slot first so self-referencing shapes terminate
            self.definitions[name] = None
            self.definitions[name] = self._object_schema(self.shapes[name])
        return {"$ref": f"{REF_PREFIX}{name}"}


def _descriptor_schema(root: TypeDescriptor) -> dict[str, Any]:
    if not isinstance(root, ObjectShape):
        raise SchemaDerivationError(
            f"Root of a result shape must be an ObjectShape, got {type(root).__name__}"
        )
    return _SchemaBuilder(root).build()


def _model_schema(model: type[BaseModel]) -> dict[str, Any]:
    try:
        schema = model.model_json_schema(ref_template=REF_PREFIX + "{model}")
    except PydanticUserError as exc:
        raise SchemaDerivationError(
            f"Could not generate schema for {model.__name__}: {exc}"
        ) from exc

    definitions = schema.pop("$defs", None)
    if definitions:
        schema[SCHEMA_DEFINITIONS_KEY] = dict(sorted(definitions.items()))
    return schema


# ============================================================================
# POST-PROCESSING
# ============================================================================


def _is_placeholder(node: Any) -> bool:
    if node is True:
        return True
    return isinstance(node, dict) and not (node.keys() - NON_CONSTRAINING_KEYS)


def _object_node(placeholder: Any) -> dict[str, Any]:
    annotations = placeholder if isinstance(placeholder, dict) else {}
    return {**annotations, "type": "object"}


def fix_opaque_values(schema: Any) -> None:
    """Replace "accept anything" placeholders with {"type": "object"} in place.

    Walks properties, array items, anyOf/oneOf/allOf branches and definitions
    at every level. Annotation keys (title, description, default) on a
    placeholder are kept. Non-placeholder nodes are left untouched.

    Example:
        >>> schema = {"type": "object", "properties": {"data": True}}
        >>> fix_opaque_values(schema)
        >>> schema["properties"]["data"]
        {'type': 'object'}
    """
    if not isinstance(schema, dict):
        return

    for key in ("properties", SCHEMA_DEFINITIONS_KEY, "$defs"):
        children = schema.get(key)
        if isinstance(children, dict):
            for name, child in children.items():
                if _is_placeholder(child):
                    children[name] = _object_node(child)
                else:
                    fix_opaque_values(child)

    items = schema.get("items")
    if _is_placeholder(items):
        schema["items"] = _object_node(items)
    else:
        fix_opaque_values(items)

    for key in ("anyOf", "oneOf", "allOf"):
        branches = schema.get(key)
        if isinstance(branches, list):
            for index, branch in enumerate(branches):
                if _is_placeholder(branch):
                    branches[index] = _object_node(branch)
                else:
                    fix_opaque_values(branch)


def serialize_schema(schema: dict[str, Any]) -> str:
    """Drop root metadata keys and pretty-print the schema tree.

    Raises:
        SchemaSerializationError: If the tree holds values JSON cannot encode.
    """
    schema_json = {
        key: value for key, value in schema.items()
        if key not in SCHEMA_STRIPPED_ROOT_KEYS
    }
    try:
        return json.dumps(
            schema_json, indent=SCHEMA_INDENT, ensure_ascii=False, allow_nan=False
        ) + "\n"
    except (TypeError, ValueError) as exc:
        raise SchemaSerializationError(f"Schema is not JSON-serializable: {exc}") from exc


def derive_schema(shape: Union[TypeDescriptor, type[BaseModel]]) -> str:
    """Generate the JSON Schema a model should follow for its answer.

    Args:
        shape: Root ObjectShape descriptor, or a Pydantic BaseModel subclass.

    Returns:
        Pretty-printed (2-space) JSON Schema string, newline-terminated,
        without root-level $schema/title and with opaque-value fields
        declared as objects. Identical input yields identical output.

    Raises:
        SchemaDerivationError: If the shape is malformed or unsupported.
        SchemaSerializationError: If the generated tree is not serializable.

    Example:
        >>> from pydantic import BaseModel
        >>> class Answer(BaseModel):
        ...     text: str
        >>> print(derive_schema(Answer))
        {
          "properties": {
            "text": {
              "title": "Text",
              "type": "string"
            }
          },
          "required": [
            "text"
          ],
          "type": "object"
        }
    """
    try:
        if isinstance(shape, type) and issubclass(shape, BaseModel):
            schema = _model_schema(shape)
        else:
            schema = _descriptor_schema(shape)
        fix_opaque_values(schema)
    except RecursionError as exc:
        raise SchemaDerivationError("Result shape is nested too deeply") from exc

    return serialize_schema(schema)
