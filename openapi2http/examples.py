"""Example value synthesis from OpenAPI schemas."""

from enum import Enum
from typing import Any, Callable, Dict, Optional, Set

from .parser import Schema

FORMAT_EXAMPLES = {
    'date': '2024-01-01',
    'date-time': '2024-01-01T00:00:00Z',
    'email': 'user@example.com',
}


class SchemaType(str, Enum):
    """Primary type of a schema, as used for example synthesis."""

    STRING = 'string'
    INTEGER = 'integer'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    ARRAY = 'array'
    OBJECT = 'object'
    NULL = 'null'
    UNTYPED = ''


# detection order; the first type present in the schema wins
_TYPE_PRIORITY = (
    SchemaType.STRING,
    SchemaType.INTEGER,
    SchemaType.NUMBER,
    SchemaType.BOOLEAN,
    SchemaType.ARRAY,
    SchemaType.OBJECT,
    SchemaType.NULL,
)


def schema_type(schema: Schema) -> SchemaType:
    """Pick the primary type from a schema's declared type set."""
    for candidate in _TYPE_PRIORITY:
        if candidate.value in schema.types:
            return candidate
    return SchemaType.UNTYPED


class ExampleSynthesizer:
    """Builds representative values for schemas.

    Explicit examples win over defaults, defaults over enums, and
    anything else falls back to a fixed value per type. Schemas that are
    already being expanded higher up the stack are not entered again, so
    recursive schemas terminate.
    """

    def __init__(self):
        self._handlers: Dict[SchemaType, Callable[[Schema], Any]] = {
            SchemaType.STRING: self._string,
            SchemaType.INTEGER: self._integer,
            SchemaType.NUMBER: self._number,
            SchemaType.BOOLEAN: self._boolean,
            SchemaType.ARRAY: self._array,
            SchemaType.OBJECT: self._object,
            SchemaType.NULL: self._untyped,
            SchemaType.UNTYPED: self._untyped,
        }
        self._active: Set[int] = set()

    def synthesize(self, schema: Optional[Schema]) -> Any:
        """Return an example value for ``schema``, or None if there is none."""
        if schema is None:
            return None

        if schema.example is not None:
            return schema.example

        if schema.default is not None:
            return schema.default

        if schema.enum:
            return schema.enum[0]

        self._active.add(id(schema))
        try:
            return self._handlers[schema_type(schema)](schema)
        finally:
            self._active.discard(id(schema))

    def _is_recursive(self, schema: Schema) -> bool:
        return id(schema) in self._active

    def _string(self, schema: Schema) -> str:
        return FORMAT_EXAMPLES.get(schema.format, 'string')

    def _integer(self, schema: Schema) -> int:
        if schema.minimum is not None:
            return int(schema.minimum)
        return 0

    def _number(self, schema: Schema) -> float:
        if schema.minimum is not None:
            return float(schema.minimum)
        return 0.0

    def _boolean(self, schema: Schema) -> bool:
        return False

    def _array(self, schema: Schema) -> list:
        if schema.items is None or self._is_recursive(schema.items):
            return []
        return [self.synthesize(schema.items)]

    def _object(self, schema: Schema) -> dict:
        obj = self._properties(schema)

        if not obj and schema.additional_properties:
            return {'key': 'value'}

        return obj

    def _untyped(self, schema: Schema) -> Optional[dict]:
        # no usable type; treat as object only when properties are declared
        if schema.properties:
            return self._properties(schema)
        return None

    def _properties(self, schema: Schema) -> dict:
        obj = {}
        for name, prop in schema.properties.items():
            if prop is None or self._is_recursive(prop):
                continue
            obj[name] = self.synthesize(prop)
        return obj


def synthesize(schema: Optional[Schema]) -> Any:
    """Synthesize an example value for ``schema``."""
    return ExampleSynthesizer().synthesize(schema)
