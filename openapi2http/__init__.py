"""openapi2http - Generate .http request files from OpenAPI specs."""

__version__ = "0.1.0"

from .errors import (
    NoOperationsFound,
    Openapi2HttpError,
    RenderError,
    SpecLoadError,
    SpecValidationError,
)
from .examples import ExampleSynthesizer, SchemaType, synthesize
from .generator import HTTPCollection, HTTPRequest, HTTPRequestGenerator
from .locator import find_operations, list_operations
from .parser import Document, OpenAPIParser, OperationRef

__all__ = [
    "OpenAPIParser",
    "Document",
    "OperationRef",
    "find_operations",
    "list_operations",
    "ExampleSynthesizer",
    "SchemaType",
    "synthesize",
    "HTTPRequestGenerator",
    "HTTPRequest",
    "HTTPCollection",
    "Openapi2HttpError",
    "SpecLoadError",
    "SpecValidationError",
    "NoOperationsFound",
    "RenderError",
]
