"""OpenAPI spec loader and document model."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import requests
import yaml
from openapi_spec_validator import validate
from openapi_spec_validator.validation.exceptions import (
    OpenAPIValidationError,
    ValidatorDetectError,
)

from .errors import SpecLoadError, SpecValidationError

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


@dataclass(eq=False)
class Schema:
    """A schema node.

    Compared by identity: recursive ``$ref``s are resolved into a cyclic
    graph, so field-wise equality would never terminate.
    """

    types: Tuple[str, ...] = ()
    format: str = ""
    example: Any = None
    default: Any = None
    enum: List[Any] = field(default_factory=list)
    minimum: Optional[float] = None
    items: Optional["Schema"] = None
    # None values are properties whose $ref could not be resolved
    properties: Dict[str, Optional["Schema"]] = field(default_factory=dict)
    additional_properties: bool = False


@dataclass
class Parameter:
    """An operation or path-level parameter."""

    name: str
    location: str  # path, query, header, cookie
    required: bool = False
    description: str = ""
    example: Any = None
    schema: Optional[Schema] = None


@dataclass
class MediaType:
    """One content entry of a request body."""

    example: Any = None
    examples: Dict[str, Any] = field(default_factory=dict)
    schema: Optional[Schema] = None


@dataclass
class RequestBody:
    """Request body keyed by content type."""

    content: Dict[str, MediaType] = field(default_factory=dict)
    required: bool = False
    description: str = ""


@dataclass
class SecurityScheme:
    """Security scheme from components.securitySchemes."""

    name: str
    type: str  # apiKey, http, oauth2, openIdConnect, mutualTLS
    location: str = ""  # header, query, cookie (for apiKey)
    scheme: str = ""  # bearer, basic (for http)
    param_name: str = ""  # name of the header/query param


@dataclass
class Operation:
    """A single HTTP method bound to a path."""

    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    # None means "not declared"; an empty list disables auth for this operation
    security: Optional[List[Dict[str, List[str]]]] = None


@dataclass
class PathItem:
    """Operations and shared parameters of one path."""

    operations: Dict[str, Operation] = field(default_factory=dict)
    parameters: List[Parameter] = field(default_factory=list)


@dataclass
class OperationRef:
    """A located operation, keeping its path item for path-level parameters."""

    path: str
    method: str
    operation: Operation
    path_item: PathItem

    def parameters_in(self, location: str) -> List[Parameter]:
        """Path-level then operation-level parameters at ``location``."""
        params = self.path_item.parameters + self.operation.parameters
        return [p for p in params if p.location == location]


@dataclass
class Document:
    """A parsed OpenAPI document."""

    title: str
    version: str
    description: str = ""
    servers: List[str] = field(default_factory=list)
    paths: Dict[str, PathItem] = field(default_factory=dict)
    security: Optional[List[Dict[str, List[str]]]] = None
    security_schemes: Dict[str, SecurityScheme] = field(default_factory=dict)

    @property
    def base_url(self) -> str:
        return self.servers[0] if self.servers else ""


class OpenAPIParser:
    """Parser for OpenAPI 3.x specifications."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def parse(self, source: Union[str, Path]) -> Document:
        """Load, validate and parse an OpenAPI spec from a file path or URL."""
        raw = self._load_spec(source)
        self._validate(raw, source)
        return self.parse_dict(raw)

    def parse_dict(self, raw: dict) -> Document:
        """Build a Document from an already loaded spec mapping."""
        return _DocumentBuilder(raw).build()

    def _load_spec(self, source: Union[str, Path]) -> dict:
        """Load spec from file or URL."""
        if isinstance(source, Path):
            source = str(source)

        try:
            if source.startswith(('http://', 'https://')):
                logger.debug("Fetching spec from %s", source)
                response = requests.get(source, timeout=self.timeout)
                response.raise_for_status()
                raw = self._decode(response.text, source)
            else:
                path = Path(source)
                logger.debug("Reading spec from %s", path)
                raw = self._decode(path.read_text(encoding="utf-8"), path.name)
        except requests.RequestException as e:
            raise SpecLoadError(f"failed to fetch spec: {e}") from e
        except OSError as e:
            raise SpecLoadError(f"failed to read spec: {e}") from e
        except (yaml.YAMLError, ValueError) as e:
            raise SpecLoadError(f"failed to parse spec: {e}") from e

        if not isinstance(raw, dict):
            raise SpecLoadError("failed to parse spec: top level is not a mapping")
        return self._to_json_data(raw)

    def _decode(self, content: str, name: str) -> Any:
        if name.endswith(('.yaml', '.yml')):
            return yaml.safe_load(content)
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            return yaml.safe_load(content)

    def _to_json_data(self, raw: dict) -> dict:
        """Reduce YAML scalars to their JSON equivalents.

        Unquoted YAML keys such as ``200:`` become strings, and dates and
        timestamps become ISO 8601 text.
        """
        try:
            return json.loads(json.dumps(raw, default=_json_default))
        except (TypeError, ValueError) as e:
            raise SpecLoadError(f"failed to parse spec: {e}") from e

    def _validate(self, raw: dict, source: Union[str, Path]) -> None:
        try:
            validate(raw)
        except (OpenAPIValidationError, ValidatorDetectError) as e:
            raise SpecValidationError(f"spec validation failed: {e}") from e
        logger.debug("Spec %s passed validation", source)


def _json_default(value: Any) -> str:
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


class _DocumentBuilder:
    """Turns a raw spec mapping into the Document model, resolving local refs."""

    def __init__(self, spec: dict):
        self.spec = spec
        # schemas by $ref pointer, so recursive references share one node
        self._schemas: Dict[str, Schema] = {}

    def build(self) -> Document:
        info = self.spec.get('info', {})
        servers = [s['url'] for s in self.spec.get('servers', []) if s.get('url')]

        return Document(
            title=info.get('title', 'API'),
            version=info.get('version', '1.0.0'),
            description=info.get('description', ''),
            servers=servers,
            paths=self._parse_paths(self.spec.get('paths') or {}),
            security=self.spec.get('security'),
            security_schemes=self._parse_security_schemes(
                self.spec.get('components', {}).get('securitySchemes', {})
            ),
        )

    def _parse_paths(self, paths: dict) -> Dict[str, PathItem]:
        result = {}

        for path, methods in paths.items():
            item = PathItem(parameters=self._parse_parameters(methods.get('parameters', [])))

            for method, details in methods.items():
                if method.upper() in HTTP_METHODS:
                    item.operations[method.upper()] = self._parse_operation(details)

            result[path] = item

        return result

    def _parse_operation(self, details: dict) -> Operation:
        request_body = None
        if 'requestBody' in details:
            request_body = self._parse_request_body(details['requestBody'])

        return Operation(
            operation_id=details.get('operationId', ''),
            summary=details.get('summary', ''),
            description=details.get('description', ''),
            tags=details.get('tags', []),
            parameters=self._parse_parameters(details.get('parameters', [])),
            request_body=request_body,
            security=details.get('security'),
        )

    def _parse_parameters(self, params: list) -> List[Parameter]:
        result = []

        for param in params:
            if '$ref' in param:
                param = self._resolve_ref(param['$ref'])
                if not param:
                    continue

            result.append(Parameter(
                name=param.get('name', ''),
                location=param.get('in', 'query'),
                required=param.get('required', False),
                description=param.get('description', ''),
                example=param.get('example'),
                schema=self._parse_schema(param.get('schema')),
            ))

        return result

    def _parse_request_body(self, body: dict) -> RequestBody:
        if '$ref' in body:
            body = self._resolve_ref(body['$ref'])

        content = {}
        for content_type, media in (body.get('content') or {}).items():
            media = media or {}
            content[content_type] = MediaType(
                example=media.get('example'),
                examples=self._parse_examples(media.get('examples') or {}),
                schema=self._parse_schema(media.get('schema')),
            )

        return RequestBody(
            content=content,
            required=body.get('required', False),
            description=body.get('description', ''),
        )

    def _parse_examples(self, examples: dict) -> Dict[str, Any]:
        result = {}
        for name, example in examples.items():
            if isinstance(example, dict) and '$ref' in example:
                example = self._resolve_ref(example['$ref'])
            # externalValue-only examples carry nothing to render
            if isinstance(example, dict) and example.get('value') is not None:
                result[name] = example['value']
        return result

    def _parse_schema(self, raw: Optional[dict]) -> Optional[Schema]:
        """Parse a schema object, resolving ``$ref`` pointers."""
        if not isinstance(raw, dict):
            return None

        ref = raw.get('$ref')
        if ref is not None:
            if ref in self._schemas:
                return self._schemas[ref]
            target = self._resolve_ref(ref)
            if not target:
                logger.debug("Unresolved schema reference %s", ref)
                return None
            schema = Schema()
            # registered before filling so self-references find it
            self._schemas[ref] = schema
            self._fill_schema(schema, target)
            return schema

        schema = Schema()
        self._fill_schema(schema, raw)
        return schema

    def _fill_schema(self, schema: Schema, raw: dict) -> None:
        declared = raw.get('type')
        if isinstance(declared, str):
            types = [declared]
        else:
            types = list(declared or [])
        if raw.get('nullable') and 'null' not in types:
            types.append('null')
        schema.types = tuple(types)

        schema.format = raw.get('format', '')
        schema.example = raw.get('example')
        if schema.example is None and raw.get('examples'):
            if isinstance(raw['examples'], list):
                schema.example = raw['examples'][0]
        schema.default = raw.get('default')
        schema.enum = list(raw.get('enum') or [])
        schema.minimum = raw.get('minimum')
        schema.items = self._parse_schema(raw.get('items'))
        schema.properties = {
            name: self._parse_schema(prop)
            for name, prop in (raw.get('properties') or {}).items()
        }
        additional = raw.get('additionalProperties')
        schema.additional_properties = additional is True or isinstance(additional, dict)

    def _parse_security_schemes(self, schemes: dict) -> Dict[str, SecurityScheme]:
        result = {}

        for name, details in schemes.items():
            if '$ref' in details:
                details = self._resolve_ref(details['$ref'])
            scheme_type = details.get('type', '')

            auth = SecurityScheme(name=name, type=scheme_type)

            if scheme_type == 'apiKey':
                auth.location = details.get('in', 'header')
                auth.param_name = details.get('name', '')
            elif scheme_type == 'http':
                auth.scheme = details.get('scheme', '')

            result[name] = auth

        return result

    def _resolve_ref(self, ref: str) -> dict:
        """Resolve a local $ref pointer."""
        if not ref.startswith('#/'):
            return {}

        parts = ref[2:].split('/')
        current = self.spec

        for part in parts:
            part = part.replace('~1', '/').replace('~0', '~')
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return {}

        return current if isinstance(current, dict) else {}
