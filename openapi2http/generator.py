"""HTTP request generator."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from jinja2 import Template

from .errors import RenderError
from .examples import ExampleSynthesizer
from .parser import Document, MediaType, OperationRef, RequestBody

logger = logging.getLogger(__name__)

HOSTNAME_PLACEHOLDER = "{{hostname}}"
JSON_CONTENT_TYPE = "application/json"


def placeholder(name: str) -> str:
    """Template token left for values the generator cannot fill in."""
    return "{{" + name + "}}"


@dataclass
class HTTPRequest:
    """One rendered request."""

    method: str
    url: str
    name: str = ""
    summary: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def to_http(self) -> str:
        """Render the request in .http file format."""
        return HTTP_TEMPLATE.render(request=self)


@dataclass
class HTTPCollection:
    """Requests rendered from a selection of operations."""

    requests: List[HTTPRequest] = field(default_factory=list)
    errors: List[RenderError] = field(default_factory=list)

    def to_http(self) -> str:
        """Render all requests, separated by a blank line."""
        return "\n".join(request.to_http() for request in self.requests)

    def save(self, path: Union[Path, str]) -> None:
        """Save the collection to a .http file."""
        Path(path).write_text(self.to_http(), encoding="utf-8")


class HTTPRequestGenerator:
    """Generates .http requests from operations of a parsed spec."""

    def __init__(self, document: Document, base_url: Optional[str] = None):
        self.document = document
        self.base_url = base_url
        self.synthesizer = ExampleSynthesizer()

    def render(self, op: OperationRef) -> str:
        """Render a single operation as .http text."""
        return self.generate(op).to_http()

    def generate(self, op: OperationRef) -> HTTPRequest:
        """Build the request for an operation.

        Raises RenderError if the request body cannot be serialized.
        """
        url = self._base_url() + self._build_path(op)
        query = self._build_query_string(op)
        if query:
            url += "?" + query

        return HTTPRequest(
            method=op.method,
            url=url,
            name=op.operation.operation_id,
            summary=self._clean_text(op.operation.summary),
            headers=self._build_headers(op),
            body=self._build_request_body(op),
        )

    def generate_collection(self, ops: Iterable[OperationRef]) -> HTTPCollection:
        """Build requests for several operations, keeping their order.

        An operation that fails to render is recorded in ``errors`` and
        does not stop the others.
        """
        collection = HTTPCollection()

        for op in ops:
            try:
                collection.requests.append(self.generate(op))
            except RenderError as e:
                logger.debug("Skipping %s %s: %s", op.method, op.path, e.reason)
                collection.errors.append(e)

        return collection

    def _base_url(self) -> str:
        if self.base_url:
            return self.base_url
        if self.document.servers:
            return self.document.servers[0]
        return HOSTNAME_PLACEHOLDER

    def _build_path(self, op: OperationRef) -> str:
        """Substitute example values into the path template."""
        path = op.path

        for param in op.parameters_in("path"):
            value = placeholder(param.name)

            if param.example is not None:
                value = self._format_value(param.example)
            else:
                example = self.synthesizer.synthesize(param.schema)
                if example is not None:
                    value = self._format_value(example)

            path = path.replace("{" + param.name + "}", value)

        return path

    def _build_query_string(self, op: OperationRef) -> str:
        parts = []

        for param in op.parameters_in("query"):
            value = placeholder(param.name)

            if param.example is not None:
                value = self._format_query_value(param.example)
            else:
                example = self.synthesizer.synthesize(param.schema)
                if example is not None:
                    value = self._format_query_value(example)

            parts.append(f"{param.name}={value}")

        return "&".join(parts)

    def _format_query_value(self, value: Any) -> str:
        # arrays are shown by their first element only
        if isinstance(value, list) and value:
            value = value[0]
        return self._format_value(value)

    def _format_value(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        if isinstance(value, (dict, list)):
            return json.dumps(value, separators=(",", ":"), default=str)
        return str(value)

    def _build_headers(self, op: OperationRef) -> Dict[str, str]:
        headers = {}

        body = op.operation.request_body
        if body is not None and body.content:
            if JSON_CONTENT_TYPE in body.content:
                headers["Content-Type"] = JSON_CONTENT_TYPE
            else:
                headers["Content-Type"] = next(iter(body.content))

        for param in op.parameters_in("header"):
            if param.example is not None:
                headers[param.name] = self._format_value(param.example)
            else:
                headers[param.name] = placeholder(param.name)

        headers.update(self._build_security_headers(op))
        return headers

    def _build_security_headers(self, op: OperationRef) -> Dict[str, str]:
        """Headers for the first scheme of the first security alternative.

        Alternatives are OR-choices, so only one is rendered. Schemes
        combined within that alternative are not rendered either.
        """
        requirements = op.operation.security
        if requirements is None:
            requirements = self.document.security
        if not requirements:
            return {}

        for scheme_name in requirements[0]:
            scheme = self.document.security_schemes.get(scheme_name)
            if scheme is None:
                logger.debug("Unknown security scheme %s", scheme_name)
                continue

            if scheme.type == "apiKey":
                # query and cookie keys are not rendered
                if scheme.location == "header":
                    return {scheme.param_name: placeholder(scheme.param_name)}
            elif scheme.type == "http":
                http_scheme = scheme.scheme.lower()
                if http_scheme == "bearer":
                    return {"Authorization": "Bearer {{token}}"}
                if http_scheme == "basic":
                    return {"Authorization": "Basic {{credentials}}"}
                return {"Authorization": placeholder(scheme.scheme)}
            elif scheme.type in ("oauth2", "openIdConnect"):
                return {"Authorization": "Bearer {{token}}"}
            # mutualTLS is handled by the transport
            return {}

        return {}

    def _select_media_type(self, body: RequestBody) -> Optional[MediaType]:
        if JSON_CONTENT_TYPE in body.content:
            return body.content[JSON_CONTENT_TYPE]
        return next(iter(body.content.values()), None)

    def _build_request_body(self, op: OperationRef) -> Optional[str]:
        body = op.operation.request_body
        if body is None:
            return None

        media_type = self._select_media_type(body)
        if media_type is None:
            return None

        if media_type.example is not None:
            data = media_type.example
        elif media_type.examples:
            data = next(iter(media_type.examples.values()))
        else:
            data = self.synthesizer.synthesize(media_type.schema)

        if data is None:
            return "{}"

        try:
            return json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise RenderError(op.method, op.path, f"cannot serialize request body: {e}") from e

    def _clean_text(self, text: str) -> str:
        """Collapse whitespace so multi-line text fits on one comment line."""
        if not text:
            return ""
        return re.sub(r"\s+", " ", str(text)).strip()


HTTP_TEMPLATE_STR = '''###
{% if request.name %}
# @name {{ request.name }}
{% endif %}
{% if request.summary %}
# {{ request.summary }}
{% endif %}

{{ request.method }} {{ request.url }}
{% for name, value in request.headers.items() %}
{{ name }}: {{ value }}
{% endfor %}
{% if request.body is not none %}

{{ request.body }}
{% endif %}
'''

HTTP_TEMPLATE = Template(HTTP_TEMPLATE_STR, trim_blocks=True, keep_trailing_newline=True)
