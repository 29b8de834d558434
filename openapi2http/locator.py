"""Locating and listing operations in a parsed spec."""

from typing import Iterator, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .parser import HTTP_METHODS, Document, OperationRef

METHOD_STYLES = {
    "GET": "blue",
    "POST": "green",
    "PUT": "bright_yellow",
    "PATCH": "bright_green",
    "DELETE": "red",
}


def iter_operations(document: Document) -> Iterator[OperationRef]:
    """Yield every operation, paths in document order, methods in fixed order."""
    for path, item in document.paths.items():
        for method in HTTP_METHODS:
            operation = item.operations.get(method)
            if operation is not None:
                yield OperationRef(path=path, method=method, operation=operation, path_item=item)


def find_operations(
    document: Document,
    operation_id: Optional[str] = None,
    path: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[OperationRef]:
    """Find operations matching all of the given filters.

    Filters left as None (or empty) match everything.
    """
    results = []

    for ref in iter_operations(document):
        if path and ref.path != path:
            continue
        if operation_id and ref.operation.operation_id != operation_id:
            continue
        if tag and tag not in ref.operation.tags:
            continue
        results.append(ref)

    return results


def list_operations(document: Document, console: Console) -> None:
    """Write a table of all operations to ``console``."""
    table = Table(title="available operations", title_justify="left")
    table.add_column("METHOD")
    table.add_column("PATH")
    table.add_column("OPERATIONID", style="bold")
    table.add_column("SUMMARY")

    refs = sorted(iter_operations(document), key=lambda ref: ref.path)
    for ref in refs:
        # Text cells so brackets in paths or summaries are not read as markup
        table.add_row(
            Text(ref.method, style=METHOD_STYLES.get(ref.method, "")),
            Text(ref.path),
            Text(ref.operation.operation_id or "(no id)"),
            Text(ref.operation.summary or "(no summary)"),
        )

    console.print(table)
