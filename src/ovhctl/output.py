"""Render command results as short/wide tables, JSON or YAML."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Protocol, Sequence, Tuple, Type

import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text


class OutputFormat(Enum):
    SHORT = "short"
    WIDE = "wide"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"'{value}' is not allowed, only 'short', 'wide', 'json' or 'yaml'"
            ) from None


class TableRow(Protocol):
    """Capability shared by every listable entity."""

    short_columns: Tuple[str, ...]
    wide_columns: Tuple[str, ...]

    def short_row(self) -> List[str]: ...

    def wide_row(self) -> List[str]: ...

    def to_dict(self) -> Dict[str, Any]: ...


def _table(columns: Sequence[str], rows: Sequence[Sequence[str]], title: str = "") -> str:
    table = Table(title=title or None, show_header=True, header_style="bold")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))

    console = Console(width=200, color_system=None)
    with console.capture() as capture:
        console.print(table)
    return capture.get().rstrip("\n")


def render(
    items: Sequence[TableRow],
    row_type: Type[TableRow],
    output: OutputFormat,
    title: str = "",
) -> str:
    """Render `items` (all of `row_type`) in the requested format."""
    if output is OutputFormat.SHORT:
        return _table(row_type.short_columns, [i.short_row() for i in items], title)
    if output is OutputFormat.WIDE:
        return _table(row_type.wide_columns, [i.wide_row() for i in items], title)

    return _dump([i.to_dict() for i in items], output)


def render_changes(
    to_delete: Sequence[TableRow],
    to_create: Sequence[TableRow],
    row_type: Type[TableRow],
    output: OutputFormat,
) -> str:
    """Render a planned change set (used by dry runs)."""
    if output in (OutputFormat.SHORT, OutputFormat.WIDE):
        return "\n".join(
            [
                render(to_delete, row_type, output, title="Records to delete"),
                render(to_create, row_type, output, title="Records to create"),
            ]
        )
    return _dump(
        {
            "delete": [i.to_dict() for i in to_delete],
            "create": [i.to_dict() for i in to_create],
        },
        output,
    )


def _dump(data: Any, output: OutputFormat) -> str:
    if output is OutputFormat.JSON:
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False).rstrip("\n")
