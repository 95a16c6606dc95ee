"""
Output formatters for CLI display.

Supports human-readable, JSON, and markdown output modes, for single
results (key/value) and for tables (list of row dicts).
"""

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class OutputFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"
    MARKDOWN = "markdown"


def format_result(
    result: Any,
    fmt: OutputFormat = OutputFormat.HUMAN,
    title: Optional[str] = None,
) -> str:
    """Format a result object for display."""
    if fmt == OutputFormat.JSON:
        return _format_json(result)
    elif fmt == OutputFormat.MARKDOWN:
        return _format_markdown(result, title)
    else:
        return _format_human(result, title)


def format_table(
    rows: Sequence[Dict[str, Any]],
    columns: Sequence[str],
    fmt: OutputFormat = OutputFormat.HUMAN,
    title: Optional[str] = None,
) -> str:
    """Format a list of row dicts, showing only ``columns`` in order."""
    if fmt == OutputFormat.JSON:
        return json.dumps([_to_dict(r) for r in rows], indent=2, default=str)

    headers = [c.replace("_", " ").title() for c in columns]
    body = [[_format_value(_to_dict(r).get(c)) for c in columns] for r in rows]

    lines: List[str] = []
    if fmt == OutputFormat.MARKDOWN:
        if title:
            lines.extend([f"# {title}", ""])
        lines.append("| " + " | ".join(headers) + " |")
        lines.append("|" + "|".join("---" for _ in headers) + "|")
        for cells in body:
            lines.append("| " + " | ".join(cells) + " |")
        return "\n".join(lines)

    if title:
        lines.extend([title, "=" * len(title), ""])
    if not body:
        lines.append("(none)")
        return "\n".join(lines)

    widths = [
        max(len(headers[i]), *(len(cells[i]) for cells in body))
        for i in range(len(headers))
    ]
    lines.append("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    lines.append("  ".join("-" * w for w in widths))
    for cells in body:
        lines.append("  ".join(c.ljust(w) for c, w in zip(cells, widths)))
    return "\n".join(lines)


def _to_dict(result: Any) -> Dict:
    if is_dataclass(result):
        return asdict(result)
    elif isinstance(result, dict):
        return result
    elif hasattr(result, "__dict__"):
        return result.__dict__
    return {"value": str(result)}


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def _format_json(result: Any) -> str:
    return json.dumps(_to_dict(result), indent=2, default=str)


def _format_human(result: Any, title: Optional[str] = None) -> str:
    lines = []
    if title:
        lines.extend([title, "=" * len(title), ""])

    data = _to_dict(result)
    max_key_len = max(len(str(k)) for k in data.keys()) if data else 0

    for key, value in data.items():
        label = key.replace("_", " ").title()
        if isinstance(value, float):
            formatted = f"{value:.2f}" if abs(value) < 1000 else f"{value:,.1f}"
        elif isinstance(value, list):
            formatted = "\n".join(f"  - {v}" for v in value) if value else "(none)"
            if value:
                formatted = "\n" + formatted
        elif isinstance(value, dict):
            formatted = ", ".join(f"{k}: {v}" for k, v in value.items()) if value else "(none)"
        else:
            formatted = _format_value(value)
        lines.append(f"{label:<{max_key_len + 2}}: {formatted}")

    return "\n".join(lines)


def _format_markdown(result: Any, title: Optional[str] = None) -> str:
    lines = []
    if title:
        lines.extend([f"# {title}", ""])

    data = _to_dict(result)
    lines.extend(["| Field | Value |", "|-------|-------|"])

    for key, value in data.items():
        label = key.replace("_", " ").title()
        if isinstance(value, float):
            formatted = f"{value:.2f}"
        elif isinstance(value, list):
            formatted = ", ".join(str(v) for v in value) if value else "-"
        else:
            formatted = _format_value(value)
        lines.append(f"| {label} | {formatted} |")

    return "\n".join(lines)
