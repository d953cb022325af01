"""Plain-text and JSON rendering of activity rows for the command line."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Sequence

from core.models import ActiveResult, ActiveRow, TreeRow

INDENT = "  "
MAX_TEXT_CHARS = 160


def _clip(text: str) -> str:
    if len(text) <= MAX_TEXT_CHARS:
        return text
    return text[: MAX_TEXT_CHARS - 3].rstrip() + "..."


def _format_active_row(row: ActiveRow) -> str:
    marker = "*" if row.active else " "
    header = f"{row.age:>4} {marker} {row.by or '-'} [{row.id}]"
    if row.second_chance:
        header += " (second chance)"
    if not row.text:
        return f"{INDENT * row.depth}{header}"
    return f"{INDENT * row.depth}{header} {_clip(row.text)}"


def render_active_text(result: ActiveResult) -> str:
    """Indented tree; inert nodes keep their place without text."""

    lines = []
    if result.second_chance_failed:
        lines.append("(front page unavailable; second-chance times not applied)")
    lines.extend(_format_active_row(row) for row in result.rows)
    return "\n".join(lines)


def render_tree_text(rows: Sequence[TreeRow]) -> str:
    return "\n".join(
        f"{INDENT * row.depth}{row.by or '-'} [{row.id}] {_clip(row.text)}".rstrip() for row in rows
    )


_OMIT_WHEN_EMPTY = ("by", "text", "active", "second_chance")


def _drop_empty(payload: dict) -> dict:
    return {
        key: value
        for key, value in payload.items()
        if key not in _OMIT_WHEN_EMPTY or value
    }


def render_active_json(result: ActiveResult) -> str:
    payload = {
        "rows": [_drop_empty(asdict(row)) for row in result.rows],
        "second_chance_failed": result.second_chance_failed,
    }
    return json.dumps(payload, ensure_ascii=False)


def render_tree_json(rows: Sequence[TreeRow]) -> str:
    return json.dumps([_drop_empty(asdict(row)) for row in rows], ensure_ascii=False)
