"""Human and JSON output helpers.

Human output goes through rich (boxed headers, tables, colored text); JSON
output is plain :func:`json.dumps` and never touches rich so it stays free of
ANSI codes. Nothing here decides *what* to print, only how it looks.
"""

from __future__ import annotations

import json

from collections.abc import Sequence
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mcphack_cli.config import StyleOptions
from mcphack_cli.models import ToolDescriptor

ROLE_STYLES = {
    "primary": "bold cyan",
    "secondary": "grey70",
    "accent": "magenta",
    "success": "green",
    "error": "bold red",
    "dim": "dim",
}

EMOJI = {
    "success": "✔",
    "error": "✖",
    "info": "ℹ",
    "tool": "🛠",
    "list": "📜",
}

PARAM_SUMMARY_LIMIT = 8
DESCRIPTION_LIMIT = 90


def make_console(style: StyleOptions) -> Console:
    return Console(
        no_color=not style.use_color,
        width=style.width,
        highlight=False,
        emoji=False,
        soft_wrap=False,
    )


def emoji(tag: str, style: StyleOptions) -> str:
    if not style.use_emoji:
        return ""
    return EMOJI.get(tag, "")


def styled(role: str, text: str, style: StyleOptions) -> Text:
    """Text in a semantic role color (plain when color is disabled)."""
    if not style.use_color:
        return Text(text)
    return Text(text, style=ROLE_STYLES.get(role, ""))


def line(tag: str, role: str, text: str, style: StyleOptions) -> Text:
    """``<emoji> <text>`` with the text in ``role`` color."""
    prefix = emoji(tag, style)
    out = Text(f"{prefix} " if prefix else "")
    out.append_text(styled(role, text, style))
    return out


def box_header(title: str, subtitle: str | None, style: StyleOptions, role: str = "primary") -> Panel:
    body = styled(role, title, style)
    if subtitle:
        body.append("  ")
        body.append_text(styled("secondary", subtitle, style))
    return Panel(body, box=box.SQUARE, expand=False, padding=(0, 1))


def table(headers: Sequence[str], rows: Sequence[Sequence[str]], style: StyleOptions) -> Table:
    tbl = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False, header_style="bold" if style.use_color else "")
    for header in headers:
        tbl.add_column(header, overflow="ellipsis")
    for row in rows:
        tbl.add_row(*(Text(cell) for cell in row))
    return tbl


def truncate_ellipsis(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    if max_chars <= 3:
        return text[:max_chars]
    return text[: max_chars - 3] + "..."


def one_line(text: str | None) -> str:
    return (text or "").replace("\r", " ").replace("\n", " ")


def param_summary(tool: ToolDescriptor, limit: int = PARAM_SUMMARY_LIMIT) -> str:
    """``name:type`` pairs for the first ``limit`` properties, ``-`` when none."""
    params = tool.parameters()
    if not params:
        return "-"
    pairs = [f"{p.name}:{p.type}" for p in params[:limit]]
    if len(params) > limit:
        pairs.append("…")
    return ", ".join(pairs)


def parameter_rows(tool: ToolDescriptor) -> list[list[str]]:
    return [
        [p.name, p.type, "yes" if p.required else "no", p.description or "-"]
        for p in tool.parameters()
    ]


def value_text(value: Any) -> str:
    """Strings as-is, everything else as compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def json_dumps(data: Any, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def error_panel(title: str, message: str, style: StyleOptions) -> Panel:
    body = styled("primary", f"{emoji('error', style)} {title}".strip(), style)
    body.append("\n")
    body.append_text(styled("error", message, style))
    return Panel(body, box=box.SQUARE, expand=False, padding=(0, 1), border_style="red" if style.use_color else "")
