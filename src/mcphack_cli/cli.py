"""Command line interface for mcp-hack.

Usage:
  # Enumerate the tools of a local stdio server
  mcp-hack list tools -t "npx -y @modelcontextprotocol/server-everything"

  # Inspect one tool (case-insensitive), or pick one interactively
  mcp-hack get tool echo
  mcp-hack get tool

  # Invoke a tool
  mcp-hack exec tool add --param a=1 --param b=2 --json
  mcp-hack exec tool add --param-file params.yaml --interactive

  # Fuzz one parameter with a wordlist
  mcp-hack fuzz tool read_file --param "path=FUZZ" -w common.txt

``MCP_TARGET`` is used when no ``--target`` is given.
"""

from __future__ import annotations

import json
import logging
import sys

from typing import Any, NoReturn

import click

from mcphack_cli import __version__
from mcphack_cli import format as fmt
from mcphack_cli.bridge import SessionFactory, open_session
from mcphack_cli.config import ConfigManager, RuntimeConfig
from mcphack_cli.exceptions import InvocationError, McpHackError, ParameterError, TargetParseError
from mcphack_cli.executor import ToolList, fetch_tools, find_tool_case_insensitive, invoke_tool, run_async
from mcphack_cli.fuzz import DEFAULT_PLACEHOLDER, fuzz_tool, read_wordlist
from mcphack_cli.mcp_utils import DebugLogger
from mcphack_cli.models import ToolDescriptor
from mcphack_cli.params import collect_parameters, read_param_file
from mcphack_cli.subject import Subject
from mcphack_cli.target import TargetSpec, parse_target

logger = logging.getLogger(__name__)

NO_TARGET_NOTE = "no target specified; use --target or MCP_TARGET"
NO_TARGET_ERROR = "no target specified (use --target or MCP_TARGET)"
RETRY_HINT = "Re-run with --json for machine-readable output or add --raw for full result payload (if available)."

SUBJECT_CHOICE = click.Choice(Subject.names(), case_sensitive=False)


def _get_opts(ctx: click.Context) -> dict[str, Any]:
    """Global state from context (set by main group)."""
    return ctx.obj or {}


def _config(ctx: click.Context) -> RuntimeConfig:
    return _get_opts(ctx).get("config") or RuntimeConfig()


def _session_factory(ctx: click.Context) -> SessionFactory:
    return _get_opts(ctx).get("session_factory") or open_session


def _debug(ctx: click.Context) -> DebugLogger:
    return DebugLogger.from_config(_config(ctx))


def _subject(value: str) -> Subject:
    subject = Subject.from_str_ci(value)
    if subject is None:
        raise click.BadParameter(f"expected one of: {', '.join(Subject.names())}")
    return subject


def _echo_json(data: Any, pretty: bool = True) -> None:
    click.echo(fmt.json_dumps(data, pretty=pretty))


def _fail(
    ctx: click.Context,
    message: str,
    *,
    as_json: bool,
    title: str,
    elapsed_ms: int | None = None,
) -> NoReturn:
    """Render an error document or panel and exit with status 1."""
    if elapsed_ms is not None:
        logger.info("%s after %d ms: %s", title, elapsed_ms, message)
    if as_json:
        _echo_json({"status": "error", "error": message})
    else:
        style = _config(ctx).style
        console = fmt.make_console(style)
        if elapsed_ms is not None:
            title = f"{title} ({elapsed_ms} ms)"
        console.print(fmt.error_panel(title, message, style))
        console.print(fmt.line("info", "dim", RETRY_HINT, style))
    sys.exit(1)


def _parse_or_fail(ctx: click.Context, target: str, *, as_json: bool, title: str) -> TargetSpec:
    try:
        return parse_target(target)
    except TargetParseError as e:
        _fail(ctx, f"Failed to parse target: '{target}': {e}", as_json=as_json, title=title)


def _fetch_or_fail(ctx: click.Context, spec: TargetSpec, *, as_json: bool, title: str) -> ToolList:
    try:
        return run_async(fetch_tools(spec, session_factory=_session_factory(ctx), debug=_debug(ctx)))
    except InvocationError as e:
        _fail(ctx, str(e), as_json=as_json, title=title, elapsed_ms=e.elapsed_ms)


def _parameters_json(tool: ToolDescriptor) -> list[dict[str, Any]]:
    return [param.model_dump() for param in tool.parameters()]


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.option("-t", "--target", help="Default target (local command or URL); falls back to MCP_TARGET")
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    metavar="KEY=VALUE",
    help="Extra header for remote transports (repeatable; reserved)",
)
@click.version_option(__version__, "--version", "-V", prog_name="mcp-hack")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: int,
    quiet: bool,
    target: str | None,
    headers: tuple[str, ...],
) -> None:
    """mcp-hack - inspect, invoke and fuzz the tools of an MCP server."""
    try:
        config = ConfigManager().build(verbose=verbose, quiet=quiet, target=target, headers=headers)
    except ParameterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    ConfigManager.configure_logging(config)

    if config.target is not None:
        try:
            spec = parse_target(config.target)
        except TargetParseError as e:
            click.echo(f"Invalid target '{config.target}': {e}", err=True)
            sys.exit(2)
        logger.debug("global target: %s (%s)", spec, spec.kind().value)

    obj = ctx.ensure_object(dict)
    obj["config"] = config
    obj.setdefault("session_factory", open_session)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@main.command("list", help="Enumerate tools (tools|tool); resources and prompts are placeholders")
@click.argument("subject", type=SUBJECT_CHOICE)
@click.option("-t", "--target", "target_override", help="Target for this command (overrides global)")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of human-readable text")
@click.pass_context
def list_cmd(ctx: click.Context, subject: str, target_override: str | None, as_json: bool) -> None:
    selected = _subject(subject)
    if not selected.is_implemented():
        if as_json:
            _echo_json(
                {
                    "status": "ok",
                    "subject": selected.value,
                    "count": 0,
                    "items": [],
                    "note": "listing for this subject not implemented yet",
                },
            )
        else:
            click.echo(f"{selected}: listing not implemented (0 items)")
        return

    target = _config(ctx).effective_target(target_override)
    if target is None:
        if as_json:
            _echo_json({"status": "ok", "subject": "tools", "target": None, "count": 0, "tools": [], "note": NO_TARGET_NOTE})
        else:
            click.echo("No target specified (use --target or set MCP_TARGET).")
            click.echo("Tools (0)")
        return

    spec = _parse_or_fail(ctx, target, as_json=as_json, title="List Error")
    if spec.is_remote():
        if as_json:
            _echo_json(
                {
                    "status": "ok",
                    "subject": "tools",
                    "target": target,
                    "count": 0,
                    "tools": [],
                    "note": "remote tool enumeration not implemented yet",
                },
            )
        else:
            click.echo(f"Tools (0) - target: {target} (remote enumeration not implemented)")
        return

    tool_list = _fetch_or_fail(ctx, spec, as_json=as_json, title="List Error")
    if as_json:
        _echo_json(
            {
                "status": "ok",
                "subject": "tools",
                "target": target,
                "elapsed_ms": tool_list.elapsed_ms,
                "count": tool_list.count(),
                "tools": [{"name": t.name, "description": t.description or ""} for t in tool_list],
            },
        )
        return

    style = _config(ctx).style
    console = fmt.make_console(style)
    title = f"{fmt.emoji('list', style)} Tools ({tool_list.count()})".strip()
    console.print(fmt.box_header(title, f"target={target} • {tool_list.elapsed_ms} ms", style))
    if not tool_list.count():
        console.print(fmt.line("info", "dim", "(none)", style))
        return

    rows = [
        [
            str(idx),
            tool.name,
            fmt.param_summary(tool),
            fmt.truncate_ellipsis(fmt.one_line(tool.description), fmt.DESCRIPTION_LIMIT),
        ]
        for idx, tool in enumerate(tool_list, start=1)
    ]
    console.print(fmt.table(["#", "NAME", "PARAMS", "DESCRIPTION"], rows, style))
    console.print()
    console.print(fmt.line("info", "dim", "Use `mcp-hack get tool <name>` for detailed info on a single tool", style))


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


def _select_tool_interactively(tools: list[ToolDescriptor]) -> str:
    """Numbered menu on stderr; accepts a number or a typed tool name."""
    click.echo("Select a tool:", err=True)
    for idx, tool in enumerate(tools, start=1):
        click.echo(f"  [{idx}] {tool.name}", err=True)
    answer = click.prompt(
        f"Enter number (1-{len(tools)})",
        default="",
        show_default=False,
        err=True,
    ).strip()
    if answer.isdigit() and 1 <= int(answer) <= len(tools):
        return tools[int(answer) - 1].name
    if not answer:
        raise ParameterError("invalid selection")
    return answer


def _print_tool_detail(console: Any, tool: ToolDescriptor, style: Any, *, indent: str = "") -> None:
    console.print(f"{indent}Description: {tool.description or '<none>'}", markup=False)
    rows = fmt.parameter_rows(tool)
    if not rows:
        console.print(f"{indent}Parameters: (none)", markup=False)
        return
    console.print(fmt.table(["NAME", "TYPE", "REQ", "DESCRIPTION"], rows, style))


@main.command("get", help="Show tool details (tools = all, tool = one by NAME or interactive pick)")
@click.argument("subject", type=SUBJECT_CHOICE)
@click.argument("name", required=False)
@click.option("-t", "--target", "target_override", help="Target for this command (overrides global)")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of human-readable text")
@click.pass_context
def get_cmd(
    ctx: click.Context,
    subject: str,
    name: str | None,
    target_override: str | None,
    as_json: bool,
) -> None:
    selected = _subject(subject)
    if not selected.is_implemented():
        if as_json:
            _echo_json(
                {
                    "status": "ok",
                    "subject": selected.value,
                    "count": 0,
                    "items": [],
                    "note": "get for this subject not implemented yet",
                },
            )
        else:
            click.echo(f"{selected}: detailed retrieval not implemented (0 items)")
        return

    target = _config(ctx).effective_target(target_override)
    if selected.is_singular_tool():
        _get_single_tool(ctx, target, name, as_json)
    else:
        _get_all_tools(ctx, target, as_json)


def _get_all_tools(ctx: click.Context, target: str | None, as_json: bool) -> None:
    if target is None:
        if as_json:
            _echo_json({"status": "ok", "subject": "tools", "target": None, "count": 0, "tools": [], "note": NO_TARGET_NOTE})
        else:
            click.echo("No target specified (use --target or set MCP_TARGET).")
            click.echo("Tools: (none)")
        return

    spec = _parse_or_fail(ctx, target, as_json=as_json, title="Get Error")
    if spec.is_remote():
        if as_json:
            _echo_json(
                {
                    "status": "ok",
                    "subject": "tools",
                    "target": target,
                    "count": 0,
                    "tools": [],
                    "note": "remote tool retrieval not implemented yet",
                },
            )
        else:
            click.echo(f"(remote) Detailed tool retrieval not implemented for {target}")
        return

    tool_list = _fetch_or_fail(ctx, spec, as_json=as_json, title="Get Error")
    if as_json:
        _echo_json(
            {
                "status": "ok",
                "subject": "tools",
                "target": target,
                "elapsed_ms": tool_list.elapsed_ms,
                "count": tool_list.count(),
                "tools": [
                    {"name": t.name, "description": t.description or "", "parameters": _parameters_json(t)}
                    for t in tool_list
                ],
            },
        )
        return

    style = _config(ctx).style
    console = fmt.make_console(style)
    title = f"{fmt.emoji('list', style)} Tools Detail ({tool_list.count()})".strip()
    console.print(fmt.box_header(title, f"target={target} • {tool_list.elapsed_ms} ms", style))
    if not tool_list.count():
        console.print("(none)")
        return
    for idx, tool in enumerate(tool_list, start=1):
        console.print()
        console.print(f"#{idx}: {tool.name}", markup=False)
        _print_tool_detail(console, tool, style, indent="  ")


def _get_single_tool(ctx: click.Context, target: str | None, name: str | None, as_json: bool) -> None:
    if target is None:
        if as_json:
            _echo_json({"status": "ok", "subject": "tool", "target": None, "tool": None, "note": NO_TARGET_NOTE})
        else:
            click.echo("No target specified (use --target or MCP_TARGET).")
        return

    spec = _parse_or_fail(ctx, target, as_json=as_json, title="Get Error")
    if spec.is_remote():
        if as_json:
            _echo_json(
                {
                    "status": "ok",
                    "subject": "tool",
                    "target": target,
                    "tool": None,
                    "note": "remote single-tool retrieval not implemented yet",
                },
            )
        else:
            click.echo(f"(remote) Single tool retrieval not implemented for {target}")
        return

    tool_list = _fetch_or_fail(ctx, spec, as_json=as_json, title="Get Error")
    if not tool_list.count():
        if as_json:
            _echo_json({"status": "ok", "subject": "tool", "target": target, "tool": None, "note": "no tools"})
        else:
            click.echo("No tools available.")
        return

    if name is None:
        try:
            name = _select_tool_interactively(tool_list.tools)
        except ParameterError as e:
            _fail(ctx, str(e), as_json=as_json, title="Get Error")

    tool = find_tool_case_insensitive(tool_list, name)
    if tool is None:
        if as_json:
            _echo_json(
                {
                    "status": "error",
                    "error": "tool not found",
                    "requested": name,
                    "subject": "tool",
                    "target": target,
                },
            )
        else:
            click.echo(f"Tool '{name}' not found.")
        sys.exit(1)

    if as_json:
        _echo_json(
            {
                "status": "ok",
                "subject": "tool",
                "target": target,
                "elapsed_ms": tool_list.elapsed_ms,
                "name": tool.name,
                "tool": tool.to_json(),
                "parameters": _parameters_json(tool),
            },
        )
        return

    style = _config(ctx).style
    console = fmt.make_console(style)
    title = f"{fmt.emoji('tool', style)} Tool: {tool.name}".strip()
    console.print(fmt.box_header(title, f"target={target} • {tool_list.elapsed_ms} ms", style))
    _print_tool_detail(console, tool, style)


# ---------------------------------------------------------------------------
# exec / fuzz shared checks
# ---------------------------------------------------------------------------


def _check_tool_subject(ctx: click.Context, subject: str, command: str, as_json: bool, title: str) -> None:
    selected = _subject(subject)
    if selected is Subject.TOOLS:
        if as_json:
            click.echo(json.dumps({"warning": "subject 'tools' is deprecated; use 'tool'"}), err=True)
        else:
            style = _config(ctx).style
            fmt.make_console(style).print(fmt.line("info", "dim", "Subject 'tools' is deprecated; use 'tool'", style))
    elif not selected.is_singular_tool():
        _fail(ctx, f"{command} currently supports only subject 'tool'", as_json=as_json, title=title)


def _local_spec_or_fail(
    ctx: click.Context,
    target_override: str | None,
    command: str,
    as_json: bool,
    title: str,
) -> tuple[str, TargetSpec]:
    target = _config(ctx).effective_target(target_override)
    if target is None:
        _fail(ctx, NO_TARGET_ERROR, as_json=as_json, title=title)
    spec = _parse_or_fail(ctx, target, as_json=as_json, title=title)
    if not spec.is_local():
        _fail(ctx, f"remote {command} not implemented yet", as_json=as_json, title=title)
    return target, spec


# ---------------------------------------------------------------------------
# exec
# ---------------------------------------------------------------------------


@main.command("exec", help="Invoke one tool ('tool'; 'tools' is a deprecated alias)")
@click.argument("subject", type=SUBJECT_CHOICE)
@click.argument("tool_name", metavar="TOOL")
@click.option("-t", "--target", "target_override", help="Target for this command (overrides global)")
@click.option("--param", "params", multiple=True, metavar="KEY=VALUE", help="Tool parameter (repeatable)")
@click.option(
    "--param-file",
    type=click.Path(dir_okay=False),
    help="JSON or YAML object of parameters (--param wins on conflicts)",
)
@click.option("--interactive", is_flag=True, help="Prompt for missing required parameters")
@click.option("--raw", is_flag=True, help="Include the full call result instead of a summary")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of human-readable text")
@click.pass_context
def exec_cmd(
    ctx: click.Context,
    subject: str,
    tool_name: str,
    target_override: str | None,
    params: tuple[str, ...],
    param_file: str | None,
    interactive: bool,
    raw: bool,
    as_json: bool,
) -> None:
    title = "Exec Error"
    _check_tool_subject(ctx, subject, "exec", as_json, title)
    tool_name = tool_name.strip()
    if not tool_name:
        _fail(ctx, "tool name cannot be empty", as_json=as_json, title=title)
    target, spec = _local_spec_or_fail(ctx, target_override, "exec", as_json, title)

    try:
        provided = collect_parameters(params, param_file)
    except McpHackError as e:
        _fail(ctx, str(e), as_json=as_json, title=title)

    try:
        result = run_async(
            invoke_tool(
                spec,
                tool_name,
                provided,
                interactive=interactive,
                session_factory=_session_factory(ctx),
                debug=_debug(ctx),
            ),
        )
    except InvocationError as e:
        _fail(ctx, str(e), as_json=as_json, title=title, elapsed_ms=e.elapsed_ms)

    if as_json:
        doc: dict[str, Any] = {
            "status": "ok",
            "subject": "tool",
            "tool": result.tool,
            "target": target,
            "elapsed_ms": result.elapsed_ms,
            "arguments": result.arguments,
        }
        if raw:
            doc["result"] = result.raw()
        else:
            doc["result_summary"] = result.summary()
        _echo_json(doc)
        return

    style = _config(ctx).style
    console = fmt.make_console(style)
    header = f"{fmt.emoji('success', style)} Exec Success ({result.tool})".strip()
    console.print(fmt.box_header(header, f"target={target} • {result.elapsed_ms} ms", style, role="success"))
    if result.arguments:
        rows = [[key, fmt.value_text(value)] for key, value in sorted(result.arguments.items())]
        console.print(fmt.styled("accent", "Arguments:", style))
        console.print(fmt.table(["NAME", "VALUE"], rows, style))
    else:
        console.print(fmt.line("info", "dim", "No arguments supplied", style))
    console.print()

    if raw:
        console.print(fmt.line("info", "accent", "Raw Result:", style))
        console.print(fmt.json_dumps(result.raw()), markup=False)
    else:
        console.print(fmt.line("info", "accent", "Result Summary:", style))
        console.print(fmt.json_dumps(result.summary()), markup=False)
        console.print()
        console.print(fmt.line("info", "dim", "Use --raw to see full call result payload", style))


# ---------------------------------------------------------------------------
# fuzz
# ---------------------------------------------------------------------------


@main.command("fuzz", help="Invoke one tool once per wordlist entry, substituting a placeholder in --param")
@click.argument("subject", type=SUBJECT_CHOICE)
@click.argument("tool_name", metavar="TOOL")
@click.option("-w", "--wordlist", required=True, type=click.Path(dir_okay=False), help="File with one word per line")
@click.option(
    "-p",
    "--placeholder",
    default=DEFAULT_PLACEHOLDER,
    show_default=True,
    help="Text replaced by each word in --param keys and values",
)
@click.option("-t", "--target", "target_override", help="Target for this command (overrides global)")
@click.option("--param", "params", multiple=True, metavar="KEY=VALUE", help="Tool parameter (repeatable)")
@click.option("--param-file", type=click.Path(dir_okay=False), help="JSON or YAML object of fixed parameters")
@click.option("--raw", is_flag=True, help="Include the full call result instead of a summary")
@click.option("--json", "as_json", is_flag=True, help="Emit one JSON record per request")
@click.pass_context
def fuzz_cmd(
    ctx: click.Context,
    subject: str,
    tool_name: str,
    wordlist: str,
    placeholder: str,
    target_override: str | None,
    params: tuple[str, ...],
    param_file: str | None,
    raw: bool,
    as_json: bool,
) -> None:
    title = "Fuzz Error"
    _check_tool_subject(ctx, subject, "fuzz", as_json, title)
    tool_name = tool_name.strip()
    if not tool_name:
        _fail(ctx, "tool name cannot be empty", as_json=as_json, title=title)
    if not placeholder:
        _fail(ctx, "placeholder cannot be empty", as_json=as_json, title=title)
    target, spec = _local_spec_or_fail(ctx, target_override, "fuzz", as_json, title)

    try:
        file_params = read_param_file(param_file) if param_file is not None else None
        words = read_wordlist(wordlist)
    except McpHackError as e:
        _fail(ctx, str(e), as_json=as_json, title=title)

    style = _config(ctx).style
    console = fmt.make_console(style)
    if not as_json:
        console.print(
            fmt.line("info", "accent", f"Starting fuzz session: {len(words)} requests for tool '{tool_name}'", style),
        )

    records = fuzz_tool(
        spec,
        tool_name,
        words,
        params,
        file_params=file_params,
        placeholder=placeholder,
        session_factory=_session_factory(ctx),
        debug=_debug(ctx),
    )
    for record in records:
        if as_json:
            _echo_json(record.to_json(tool=tool_name, target=target, raw=raw), pretty=False)
            continue
        prefix = f"Request {record.request_index + 1}/{record.total_requests}: word='{record.word}' -> "
        if record.ok:
            out = fmt.line("success", "", prefix, style)
            out.append(json.dumps(record.result.summary(), ensure_ascii=False))
        else:
            out = fmt.line("error", "", prefix, style)
            out.append_text(fmt.styled("error", record.error or "", style))
        console.print(out)
