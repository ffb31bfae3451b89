"""Unit tests for target parsing (local command vs remote URL)."""

from __future__ import annotations

import pytest

from mcphack_cli.exceptions import TargetParseError
from mcphack_cli.target import LocalCommand, RemoteUrl, TargetKind, parse_target, resolve_target_value
from tests.helpers import assert_string_invariants, assert_url_shape

pytestmark = pytest.mark.unit


class TestParseLocalCommand:
    def test_program_and_args(self):
        spec = parse_target("npx -y @modelcontextprotocol/server-everything")
        assert isinstance(spec, LocalCommand)
        assert spec.program == "npx"
        assert spec.args == ("-y", "@modelcontextprotocol/server-everything")
        assert spec.kind() is TargetKind.LOCAL_PROCESS
        assert spec.is_local()
        assert not spec.is_remote()

    def test_quoted_argument_stays_one_token(self):
        spec = parse_target('node "my server.js" --port 3')
        assert isinstance(spec, LocalCommand)
        assert spec.args == ("my server.js", "--port", "3")

    def test_quoted_path_with_space(self):
        spec = parse_target('my-server --path "/tmp/my dir"')
        assert isinstance(spec, LocalCommand)
        assert spec.program == "my-server"
        assert spec.args == ("--path", "/tmp/my dir")

    def test_surrounding_whitespace_is_ignored(self):
        spec = parse_target("   python server.py  ")
        assert isinstance(spec, LocalCommand)
        assert spec.program == "python"
        assert spec.args == ("server.py",)
        assert spec.original == "   python server.py  "

    def test_unknown_scheme_falls_back_to_command(self):
        spec = parse_target("ftp://example.com/resource")
        assert isinstance(spec, LocalCommand)
        assert spec.program == "ftp://example.com/resource"
        assert spec.args == ()

    def test_display(self):
        assert str(parse_target("uvx my-server --stdio")) == "local: uvx my-server --stdio"
        assert str(parse_target("my-server")) == "local: my-server"
        assert_string_invariants(str(parse_target("my-server")), starts_with="local: ")


class TestParseRemote:
    @pytest.mark.parametrize(
        ("raw", "kind"),
        [
            ("https://example.org/mcp", TargetKind.REMOTE_HTTP),
            ("http://127.0.0.1:8080/mcp", TargetKind.REMOTE_HTTP),
            ("wss://mcp.example/ws", TargetKind.REMOTE_WS),
            ("ws://localhost:9000/socket", TargetKind.REMOTE_WS),
        ],
    )
    def test_remote_kinds(self, raw: str, kind: TargetKind):
        spec = parse_target(raw)
        assert isinstance(spec, RemoteUrl)
        assert spec.kind() is kind
        assert spec.is_remote()
        assert not spec.is_local()

    def test_url_parts(self):
        spec = parse_target("https://example.org/mcp")
        assert isinstance(spec, RemoteUrl)
        assert spec.scheme == "https"
        assert_url_shape(str(spec.url), scheme="https", host="example.org", path="/mcp")
        assert str(spec) == "remote: https://example.org/mcp"


class TestParseErrors:
    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_blank(self, raw: str):
        with pytest.raises(TargetParseError, match="empty"):
            parse_target(raw)

    def test_unbalanced_quote(self):
        with pytest.raises(TargetParseError, match="shell splitting"):
            parse_target('node "unterminated')

    def test_empty_program(self):
        with pytest.raises(TargetParseError, match="empty program"):
            parse_target('"" --flag')


class TestResolveTargetValue:
    def test_first_non_blank_wins(self):
        assert resolve_target_value("cli-server", "env-server") == "cli-server"

    def test_blank_counts_as_absent(self):
        assert resolve_target_value("   ", " env-server ") == "env-server"
        assert resolve_target_value(None, "") is None
        assert resolve_target_value() is None
