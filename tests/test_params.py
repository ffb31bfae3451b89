"""Unit tests for --param pairs, parameter files and interactive prompts."""

from __future__ import annotations

import json

from pathlib import Path

import pytest

from mcphack_cli.exceptions import ParameterError
from mcphack_cli.models import InputSchema
from mcphack_cli.params import (
    collect_parameters,
    merge_file_params,
    parse_param_pairs,
    prompt_for_missing_required,
    read_param_file,
    split_param_pair,
    substitute_placeholder,
)
from tests.helpers import assert_mapping_invariants

pytestmark = pytest.mark.unit


class TestSplitParamPair:
    def test_splits_on_first_equals(self):
        assert split_param_pair("query=a=b") == ("query", "a=b")

    def test_trims_key_and_value(self):
        assert split_param_pair("  name =  value ") == ("name", "value")

    def test_empty_value_is_allowed(self):
        assert split_param_pair("flag=") == ("flag", "")

    def test_missing_equals(self):
        with pytest.raises(ParameterError, match=r"expected KEY=VALUE"):
            split_param_pair("novalue")

    def test_empty_key(self):
        with pytest.raises(ParameterError, match=r"empty key"):
            split_param_pair(" =value")


class TestParseParamPairs:
    def test_last_duplicate_wins(self):
        assert parse_param_pairs(["a=1", "b=2", "a=3"]) == {"a": "3", "b": "2"}

    def test_inserts_into_existing_mapping(self):
        provided = {"a": "old"}
        parse_param_pairs(["a=new"], provided)
        assert provided == {"a": "new"}


class TestReadParamFile:
    def test_json_values_are_stringified(self, tmp_path: Path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"a": 1, "b": "x", "c": True, "d": [1, 2], "e": None}), encoding="utf-8")
        params = read_param_file(path)
        assert params == {"a": "1", "b": "x", "c": "true", "d": "[1,2]", "e": "null"}
        assert_mapping_invariants(params, expected_keys=["a", "b"])

    @pytest.mark.parametrize("name", ["params.yaml", "params.yml", "PARAMS.YAML"])
    def test_yaml_by_extension(self, tmp_path: Path, name: str):
        path = tmp_path / name
        path.write_text("count: 3\nlabel: hello\nratio: 0.5\n", encoding="utf-8")
        assert read_param_file(path) == {"count": "3", "label": "hello", "ratio": "0.5"}

    def test_yaml_dates_stay_as_written(self, tmp_path: Path):
        path = tmp_path / "params.yaml"
        path.write_text("since: 2024-01-01\nat: 2024-01-01T10:00:00Z\nwindow: [2024-01-01]\n", encoding="utf-8")
        assert read_param_file(path) == {
            "since": "2024-01-01",
            "at": "2024-01-01T10:00:00Z",
            "window": '["2024-01-01"]',
        }

    def test_unknown_extension_parsed_as_json(self, tmp_path: Path):
        path = tmp_path / "params.txt"
        path.write_text('{"k": "v"}', encoding="utf-8")
        assert read_param_file(path) == {"k": "v"}

    def test_root_must_be_object(self, tmp_path: Path):
        path = tmp_path / "params.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ParameterError, match="root must be an object"):
            read_param_file(path)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "params.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParameterError, match="failed to parse JSON"):
            read_param_file(path)

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "params.yaml"
        path.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(ParameterError, match="failed to parse YAML"):
            read_param_file(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ParameterError, match="failed to read"):
            read_param_file(tmp_path / "absent.json")


class TestMergePrecedence:
    def test_cli_wins_over_file(self, tmp_path: Path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"a": 1, "b": "x"}), encoding="utf-8")
        assert collect_parameters(["b=override"], path) == {"b": "override", "a": "1"}

    def test_merge_only_fills_missing_keys(self):
        provided = {"a": "cli"}
        merge_file_params(provided, {"a": "file", "b": "file"})
        assert provided == {"a": "cli", "b": "file"}

    def test_no_file(self):
        assert collect_parameters(["x=1"]) == {"x": "1"}


class TestSubstitutePlaceholder:
    def test_replaces_every_occurrence_in_key_and_value(self):
        assert substitute_placeholder(["FUZZ=FUZZ-FUZZ", "fixed=1"], "FUZZ", "w") == ["w=w-w", "fixed=1"]

    def test_word_may_introduce_equals(self):
        pairs = substitute_placeholder(["path=FUZZ"], "FUZZ", "a=b")
        assert parse_param_pairs(pairs) == {"path": "a=b"}


class TestPromptForMissingRequired:
    def _schema(self) -> InputSchema:
        return InputSchema.model_validate(
            {
                "properties": {"a": {"type": "integer"}, "b": {}, "opt": {"type": "string"}},
                "required": ["a", "b"],
            },
        )

    def test_prompts_only_missing_required(self):
        asked: list[str] = []

        def fake_prompt(message: str) -> str:
            asked.append(message)
            return " 7 "

        provided = prompt_for_missing_required(self._schema(), {"b": "given"}, prompt=fake_prompt)
        assert provided == {"b": "given", "a": "7"}
        assert asked == ["Enter value for required param 'a' (type: integer):"]

    def test_untyped_property_shows_string(self):
        asked: list[str] = []
        prompt_for_missing_required(self._schema(), {"a": "1"}, prompt=lambda m: asked.append(m) or "v")
        assert asked == ["Enter value for required param 'b' (type: string):"]

    def test_empty_answer_asks_again(self):
        answers = iter(["", "   ", "ok"])
        notes: list[str] = []
        provided = prompt_for_missing_required(
            self._schema(),
            {"a": "1"},
            prompt=lambda _m: next(answers),
            notify=notes.append,
        )
        assert provided["b"] == "ok"
        assert notes == ["  (value required)", "  (value required)"]

    def test_no_schema_is_a_no_op(self):
        assert prompt_for_missing_required(None, {"x": "1"}, prompt=pytest.fail) == {"x": "1"}
