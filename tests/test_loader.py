"""Tests for declarest.loader -- JSON/YAML interface descriptions."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from declarest.exceptions import ConfigurationError
from declarest.loader import load_interface
from declarest.markers import HttpMethodMarker, PathMarker, PathParam, QueryParam
from declarest.models import Response

GITHUB_YAML = """\
name: GitHub
operations:
  - name: contributors
    markers:
      - {kind: http_method, verb: GET}
      - {kind: path, value: "/repos/{owner}/{repo}/contributors"}
    parameters:
      - {name: owner, type_name: str, markers: [{kind: path_param}]}
      - {name: repository, type_name: str, markers: [{kind: path_param, name: repo}]}
    return_type: list
  - name: search
    markers:
      - {kind: http_method, verb: GET}
      - {kind: path, value: /search}
    parameters:
      - {name: q, markers: [{kind: query_param}]}
    return_type: response
"""


class TestLoadInterface:
    def test_yaml_file(self, tmp_path: Path) -> None:
        source = tmp_path / "github.yaml"
        source.write_text(GITHUB_YAML, encoding="utf-8")

        descriptor = load_interface(source)

        assert descriptor.name == "GitHub"
        contributors, search = descriptor.operations
        assert contributors.markers == [
            HttpMethodMarker(verb="GET"),
            PathMarker(value="/repos/{owner}/{repo}/contributors"),
        ]
        assert contributors.parameters[0].markers == [PathParam("owner")]
        assert contributors.parameters[1].markers == [PathParam("repo")]
        assert contributors.return_type is list
        assert contributors.config_key("GitHub") == "GitHub#contributors(str,str)"
        assert search.parameters[0].markers == [QueryParam("q")]
        assert search.config_key("GitHub") == "GitHub#search(object)"
        assert search.return_type is Response

    def test_json_file(self, tmp_path: Path) -> None:
        source = tmp_path / "api.json"
        source.write_text(json.dumps({"name": "Api", "operations": []}), encoding="utf-8")
        assert load_interface(str(source)).name == "Api"

    def test_mapping(self) -> None:
        descriptor = load_interface({"name": "Api", "operations": [{"name": "ping", "return_type": "none"}]})
        assert descriptor.operations[0].return_type is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_interface(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        source = tmp_path / "empty.yaml"
        source.write_text("  \n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="empty"):
            load_interface(source)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        source = tmp_path / "bad.yaml"
        source.write_text("name: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_interface(source)

    def test_invalid_json(self, tmp_path: Path) -> None:
        source = tmp_path / "bad.json"
        source.write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_interface(source)

    def test_not_an_object(self, tmp_path: Path) -> None:
        source = tmp_path / "list.yaml"
        source.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="got list"):
            load_interface(source)

    def test_unknown_marker_kind(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid interface description"):
            load_interface(
                {"name": "Api", "operations": [{"name": "x", "markers": [{"kind": "teleport"}]}]}
            )
