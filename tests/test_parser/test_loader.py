"""Tests for specforge.parser.loader -- JSON/YAML loading and version checks."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path

import pytest

from specforge.exceptions import SpecParseError
from specforge.parser.loader import load_document, parse_content, validate_openapi_version


class TestLoadDocument:
    """Loading from local files and stdin."""

    def test_load_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text("openapi: 3.0.3\ninfo:\n  title: T\n  version: '1'\npaths: {}\n")

        raw = load_document(str(path))
        assert raw["openapi"] == "3.0.3"
        assert raw["info"]["title"] == "T"

    def test_load_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "api.json"
        path.write_text(json.dumps({"openapi": "3.1.0", "paths": {}}))

        raw = load_document(str(path))
        assert raw["openapi"] == "3.1.0"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_document(str(tmp_path / "missing.yaml"))

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"openapi": "3.0.0"}'))
        assert load_document("-") == {"openapi": "3.0.0"}

    def test_empty_stdin_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("   "))
        with pytest.raises(SpecParseError, match="No input"):
            load_document("-")


class TestParseContent:
    """Content parsing, format hints, and YAML normalisation."""

    def test_json_without_hint(self) -> None:
        assert parse_content('{"a": 1}') == {"a": 1}

    def test_yaml_without_hint(self) -> None:
        assert parse_content("a: 1\nb: [x, y]\n") == {"a": 1, "b": ["x", "y"]}

    def test_invalid_json_with_json_hint(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            parse_content("a: 1", source_name="api.json")

    def test_empty_content(self) -> None:
        with pytest.raises(SpecParseError, match="empty"):
            parse_content("\n\n", source_name="api.yaml")

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            parse_content("- a\n- b\n", source_name="api.yaml")

    def test_unparseable_content(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse"):
            parse_content("key: [unclosed\n")

    def test_integer_keys_become_strings(self) -> None:
        content = textwrap.dedent("""\
            responses:
              200:
                description: OK
              404:
                description: Missing
        """)
        raw = parse_content(content, source_name="api.yaml")
        assert list(raw["responses"]) == ["200", "404"]

    def test_dates_become_iso_strings(self) -> None:
        raw = parse_content("released: 2024-05-01\n", source_name="api.yaml")
        assert raw["released"] == "2024-05-01"


class TestValidateOpenAPIVersion:
    """Version detection."""

    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
    def test_supported_versions(self, version: str) -> None:
        assert validate_openapi_version({"openapi": version}) == version

    def test_swagger_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0"):
            validate_openapi_version({"swagger": "2.0"})

    def test_missing_version(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_unsupported_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported"):
            validate_openapi_version({"openapi": "4.0.0"})
