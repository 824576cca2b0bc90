"""Tests for the reportbridge command line."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from reportbridge import __version__
from reportbridge.cli import app, load_results

runner = CliRunner()

ENABLED_YAML = """
enabled: true
endpoint: https://rp.example.com
token: secret-token
project: web
launch_name: nightly
attributes:
  - browser:chrome
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "reportbridge.yaml"
    path.write_text(ENABLED_YAML)
    return path


@pytest.fixture
def results_file(tmp_path):
    path = tmp_path / "results.json"
    path.write_text(json.dumps({
        "suites": [{"title": "S1"}],
        "tests": {"passed": [{"title": "T1", "parent": {"title": "S1"}}], "failed": []},
    }))
    return path


class TestVersionAndInfo:

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_info_mentions_link_variable(self):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "REPORT_PORTAL_RESULT_LINK" in result.stdout


class TestValidate:

    def test_valid_config_prints_masked_settings(self, config_file):
        result = runner.invoke(app, ["validate", str(config_file)])

        assert result.exit_code == 0
        assert "Valid configuration" in result.stdout
        assert "browser:chrome" in result.stdout
        assert "secret-token" not in result.stdout

    def test_invalid_config_exits_with_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("enabled: true\n")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Required when 'enabled' is true" in result.stdout


class TestSend:

    def test_disabled_config_sends_nothing(self, tmp_path, results_file):
        path = tmp_path / "off.yaml"
        path.write_text("enabled: false\n")

        result = runner.invoke(app, ["send", str(results_file), "-c", str(path)])

        assert result.exit_code == 0
        assert "nothing sent" in result.stdout

    def test_invalid_config_exits_with_error(self, tmp_path, results_file):
        path = tmp_path / "bad.yaml"
        path.write_text("endpoint: ftp://rp\n")

        result = runner.invoke(app, ["send", str(results_file), "-c", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout

    def test_unreadable_results_exit_with_error(self, tmp_path, config_file):
        path = tmp_path / "results.json"
        path.write_text("[1, 2]")

        result = runner.invoke(app, ["send", str(path), "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Could not read results" in result.stdout


class TestLoadResults:

    def test_parses_worker_result(self, results_file):
        result = load_results(results_file)

        assert [s.title for s in result.suites] == ["S1"]
        assert result.passed[0].parent_title == "S1"

    def test_rejects_non_object(self, tmp_path):
        path = tmp_path / "results.json"
        path.write_text('"nope"')

        with pytest.raises(ValueError):
            load_results(path)
