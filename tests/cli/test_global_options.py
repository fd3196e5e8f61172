"""Tests for global options, configuration errors, and ``zephyr config init``."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from tests.conftest import FakeZephyr
from zephyr_cli import __version__
from zephyr_cli.cli import cli
from zephyr_cli.config import load_config


def invoke(runner: CliRunner, api: FakeZephyr, *args: str) -> Result:
    return runner.invoke(cli, list(args), obj={"transport": api.transport})


class TestGlobalOptions:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
        assert "zephyr" in result.output

    def test_help_lists_groups(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for group in ("folder", "testcase", "testcycle", "testexecution", "testplan", "config", "issuelink"):
            assert group in result.output

    def test_missing_config_file(self, cli_runner: CliRunner, fake_api: FakeZephyr, tmp_path: Path) -> None:
        result = invoke(cli_runner, fake_api, "--config", str(tmp_path / "none.json"), "folder", "list")
        assert result.exit_code == 1
        assert result.stderr.startswith("Configuration Error: Configuration file not found")
        assert '"currentProfile": "default"' in result.stderr
        assert fake_api.requests == []

    def test_malformed_config_file(self, cli_runner: CliRunner, fake_api: FakeZephyr, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        result = invoke(cli_runner, fake_api, "--config", str(path), "project", "list")
        assert result.exit_code == 1
        assert "Failed to parse configuration file" in result.stderr

    def test_unknown_profile(self, cli_runner: CliRunner, fake_api: FakeZephyr, config_file: Path) -> None:
        result = invoke(cli_runner, fake_api, "--config", str(config_file), "--profile", "nope", "folder", "list")
        assert result.exit_code == 1
        assert "Profile 'nope' not found" in result.stderr
        assert "Available profiles: default, other" in result.stderr

    def test_config_path_from_environment(
        self,
        cli_runner: CliRunner,
        fake_api: FakeZephyr,
        config_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("ZEPHYR_CONFIG_PATH", str(config_file))
        result = invoke(cli_runner, fake_api, "project", "list")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_log_file_records_commands(
        self, cli_runner: CliRunner, fake_api: FakeZephyr, config_file: Path, tmp_path: Path
    ) -> None:
        log_path = tmp_path / "logs" / "zephyr.jsonl"
        result = invoke(
            cli_runner, fake_api, "--config", str(config_file), "--log-file", str(log_path), "project", "list"
        )
        assert result.exit_code == 0, result.output
        entries = [json.loads(line) for line in log_path.read_text().splitlines()]
        finished = [e for e in entries if e["msg"].endswith("finished")]
        assert finished
        assert finished[-1]["command"] == "cli project list"
        assert "duration_ms" in finished[-1]


class TestConfigInit:
    def test_writes_profile(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "new" / "config.json"
        result = cli_runner.invoke(
            cli, ["--config", str(path), "config", "init", "--api-token", "tok", "--project-key", "ABC"]
        )
        assert result.exit_code == 0, result.output
        assert f"Wrote {path}" in result.stdout
        config = load_config(path)
        assert config["currentProfile"] == "default"
        assert config["profiles"]["default"] == {"apiToken": "tok", "projectKey": "ABC"}

    def test_named_profile_with_base_url(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        result = cli_runner.invoke(
            cli,
            [
                "--config",
                str(path),
                "config",
                "init",
                "--api-token",
                "tok",
                "--project-key",
                "ABC",
                "--profile",
                "eu",
                "--base-url",
                "https://eu.api.zephyrscale.smartbear.com/v2",
            ],
        )
        assert result.exit_code == 0, result.output
        config = load_config(path)
        assert config["currentProfile"] == "eu"
        assert config["profiles"]["eu"]["baseUrl"] == "https://eu.api.zephyrscale.smartbear.com/v2"

    def test_refuses_to_overwrite(self, cli_runner: CliRunner, config_file: Path) -> None:
        before = config_file.read_text()
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "config", "init", "--api-token", "x", "--project-key", "Y"]
        )
        assert result.exit_code == 1
        assert "already exists" in result.stderr
        assert config_file.read_text() == before

    def test_force_overwrites(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "config", "init", "--api-token", "x", "--project-key", "Y", "--force"]
        )
        assert result.exit_code == 0, result.output
        assert load_config(config_file)["profiles"] == {"default": {"apiToken": "x", "projectKey": "Y"}}
