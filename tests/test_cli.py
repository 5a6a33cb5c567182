"""Unit tests for the CLI argument parsing, logging setup and exit status."""

import logging
from pathlib import Path

import pytest

import landscape.cli as cli
from landscape.exceptions import ExternalServiceError

BUILD_ARGV = [
    "build",
    "--data-file",
    "landscape.yml",
    "--settings-url",
    "https://example.org/settings.yml",
    "--logos-path",
    "logos",
    "--output-dir",
    "out",
]


def test_configure_logging_skips_unwritable_log_dir(monkeypatch):
    class BadFileHandler:
        def __init__(self, *a, **k):
            raise PermissionError("read only")

    monkeypatch.setattr(logging, "FileHandler", BadFileHandler)
    cli.configure_logging(level="DEBUG", enable_file=True)
    assert logging.getLogger().level == logging.DEBUG


def test_parse_build_arguments():
    ns = cli.parse_arguments(BUILD_ARGV + ["--log-level", "debug"])
    args = cli.build_args_from(ns)
    assert args.data_source.file == Path("landscape.yml")
    assert args.settings_source.url == "https://example.org/settings.yml"
    assert args.logos_source.path == Path("logos")
    assert args.output_dir == Path("out")
    assert args.cache_dir.name == "landscape"
    assert ns.log_level == "debug"


def test_build_requires_one_source_of_each(capsys):
    with pytest.raises(SystemExit):
        cli.parse_arguments(["build", "--output-dir", "out", "--logos-path", "l"])
    with pytest.raises(SystemExit):
        cli.parse_arguments(BUILD_ARGV + ["--data-url", "https://x"])


def test_main_returns_zero_on_success(monkeypatch):
    received = []

    async def fake_build(args):
        received.append(args)

    monkeypatch.setattr(cli, "build", fake_build)
    assert cli.main(BUILD_ARGV + ["--cache-dir", "c"]) == 0
    assert received[0].cache_dir == Path("c")


def test_main_logs_app_errors_once(monkeypatch, caplog):
    async def failing_build(args):
        raise ExternalServiceError("GitHub rejected the token", transient=False)

    monkeypatch.setattr(cli, "build", failing_build)
    # configure_logging replaces root handlers; keep caplog's handler attached
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)
    with caplog.at_level(logging.ERROR):
        assert cli.main(BUILD_ARGV) == 1
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "GitHub rejected the token" in errors[0].getMessage()


def test_validate_data(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)
    good = tmp_path / "landscape.yml"
    good.write_text(
        "landscape:\n  - name: C\n    subcategories:\n      - name: S\n", encoding="utf-8"
    )
    assert cli.main(["validate", "data", "--data-file", str(good)]) == 0
    bad = tmp_path / "bad.yml"
    bad.write_text("nothing: here\n", encoding="utf-8")
    assert cli.main(["validate", "data", "--data-file", str(bad)]) == 1


def test_validate_settings(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)
    path = tmp_path / "settings.yml"
    path.write_text("foundation: F\n", encoding="utf-8")
    assert cli.main(["validate", "settings", "--settings-file", str(path)]) == 1
    path.write_text("foundation: F\nurl: https://f\n", encoding="utf-8")
    assert cli.main(["validate", "settings", "--settings-file", str(path)]) == 0
