"""
Tests for the dpd command line interface.
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from dpd.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger onto the runner's streams"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def detect_args(resources, tmp_path, *extra):
    return [
        "detect",
        "--template", str(resources / "patterns_observer.xml"),
        "--system", str(resources / "MyObserver.xmi"),
        "--config", str(tmp_path / "no-config.yaml"),
        "--quiet",
        *extra,
    ]


def test_detect_prints_solution(resources, tmp_path):
    result = runner.invoke(app, detect_args(resources, tmp_path))

    assert result.exit_code == 0, result.output
    assert "Design pattern: Observer (#1)" in result.output
    assert "MyConcreteSubject --> ConcreteSubject" in result.output
    assert "Solutions Found: 1" in result.output


def test_detect_writes_json(resources, tmp_path):
    out = tmp_path / "report.json"
    result = runner.invoke(app, detect_args(resources, tmp_path, "--json", str(out), "-n", "1"))

    assert result.exit_code == 0, result.output
    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["system"] == "MyObserver"
    assert report["tolerance"] == 1
    assert len(report["solutions"]) >= 1


def test_detect_uses_config(resources, tmp_path):
    config = tmp_path / "detector.yaml"
    config.write_text(
        "detection:\n"
        f"  template_file: {resources / 'patterns_observer.xml'}\n"
        f"  system_file: {resources / 'MyObserver.xmi'}\n"
        "logging:\n"
        "  verbose: false\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["detect", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "Design pattern: Observer (#1)" in result.output


def test_missing_system_file(resources, tmp_path):
    result = runner.invoke(app, [
        "detect",
        "--template", str(resources / "patterns_observer.xml"),
        "--system", str(tmp_path / "missing.xmi"),
        "--config", str(tmp_path / "no-config.yaml"),
        "--quiet",
    ])
    assert result.exit_code == 1
    assert "could not be parsed" in result.output


def test_negative_tolerance_rejected(resources, tmp_path):
    result = runner.invoke(app, detect_args(resources, tmp_path, "--tolerance", "-1"))
    assert result.exit_code != 0


def test_invalid_config(resources, tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("detection:\n  tolerance: -3\n", encoding="utf-8")
    result = runner.invoke(app, ["detect", "--config", str(config)])
    assert result.exit_code == 2
