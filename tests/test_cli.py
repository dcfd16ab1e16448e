"""Tests for CLI argument parsing and command handlers."""

import json

import pytest

from envprec.precedence_cli import build_parser, main

from conftest import posix_only


def test_probe_defaults() -> None:
    args = build_parser().parse_args(["probe"])

    assert args.property_key is None
    assert args.json is False
    assert args.no_sanity is False
    assert args.strict is False


def test_probe_short_flags() -> None:
    args = build_parser().parse_args(["probe", "-p", "testKey", "-j", "-q", "-k", "--no-color", "--no-sanity"])

    assert args.property_key == "testKey"
    assert args.json and args.quiet and args.keep_temp and args.no_color and args.no_sanity


def test_report_positional_defaults() -> None:
    args = build_parser().parse_args(["report"])
    assert args.root == "artifacts"
    assert args.output == "REPORT.md"


def test_command_required() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@posix_only
def test_probe_json_output(fake_java, tmp_path, capsys) -> None:
    output = tmp_path / "artifacts" / "precedence-json-jdk-21" / "result.json"

    code = main(["probe", "-p", "foo3", "-j", "--executable", str(fake_java), "--output", str(output)])

    captured = capsys.readouterr()
    record = json.loads(captured.out)
    assert code == 0
    assert record["property"] == "foo3"
    assert record["status"] == "ok"
    assert json.loads(output.read_text()) == record


@posix_only
def test_probe_human_output(fake_java, capsys) -> None:
    code = main(["probe", "-p", "foo4", "--no-color", "--executable", str(fake_java)])

    out = capsys.readouterr().out
    assert code == 0
    assert "Precedence chain: _JAVA_OPTIONS > JDK_JAVA_OPTIONS > JAVA_TOOL_OPTIONS" in out
    assert "-Dfoo4=..." in out


def test_probe_missing_executable_exits_one(tmp_path, capsys) -> None:
    code = main(["probe", "-j", "--executable", str(tmp_path / "missing")])

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""


def test_probe_unknown_target_exits_one(capsys) -> None:
    assert main(["probe", "--target", "no-such-target"]) == 1


@posix_only
def test_report_command(fake_java, tmp_path) -> None:
    output = tmp_path / "artifacts" / "precedence-json-jdk-21" / "result.json"
    assert main(["probe", "-q", "--executable", str(fake_java), "--output", str(output)]) == 0

    report = tmp_path / "REPORT.md"
    assert main(["report", str(tmp_path / "artifacts"), str(report)]) == 0
    assert "| 21 |" in report.read_text()
    assert (tmp_path / "REPORT.csv").exists()


def test_report_command_without_records(tmp_path) -> None:
    assert main(["report", str(tmp_path), str(tmp_path / "REPORT.md")]) == 1


def test_targets_command(capsys) -> None:
    assert main(["targets", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert "jvm" in payload["targets"]


@posix_only
def test_probe_human_output_keeps_logs_off_stdout(fake_java, capsys) -> None:
    code = main(["probe", "-p", "foo6", "--no-color", "--executable", str(fake_java)])

    captured = capsys.readouterr()
    assert code == 0
    assert "| INFO" not in captured.out
    assert "Precedence chain:" in captured.out
    assert "Run status: ok" in captured.err


@posix_only
def test_probe_artifacts_dir_uses_detected_version(fake_java, tmp_path) -> None:
    artifacts = tmp_path / "artifacts"

    code = main(["probe", "-q", "-p", "foo7", "--executable", str(fake_java), "--artifacts-dir", str(artifacts)])

    record = json.loads((artifacts / "precedence-json-jdk-21" / "result.json").read_text())
    assert code == 0
    assert record["property"] == "foo7"
    assert main(["report", str(artifacts), str(tmp_path / "REPORT.md")]) == 0
    assert "| 21 |" in (tmp_path / "REPORT.md").read_text()


@posix_only
def test_probe_unsafe_key_exits_one(fake_java, capsys) -> None:
    code = main(["probe", "-j", "-p", 'foo"bar', "--executable", str(fake_java)])

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "Invalid property key" in captured.err
