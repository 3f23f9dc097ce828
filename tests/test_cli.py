"""Tests for the click CLI."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import FakeModel
from tfassist import __version__
from tfassist.cli import main

ENVELOPE = '{"files":[{"path":"main.tf","content":"terraform {}"}],"summary":"Created main.tf."}'


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("HISTORY_DB_PATH", str(tmp_path / "history.db"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("LOG_FORMAT", "json")
    return tmp_path


def _patched_model(model):
    return patch("tfassist.cli.OpenAIChatModel.from_settings", return_value=model)


def test_ask_prints_answer_and_records_history(env):
    runner = CliRunner()
    with _patched_model(FakeModel("Use remote state.")):
        result = runner.invoke(main, ["ask", "how do I share state?"])

    assert result.exit_code == 0, result.output
    assert "Use remote state." in result.output

    result = runner.invoke(main, ["history"])
    assert "user: how do I share state?" in result.output
    assert "assistant: Use remote state." in result.output


def test_ask_mentions_directory_without_writing(env):
    model = FakeModel(ENVELOPE)
    with _patched_model(model):
        result = CliRunner().invoke(main, ["ask", "--dir", str(env), "make a file"])

    assert result.exit_code == 0
    assert model.calls[0][-1].content.startswith(f"[workspace: {env}]")
    assert not (env / "main.tf").exists()


def test_generate_writes_files(env):
    out_dir = env / "infra"
    with _patched_model(FakeModel(ENVELOPE)):
        result = CliRunner().invoke(main, ["--no-history", "generate", "--out", str(out_dir), "empty root module"])

    assert result.exit_code == 0, result.output
    assert (out_dir / "main.tf").read_text(encoding="utf-8") == "terraform {}"
    assert "Created main.tf." in result.output
    assert "Files written to:" in result.output


def test_generate_confinement_error_is_reported(env):
    reply = '{"files":[{"path":"../escape.tf","content":"x"}]}'
    out_dir = env / "infra"
    with _patched_model(FakeModel(reply)):
        result = CliRunner().invoke(main, ["--no-history", "generate", "--out", str(out_dir), "bad"])

    assert result.exit_code != 0
    assert "outside the workspace directory" in result.output
    assert not (env / "escape.tf").exists()
    assert "Traceback" not in result.output


def test_history_disabled(env, monkeypatch):
    monkeypatch.setenv("HISTORY_DB_PATH", "disabled")
    result = CliRunner().invoke(main, ["history"])
    assert result.exit_code == 0
    assert "disabled" in result.output


def test_diagnose_reads_plan_file(env):
    plan = env / "plan.txt"
    plan.write_text("Error: Invalid provider configuration", encoding="utf-8")
    model = FakeModel("Set the region argument.")

    with _patched_model(model):
        result = CliRunner().invoke(main, ["--no-history", "diagnose", "--plan", str(plan)])

    assert result.exit_code == 0, result.output
    assert "Set the region argument." in result.output
    prompt = model.calls[0][-1].content
    assert "root cause" in prompt
    assert "Error: Invalid provider configuration" in prompt


def test_diagnose_reads_piped_stdin(env):
    model = FakeModel("Import the existing bucket.")

    with _patched_model(model):
        result = CliRunner().invoke(
            main, ["--no-history", "diagnose"], input="Error: BucketAlreadyExists\n"
        )

    assert result.exit_code == 0, result.output
    assert "Error: BucketAlreadyExists" in model.calls[0][-1].content


def test_diagnose_falls_back_to_directory(env):
    model = FakeModel("Looks fine.")

    with _patched_model(model):
        result = CliRunner().invoke(main, ["--no-history", "diagnose", "--dir", str(env)])

    assert result.exit_code == 0, result.output
    assert str(env) in model.calls[0][-1].content
    assert not (env / "main.tf").exists()


def test_diagnose_without_input_is_usage_error(env):
    model = FakeModel("unused")

    with _patched_model(model):
        result = CliRunner().invoke(main, ["--no-history", "diagnose"])

    assert result.exit_code == 2
    assert "--plan" in result.output
    assert model.calls == []


def test_version(env):
    result = CliRunner().invoke(main, ["version"])

    assert result.exit_code == 0
    assert result.output.strip() == f"tfassist {__version__}"
