"""Tests for code_guardian/cli.py"""

import json

import pytest
from click.testing import CliRunner

from code_guardian import __version__
from code_guardian.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A small source tree with the working directory set to its parent."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    src = tmp_path / "repo"
    (src / "pkg").mkdir(parents=True)
    (src / "pkg" / "settings.py").write_text('password = "abc123"\n', encoding="utf-8")
    (src / "pkg" / "util.py").write_text("value = 1\n", encoding="utf-8")
    return src


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

def test_init_writes_template(runner, tmp_path):
    out = tmp_path / "code-guardian.yaml"
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    assert "Template written" in result.output


def test_init_refuses_to_overwrite(runner, tmp_path):
    out = tmp_path / "code-guardian.yaml"
    out.write_text("existing")
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 1
    assert "already exists" in result.output


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

def test_analyze_report(runner, project):
    result = runner.invoke(cli, ["analyze", "repo"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["report_type"] == "analysis"
    assert report["name"] == "repo"
    assert report["total_files"] == 2
    assert [i["title"] for i in report["issues"]] == ["Hardcoded password detected"]
    assert report["issues"][0]["file"] == "pkg/settings.py"


def test_analyze_webhook_format(runner, project):
    result = runner.invoke(cli, ["analyze", "repo", "--format", "webhook", "--name", "demo"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["event"] == "analysis_complete"
    assert payload["data"]["name"] == "demo"


def test_analyze_insights_format(runner, project):
    result = runner.invoke(cli, ["analyze", "repo", "--format", "insights"])
    assert result.exit_code == 0, result.output
    request = json.loads(result.output)
    assert request["critical"] == 1
    assert request["language_stats"] == {"python": 2}


def test_analyze_writes_output_file(runner, project, tmp_path):
    out = tmp_path / "report.json"
    result = runner.invoke(cli, ["--output", str(out), "--pretty", "analyze", "repo"])
    assert result.exit_code == 0, result.output
    assert "Report written" in result.output
    text = out.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert json.loads(text)["name"] == "repo"


def test_analyze_honours_config(runner, project, tmp_path):
    config = tmp_path / "code-guardian.yaml"
    config.write_text("rules:\n  disabled_categories: [security]\n", encoding="utf-8")
    result = runner.invoke(cli, ["analyze", "repo"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["issues"] == []


def test_analyze_with_churn(runner, project, tmp_path):
    churn = tmp_path / "churn.yaml"
    churn.write_text("pkg/util.py: 12\n", encoding="utf-8")
    result = runner.invoke(cli, ["analyze", "repo", "--churn", str(churn)])
    assert result.exit_code == 0, result.output
    hotspots = json.loads(result.output)["hotspots"]
    assert hotspots["hotspots_by_type"]["High Churn"] == ["pkg/util.py"]


def test_analyze_rejects_bad_churn(runner, project, tmp_path):
    churn = tmp_path / "churn.yaml"
    churn.write_text("- just\n- a list\n", encoding="utf-8")
    result = runner.invoke(cli, ["analyze", "repo", "--churn", str(churn)])
    assert result.exit_code == 2
    assert "--churn" in result.output


def test_analyze_missing_directory(runner, project):
    result = runner.invoke(cli, ["analyze", "no-such-dir"])
    assert result.exit_code == 2


def test_explicit_config_must_exist(runner, project):
    result = runner.invoke(cli, ["--config", "missing.yaml", "analyze", "repo"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_invalid_config_is_reported(runner, project, tmp_path):
    (tmp_path / "code-guardian.yaml").write_text("rules:\n  max_line_length: -5\n", encoding="utf-8")
    result = runner.invoke(cli, ["analyze", "repo"])
    assert result.exit_code == 1
    assert "max_line_length" in result.output


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------

def test_rules_lists_rule_table(runner, project):
    result = runner.invoke(cli, ["rules"])
    assert result.exit_code == 0, result.output
    rules = json.loads(result.output)
    by_id = {r["id"]: r for r in rules}
    assert by_id["SEC001"] == {
        "id":        "SEC001",
        "category":  "security",
        "severity":  "critical",
        "message":   "Hardcoded password detected",
        "languages": [],
    }
    assert by_id["CQ008"]["languages"] == ["typescript"]


def test_rules_respects_disabled_rules(runner, project, tmp_path):
    (tmp_path / "code-guardian.yaml").write_text("rules:\n  disabled_rules: [SEC001]\n", encoding="utf-8")
    result = runner.invoke(cli, ["rules"])
    ids = {r["id"] for r in json.loads(result.output)}
    assert "SEC001" not in ids
    assert "SEC002" in ids


# ---------------------------------------------------------------------------
# misc
# ---------------------------------------------------------------------------

def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
