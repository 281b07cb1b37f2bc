"""Tests for code_guardian/config.py"""

import textwrap
from pathlib import Path

import pytest

from code_guardian.config import (
    Config,
    ConfigError,
    generate_template,
    load,
    load_or_default,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "code-guardian.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    analysis:
      exclude:
        - "vendor/**"
      max_file_size_kb: 256
    rules:
      disabled_categories: ["performance"]
      disabled_rules: ["CQ006"]
      max_line_length: 400
    logging:
      level: info
    """


# ---------------------------------------------------------------------------
# load() - happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path, monkeypatch):
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    p = write_config(tmp_path, VALID_YAML)
    config = load(str(p))
    assert config.exclude == ["vendor/**"]
    assert config.max_file_size_kb == 256
    assert config.disabled_categories == ["performance"]
    assert config.disabled_rules == ["CQ006"]
    assert config.max_line_length == 400
    assert config.log_level == "INFO"


def test_load_empty_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    p = write_config(tmp_path, "")
    assert load(str(p)) == Config()


# ---------------------------------------------------------------------------
# load() - missing or malformed file
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_malformed_yaml(tmp_path):
    p = write_config(tmp_path, "analysis: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_top_level_list(tmp_path):
    p = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


# ---------------------------------------------------------------------------
# load() - invalid values
# ---------------------------------------------------------------------------

def test_load_unknown_category(tmp_path):
    p = write_config(tmp_path, """\
        rules:
          disabled_categories: ["styling"]
        """)
    with pytest.raises(ConfigError, match="styling"):
        load(str(p))


def test_load_unknown_rule_id(tmp_path):
    p = write_config(tmp_path, """\
        rules:
          disabled_rules: ["NOPE001"]
        """)
    with pytest.raises(ConfigError, match="NOPE001"):
        load(str(p))


def test_load_non_positive_line_length(tmp_path):
    p = write_config(tmp_path, """\
        rules:
          max_line_length: 0
        """)
    with pytest.raises(ConfigError, match="max_line_length"):
        load(str(p))


def test_load_collects_every_error(tmp_path, monkeypatch):
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    p = write_config(tmp_path, """\
        analysis:
          max_file_size_kb: -1
        logging:
          level: chatty
        """)
    with pytest.raises(ConfigError) as excinfo:
        load(str(p))
    message = str(excinfo.value)
    assert "max_file_size_kb" in message
    assert "logging.level" in message


# ---------------------------------------------------------------------------
# load() - environment variable overrides
# ---------------------------------------------------------------------------

def test_env_log_level_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("CODE_GUARDIAN_LOG_LEVEL", "debug")
    assert load(str(p)).log_level == "DEBUG"


def test_env_log_level_is_validated(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("CODE_GUARDIAN_LOG_LEVEL", "loud")
    with pytest.raises(ConfigError, match="CODE_GUARDIAN_LOG_LEVEL"):
        load(str(p))


# ---------------------------------------------------------------------------
# load_or_default()
# ---------------------------------------------------------------------------

def test_default_path_absent_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    config = load_or_default(str(tmp_path / "code-guardian.yaml"))
    assert config == Config()


def test_explicit_path_must_exist(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_or_default(str(tmp_path / "custom.yaml"), explicit=True)


def test_defaults_still_honour_env(tmp_path, monkeypatch):
    monkeypatch.setenv("CODE_GUARDIAN_LOG_LEVEL", "error")
    config = load_or_default(str(tmp_path / "code-guardian.yaml"))
    assert config.log_level == "ERROR"


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_file(tmp_path):
    out = tmp_path / "code-guardian.yaml"
    generate_template(str(out))
    assert out.exists()
    content = out.read_text()
    assert "analysis:" in content
    assert "rules:" in content


def test_generated_template_loads(tmp_path, monkeypatch):
    monkeypatch.delenv("CODE_GUARDIAN_LOG_LEVEL", raising=False)
    out = tmp_path / "code-guardian.yaml"
    generate_template(str(out))
    config = load(str(out))
    assert config.exclude == ["vendor/**", "**/*.min.js"]
    assert config.log_level == "WARNING"


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "code-guardian.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))
