"""Configuration loading and validation.

Usage:
    config = load("code-guardian.yaml")        # raises ConfigError on bad config
    config = Config()                          # built-in defaults
    generate_template("code-guardian.yaml")    # writes example file to disk
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from code_guardian.models import Category
from code_guardian.rules import DEFAULT_MAX_LINE_LENGTH, DEFAULT_RULES

DEFAULT_CONFIG_PATH = "code-guardian.yaml"
LOG_LEVEL_ENV = "CODE_GUARDIAN_LOG_LEVEL"

DEFAULT_EXCLUDES = ("node_modules", ".git", "dist", "build", "coverage", ".vscode", ".idea")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    exclude: list[str] = field(default_factory=list)
    max_file_size_kb: int = 1024
    disabled_categories: list[str] = field(default_factory=list)
    disabled_rules: list[str] = field(default_factory=list)
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    log_level: str = "WARNING"

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """Load and validate configuration from a YAML file.

    The environment variable CODE_GUARDIAN_LOG_LEVEL overrides
    ``logging.level``.

    Raises:
        ConfigError: if the file is missing, malformed, or holds invalid
                     values.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `code-guardian init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    analysis = raw.get("analysis") or {}
    rules    = raw.get("rules") or {}
    logging_ = raw.get("logging") or {}
    defaults = Config()

    level = os.environ.get(LOG_LEVEL_ENV) or logging_.get("level", defaults.log_level)

    config = Config(
        exclude=list(analysis.get("exclude") or []),
        max_file_size_kb=analysis.get("max_file_size_kb", defaults.max_file_size_kb),
        disabled_categories=list(rules.get("disabled_categories") or []),
        disabled_rules=list(rules.get("disabled_rules") or []),
        max_line_length=rules.get("max_line_length", defaults.max_line_length),
        log_level=str(level).strip().upper(),
    )
    _validate(config)
    return config


def load_or_default(config_path: str = DEFAULT_CONFIG_PATH, explicit: bool = False) -> Config:
    """Load *config_path*, or return defaults when the default file is absent.

    An explicitly requested file must exist.
    """
    if not explicit and not Path(config_path).exists():
        config = Config()
        level = os.environ.get(LOG_LEVEL_ENV)
        if level:
            config.log_level = level.strip().upper()
            _validate(config)
        return config
    return load(config_path)


def _validate(config: Config) -> None:
    """Raise ConfigError if any value is out of range or unknown."""
    errors: list[str] = []
    categories = {c.value for c in Category}
    rule_ids = {r.id for r in DEFAULT_RULES}

    if not isinstance(config.max_file_size_kb, int) or config.max_file_size_kb <= 0:
        errors.append("  - 'analysis.max_file_size_kb' must be a positive integer")
    if not isinstance(config.max_line_length, int) or config.max_line_length <= 0:
        errors.append("  - 'rules.max_line_length' must be a positive integer")
    for name in config.disabled_categories:
        if name not in categories:
            errors.append(
                f"  - unknown category '{name}' in 'rules.disabled_categories' "
                f"(expected one of: {', '.join(sorted(categories))})"
            )
    for rule_id in config.disabled_rules:
        if rule_id not in rule_ids:
            errors.append(f"  - unknown rule id '{rule_id}' in 'rules.disabled_rules'")
    if config.log_level not in _LOG_LEVELS:
        errors.append(
            f"  - 'logging.level' must be one of {', '.join(_LOG_LEVELS)} "
            f"(or set the {LOG_LEVEL_ENV} environment variable)"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
analysis:
  # Glob patterns (relative to the analysed directory) to skip, in addition
  # to node_modules, .git, dist, build, coverage, .vscode and .idea
  exclude:
    - "vendor/**"
    - "**/*.min.js"
  max_file_size_kb: 1024

rules:
  # Any of: security, performance, code-quality, error-handling, architecture
  disabled_categories: []
  # Rule ids as listed by `code-guardian rules`, e.g. CQ006
  disabled_rules: []
  max_line_length: 1000

logging:
  level: WARNING                  # or set CODE_GUARDIAN_LOG_LEVEL
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template code-guardian.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
