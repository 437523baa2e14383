"""TOML and environment configuration loader.

Builds the immutable CheckConfig for one invocation. Values are layered
with this priority:
  1. Action inputs and Actions environment variables (highest)
  2. User TOML file passed with --config
  3. Packaged defaults in branchcheck/config/defaults.toml
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from branchcheck.exceptions import ConfigError
from branchcheck.github.context import load_event_context
from branchcheck.schemas.config import CheckConfig

logger = logging.getLogger(__name__)

# Default config directory relative to the branchcheck package
_CONFIG_DIR = Path(__file__).parent / "config"

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off", ""}


def load_settings(config_path: Path | None = None) -> dict[str, Any]:
    """Load the [check] section from the packaged defaults and a user file.

    Args:
        config_path: Optional user TOML file whose [check] keys override
            the defaults.

    Returns:
        Merged settings dictionary.

    Raises:
        ConfigError: If a file is missing or is not valid TOML.
    """
    settings = _read_check_section(_CONFIG_DIR / "defaults.toml")
    if config_path is not None:
        settings.update(_read_check_section(config_path))
    return settings


def _read_check_section(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    section = raw.get("check", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[check] in {path} must be a table")
    return dict(section)


def parse_bool(value: str | bool, name: str) -> bool:
    """Parse an action input as a boolean.

    Action inputs always arrive as strings, so ``"false"`` must not count
    as true.
    """
    if isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _input(environ: Mapping[str, str], name: str) -> str:
    """Read a GitHub Actions input (INPUT_<NAME>)."""
    return environ.get(f"INPUT_{name.upper()}", "").strip()


def load_check_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CheckConfig:
    """Build the invocation config from files, inputs and the event payload.

    Raises:
        ConfigError: If required values are missing or invalid.
        NotAPullRequestError: If the triggering event is not a pull request.
    """
    env = os.environ if environ is None else environ
    settings = load_settings(config_path)
    context = load_event_context(env)

    token = _input(env, "gh_token") or env.get("GITHUB_TOKEN", "")
    if not token:
        raise ConfigError("No GitHub token: set the gh_token input or GITHUB_TOKEN")

    main_branch = _input(env, "main_branch") or settings.get("main_branch", "main")
    allow_all: str | bool = _input(env, "allow_override_all") or settings.get(
        "allow_override_all", False,
    )

    try:
        config = CheckConfig(
            github_token=token,
            repository=context.repository,
            pr_number=context.pr_number,
            workflow_name=context.workflow_name,
            workflow_ref=_input(env, "workflow_ref") or context.workflow_ref,
            main_branch=main_branch,
            allow_override_all=parse_bool(allow_all, "allow_override_all"),
            api_url=env.get("GITHUB_API_URL") or settings.get("api_url", "https://api.github.com"),
            request_timeout=settings.get("request_timeout", 30.0),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug("Loaded config for %s#%d", config.repository, config.pr_number)
    return config
