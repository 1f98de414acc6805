"""Configuration loading for test cases.

Configuration variables are plain name/value strings handed to a TestCase.
They can be kept in a YAML file, either as a top-level mapping or under a
"config" key:

    config:
      timeout: "30"
      unprivileged-user: nobody
      has.network: true

Scalar values are converted to strings ("has.network" above becomes
"True").

Usage:

    from casekit.config import load_config

    config = load_config("site.yaml")
    tc = TestCase("net_basic", body=body, config=config)

Without an explicit path the file named by the CASEKIT_CONFIG environment
variable is used; if that is unset there is no configuration at all, which
test cases can tell apart from an empty one.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from casekit.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CASEKIT_CONFIG"


def parse_config(data: Any) -> dict[str, str]:
    """Build configuration variables from parsed YAML data.

    Args:
        data: Parsed YAML document.

    Returns:
        Configuration variables.

    Raises:
        ConfigError: If the data is not a mapping of names to scalars.
    """
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    if "config" in data and isinstance(data["config"], dict):
        data = data["config"]
    elif "config" in data and data["config"] is None:
        return {}

    config: dict[str, str] = {}
    for name, value in data.items():
        if isinstance(value, (dict, list)):
            raise ConfigError(f"Configuration variable '{name}' must be a scalar")
        config[str(name)] = "" if value is None else str(value)

    return config


def load_config(path: str | Path | None = None) -> dict[str, str] | None:
    """Load configuration variables from a YAML file.

    Args:
        path: Path to the configuration file. Defaults to the file named by
            the CASEKIT_CONFIG environment variable.

    Returns:
        Configuration variables, or None if no path was given and
        CASEKIT_CONFIG is unset.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the file is not valid configuration.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR, "")
        if not env_path:
            return None
        path = env_path

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    config = parse_config(data)
    logger.debug("Loaded %d configuration variable(s) from %s", len(config), path)
    return config
