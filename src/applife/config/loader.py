import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict

from applife.utils.diagnostics import ConfigurationError

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]+))?\}")

ALLOWED_KEYS = {"applife", "modules", "bundles"}


def interpolate_env_vars(content: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variables."""
    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, content)


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load applife.yaml with environment variable interpolation.

    Keeps the keys: applife, modules, bundles. A missing file is an empty config.
    """
    if not path.exists():
        return {}

    content = path.read_text()
    interpolated_content = interpolate_env_vars(content)
    try:
        full_config = yaml.safe_load(interpolated_content) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(full_config, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level.")

    filtered_config = {k: v for k, v in full_config.items() if k in ALLOWED_KEYS}

    for key in ("modules", "bundles"):
        value = filtered_config.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            filtered_config[key] = [value]
        elif not isinstance(value, list):
            raise ConfigurationError(f"'{key}' in {path} must be a list of dotted paths.")

    return filtered_config
