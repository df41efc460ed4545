"""
Configuration loading.

Reads generator options from a JSON config file and the environment.
"""

import json
import os
import re
from typing import Any, Dict, Mapping, Optional

from .utils.log import get_logger


# Looked up in the working directory when no explicit file is given
CONFIG_FILE_NAMES = ("llms.config.json", ".llmsrc.json")

# Environment variables applied to keys the config leaves unset
ENV_OVERRIDES = {
    "site_url": ("LLMS_SITE_URL", "SITE_URL"),
    "max_pages": ("LLMS_MAX_PAGES",),
    "concurrency": ("LLMS_CONCURRENCY",),
}
_INT_KEYS = ("max_pages", "concurrency")

logger = get_logger("config")


def find_config_file(directory: Optional[str] = None) -> Optional[str]:
    """
    Find the first default config file in a directory.

    Args:
        directory: Directory to search (default: working directory)

    Returns:
        Path to the config file, or None
    """
    directory = directory or os.getcwd()
    for name in CONFIG_FILE_NAMES:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return path
    return None


def snake_case(key: str) -> str:
    """Convert a camelCase key to snake_case (snake_case keys are unchanged)."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {snake_case(key): value for key, value in data.items()}


def load_config(
    path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Load configuration as a dictionary of snake_case option values.

    Args:
        path: Explicit config file; when omitted the default file names
            are looked up in the working directory
        env: Environment mapping (default: os.environ)

    Returns:
        Option values suitable for GeneratorOptions.from_dict

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file is not a JSON object
    """
    env = os.environ if env is None else env
    config: Dict[str, Any] = {}

    if path is not None and not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    config_path = path or find_config_file()
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a JSON object")
        config.update(_normalize_keys(data))
        logger.debug(f"Loaded configuration from {config_path}")

    for key, variables in ENV_OVERRIDES.items():
        if config.get(key) not in (None, ""):
            continue
        for variable in variables:
            value = env.get(variable)
            if not value:
                continue
            if key in _INT_KEYS:
                try:
                    config[key] = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer {variable}={value!r}")
                    continue
            else:
                config[key] = value
            break

    return config
