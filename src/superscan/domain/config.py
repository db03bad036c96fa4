from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of backend settings (Google Drive credentials,
S3 bucket and region) as JSON in the user data directory, merged over
defaults and overridden by environment variables.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from superscan.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"

ENV_CONFIG_PATH = "SUPERSCAN_CONFIG"
ENV_GOOGLE_CREDENTIALS = "SUPERSCAN_CONFIG_GOOGLE"
ENV_S3_BUCKET = "AWS_S3_BUCKET"
ENV_AWS_REGION = "AWS_REGION"

DEFAULT_S3_REGION = "us-east-1"
DEFAULT_DRIVE_START_PATH = "root"

_SECTIONS = ("google_drive", "s3")


def get_config_path() -> str:
    """Location of the configuration file, honouring SUPERSCAN_CONFIG."""
    override = os.environ.get(ENV_CONFIG_PATH, "").strip()
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_config(config_dir: Optional[str] = None) -> Dict[str, Any]:
    """
    Generate the default configuration.

    Args:
        config_dir: Directory holding credential files; defaults to the
            user data directory.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = config_dir or get_user_data_dir()
    return {
        "version": CURRENT_CONFIG_VERSION,
        "google_drive": {
            "credentials_file": os.path.join(base, "credentials.json"),
            "token_file": os.path.join(base, "token.json"),
            "start_path": DEFAULT_DRIVE_START_PATH,
        },
        "s3": {
            "bucket": "",
            "region": DEFAULT_S3_REGION,
            "start_path": "",
        },
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from disk and apply environment overrides.

    A missing file is created with the defaults. A corrupted file is
    ignored in favour of the defaults.

    Args:
        path: Explicit configuration file; defaults to get_config_path().

    Returns:
        Dict[str, Any]: The effective configuration.
    """
    config_path = _resolve_path(path)
    config = get_default_config(os.path.dirname(config_path))

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found. Writing defaults to {config_path}")
        save_config(config, config_path)
        return apply_env_overrides(config)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return apply_env_overrides(config)

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return apply_env_overrides(config)

    # Merge known sections over the defaults so new keys always exist
    for section in _SECTIONS:
        values = data.get(section)
        if isinstance(values, dict):
            config[section].update(values)

    config["version"] = CURRENT_CONFIG_VERSION
    return apply_env_overrides(config)


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Target file; defaults to get_config_path().
    """
    config_path = _resolve_path(path)
    try:
        os.makedirs(os.path.dirname(config_path), exist_ok=True)
        data = copy.deepcopy(config)
        data["version"] = CURRENT_CONFIG_VERSION
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override file values with SUPERSCAN_CONFIG_GOOGLE, AWS_S3_BUCKET and AWS_REGION."""
    credentials = os.environ.get(ENV_GOOGLE_CREDENTIALS)
    if credentials:
        config["google_drive"]["credentials_file"] = credentials

    bucket = os.environ.get(ENV_S3_BUCKET)
    if bucket:
        config["s3"]["bucket"] = bucket

    region = os.environ.get(ENV_AWS_REGION)
    if region:
        config["s3"]["region"] = region

    return config


def config_to_json(config: Dict[str, Any]) -> str:
    """Render the effective configuration for display."""
    return json.dumps(config, ensure_ascii=False, indent=2)


def _resolve_path(path: Optional[str]) -> str:
    """Absolute config location; relative names resolve against the cwd."""
    if not path:
        return get_config_path()
    return os.path.abspath(os.path.expanduser(path))
