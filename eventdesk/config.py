"""
Handles loading and validation of configuration settings.

This module is responsible for loading, merging, and validating configuration settings from:
1. The config.yaml file (primary configuration source)
2. Environment variables (for secrets and overrides)

It provides a unified configuration access mechanism through the get_config_value function,
ensures settings are validated against expected types and requirements, and makes the
configuration available throughout the application.

Key components:
- APP_CONFIG: The global configuration dictionary
- get_config_value: Function to retrieve values using dot notation
- validate_config: Validates configuration against expected structure and types
- load_app_config: Loads and merges configuration from all sources
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Tuple

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment variables from .env are visible before config.yaml is merged
load_dotenv()

APP_CONFIG: Dict[str, Any] = {}

__all__ = [
    "APP_CONFIG",
    "load_app_config",
    "get_config_value",
    "validate_config",
]

DEFAULT_CONFIG_STRUCTURE = {
    "bot_settings": {
        "bot_name": "EventDesk",
        "log_file_name": "eventdesk.log",
        "db_file_name": "eventdesk.db",
        "debug_mode": False,
        "log_level": "INFO",
    },
    "discord": {
        "token": None,  # Secret
        "guild_id": None,
        "audit_log_channel_id": None,
    },
    "api": {
        "base_url": "http://localhost:8080",
        "timeout_seconds": 15,
        "user_agent": "EventDesk/1.0",
    },
    "message_settings": {
        "templates_file": "message_templates.json",
        "embed_colors": {
            "success": "0x28a745",
            "error": "0xdc3545",
            "info": "0x17a2b8",
            "warning": "0xffc107",
            "blue": "0x007bff",
        },
        "embed_footer_text": "Powered by {bot_name}",
        "bot_display_name_in_messages": "EventDesk",
    },
    "topup": {
        "fixed_amounts": [50000, 100000, 250000, 500000, 1000000],
        "custom_min": 10000,
        "custom_max": 1000000,
    },
    "reports": {
        "comment_min_length": 5,
        "comment_max_length": 500,
        "description_min_length": 10,
    },
    "transactions": {
        "page_size": 10,
    },
}

# (type, is_required, default_value)
EXPECTED_CONFIG: Dict[str, Tuple[type, bool, Any]] = {
    "bot_settings.bot_name": (str, False, "EventDesk"),
    "bot_settings.log_file_name": (str, False, "eventdesk.log"),
    "bot_settings.db_file_name": (str, False, "eventdesk.db"),
    "bot_settings.debug_mode": (bool, False, False),
    "bot_settings.log_level": (str, False, "INFO"),
    "discord.token": (str, True, None),
    "discord.guild_id": (str, True, None),
    "discord.audit_log_channel_id": (str, False, None),
    "api.base_url": (str, True, "http://localhost:8080"),
    "api.timeout_seconds": (int, False, 15),
    "api.user_agent": (str, False, "EventDesk/1.0"),
    "message_settings.templates_file": (str, False, "message_templates.json"),
    "message_settings.embed_colors": (dict, False, {}),
    "message_settings.embed_footer_text": (str, False, "Powered by {bot_name}"),
    "message_settings.bot_display_name_in_messages": (str, False, "EventDesk"),
    "topup.fixed_amounts": (list, False, [50000, 100000, 250000, 500000, 1000000]),
    "topup.custom_min": (int, False, 10000),
    "topup.custom_max": (int, False, 1000000),
    "reports.comment_min_length": (int, False, 5),
    "reports.comment_max_length": (int, False, 500),
    "reports.description_min_length": (int, False, 10),
    "transactions.page_size": (int, False, 10),
}

# Secrets and overrides that do not follow the SECTION_KEY naming
ENV_VAR_OVERRIDES = {
    ("discord", "token"): "DISCORD_TOKEN",
}


def _load_yaml_config(path: str = "config.yaml") -> Dict[str, Any]:
    """Loads configuration from a YAML file."""
    try:
        if os.path.exists(path):
            with open(path, "r") as f:
                yaml_config = yaml.safe_load(f)
                logger.info(f"Successfully loaded configuration from {path}")
                return yaml_config or {}
        else:
            logger.warning(
                f"YAML configuration file not found at {path}. "
                "Ensure 'config.yaml' exists or all settings are provided via environment variables."
            )
            return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration file {path}: {e}")
        sys.exit(f"Critical error: Could not parse {path}. Please check its syntax.")
    except OSError as e:
        logger.error(f"Could not read YAML configuration {path}: {e}")
        return {}


def _get_typed_env_var(key: str, default_value: Any, expected_type: type) -> Any:
    """Gets an environment variable and attempts to cast it to the expected type."""
    value = os.getenv(key)
    if value is None:
        return default_value

    try:
        if expected_type is bool:
            return value.lower() in ("true", "1", "t", "yes", "y")
        if expected_type is int:
            return int(value)
        if expected_type is list:  # Comma-separated; numeric items become ints
            items = [item.strip() for item in value.split(",") if item.strip()]
            return [int(item) if item.isdigit() else item for item in items]
        if expected_type is dict:
            return json.loads(value)
        return expected_type(value)
    except (ValueError, TypeError):
        logger.warning(
            f"Could not cast environment variable {key}='{value}' to {expected_type}. Using default: {default_value}"
        )
        return default_value


def _merge_configs(
    yaml_config: Dict[str, Any], defaults: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Merges YAML config with defaults section by section.
    Keys missing from the YAML keep their default values.
    """
    merged_config = {}

    for section, section_defaults in defaults.items():
        merged_config[section] = section_defaults.copy()
        yaml_section = yaml_config.get(section, {})

        if isinstance(yaml_section, dict) and isinstance(merged_config[section], dict):
            for key, default_val in section_defaults.items():
                merged_config[section][key] = yaml_section.get(key, default_val)
        elif yaml_section is not None:
            merged_config[section] = yaml_section

    return merged_config


def _apply_env_vars_to_merged_config(
    config_dict: Dict[str, Any], defaults: Dict[str, Any]
):
    """Applies environment variables to the config_dict based on default structure.
    Environment variables are expected to be in format SECTION_KEY=value (e.g., API_BASE_URL=http://...).
    This will override values previously set by YAML or defaults if the env var is present.
    """
    for section_name, section_defaults in defaults.items():
        if section_name not in config_dict:
            config_dict[section_name] = {}
        for key_name, default_value in section_defaults.items():
            env_var_key = ENV_VAR_OVERRIDES.get(
                (section_name, key_name), f"{section_name.upper()}_{key_name.upper()}"
            )
            expected_type = type(default_value) if default_value is not None else str

            if os.getenv(env_var_key) is None:
                continue

            current_val_in_config = config_dict[section_name].get(
                key_name, default_value
            )
            env_val = _get_typed_env_var(
                env_var_key, current_val_in_config, expected_type
            )
            config_dict[section_name][key_name] = env_val
            if env_val != current_val_in_config:
                logger.debug(
                    f"Applied environment variable '{env_var_key}' to '{section_name}.{key_name}'"
                )


def load_app_config(path: str = "config.yaml") -> Dict[str, Any]:
    """
    Load application configuration from YAML and environment variables.

    The configuration loading follows this priority order:
    - Built-in defaults
    - Base settings from config.yaml
    - Overrides from environment variables (including a .env file)

    Returns:
        Dict[str, Any]: The loaded configuration dictionary
    """
    global APP_CONFIG

    yaml_config = _load_yaml_config(path)
    merged_config = _merge_configs(yaml_config, DEFAULT_CONFIG_STRUCTURE)
    _apply_env_vars_to_merged_config(merged_config, DEFAULT_CONFIG_STRUCTURE)

    APP_CONFIG = merged_config

    logger.debug(f"Configuration loaded with {len(APP_CONFIG)} top-level keys.")
    return APP_CONFIG


load_app_config()


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using dot notation path.

    Args:
        path: Dot-notation path to the configuration value (e.g., 'api.base_url')
        default: Value to return if the path is not found or is unset

    Returns:
        The configuration value at the specified path, or the default if not found

    Examples:
        >>> get_config_value('transactions.page_size', 10)
        10
        >>> get_config_value('nonexistent.path', 'fallback')
        'fallback'
    """
    if not APP_CONFIG:
        load_app_config()

    current: Any = APP_CONFIG
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return default if current is None else current


def _is_hex_color(value: str) -> bool:
    return (
        value.startswith("0x")
        and len(value) == 8
        and all(c in "0123456789abcdefABCDEF" for c in value[2:])
    )


def validate_config() -> None:
    """
    Validates the loaded configuration against expected types and requirements.

    Every problem is logged at CRITICAL before exiting, so a single run reports
    all misconfigured keys at once. Non-critical issues are logged as warnings.

    Raises:
        SystemExit: If a critical configuration error is found
    """
    logger.info("Validating configuration...")
    valid = True

    for key, (p_type, is_required, _default) in EXPECTED_CONFIG.items():
        val = get_config_value(key)

        if val is None:
            if is_required:
                logger.critical(
                    f"Config Error: Required key '{key}' is missing or not set."
                )
                valid = False
            continue

        type_valid = isinstance(val, p_type)
        if p_type is int and isinstance(val, bool):
            type_valid = False
        if not type_valid:
            logger.critical(
                f"Config Error: Key '{key}' (value: '{val}', type: {type(val).__name__}) must be of type {p_type.__name__}."
            )
            valid = False
            continue

        if key == "bot_settings.log_level":
            if val.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                logger.critical(
                    f"Config Error: '{key}' (value: {val}) must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
                )
                valid = False

        elif key in ["discord.guild_id", "discord.audit_log_channel_id"]:
            if not val.isdigit():
                logger.critical(
                    f"Config Error: '{key}' (value: {val}) must be a valid Discord ID (string of digits)."
                )
                valid = False

        elif key.endswith("url") and val:
            if not (val.startswith("http://") or val.startswith("https://")):
                logger.warning(
                    f"Config Warning: Key '{key}' (value: {val}) does not appear to be a valid HTTP/HTTPS URL."
                )

        elif key in [
            "api.timeout_seconds",
            "transactions.page_size",
            "topup.custom_min",
            "topup.custom_max",
            "reports.comment_min_length",
            "reports.comment_max_length",
            "reports.description_min_length",
        ]:
            if val <= 0:
                logger.critical(
                    f"Config Error: Key '{key}' (value: {val}) must be a positive integer."
                )
                valid = False

        elif key == "topup.fixed_amounts":
            if not val or not all(isinstance(a, int) and a > 0 for a in val):
                logger.critical(
                    f"Config Error: All items in '{key}' must be positive integers."
                )
                valid = False

        elif key == "message_settings.embed_colors":
            for color_name, color_value in val.items():
                if not isinstance(color_value, str) or not _is_hex_color(color_value):
                    logger.critical(
                        f"Config Error: In '{key}', color value '{color_value}' for '{color_name}' is not a valid hex color string (e.g., '0xFF00FF')."
                    )
                    valid = False
                    break

    custom_min = get_config_value("topup.custom_min", 10000)
    custom_max = get_config_value("topup.custom_max", 1000000)
    if isinstance(custom_min, int) and isinstance(custom_max, int):
        if custom_min > custom_max:
            logger.critical(
                f"Config Error: 'topup.custom_min' ({custom_min}) must not exceed 'topup.custom_max' ({custom_max})."
            )
            valid = False

    comment_min = get_config_value("reports.comment_min_length", 5)
    comment_max = get_config_value("reports.comment_max_length", 500)
    if isinstance(comment_min, int) and isinstance(comment_max, int):
        if comment_min > comment_max:
            logger.critical(
                f"Config Error: 'reports.comment_min_length' ({comment_min}) must not exceed 'reports.comment_max_length' ({comment_max})."
            )
            valid = False

    if not valid:
        logger.critical(
            "Configuration validation failed. Please check your config.yaml and .env files, or logs for details."
        )
        sys.exit(1)
    logger.info("Configuration validated successfully.")
