"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.streamtape/config.yaml), and builds the ClientConfig
used by the client.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from dotenv import load_dotenv

from streamtape.domain.models.api import DEFAULT_BASE_URL
from streamtape.domain.models.config import (
    DEFAULT_BASE_DELAY_SECONDS,
    DEFAULT_MAX_DELAY_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRYABLE_STATUS_CODES,
    DEFAULT_TIMEOUT_SECONDS,
    ClientConfig,
    RetryConfig,
)

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".streamtape"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ({'retry': {'max_retries': 2}} -> 'retry.max_retries')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file (~/.streamtape/config.yaml if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False keeps real environment variables on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("No .env file found at or above the current directory.")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load_configuration() reads again."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _env_key(key: str) -> str:
    return key.upper().replace('.', '_')


def _convert_env_value(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None, convert: bool = True) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key, e.g. 'streamtape.retry.max_retries'
        default: Default value if the key is not found
        convert: Convert environment strings to bool/int/float

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = _env_key(key)
    if env_key in os.environ:
        value = os.environ[env_key]
        return _convert_env_value(value) if convert else value

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def _parse_status_codes(value: Any) -> Iterable[int]:
    """Accepts a YAML list, a single int, or a comma-separated string ('' means none)."""
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        return [int(part) for part in value.split(',') if part.strip()]
    return [int(code) for code in value]


def load_retry_config() -> RetryConfig:
    """Builds the RetryConfig from settings; zeros and empty lists are kept."""
    codes = get_config('streamtape.retry.retryable_status_codes', None)
    return RetryConfig(
        max_retries=int(get_config('streamtape.retry.max_retries', DEFAULT_MAX_RETRIES)),
        base_delay=float(get_config('streamtape.retry.base_delay', DEFAULT_BASE_DELAY_SECONDS)),
        max_delay=float(get_config('streamtape.retry.max_delay', DEFAULT_MAX_DELAY_SECONDS)),
        retryable_status_codes=(
            DEFAULT_RETRYABLE_STATUS_CODES if codes is None else frozenset(_parse_status_codes(codes))
        ),
    )


def load_client_config(login: Optional[str] = None, key: Optional[str] = None) -> ClientConfig:
    """Builds the ClientConfig from explicit credentials and loaded settings.

    Raises:
        ValueError: If no login or key can be found.
    """
    load_configuration()
    effective_login = login or get_config('streamtape.login', convert=False)
    effective_key = key or get_config('streamtape.key', convert=False)
    if not effective_login or not effective_key:
        raise ValueError(
            "StreamTape credentials not found. Set STREAMTAPE_LOGIN and STREAMTAPE_KEY "
            f"or add them to {DEFAULT_CONFIG_FILE}."
        )
    return ClientConfig(
        login=str(effective_login),
        key=str(effective_key),
        base_url=str(get_config('streamtape.base_url', DEFAULT_BASE_URL)),
        timeout=float(get_config('streamtape.timeout', DEFAULT_TIMEOUT_SECONDS)),
        retry=load_retry_config(),
    )


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
