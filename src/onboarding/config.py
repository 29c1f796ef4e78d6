"""Onboarding client configuration from YAML file and environment.

Loads the ``onboarding:`` section of a YAML file. Environment variables are
supported in the file using ${VAR_NAME} or ${VAR_NAME:-default} syntax, and
ONBOARDING_* variables override file values:

    onboarding:
      base_url: https://ingest.occtoo.com
      data_provider_id: ${OCCTOO_PROVIDER_ID}
      data_provider_secret: ${OCCTOO_PROVIDER_SECRET}
      token_lifetime_minutes: 59
      refresh_on_unauthorized: false
"""

import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ingest.occtoo.com"
# One minute under the service's 60 minute token lifetime
DEFAULT_TOKEN_LIFETIME_MINUTES = 59
ENV_PREFIX = "ONBOARDING_"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class OnboardingConfig:
    """Onboarding client configuration.

    All timeouts in seconds.
    """

    base_url: str = DEFAULT_BASE_URL
    data_provider_id: str = ""
    data_provider_secret: str = ""
    token_lifetime_minutes: int = DEFAULT_TOKEN_LIFETIME_MINUTES
    request_timeout_seconds: int = 120
    connect_timeout_seconds: int = 30
    max_connections: int = 100
    max_connections_per_host: int = 10
    # Force one token refresh and retry when an import gets 401/403
    refresh_on_unauthorized: bool = False

    def __repr__(self) -> str:
        secret = "***" if self.data_provider_secret else ""
        return (
            f"OnboardingConfig(base_url={self.base_url!r}, "
            f"data_provider_id={self.data_provider_id!r}, "
            f"data_provider_secret={secret!r}, "
            f"token_lifetime_minutes={self.token_lifetime_minutes}, "
            f"refresh_on_unauthorized={self.refresh_on_unauthorized})"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OnboardingConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown onboarding settings: {unknown}")

        kwargs: Dict[str, Any] = {}
        for name, value in data.items():
            if name not in known or value is None:
                continue
            if known[name].type in (bool, "bool"):
                kwargs[name] = _parse_bool(value)
            elif known[name].type in (int, "int"):
                kwargs[name] = int(value)
            else:
                kwargs[name] = str(value)
        return cls(**kwargs)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is missing or out of range
        """
        if not self.base_url:
            raise ValueError("base_url is required in onboarding section")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"base_url must start with http:// or https://, got: {self.base_url!r}"
            )

        for name in (
            "token_lifetime_minutes",
            "request_timeout_seconds",
            "connect_timeout_seconds",
            "max_connections",
            "max_connections_per_host",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")


def _env_overrides() -> Dict[str, Any]:
    overrides = {}
    for f in fields(OnboardingConfig):
        env_value = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
        if env_value is not None:
            overrides[f.name] = env_value
    return overrides


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    load_env_file: bool = False,
) -> OnboardingConfig:
    """Load onboarding configuration.

    Priority (highest to lowest):
    1. overrides argument
    2. ONBOARDING_* environment variables
    3. onboarding: section of the YAML file
    4. dataclass defaults

    Args:
        config_path: YAML file; a missing path is an error, None skips the file
        overrides: Values applied last
        load_env_file: Load a .env file from the working directory first

    Raises:
        FileNotFoundError: If config_path is given but does not exist
        ValueError: If the resulting configuration is invalid
    """
    if load_env_file:
        load_dotenv()

    data: Dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        logger.info(f"Loading configuration from file: {config_path}")
        yaml_data = _expand_env_vars(load_yaml(config_path))
        data = yaml_data.get("onboarding", {}) or {}

    data = _deep_merge(data, _env_overrides())
    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        data = _deep_merge(data, overrides)

    config = OnboardingConfig.from_dict(data)
    config.validate()
    return config


_config: Optional[OnboardingConfig] = None


def get_config() -> OnboardingConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: OnboardingConfig) -> None:
    global _config
    _config = config


def reset_config() -> None:
    global _config
    _config = None


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TOKEN_LIFETIME_MINUTES",
    "OnboardingConfig",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
]
