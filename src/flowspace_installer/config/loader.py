"""Configuration loading and merging.

Handles building the installer configuration from:
- Built-in defaults
- An optional YAML file (--config, $FLOWSPACE_CONFIG, ~/.config/flowspace/installer.yml)
- FLOWSPACE_* environment variables
- CLI flags

Later layers take precedence. YAML string values support ${VAR} expansion.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from flowspace_installer.bootstrap.paths import get_default_config_path, get_default_install_dir
from flowspace_installer.config.models import DEFAULT_REPOSITORY, InstallerConfig
from flowspace_installer.config.validation import ValidationSeverity, validate_config
from flowspace_installer.core.logging import get_logger
from flowspace_installer.core.models import VersionSelector
from flowspace_installer.release.endpoints import DEFAULT_API_URL, DEFAULT_DOWNLOAD_URL

LOGGER = get_logger(__name__)

CONFIG_ENV_VAR = "FLOWSPACE_CONFIG"

# Environment variable -> config key
ENV_VARS: Dict[str, str] = {
    "FLOWSPACE_VERSION": "version",
    "FLOWSPACE_INSTALL_DIR": "install_dir",
    "FLOWSPACE_BASE_URL": "base_url",
    "FLOWSPACE_FORCE": "force",
    "FLOWSPACE_USE_GCM_AUTH": "use_credentials",
    "FLOWSPACE_PRE_RELEASE": "pre_release",
    "FLOWSPACE_SKIP_PREFLIGHT": "skip_preflight",
}

BOOLEAN_ENV_KEYS = {"force", "use_credentials", "pre_release", "skip_preflight"}

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

ALLOWED_BASE_SCHEMES = ("file://", "http://", "https://")

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    cli_overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> InstallerConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. FLOWSPACE_* environment variables
    3. Config file
    4. Built-in defaults

    Args:
        cli_overrides: Dict of CLI flag overrides; None values are ignored.
        environ: Environment to read (defaults to os.environ).
        config_path: Optional path to a config file (--config flag).

    Returns:
        Merged InstallerConfig instance.

    Raises:
        ConfigError: If a config file is missing or invalid, or a value is malformed.
    """
    env = os.environ if environ is None else environ
    sources: List[str] = ["defaults"]
    merged: Dict[str, Any] = {}

    # Layer 1: Config file
    file_path = find_config_file(config_path, env)
    if file_path is not None:
        merged = merge_configs(merged, load_yaml_file(file_path, env))
        sources.append(f"file:{file_path}")
        LOGGER.debug(f"Loaded config from {file_path}")

    # Layer 2: Environment variables
    env_dict = env_overrides(env)
    if env_dict:
        merged = merge_configs(merged, env_dict)
        sources.append("env")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, {k: v for k, v in cli_overrides.items() if v is not None})
        sources.append("cli")

    config = dict_to_config(merged)
    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def find_config_file(config_path: Optional[Path], environ: Mapping[str, str]) -> Optional[Path]:
    """Locate the config file to read, if any.

    An explicitly named file (flag or environment) must exist; the default
    location is optional.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return config_path

    env_value = environ.get(CONFIG_ENV_VAR)
    if env_value:
        env_path = Path(env_value).expanduser()
        if not env_path.is_file():
            raise ConfigError(f"Config file not found: {env_path} (from ${CONFIG_ENV_VAR})")
        return env_path

    default_path = get_default_config_path()
    if default_path.is_file():
        return default_path
    return None


def load_yaml_file(path: Path, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load, expand and validate a YAML config file.

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or has invalid values.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    data = expand_env_vars(data, os.environ if environ is None else environ)

    errors = [
        issue for issue in validate_config(data, source=str(path))
        if issue.severity == ValidationSeverity.ERROR
    ]
    if errors:
        raise ConfigError("; ".join(f"{issue.message} in {issue.source}" for issue in errors))
    return data


def expand_env_vars(data: Any, environ: Mapping[str, str]) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v, environ) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item, environ) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(lambda m: _env_var_replacer(m, environ), data)
    else:
        return data


def _env_var_replacer(match: re.Match[str], environ: Mapping[str, str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def parse_bool(value: str, name: str) -> bool:
    """Parse a boolean environment value.

    Raises:
        ConfigError: If the value is not a recognised boolean.
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: '{value}' (use true/false)")


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect config values from FLOWSPACE_* environment variables."""
    result: Dict[str, Any] = {}
    for var, key in ENV_VARS.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        result[key] = parse_bool(value, var) if key in BOOLEAN_ENV_KEYS else value
    return result


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two flat config dicts, with overlay taking precedence."""
    result = base.copy()
    result.update(overlay)
    return result


def _validate_base_url(base_url: Optional[str]) -> Optional[str]:
    if not base_url:
        return None
    base_url = base_url.strip()
    if not base_url.lower().startswith(ALLOWED_BASE_SCHEMES):
        raise ConfigError(f"Base URL must start with file://, http:// or https://: {base_url}")
    return base_url.rstrip("/")


def dict_to_config(data: Dict[str, Any]) -> InstallerConfig:
    """Convert a merged dict to a typed InstallerConfig.

    Raises:
        ConfigError: If a value is malformed.
    """
    repository = str(data.get("repository") or DEFAULT_REPOSITORY).strip()
    owner, _, name = repository.partition("/")
    if not owner or not name or "/" in name:
        raise ConfigError(f"Repository must be in owner/name form: {repository}")

    install_dir = data.get("install_dir")
    install_dir_path = Path(install_dir).expanduser() if install_dir else get_default_install_dir()

    selector = VersionSelector.parse(
        data.get("version"),
        include_prerelease=bool(data.get("pre_release", False)),
    )

    return InstallerConfig(
        repository=repository,
        binary_name=str(data.get("binary_name") or name),
        selector=selector,
        install_dir=install_dir_path,
        base_url=_validate_base_url(data.get("base_url")),
        force=bool(data.get("force", False)),
        use_credentials=bool(data.get("use_credentials", True)),
        skip_preflight=bool(data.get("skip_preflight", False)),
        api_url=str(data.get("api_url") or DEFAULT_API_URL).rstrip("/"),
        download_url=str(data.get("download_url") or DEFAULT_DOWNLOAD_URL).rstrip("/"),
    )
