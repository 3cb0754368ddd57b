"""Configuration loading from defaults, optional YAML file, env vars, and CLI args."""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_int(name: str, value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer %r for %s, using %d", value, name, default)
        return default


@dataclass(frozen=True)
class Config:
    assets_dir: str | None = None
    sdk_path: str | None = None
    compressed: bool = True
    viewer_host: str = "127.0.0.1"
    viewer_port: int = 8080
    preferences_file: str | None = None
    log_level: str = "INFO"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config from YAML data, env vars, then CLI args (highest wins)."""
    yaml_data = yaml_data or {}
    viewer = yaml_data.get("viewer") or {}

    assets_dir = os.environ.get("SYSTRACE_ASSETS_DIR", yaml_data.get("assets_dir", Config.assets_dir))
    sdk_path = os.environ.get("SYSTRACE_SDK_PATH", yaml_data.get("sdk_path", Config.sdk_path))
    compressed = _parse_bool(os.environ.get("SYSTRACE_COMPRESSED", yaml_data.get("compressed", Config.compressed)))
    viewer_host = os.environ.get("SYSTRACE_VIEWER_HOST", viewer.get("host", Config.viewer_host))
    viewer_port = _parse_int(
        "viewer port",
        os.environ.get("SYSTRACE_VIEWER_PORT", viewer.get("port", Config.viewer_port)),
        Config.viewer_port,
    )
    preferences_file = os.environ.get(
        "SYSTRACE_PREFERENCES_FILE", yaml_data.get("preferences_file", Config.preferences_file)
    )
    log_level = os.environ.get("SYSTRACE_LOG_LEVEL", yaml_data.get("log_level", Config.log_level))

    def _cli(name, current):
        value = getattr(cli_args, name, None) if cli_args is not None else None
        return current if value is None else value

    return Config(
        assets_dir=_cli("assets", assets_dir),
        sdk_path=_cli("sdk", sdk_path),
        compressed=_cli("compressed", compressed),
        viewer_host=_cli("host", viewer_host),
        viewer_port=_cli("port", viewer_port),
        preferences_file=_cli("preferences", preferences_file),
        log_level=str(_cli("log_level", log_level)).upper(),
    )
