"""Config loader with environment variable support."""
import copy
import os
import re
import yaml
from pathlib import Path
import threading

DEFAULT_PATH = "config/config.yaml"

DEFAULT_CONFIG = {
    "server": {
        "host": "localhost",
        "port": 4212,
        "use_ssl": False,
        "timeout": None,
    },
    "files": {
        "max_dim": 1920,
        "jpeg_quality": 95,
    },
}

_config = None
_config_lock = threading.Lock()


def _resolve_env_vars(value):
    """Resolve ${VAR:-default} patterns in config values."""
    if isinstance(value, str):
        pattern = r'\$\{(\w+)(?::-([^}]*))?\}'
        def replacer(match):
            var_name = match.group(1)
            default = match.group(2) or ""
            return os.environ.get(var_name, default)
        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _merge(defaults: dict, overrides: dict) -> dict:
    """Merge config sections over defaults, one level deep."""
    merged = copy.deepcopy(defaults)
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def _coerce(config: dict) -> dict:
    # Env substitution yields strings
    server = config["server"]
    server["port"] = int(server["port"])
    server["use_ssl"] = _to_bool(server["use_ssl"])
    timeout = server.get("timeout")
    server["timeout"] = float(timeout) if timeout not in (None, "") else None

    files = config["files"]
    files["max_dim"] = int(files["max_dim"])
    files["jpeg_quality"] = int(files["jpeg_quality"])
    return config


def load_config(path: str | None = None) -> dict:
    """Load configuration from YAML file with thread safety.

    The path defaults to $PASTEC_CONFIG, then config/config.yaml. Only a
    missing default file falls back to the built-in defaults; an explicit
    path that does not exist raises FileNotFoundError.
    """
    global _config
    with _config_lock:
        if _config is None:
            path = path or os.environ.get("PASTEC_CONFIG")
            raw_config = {}
            if path or Path(DEFAULT_PATH).is_file():
                path = path or DEFAULT_PATH
                with open(path) as f:
                    raw_config = yaml.safe_load(f) or {}
            _config = _coerce(_merge(DEFAULT_CONFIG, _resolve_env_vars(raw_config)))
    return _config


def get_config() -> dict:
    """Get loaded configuration."""
    return _config or load_config()


def reset_config() -> None:
    """Forget the loaded configuration so the next load re-reads the file."""
    global _config
    with _config_lock:
        _config = None
