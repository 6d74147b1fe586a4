"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY (Junior Developer Guide) ──────────────────
#
#   1. config/config.yaml : limiter, retry, batching and cache tunables
#   2. .env / environment : credentials, host/port, log level
#
# load_config() reads the YAML first and deep-merges the Settings-derived
# values on top, so ``app.port`` from the environment beats the YAML one
# while ``archive.rate_limit`` stays as written.
#
# The merged dict is then checked before any fetcher is built:
#
#   archive|catalog.rate_limit.max_concurrent   int >= 1
#   archive|catalog.rate_limit.min_interval     >= 0
#   archive|catalog.rate_limit.max_retries      int >= 0
#   enrichment.batch_size                       int >= 1
#
# Keys that are absent fall back to the defaults in main.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from setlist_scout.config.settings import Settings
from setlist_scout.utils.errors import ConfigurationError

_LIMITED_UPSTREAMS = ("archive", "catalog")


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Already-built settings; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: A limiter or batching tunable is out of range.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "identity": {
            "user_agent": settings.musicbrainz_user_agent(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    _validate(yaml_config)
    return yaml_config


def _validate(config: dict) -> None:
    for upstream in _LIMITED_UPSTREAMS:
        limits = (config.get(upstream) or {}).get("rate_limit") or {}
        _require(limits, "max_concurrent", f"{upstream}.rate_limit", minimum=1, integer=True)
        _require(limits, "min_interval", f"{upstream}.rate_limit", minimum=0)
        _require(limits, "max_retries", f"{upstream}.rate_limit", minimum=0, integer=True)

    _require(config.get("enrichment") or {}, "batch_size", "enrichment", minimum=1, integer=True)


def _require(section: dict, key: str, where: str, minimum: float, integer: bool = False) -> None:
    if key not in section:
        return
    value = section[key]
    # bool is an int subclass; `max_concurrent: true` is still a typo.
    valid_type = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, valid_type) or value < minimum:
        raise ConfigurationError(
            message=f"{where}.{key} must be {'an integer' if integer else 'a number'} >= {minimum}, got {value!r}"
        )


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
