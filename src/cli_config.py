"""Configuration assembly for the CLI.

Settings are layered with increasing precedence: built-in defaults from
``Constants``, then the optional YAML/JSON config file, then CLI flags.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

from constants import ExclusionKeyMode
from registry.maven.coordinates import InputError
from registry.maven.resolver import ResolverConfig

logger = logging.getLogger(__name__)


def _scope_list(value: Any) -> Tuple[str, ...]:
    """Accept a single scope name or a list of them."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("skipped_scopes must be a string or a list")
    return tuple(str(scope).strip().lower() for scope in value)


# config-file key -> (ResolverConfig field, converter)
_FILE_KEYS = {
    "base_url": ("base_url", str),
    "output_dir": ("output_dir", str),
    "pom_dir": ("pom_dir", str),
    "artifact_extension": ("artifact_extension", str),
    "metadata_extension": ("metadata_extension", str),
    "parent_version_placeholder": ("parent_version_placeholder", str),
    "timeout": ("timeout", float),
    "max_depth": ("max_depth", int),
    "exclusion_key_mode": ("exclusion_key_mode", lambda v: ExclusionKeyMode(str(v).lower())),
    "skipped_scopes": ("skipped_scopes", _scope_list),
}

# argparse dest -> (ResolverConfig field, converter)
_ARG_KEYS = {
    "BASE_URL": ("base_url", str),
    "OUTPUT_DIR": ("output_dir", str),
    "POM_DIR": ("pom_dir", str),
    "TIMEOUT": ("timeout", float),
    "MAX_DEPTH": ("max_depth", int),
    "EXCLUSION_KEY_MODE": ("exclusion_key_mode", ExclusionKeyMode),
}


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML (or JSON) file.

    A top-level ``depfetch`` section is used when present.

    Raises:
        InputError: If the file is missing, unreadable, or not a mapping.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        raise InputError(f"Config file not found: {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise InputError(f"Failed to load config {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InputError(f"Config {config_path} must contain a mapping")
    section = data.get("depfetch", data)
    if not isinstance(section, dict):
        raise InputError(f"Config {config_path}: 'depfetch' must be a mapping")
    return section


def _apply(config: ResolverConfig, field_name: str, converter, raw: Any, source: str) -> None:
    try:
        setattr(config, field_name, converter(raw))
    except (TypeError, ValueError) as exc:
        raise InputError(f"Invalid value for {field_name} in {source}: {raw!r}") from exc


def build_config(args: Any, file_settings: Optional[Dict[str, Any]] = None) -> ResolverConfig:
    """Assemble a ResolverConfig from defaults, config file values and CLI args.

    Raises:
        InputError: If a setting has an invalid value.
    """
    config = ResolverConfig()

    for key, raw in (file_settings or {}).items():
        if key not in _FILE_KEYS:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if raw is None:
            continue
        field_name, converter = _FILE_KEYS[key]
        _apply(config, field_name, converter, raw, "config file")

    for dest, (field_name, converter) in _ARG_KEYS.items():
        raw = getattr(args, dest, None)
        if raw is not None:
            _apply(config, field_name, converter, raw, "command line")

    if config.max_depth is not None and config.max_depth < 0:
        raise InputError("max_depth must be zero or greater")
    return config
