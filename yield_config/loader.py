"""
Configuration Loader (``yield_config.loader``).

Responsibility
--------------
Reads a YAML settings file and parses it into a frozen
``yield_config.schema.YieldConfig``.  Runtime callers go through
``yield_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from ``YieldConfig``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from yield_config.schema import YieldConfig

_KNOWN_KEYS = frozenset({"database_url", "initial_oracle", "log_level", "echo_sql"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> YieldConfig:
    """
    Build a YieldConfig from a parsed dict.

    Raises:
        KeyError: if ``database_url`` or ``initial_oracle`` is missing.
        ValueError: on unknown keys or invalid values.
    """
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    return YieldConfig(
        database_url=data["database_url"],
        initial_oracle=data["initial_oracle"],
        log_level=str(data.get("log_level", "INFO")).upper(),
        echo_sql=data.get("echo_sql", False),
        checksum=compute_checksum(data),
    )


def load_config(path: Path | str) -> YieldConfig:
    """Load and parse the YAML settings file at ``path``."""
    return parse_config(load_yaml_file(Path(path)))
