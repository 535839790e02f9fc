"""
Configuration Loader (``procurement_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses their ``returns:`` section into
a typed ``ReturnsConfig``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Bridges plain YAML into the
returns module's config schema; the kernel and engines never import it.

Invariants enforced
-------------------
* Unknown keys in the ``returns:`` section are rejected, never ignored.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* ``returns:`` not a mapping  -> ``ValueError``.
* Unknown key  -> ``TypeError`` from the dataclass constructor.
* Out-of-range limit  -> ``ValueError`` from ``ReturnsConfig``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from procurement_kernel.logging_config import get_logger
from procurement_modules.returns.config import ReturnsConfig

logger = get_logger("config.loader")

RETURNS_SECTION = "returns"


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping, got {type(data).__name__}")
    return data


def parse_returns_config(data: dict[str, Any]) -> ReturnsConfig:
    """Build a ``ReturnsConfig`` from the ``returns:`` section of ``data``.

    A missing or empty section yields the defaults.
    """
    section = data.get(RETURNS_SECTION) or {}
    if not isinstance(section, dict):
        raise ValueError(
            f"'{RETURNS_SECTION}' section must be a mapping, got {type(section).__name__}"
        )
    return ReturnsConfig.from_dict(dict(section))


def load_returns_config(path: Path | str) -> ReturnsConfig:
    """Load and parse the returns configuration from a YAML file."""
    data = load_yaml_file(path)
    config = parse_returns_config(data)
    logger.info(
        "returns_config_loaded",
        extra={
            "path": str(path),
            "checksum": compute_checksum(config.to_dict()),
        },
    )
    return config


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums, whatever the
    key order.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
