"""
procurement_config -- YAML configuration loading for the procurement system.

Responsibility:
    Reads configuration files and turns them into the typed config schemas
    declared by the modules.  No other package reads configuration files.

Architecture position:
    Configuration -- sits above ``procurement_modules`` (it builds their
    config dataclasses).  The kernel and engines MUST NEVER import from
    ``procurement_config``.
"""

from procurement_config.loader import (
    compute_checksum,
    load_returns_config,
    load_yaml_file,
    parse_returns_config,
)

__all__ = [
    "compute_checksum",
    "load_returns_config",
    "load_yaml_file",
    "parse_returns_config",
]
