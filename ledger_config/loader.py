"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a ledger YAML file and parses it into a frozen ``LedgerConfig``.
Callers outside this package go through ``ledger_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or mistyped keys  -> ``ValueError`` with the key name.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import LedgerConfig

_KNOWN_KEYS = frozenset(
    {"database_url", "orphan_policy", "atomic_linkage", "extra_cost_categories", "log_level"}
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file into a dict."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of a config mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _parse_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _parse_categories(data: dict[str, Any]) -> tuple[str, ...]:
    raw = data.get("extra_cost_categories") or []
    if not isinstance(raw, list):
        raise ValueError("extra_cost_categories must be a list")
    codes = []
    for item in raw:
        code = str(item).strip().upper()
        if not code:
            raise ValueError("extra_cost_categories entries must not be empty")
        codes.append(code)
    return tuple(sorted(set(codes)))


def parse_ledger_config(
    data: dict[str, Any],
    database_url_override: str | None = None,
) -> LedgerConfig:
    """Parse a raw mapping into a LedgerConfig."""
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"unknown configuration keys: {sorted(unknown)}")

    database_url = database_url_override or data.get("database_url")
    if not database_url:
        raise ValueError("database_url is required")

    return LedgerConfig(
        database_url=str(database_url),
        orphan_policy=str(data.get("orphan_policy", "reject")).strip().lower(),
        atomic_linkage=_parse_bool(data, "atomic_linkage", True),
        extra_cost_categories=_parse_categories(data),
        log_level=str(data.get("log_level", "INFO")).strip().upper(),
        checksum=compute_checksum(data),
    )


def load_ledger_config(
    path: Path,
    database_url_override: str | None = None,
) -> LedgerConfig:
    return parse_ledger_config(load_yaml_file(path), database_url_override)
