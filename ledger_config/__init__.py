"""
ledger_config: single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration.  This package sits above ``ledger_kernel``.  The kernel
    MUST NEVER import from ``ledger_config``; ``bridges`` translates a
    ``LedgerConfig`` into kernel inputs.

Environment:
    LEDGER_CONFIG_FILE   -- path of the YAML file (default: bundled
                            ``defaults/ledger.yaml``).
    LEDGER_DATABASE_URL  -- overrides ``database_url`` from the file.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``ValueError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``LEDGER_CONFIG_TRACE`` log entry with the source path, checksum and
    the policy switches in force.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ledger_config.bridges import build_ledger_policy
from ledger_config.loader import load_ledger_config
from ledger_config.schema import LedgerConfig

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults" / "ledger.yaml"

CONFIG_FILE_ENV = "LEDGER_CONFIG_FILE"
DATABASE_URL_ENV = "LEDGER_DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        path: Explicit config file.  When omitted, LEDGER_CONFIG_FILE is
            used, then the bundled default.

    Returns:
        A validated, frozen LedgerConfig.
    """
    if path is None:
        path = os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"ledger configuration not found: {path}")

    config = load_ledger_config(path, os.environ.get(DATABASE_URL_ENV) or None)

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "source": str(path),
            "checksum": config.checksum,
            "orphan_policy": config.orphan_policy,
            "atomic_linkage": config.atomic_linkage,
            "extra_cost_categories": list(config.extra_cost_categories),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "LedgerConfig",
    "build_ledger_policy",
    "get_active_config",
]
