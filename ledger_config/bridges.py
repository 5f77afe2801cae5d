"""
Config → Kernel Bridges.

Functions that convert a LedgerConfig into kernel inputs.  These live in
ledger_config (the producer) because the kernel must NEVER import
ledger_config.

Usage:
    from ledger_config.bridges import build_ledger_policy

    config = get_active_config()
    policy = build_ledger_policy(config)
"""

from __future__ import annotations

import logging

from ledger_config.schema import LedgerConfig
from ledger_kernel.domain.policy import LedgerPolicy, OrphanPolicy


def build_ledger_policy(config: LedgerConfig) -> LedgerPolicy:
    """Build the kernel LedgerPolicy from a LedgerConfig."""
    return LedgerPolicy(
        orphan_policy=OrphanPolicy(config.orphan_policy),
        atomic_linkage=config.atomic_linkage,
        extra_cost_categories=frozenset(config.extra_cost_categories),
    )


def log_level_of(config: LedgerConfig) -> int:
    """The stdlib logging level named by the config."""
    return logging.getLevelName(config.log_level)
