"""
LedgerConfig schema.

The typed, frozen form of a ledger configuration file.  The loader parses
YAML into this type; bridges translate it into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

VALID_ORPHAN_POLICIES = ("reject", "cascade")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """Deployment configuration for the ledger."""

    database_url: str
    orphan_policy: str = "reject"
    atomic_linkage: bool = True
    extra_cost_categories: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"
    checksum: str = ""

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url is required")
        if self.orphan_policy not in VALID_ORPHAN_POLICIES:
            raise ValueError(
                f"orphan_policy must be one of {VALID_ORPHAN_POLICIES}, "
                f"got '{self.orphan_policy}'"
            )
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{self.log_level}'"
            )
