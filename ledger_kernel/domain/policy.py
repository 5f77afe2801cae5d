"""
Runtime policy consumed by the ledger services.

LedgerPolicy is the kernel-side view of configuration.  It is built from a
LedgerConfig by ledger_config.bridges.build_ledger_policy so that the kernel
never imports the configuration package.
"""

from dataclasses import dataclass
from enum import Enum


class OrphanPolicy(str, Enum):
    """What to do with transactions that still reference a debt being deleted."""

    REJECT = "reject"  # raise OrphanedChildError
    CASCADE = "cascade"  # delete the transactions first


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Behavioural switches for the ledger services.

    Attributes:
        orphan_policy: Applied on debt deletion, cost deletion and supplier
            clearing.
        atomic_linkage: When True a failed derived write undoes the primary
            write.  When False the primary write is kept and the operation
            reports PARTIAL_SUCCESS.
        extra_cost_categories: Category codes accepted besides CostCategory.
    """

    orphan_policy: OrphanPolicy = OrphanPolicy.REJECT
    atomic_linkage: bool = True
    extra_cost_categories: frozenset[str] = frozenset()


DEFAULT_POLICY = LedgerPolicy()
