"""
Typed exception hierarchy for the ledger kernel.

Every error has a typed class (catch by type, not message), a ``code`` class
attribute (machine-readable, safe to hand to an API) and structured
attributes carrying the ids involved.

    LedgerError (base)
    |
    +-- LedgerValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidCategoryError
    |   +-- ParentScopeError
    |   +-- DebtTypeMismatchError
    |   +-- DerivedDebtError
    |
    +-- NotFoundError
    |   +-- PartnerNotFoundError
    |   +-- CostNotFoundError
    |   +-- DebtNotFoundError
    |   +-- TransactionNotFoundError
    |   +-- ParentNotFoundError
    |
    +-- PartialFailureError
    +-- OrphanedChildError
    +-- StoreError
    +-- AuthorizationError

Category        | Code                 | When raised
----------------|----------------------|-----------------------------------------
Validation      | INVALID_AMOUNT       | Amount not a number, negative, or not > 0
                | INVALID_CATEGORY     | Empty or unregistered cost category
                | PARENT_SCOPE         | Cost parent is neither/both contract and project
                | DEBT_TYPE_MISMATCH   | RECEIPT on a PAYABLE debt, wrong partner, ...
                | DERIVED_DEBT         | Direct edit/delete of a cost-derived debt
Not found       | PARTNER_NOT_FOUND    | Partner id does not exist
                | COST_NOT_FOUND       | Cost id does not exist
                | DEBT_NOT_FOUND       | Debt id does not exist
                | TRANSACTION_NOT_FOUND| Transaction id does not exist
                | PARENT_NOT_FOUND     | Contract / project id does not exist
Consistency     | PARTIAL_FAILURE      | Primary write kept, derived write failed
                | ORPHANED_CHILD       | Debt still referenced by transactions
Store           | STORE_ERROR          | Persistence failure (constraint, connectivity)
Access          | ROLE_REQUIRED        | Caller's role does not allow the operation
"""

from typing import Any


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "LEDGER_ERROR"


# Validation


class LedgerValidationError(LedgerError):
    """Malformed input, rejected before any write."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidAmountError(LedgerValidationError):
    """Amount cannot be parsed or is out of range."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: Any, reason: str):
        self.value = str(value)
        super().__init__(field, reason)


class InvalidCategoryError(LedgerValidationError):
    """Cost category is empty or not registered."""

    code: str = "INVALID_CATEGORY"

    def __init__(self, category: str):
        self.category = category
        super().__init__("category", f"unknown cost category '{category}'")


class ParentScopeError(LedgerValidationError):
    """A cost must belong to exactly one contract or one project."""

    code: str = "PARENT_SCOPE"

    def __init__(self, reason: str):
        super().__init__("parent", reason)


class DebtTypeMismatchError(LedgerValidationError):
    """Transaction cannot be linked to the given debt."""

    code: str = "DEBT_TYPE_MISMATCH"

    def __init__(self, debt_id: str, reason: str):
        self.debt_id = debt_id
        super().__init__("debt_id", reason)


class DerivedDebtError(LedgerValidationError):
    """Cost-derived debts are maintained through their cost only."""

    code: str = "DERIVED_DEBT"

    def __init__(self, debt_id: str, source_cost_id: str):
        self.debt_id = debt_id
        self.source_cost_id = source_cost_id
        super().__init__(
            "debt_id",
            f"debt {debt_id} is derived from cost {source_cost_id}; "
            "edit or delete the cost instead",
        )


# Not found


class NotFoundError(LedgerError):
    """Referenced record does not exist."""

    code: str = "NOT_FOUND"
    entity_type: str = "record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity_type.capitalize()} not found: {entity_id}")


class PartnerNotFoundError(NotFoundError):
    code: str = "PARTNER_NOT_FOUND"
    entity_type: str = "partner"


class CostNotFoundError(NotFoundError):
    code: str = "COST_NOT_FOUND"
    entity_type: str = "cost"


class DebtNotFoundError(NotFoundError):
    code: str = "DEBT_NOT_FOUND"
    entity_type: str = "debt"


class TransactionNotFoundError(NotFoundError):
    code: str = "TRANSACTION_NOT_FOUND"
    entity_type: str = "transaction"


class ParentNotFoundError(NotFoundError):
    """Contract or project referenced by a cost does not exist."""

    code: str = "PARENT_NOT_FOUND"
    entity_type: str = "parent"

    def __init__(self, parent_kind: str, entity_id: str):
        self.parent_kind = parent_kind
        super().__init__(entity_id)


# Consistency


class PartialFailureError(LedgerError):
    """
    The primary entity write succeeded but the derived ledger write failed.

    Only raised when atomic linkage is disabled; names the invariant that is
    now violated and the entity an operator must reconcile.  ``result``
    holds whatever the kept primary write produced.
    """

    code: str = "PARTIAL_FAILURE"

    def __init__(
        self,
        invariant: str,
        entity_type: str,
        entity_id: str,
        reason: str,
        result: Any = None,
    ):
        self.invariant = invariant
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        self.result = result
        super().__init__(
            f"{entity_type} {entity_id} committed but {invariant} is violated: {reason}"
        )


class OrphanedChildError(LedgerError):
    """Debt cannot be deleted while transactions still reference it."""

    code: str = "ORPHANED_CHILD"

    def __init__(self, debt_id: str, transaction_count: int):
        self.debt_id = debt_id
        self.transaction_count = transaction_count
        super().__init__(
            f"Debt {debt_id} still has {transaction_count} transaction(s); "
            "delete them first"
        )


# Store


class StoreError(LedgerError):
    """Persistence failure reported by the ledger store."""

    code: str = "STORE_ERROR"

    def __init__(self, operation: str, entity_type: str, reason: str):
        self.operation = operation
        self.entity_type = entity_type
        self.reason = reason
        super().__init__(f"Store {operation} on {entity_type} failed: {reason}")


# Access


class AuthorizationError(LedgerError):
    """Caller's role is not allowed to perform the operation."""

    code: str = "ROLE_REQUIRED"

    def __init__(self, role: str, allowed: tuple[str, ...]):
        self.role = role
        self.allowed = allowed
        super().__init__(
            f"Role '{role}' not permitted; requires one of {', '.join(allowed)}"
        )
