"""
Cost categories.

The built-in set is closed; deployments may register extra codes through
configuration (LedgerPolicy.extra_cost_categories).  Codes are stored upper
case.
"""

from collections.abc import Iterable
from enum import Enum

from ledger_kernel.exceptions import InvalidCategoryError


class CostCategory(str, Enum):
    """Built-in cost categories."""

    VAT_TU = "VAT_TU"
    NHAN_CONG = "NHAN_CONG"
    MAY_MOC = "MAY_MOC"
    VAN_CHUYEN = "VAN_CHUYEN"
    QUANG_CAO = "QUANG_CAO"
    KHAC = "KHAC"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS: dict[CostCategory, str] = {
    CostCategory.VAT_TU: "Materials",
    CostCategory.NHAN_CONG: "Labour",
    CostCategory.MAY_MOC: "Machinery",
    CostCategory.VAN_CHUYEN: "Transport",
    CostCategory.QUANG_CAO: "Advertising",
    CostCategory.KHAC: "Other",
}


def resolve_category(category: str | None, extra: Iterable[str] = ()) -> str:
    """
    Normalize and validate a category code.

    Args:
        category: Raw code from the caller.
        extra: Additional codes accepted besides the built-in ones.

    Returns:
        The normalized code.

    Raises:
        InvalidCategoryError: If the code is empty or not registered.
    """
    if category is None:
        raise InvalidCategoryError("")
    code = str(category).strip().upper()
    if not code:
        raise InvalidCategoryError(str(category))
    if code in CostCategory.__members__:
        return code
    if code in {e.strip().upper() for e in extra}:
        return code
    raise InvalidCategoryError(code)


def category_label(code: str) -> str:
    """Human-readable label; unknown (configured) codes label themselves."""
    try:
        return CostCategory(code).label
    except ValueError:
        return code
