"""
Kernel Boundary & Invariants Contract.

Tests that enforce the ledger's architectural boundaries:

1. ledger_kernel/** and ledger_engines/** may NOT import ledger_config.
   Configuration reaches the kernel only through ledger_config.bridges.

2. ledger_engines/** is pure: no SQLAlchemy, no kernel services or
   selectors.

3. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from ledger_kernel.invariants import (
    ALL_LEDGER_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    LedgerInvariant,
)

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    """ledger_kernel/** must not import ledger_config."""

    def test_kernel_does_not_import_config(self):
        violations = _violations("ledger_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation: ledger_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )

    def test_engines_do_not_import_config(self):
        violations = _violations("ledger_engines", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, "\n".join(violations)


class TestEnginesArePure:
    """ledger_engines/** performs no I/O and knows nothing of persistence."""

    FORBIDDEN = (
        "sqlalchemy",
        "ledger_kernel.db",
        "ledger_kernel.services",
        "ledger_kernel.selectors",
    )

    def test_engines_have_no_persistence_imports(self):
        violations = _violations("ledger_engines", self.FORBIDDEN)
        assert not violations, (
            "Engine purity violation:\n" + "\n".join(violations)
        )


class TestSelectorsDoNotWrite:
    """Selectors are read-only and must not depend on services."""

    def test_selectors_do_not_import_services(self):
        violations = _violations("ledger_kernel/selectors", ("ledger_kernel.services",))
        assert not violations, "\n".join(violations)


class TestInvariantDeclaration:
    def test_every_invariant_is_declared(self):
        assert set(ALL_LEDGER_INVARIANTS) == set(LedgerInvariant)
        assert len(ALL_LEDGER_INVARIANTS) == 4

    def test_invariant_values_are_unique(self):
        values = [inv.value for inv in LedgerInvariant]
        assert len(values) == len(set(values))
