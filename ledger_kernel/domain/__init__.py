"""Pure domain types for the ledger kernel: DTOs, categories, policy, results, roles."""
