"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the loan ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. terms_codec.py - Packed terms round-trip and field isolation
2. accrual.py - Interest monotonicity, additivity and fee bounds
3. all_or_nothing.py - Failed operations leave no trace
4. index_consistency.py - Open loans are indexed exactly once

These tests use hypothesis for property-based testing.
"""
