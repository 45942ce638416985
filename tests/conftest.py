"""
conftest.py - Shared pytest fixtures for loanledger tests

Provides common fixtures used across unit and conformance tests:
- Standard loan terms (5% annual, one-day duration, 10% relayer fee)
- A funded AssetLedger with lender, borrower and relayer wallets
- Lifecycle managers wired to the asset ledger or to recording fakes
"""

import pytest

from loanledger import (
    AssetLedger, FixedClock, LoanEventLog, LoanLifecycleManager,
)

from tests.fakes import RecordingTransfer
from tests.helpers import START, make_terms


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def terms():
    """5% annual, starts at 1000, one day, 10% relayer fee."""
    return make_terms()


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def event_log():
    return LoanEventLog()


@pytest.fixture
def assets():
    """AssetLedger with DAI and funded, approved borrowers."""
    ledger = AssetLedger("test", verbose=False, test_mode=True)
    ledger.register_asset("DAI")
    for wallet in ("bank", "alice", "bob", "relay"):
        ledger.register_wallet(wallet)
    for wallet in ("alice", "bob"):
        ledger.set_balance(wallet, "DAI", 1_000_000)
        ledger.approve(wallet, "DAI", 1_000_000)
    return ledger


@pytest.fixture
def manager(assets, clock, event_log):
    """Lifecycle manager settling through the AssetLedger."""
    return LoanLifecycleManager(assets, clock, event_sink=event_log, verbose=False)


@pytest.fixture
def recording_transfer():
    return RecordingTransfer()


@pytest.fixture
def recording_manager(recording_transfer, clock, event_log):
    """Lifecycle manager whose transfers are only recorded."""
    return LoanLifecycleManager(recording_transfer, clock, event_sink=event_log, verbose=False)
