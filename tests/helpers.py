"""
helpers.py - Shared constants and builders for loanledger tests
"""

from typing import Tuple

from hypothesis import strategies as st

from loanledger import (
    AssetLedger, FixedClock, LoanEventLog, LoanLifecycleManager, LoanTerms,
)


START = 1000
DAY = 86400
HALF_DAY = 43200


def make_terms(
    interest_rate: int = 500,
    start_at: int = START,
    duration: int = DAY,
    relayer_fee_rate: int = 1000,
    gas_price: int = 0,
    salt: int = 0,
) -> LoanTerms:
    """LoanTerms with the defaults used across the suite."""
    return LoanTerms(
        interest_rate=interest_rate,
        start_at=start_at,
        duration=duration,
        relayer_fee_rate=relayer_fee_rate,
        gas_price=gas_price,
        salt=salt,
    )


def open_loan(manager: LoanLifecycleManager, amount: int = 100_000,
              borrower: str = "alice", terms: LoanTerms = None,
              lender_order_id: int = 1) -> int:
    """Create a DAI loan from bank to borrower through relay."""
    return manager.create_loan(
        lender_order_id=lender_order_id,
        lender="bank",
        borrower=borrower,
        relayer="relay",
        asset="DAI",
        amount=amount,
        terms=terms or make_terms(),
    )


# =============================================================================
# RANDOM SCENARIOS
# =============================================================================

BORROWERS = ("alice", "bob")
PAYERS = ("alice", "bob", "carol")


def funded_world(clock: FixedClock, events: LoanEventLog) -> Tuple[LoanLifecycleManager, AssetLedger]:
    """Manager over an AssetLedger where carol has no funds."""
    assets = AssetLedger("scenario", verbose=False)
    assets.register_asset("DAI")
    for wallet in ("bank", "relay") + PAYERS:
        assets.register_wallet(wallet)
    for wallet in ("alice", "bob"):
        assets.issue(wallet, "DAI", 50_000)
        assets.approve(wallet, "DAI", 50_000)
    manager = LoanLifecycleManager(assets, clock, event_sink=events, verbose=False)
    return manager, assets


def apply_op(manager: LoanLifecycleManager, assets: AssetLedger, op: tuple) -> None:
    """Run one scenario step; may raise whatever the operation raises."""
    kind = op[0]
    if kind == "create":
        _, borrower, amount, fee_rate = op
        terms = make_terms(interest_rate=5000, relayer_fee_rate=fee_rate)
        open_loan(manager, amount=amount, borrower=BORROWERS[borrower], terms=terms)
    elif kind == "repay":
        _, pick, payer, amount = op
        if manager.store.count:
            manager.repay_loan(pick % manager.store.count, PAYERS[payer], amount)
    elif kind == "settle":
        _, pick, payer, amount = op
        if manager.store.count:
            manager.settle_loan(pick % manager.store.count, PAYERS[payer], amount)
    elif kind == "reduce":
        _, pick, amount = op
        if manager.store.count:
            manager.reduce_loan(pick % manager.store.count, amount)
    elif kind == "approve":
        _, payer, allowance = op
        assets.approve(PAYERS[payer], "DAI", allowance)
    elif kind == "advance":
        manager.clock.advance_by(op[1])


_pick = st.integers(min_value=0, max_value=20)
_payer = st.integers(min_value=0, max_value=len(PAYERS) - 1)
_amount = st.integers(min_value=0, max_value=6_000)

scenario_ops = st.lists(
    st.one_of(
        st.tuples(st.just("create"), st.integers(min_value=0, max_value=1),
                  _amount, st.integers(min_value=0, max_value=12_000)),
        st.tuples(st.just("repay"), _pick, _payer, _amount),
        st.tuples(st.just("settle"), _pick, _payer, _amount),
        st.tuples(st.just("reduce"), _pick, _amount),
        st.tuples(st.just("approve"), _payer, st.integers(min_value=0, max_value=60_000)),
        st.tuples(st.just("advance"), st.integers(min_value=0, max_value=30 * DAY)),
    ),
    min_size=1,
    max_size=40,
)
