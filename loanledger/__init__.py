"""
loanledger - Loan Ledger and Interest-Accrual Engine

Records loans between a lender and a borrower, computes time-proportional
interest and relayer fees at repayment, tracks overdue status, and keeps a
borrower-indexed view of open loans.

Usage:
    from loanledger import (
        AssetLedger, FixedClock, LoanEventLog, LoanLifecycleManager, LoanTerms,
    )

    assets = AssetLedger("main", verbose=False)
    assets.register_asset("DAI")
    for wallet in ("bank", "alice", "relay"):
        assets.register_wallet(wallet)
    assets.issue("alice", "DAI", 200_000)
    assets.approve("alice", "DAI", 200_000)

    clock = FixedClock(1000)
    manager = LoanLifecycleManager(assets, clock, event_sink=LoanEventLog())

    terms = LoanTerms(interest_rate=500, start_at=1000, duration=86400,
                      relayer_fee_rate=1000, gas_price=0)
    loan_id = manager.create_loan(1, "bank", "alice", "relay", "DAI", 100_000, terms)

    clock.advance_by(43200)
    manager.settle_loan(loan_id, payer="alice", amount=100_000)
"""

# Core types
from .core import (
    Loan,
    LoanStatus,
    Move,
    AssetTransfer,
    Clock,
    LoanEventSink,
    LoanLedgerError,
    EncodingOverflow,
    ArithmeticOverflow,
    ClockSkew,
    InsufficientPrincipal,
    RecordNotFound,
    InvalidTerms,
    TransferFailed,
    InsufficientBalance,
    InsufficientAllowance,
    WalletNotRegistered,
    AssetNotRegistered,
    check_uint256,
    WORD_BITS,
    UINT256_MAX,
    RATE_BASIS,
    SECONDS_PER_YEAR,
    GAS_PRICE_UNIT,
    SYSTEM_WALLET,
)

# Packed terms
from .terms import (
    LoanTerms,
    TERMS_LAYOUT,
    encode_terms,
    decode_terms,
    field_max,
)

# Interest and fees
from .interest import (
    InterestQuote,
    RepaymentQuote,
    calculate_interest,
    calculate_repayment,
    calculate_gas_cost_in_asset,
    is_overdue,
)

# Records and index
from .store import LoanRecordStore
from .borrower_index import BorrowerIndex

# Lifecycle
from .manager import LoanLifecycleManager

# Collaborators
from .events import (
    LoanEvent,
    LoanEventLog,
    LOAN_CREATED,
    LOAN_REPAID,
    LOAN_CLOSED,
)
from .clock import FixedClock, SystemClock, to_timestamp
from .asset_ledger import AssetLedger, TransferBatch

__all__ = [
    # Core
    'Loan', 'LoanStatus', 'Move',
    'AssetTransfer', 'Clock', 'LoanEventSink',
    'LoanLedgerError', 'EncodingOverflow', 'ArithmeticOverflow', 'ClockSkew',
    'InsufficientPrincipal', 'RecordNotFound', 'InvalidTerms', 'TransferFailed',
    'InsufficientBalance', 'InsufficientAllowance', 'WalletNotRegistered',
    'AssetNotRegistered', 'check_uint256',
    'WORD_BITS', 'UINT256_MAX', 'RATE_BASIS', 'SECONDS_PER_YEAR', 'GAS_PRICE_UNIT',
    'SYSTEM_WALLET',
    # Terms
    'LoanTerms', 'TERMS_LAYOUT', 'encode_terms', 'decode_terms', 'field_max',
    # Interest
    'InterestQuote', 'RepaymentQuote', 'calculate_interest', 'calculate_repayment',
    'calculate_gas_cost_in_asset', 'is_overdue',
    # Records and index
    'LoanRecordStore', 'BorrowerIndex',
    # Lifecycle
    'LoanLifecycleManager',
    # Collaborators
    'LoanEvent', 'LoanEventLog', 'LOAN_CREATED', 'LOAN_REPAID', 'LOAN_CLOSED',
    'FixedClock', 'SystemClock', 'to_timestamp',
    'AssetLedger', 'TransferBatch',
]

__version__ = '1.0.0'
