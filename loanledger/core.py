"""
Core types and constants for the loan ledger.

This module provides the foundational data structures and protocols:
1. Protocols: AssetTransfer, Clock and LoanEventSink for external collaborators
2. Immutable data structures: Move, Loan
3. Exceptions: LoanLedgerError and domain-specific error types
4. Constants: word width, rate basis, seconds per year

Amounts are plain Python ints constrained to the unsigned 256-bit range.
Loan records are frozen; every change produces a new record via replace().
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any, Callable, Dict, Optional, Protocol, Union,
    runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Width of a machine word in bits. Amounts, ids and the terms word share it.
WORD_BITS = 256
UINT256_MAX = (1 << WORD_BITS) - 1

# Basis for interest_rate and relayer_fee_rate (10,000 = 100%).
RATE_BASIS = 10_000

# Fixed 365-day year.
SECONDS_PER_YEAR = 365 * 24 * 60 * 60

# gas_price is quoted in one-billionth of the asset's native unit.
GAS_PRICE_UNIT = 10 ** 9

# Reserved wallet for issuance into the asset ledger.
SYSTEM_WALLET = "system"


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from asset symbol to quantity held in a single wallet.
BalanceMap = Dict[str, int]

# Account identifiers (lender, borrower, relayer, payer).
Address = str


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LoanLedgerError(Exception):
    """Base exception for all loan ledger errors."""
    pass


class EncodingOverflow(LoanLedgerError):
    """Raised when a terms sub-field does not fit its packed width."""
    pass


class ArithmeticOverflow(LoanLedgerError):
    """Raised when a computation exceeds the unsigned 256-bit range."""
    pass


class ClockSkew(LoanLedgerError):
    """Raised when the current time precedes a loan's start time."""
    pass


class InsufficientPrincipal(LoanLedgerError):
    """Raised when a reduction or fee split would underflow available principal."""
    pass


class RecordNotFound(LoanLedgerError):
    """Raised when looking up a loan id that was never created."""
    pass


class InvalidTerms(LoanLedgerError):
    """Raised when decoded terms are outside their accepted range (relayer fee rate above basis)."""
    pass


class TransferFailed(LoanLedgerError):
    """Raised when the asset transfer collaborator refuses a transfer."""
    pass


class InsufficientBalance(TransferFailed):
    """Raised when the source wallet does not hold enough of the asset."""
    pass


class InsufficientAllowance(TransferFailed):
    """Raised when the source wallet has not approved enough of the asset."""
    pass


class WalletNotRegistered(TransferFailed):
    """Raised when a transfer names a wallet unknown to the asset ledger."""
    pass


class AssetNotRegistered(TransferFailed):
    """Raised when a transfer names an asset unknown to the asset ledger."""
    pass


def check_uint256(value: int, name: str) -> int:
    """
    Validate that value is an int in the unsigned 256-bit range.

    Raises:
        ValueError: if value is not an int (bool excluded) or is negative
        ArithmeticOverflow: if value exceeds UINT256_MAX
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")
    if value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name} exceeds 256 bits: {value}")
    return value


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of an asset between two wallets.

    Attributes:
        amount: Quantity to transfer, in the asset's smallest unit (positive int).
        asset: Symbol of the asset being transferred.
        source: Wallet debited.
        dest: Wallet credited.
        memo: Identifier of the operation that produced this move.
    """
    amount: int
    asset: str
    source: str
    dest: str
    memo: str

    def __post_init__(self):
        if not self.source or not self.source.strip():
            raise ValueError("Move source cannot be empty")
        if not self.dest or not self.dest.strip():
            raise ValueError("Move dest cannot be empty")
        if not self.asset or not self.asset.strip():
            raise ValueError("Move asset cannot be empty")
        if not self.memo or not self.memo.strip():
            raise ValueError("Move memo cannot be empty")
        check_uint256(self.amount, "Move amount")
        if self.amount == 0:
            raise ValueError("Move amount is zero")
        if self.source == self.dest:
            raise ValueError("Source and dest must be different")

    def __repr__(self) -> str:
        return f"Move({self.amount} {self.asset}: {self.source}→{self.dest})"


class LoanStatus(str, Enum):
    """Lifecycle state of a loan record."""
    ACTIVE = "active"                       # Full principal outstanding
    PARTIALLY_REPAID = "partially_repaid"   # Principal reduced, still open
    CLOSED = "closed"                       # Principal zero, unindexed, kept for history


@dataclass(frozen=True, slots=True)
class Loan:
    """
    Canonical loan record owned by the LoanRecordStore.

    Attributes:
        loan_id: Sequential identifier, never reused
        lender_order_id: Opaque reference to the originating lend offer
        lender: Account that supplied the principal
        borrower: Account that owes the principal
        relayer: Account entitled to the relayer fee
        asset: Asset the loan is denominated in
        amount: Outstanding principal
        principal: Principal at creation (upper bound for amount)
        terms: Packed 256-bit terms word (see terms.py)
        status: ACTIVE, PARTIALLY_REPAID or CLOSED
        created_at: Clock time at creation
        closed_at: Clock time of closure (None while open)
    """
    loan_id: int
    lender_order_id: int
    lender: Address
    borrower: Address
    relayer: Address
    asset: str
    amount: int
    principal: int
    terms: int
    status: LoanStatus = LoanStatus.ACTIVE
    created_at: Optional[int] = None
    closed_at: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.status != LoanStatus.CLOSED

    @property
    def decoded_terms(self) -> 'LoanTerms':
        """Unpack the terms word."""
        from .terms import decode_terms
        return decode_terms(self.terms)

    def __repr__(self) -> str:
        return (
            f"Loan(#{self.loan_id} {self.amount}/{self.principal} {self.asset}: "
            f"{self.lender}→{self.borrower}, {self.status.value})"
        )


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class AssetTransfer(Protocol):
    """
    Interface to the service that actually moves funds.

    transfer_from must fail atomically: either the full amount moves or
    nothing does. Failure is signalled by raising TransferFailed; a falsy
    return value is treated the same way by callers.

    Implementations may also provide transfer_batch(moves), which applies
    a sequence of moves all-or-nothing.
    """

    def transfer_from(self, asset: str, source: Address, dest: Address, amount: int) -> Any:
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of the current time in seconds since the epoch."""

    def current_time(self) -> int:
        ...


@runtime_checkable
class LoanEventSink(Protocol):
    """Observer notified of loan creation, repayment and closure."""

    def emit(self, event: 'LoanEvent') -> None:
        ...


# An event sink may be an object with emit() or a plain callable.
EventSinkLike = Union[LoanEventSink, Callable[['LoanEvent'], None]]
