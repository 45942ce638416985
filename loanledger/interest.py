"""
interest.py - Interest, Relayer Fee and Overdue Calculations

Pure functions over decoded LoanTerms. No store, no clock, no hidden state:
the caller passes the current time explicitly.

Key Formulas:
    time_delta     = current_time - start_at
    total_interest = amount * interest_rate * time_delta // (RATE_BASIS * SECONDS_PER_YEAR)
    relayer_fee    = total_interest * relayer_fee_rate // RATE_BASIS
    lender_amount  = amount + total_interest - relayer_fee
    relayer_amount = relayer_fee + gas_cost

Integer division truncates (all operands are non-negative). Every
intermediate product is held to the unsigned 256-bit range.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from .core import (
    RATE_BASIS, SECONDS_PER_YEAR, UINT256_MAX,
    ArithmeticOverflow, ClockSkew, InsufficientPrincipal, InvalidTerms,
    check_uint256,
)
from .terms import LoanTerms, decode_terms


TermsLike = Union[LoanTerms, int]


@dataclass(frozen=True, slots=True)
class InterestQuote:
    """Interest accrued on an amount and the relayer's share of it."""
    total_interest: int
    relayer_fee: int


@dataclass(frozen=True, slots=True)
class RepaymentQuote:
    """
    Breakdown of a repayment into the two transfer legs.

    Attributes:
        principal: Principal being repaid
        total_interest: Interest accrued on that principal
        relayer_fee: Relayer's cut of the interest
        gas_cost: Gas cost charged in the asset (currently always 0)
        lender_amount: principal + total_interest - relayer_fee (payer -> lender)
        relayer_amount: relayer_fee + gas_cost (payer -> relayer)
        timestamp: Time the quote was computed for
    """
    principal: int
    total_interest: int
    relayer_fee: int
    gas_cost: int
    lender_amount: int
    relayer_amount: int
    timestamp: int


def _as_terms(terms: TermsLike) -> LoanTerms:
    if isinstance(terms, LoanTerms):
        return terms
    return decode_terms(terms)


def _checked_mul(*factors: int) -> int:
    product = 1
    for factor in factors:
        product *= factor
        if product > UINT256_MAX:
            raise ArithmeticOverflow(f"product of {factors} exceeds 256 bits")
    return product


def _check_fee_rate(terms: LoanTerms) -> None:
    if terms.relayer_fee_rate > RATE_BASIS:
        raise InvalidTerms(
            f"relayer_fee_rate {terms.relayer_fee_rate} exceeds basis {RATE_BASIS}"
        )


def calculate_interest(terms: TermsLike, amount: int, current_time: int) -> InterestQuote:
    """
    Compute interest accrued on amount since start_at, and the relayer fee.

    Args:
        terms: Decoded LoanTerms or the packed terms word
        amount: Principal the interest accrues on
        current_time: Seconds since epoch

    Returns:
        InterestQuote(total_interest, relayer_fee), relayer_fee <= total_interest

    Raises:
        ClockSkew: current_time is before start_at
        ArithmeticOverflow: an intermediate product exceeds 256 bits
        InvalidTerms: relayer_fee_rate is above RATE_BASIS

    Example:
        rate 5%, 100000 units, half a day elapsed:
        100000 * 500 * 43200 // (10000 * 31536000) = 6, fee at 10% = 0
    """
    terms = _as_terms(terms)
    check_uint256(amount, "amount")
    check_uint256(current_time, "current_time")
    _check_fee_rate(terms)

    time_delta = current_time - terms.start_at
    if time_delta < 0:
        raise ClockSkew(
            f"current time {current_time} precedes loan start {terms.start_at}"
        )

    total_interest = (
        _checked_mul(amount, terms.interest_rate, time_delta)
        // (RATE_BASIS * SECONDS_PER_YEAR)
    )
    relayer_fee = _checked_mul(total_interest, terms.relayer_fee_rate) // RATE_BASIS
    return InterestQuote(total_interest=total_interest, relayer_fee=relayer_fee)


def is_overdue(terms: TermsLike, current_time: int) -> bool:
    """True once current_time is strictly past start_at + duration."""
    terms = _as_terms(terms)
    return terms.end_at < current_time


def calculate_gas_cost_in_asset(terms: TermsLike) -> int:
    """
    Gas cost reimbursed to the relayer, in asset units.

    The gas_price field is carried in the terms word but no gas metering
    exists, so the cost is always zero.
    """
    _as_terms(terms)
    return 0


def calculate_repayment(terms: TermsLike, amount: int, current_time: int) -> RepaymentQuote:
    """
    Split a repayment of amount into the lender and relayer legs.

    Raises:
        InsufficientPrincipal: amount + interest < relayer_fee
        plus everything calculate_interest raises
    """
    terms = _as_terms(terms)
    quote = calculate_interest(terms, amount, current_time)
    gas_cost = calculate_gas_cost_in_asset(terms)

    gross = amount + quote.total_interest
    if gross > UINT256_MAX:
        raise ArithmeticOverflow(f"repayment {amount} + {quote.total_interest} exceeds 256 bits")
    if gross < quote.relayer_fee:
        raise InsufficientPrincipal(
            f"relayer fee {quote.relayer_fee} exceeds repayment {gross}"
        )
    relayer_amount = quote.relayer_fee + gas_cost
    if relayer_amount > UINT256_MAX:
        raise ArithmeticOverflow(f"relayer amount {relayer_amount} exceeds 256 bits")

    return RepaymentQuote(
        principal=amount,
        total_interest=quote.total_interest,
        relayer_fee=quote.relayer_fee,
        gas_cost=gas_cost,
        lender_amount=gross - quote.relayer_fee,
        relayer_amount=relayer_amount,
        timestamp=current_time,
    )
