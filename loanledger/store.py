"""
store.py - Loan Record Store

Owns the canonical Loan records, keyed by a sequential id. Records are never
deleted: a closed loan keeps its record (status CLOSED, amount 0) so that
get() resolves for historical lookups.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

from .core import (
    Loan, LoanStatus, InsufficientPrincipal, RecordNotFound,
    check_uint256,
)


class LoanRecordStore:
    """
    Append-only map from loan id to Loan.

    Ids start at 0 and increase by one per create(); they are never reused.
    reduce_amount() is the only mutation and replaces the frozen record.

    Thread Safety:
        Not thread-safe. The host serializes operations.
    """

    def __init__(self):
        self._loans: Dict[int, Loan] = {}
        self._next_id: int = 0

    @property
    def count(self) -> int:
        """Number of loans ever created (also the next id)."""
        return self._next_id

    def __len__(self) -> int:
        return self._next_id

    def __contains__(self, loan_id: object) -> bool:
        return loan_id in self._loans

    def __iter__(self) -> Iterator[Loan]:
        for loan_id in range(self._next_id):
            yield self._loans[loan_id]

    def create(
        self,
        lender_order_id: int,
        lender: str,
        borrower: str,
        relayer: str,
        asset: str,
        amount: int,
        terms: int,
        created_at: Optional[int] = None,
    ) -> int:
        """Store a new ACTIVE loan and return its id."""
        loan_id = self._next_id
        self._loans[loan_id] = Loan(
            loan_id=loan_id,
            lender_order_id=lender_order_id,
            lender=lender,
            borrower=borrower,
            relayer=relayer,
            asset=asset,
            amount=amount,
            principal=amount,
            terms=terms,
            status=LoanStatus.ACTIVE,
            created_at=created_at,
        )
        self._next_id += 1
        return loan_id

    def find(self, loan_id: int) -> Optional[Loan]:
        """Return the loan, or None if the id was never created."""
        return self._loans.get(loan_id)

    def get(self, loan_id: int) -> Loan:
        """
        Return the loan with this id.

        Raises:
            RecordNotFound: if the id was never created
        """
        loan = self._loans.get(loan_id)
        if loan is None:
            raise RecordNotFound(f"Loan {loan_id} not found")
        return loan

    def get_many(self, loan_ids: Iterable[int]) -> List[Loan]:
        """Project ids to loans, preserving input order."""
        return [self.get(loan_id) for loan_id in loan_ids]

    def reduce_amount(
        self,
        loan_id: int,
        delta: int,
        closed_at: Optional[int] = None,
    ) -> Loan:
        """
        Subtract delta from the loan's outstanding amount.

        The status tag follows the amount: CLOSED at zero, PARTIALLY_REPAID
        below principal, otherwise unchanged.

        Returns:
            The updated Loan

        Raises:
            RecordNotFound: unknown id
            InsufficientPrincipal: delta > amount, or the loan is closed
        """
        loan = self.get(loan_id)
        check_uint256(delta, "delta")
        if loan.status == LoanStatus.CLOSED:
            raise InsufficientPrincipal(f"Loan {loan_id} is closed")
        if delta > loan.amount:
            raise InsufficientPrincipal(
                f"Loan {loan_id}: cannot reduce {loan.amount} by {delta}"
            )

        new_amount = loan.amount - delta
        if new_amount == 0:
            status = LoanStatus.CLOSED
        elif new_amount < loan.principal:
            status = LoanStatus.PARTIALLY_REPAID
        else:
            status = loan.status

        updated = replace(
            loan,
            amount=new_amount,
            status=status,
            closed_at=closed_at if status == LoanStatus.CLOSED else loan.closed_at,
        )
        self._loans[loan_id] = updated
        return updated
