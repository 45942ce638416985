"""
manager.py - Loan Lifecycle Manager

Orchestrates creation, repayment and closure of loans by composing the
terms codec, the interest calculator, the record store and the borrower
index, and by calling out to the asset transfer collaborator.

=== STATE MACHINE ===

    ACTIVE --reduce--> PARTIALLY_REPAID --reduce--> CLOSED
    ACTIVE --reduce to zero-----------------------> CLOSED

CLOSED is terminal. A closed loan keeps its record in the store but is no
longer listed under its borrower.

=== ALL-OR-NOTHING ===

Every operation computes and validates first, then mutates. Store, index
and transfer calls happen only after all fallible arithmetic has succeeded.
When the transfer service offers transfer_batch(), both repayment legs go
out as one atomic batch.

Example:
    assets = AssetLedger("main", verbose=False)
    manager = LoanLifecycleManager(assets, FixedClock(1000))
    loan_id = manager.create_loan(
        lender_order_id=1, lender="bank", borrower="alice", relayer="relay",
        asset="DAI", amount=100000,
        terms=LoanTerms(500, 1000, 86400, 1000, 0),
    )
    manager.settle_loan(loan_id, payer="alice", amount=100000)
"""

from __future__ import annotations
from typing import List, Optional, Union

from .core import (
    AssetTransfer, Clock, EventSinkLike, Loan, Move, LoanStatus,
    LoanLedgerError, InsufficientPrincipal, TransferFailed,
    check_uint256,
)
from .terms import LoanTerms, decode_terms, encode_terms
from .interest import (
    RepaymentQuote, calculate_repayment, is_overdue, _check_fee_rate,
)
from .store import LoanRecordStore
from .borrower_index import BorrowerIndex
from .events import LoanEvent, LOAN_CREATED, LOAN_REPAID, LOAN_CLOSED


class LoanLifecycleManager:
    """
    Creates, repays and closes loans.

    Thread Safety:
        Not thread-safe. The host must serialize create/repay/reduce calls;
        a concurrent host wraps each call in one lock or transaction.
    """

    def __init__(
        self,
        transfers: AssetTransfer,
        clock: Clock,
        store: Optional[LoanRecordStore] = None,
        index: Optional[BorrowerIndex] = None,
        event_sink: Optional[EventSinkLike] = None,
        verbose: bool = True,
    ):
        """
        Args:
            transfers: Service that moves funds (transfer_from, optionally transfer_batch)
            clock: Source of current_time()
            store: Loan records (a fresh store if not provided)
            index: Borrower index (a fresh index if not provided)
            event_sink: Observer for lifecycle events (object with emit() or callable)
            verbose: Print one line per lifecycle operation (default: True)
        """
        self.transfers = transfers
        self.clock = clock
        self.store = store if store is not None else LoanRecordStore()
        self.index = index if index is not None else BorrowerIndex()
        self.event_sink = event_sink
        self.verbose = verbose

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_loan(self, loan_id: int) -> Loan:
        return self.store.get(loan_id)

    def get_loans(self, loan_ids: List[int]) -> List[Loan]:
        return self.store.get_many(loan_ids)

    def get_open_loans(self, borrower: str) -> List[Loan]:
        """Open loans of borrower, in index order."""
        return self.store.get_many(self.index.list(borrower))

    def get_overdue_loans(self, borrower: str) -> List[Loan]:
        """Open loans of borrower whose start_at + duration has passed."""
        now = self.clock.current_time()
        return [
            loan for loan in self.get_open_loans(borrower)
            if is_overdue(loan.decoded_terms, now)
        ]

    def quote_repayment(self, loan_id: int, amount: int) -> RepaymentQuote:
        """Repayment breakdown at the current time, without moving funds."""
        loan = self.store.get(loan_id)
        self._check_repayable(loan, amount)
        return calculate_repayment(loan.decoded_terms, amount, self.clock.current_time())

    # ========================================================================
    # LIFECYCLE OPERATIONS
    # ========================================================================

    def create_loan(
        self,
        lender_order_id: int,
        lender: str,
        borrower: str,
        relayer: str,
        asset: str,
        amount: int,
        terms: Union[LoanTerms, int],
    ) -> int:
        """
        Record a new loan and index it under its borrower.

        Args:
            lender_order_id: Opaque reference to the originating lend offer
            lender, borrower, relayer: Account identifiers (already verified)
            asset: Asset the principal is denominated in
            amount: Principal (positive)
            terms: LoanTerms or the packed terms word

        Returns:
            The new loan id

        Raises:
            ValueError: empty identifiers, lender == borrower, amount <= 0
            ArithmeticOverflow: amount or lender_order_id exceeds 256 bits
            EncodingOverflow: terms do not encode/decode
            InvalidTerms: relayer_fee_rate above basis
        """
        for label, value in (("lender", lender), ("borrower", borrower),
                             ("relayer", relayer), ("asset", asset)):
            if not value or not value.strip():
                raise ValueError(f"{label} cannot be empty")
        if lender == borrower:
            raise ValueError("lender and borrower must be different")
        check_uint256(lender_order_id, "lender_order_id")
        check_uint256(amount, "amount")
        if amount == 0:
            raise ValueError("amount must be positive, got 0")

        word = encode_terms(terms) if isinstance(terms, LoanTerms) else terms
        _check_fee_rate(decode_terms(word))

        now = self.clock.current_time()
        loan_id = self.store.create(
            lender_order_id=lender_order_id,
            lender=lender,
            borrower=borrower,
            relayer=relayer,
            asset=asset,
            amount=amount,
            terms=word,
            created_at=now,
        )
        self.index.add(borrower, loan_id)

        if self.verbose:
            print(f"📝 Loan #{loan_id} created: {amount} {asset} {lender}→{borrower}")
        self._emit(LoanEvent(
            event_type=LOAN_CREATED,
            loan_id=loan_id,
            timestamp=now,
            borrower=borrower,
            amount=amount,
            params=(("lender", lender), ("relayer", relayer), ("asset", asset)),
        ))
        return loan_id

    def repay_loan(self, loan_id: int, payer: str, amount: int) -> RepaymentQuote:
        """
        Pay principal plus accrued interest to the lender, and the fee to the relayer.

        Transfers:
            payer -> lender   amount + interest - relayer_fee
            payer -> relayer  relayer_fee + gas_cost
        Zero-value legs are skipped. The stored amount is not changed; call
        reduce_loan() (or use settle_loan()) to book the principal.

        Returns:
            The RepaymentQuote that was paid

        Raises:
            RecordNotFound: unknown id
            InsufficientPrincipal: amount exceeds outstanding principal,
                or the relayer fee exceeds amount + interest
            ClockSkew, ArithmeticOverflow, InvalidTerms: from the calculator
            TransferFailed: the transfer service refused a leg
        """
        if not payer or not payer.strip():
            raise ValueError("payer cannot be empty")
        loan = self.store.get(loan_id)
        self._check_repayable(loan, amount)
        quote = calculate_repayment(loan.decoded_terms, amount, self.clock.current_time())

        moves: List[Move] = []
        if quote.lender_amount > 0 and payer != loan.lender:
            moves.append(Move(
                quote.lender_amount, loan.asset, payer, loan.lender,
                f"repay_{loan_id}_lender",
            ))
        if quote.relayer_amount > 0 and payer != loan.relayer:
            moves.append(Move(
                quote.relayer_amount, loan.asset, payer, loan.relayer,
                f"repay_{loan_id}_relayer",
            ))
        self._transfer(moves)

        if self.verbose:
            print(
                f"💰 Loan #{loan_id} repaid: principal={quote.principal} "
                f"interest={quote.total_interest} relayer_fee={quote.relayer_fee}"
            )
        self._emit(LoanEvent(
            event_type=LOAN_REPAID,
            loan_id=loan_id,
            timestamp=quote.timestamp,
            borrower=loan.borrower,
            amount=amount,
            params=(
                ("payer", payer),
                ("total_interest", quote.total_interest),
                ("relayer_fee", quote.relayer_fee),
            ),
        ))
        return quote

    def reduce_loan(self, loan_id: int, amount: int) -> Loan:
        """
        Book a principal reduction; at zero the loan closes and leaves the index.

        Raises:
            RecordNotFound: unknown id
            InsufficientPrincipal: amount exceeds outstanding principal, or the loan is closed
        """
        now = self.clock.current_time()
        loan = self.store.reduce_amount(loan_id, amount, closed_at=now)

        if loan.status == LoanStatus.CLOSED:
            self.index.remove(loan.borrower, loan_id)
            if self.verbose:
                print(f"✓ Loan #{loan_id} closed")
            self._emit(LoanEvent(
                event_type=LOAN_CLOSED,
                loan_id=loan_id,
                timestamp=now,
                borrower=loan.borrower,
                amount=loan.principal,
            ))
        elif self.verbose:
            print(f"Loan #{loan_id} reduced by {amount}: {loan.amount} outstanding")
        return loan

    def settle_loan(self, loan_id: int, payer: str, amount: int) -> RepaymentQuote:
        """
        repay_loan() followed by reduce_loan() for the same amount.

        The reduction cannot fail once the repayment has passed its checks,
        so funds never move without the principal being booked.
        """
        quote = self.repay_loan(loan_id, payer, amount)
        self.reduce_loan(loan_id, amount)
        return quote

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @staticmethod
    def _check_repayable(loan: Loan, amount: int) -> None:
        check_uint256(amount, "amount")
        if not loan.is_open:
            raise InsufficientPrincipal(f"Loan {loan.loan_id} is closed")
        if amount > loan.amount:
            raise InsufficientPrincipal(
                f"Loan {loan.loan_id}: repayment {amount} exceeds outstanding {loan.amount}"
            )

    def _transfer(self, moves: List[Move]) -> None:
        if not moves:
            return
        try:
            if hasattr(self.transfers, 'transfer_batch'):
                result = self.transfers.transfer_batch(moves)
                if result is False:
                    raise TransferFailed(f"transfer batch refused: {moves}")
                return
            for move in moves:
                result = self.transfers.transfer_from(
                    move.asset, move.source, move.dest, move.amount
                )
                if result is False:
                    raise TransferFailed(f"transfer refused: {move!r}")
        except LoanLedgerError:
            raise
        except Exception as e:
            raise TransferFailed(f"transfer service error: {e}") from e

    def _emit(self, event: LoanEvent) -> None:
        if self.event_sink is None:
            return
        if hasattr(self.event_sink, 'emit'):
            self.event_sink.emit(event)
        else:
            self.event_sink(event)
