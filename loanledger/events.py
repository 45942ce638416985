"""
events.py - Loan Lifecycle Notifications

Events are just data. The manager emits one per lifecycle transition to an
optional sink; the sink's return value is ignored.

Core concepts:
1. LoanEvent: Immutable record of what happened to which loan and when
2. LoanEventLog: In-memory sink that keeps every event in emission order
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


# Event types (strings, like the ledger's unit type constants).
LOAN_CREATED = "loan_created"
LOAN_REPAID = "loan_repaid"
LOAN_CLOSED = "loan_closed"


@dataclass(frozen=True, slots=True)
class LoanEvent:
    """
    Immutable lifecycle notification.

    Attributes:
        event_type: LOAN_CREATED, LOAN_REPAID or LOAN_CLOSED
        loan_id: Loan the event refers to
        timestamp: Clock time of the operation
        borrower: Borrower of the loan
        amount: Principal created, repaid, or reduced to zero
        params: Extra event-specific values as frozen (key, value) pairs
    """
    event_type: str
    loan_id: int
    timestamp: int
    borrower: str
    amount: int
    params: tuple = ()

    @property
    def params_dict(self) -> Dict[str, Any]:
        return dict(self.params)

    @property
    def event_id(self) -> str:
        return f"{self.event_type}:{self.loan_id}:{self.timestamp}"


class LoanEventLog:
    """Event sink that records events for later inspection."""

    def __init__(self):
        self.events: List[LoanEvent] = []

    def emit(self, event: LoanEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> List[LoanEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def for_loan(self, loan_id: int) -> List[LoanEvent]:
        return [e for e in self.events if e.loan_id == loan_id]

    def last(self) -> Optional[LoanEvent]:
        return self.events[-1] if self.events else None

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"LoanEventLog({len(self.events)} events)"
