"""
borrower_index.py - Borrower Index

Secondary index from borrower to the ids of its open loans. Holds ids only;
the LoanRecordStore remains the single source of truth for amounts and terms.

Each borrower's entry is an unordered set kept in a list, with a map from
loan id to its slot. Removal overwrites the removed slot with the last
element and shrinks the list by one, so iteration order changes after a
removal.
"""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, List, Optional, Set


class BorrowerIndex:

    def __init__(self):
        self._loans_by_borrower: Dict[str, List[int]] = defaultdict(list)
        # borrower -> loan_id -> slot in _loans_by_borrower[borrower]
        self._positions: Dict[str, Dict[int, int]] = defaultdict(dict)

    def add(self, borrower: str, loan_id: int) -> None:
        ids = self._loans_by_borrower[borrower]
        self._positions[borrower][loan_id] = len(ids)
        ids.append(loan_id)

    def remove(self, borrower: str, loan_id: int) -> bool:
        """
        Swap-remove loan_id from the borrower's entry in constant time.

        Returns:
            True if the id was removed, False if it was not present
            (removing an absent id is a no-op).
        """
        positions = self._positions.get(borrower)
        if not positions or loan_id not in positions:
            return False

        ids = self._loans_by_borrower[borrower]
        position = positions.pop(loan_id)
        last = ids.pop()
        if position < len(ids):
            ids[position] = last
            positions[last] = position
        if not ids:
            del self._loans_by_borrower[borrower]
            del self._positions[borrower]
        return True

    def list(self, borrower: str) -> List[int]:
        """Current ids for the borrower (a copy; safe to iterate while mutating)."""
        return list(self._loans_by_borrower.get(borrower, ()))

    def position(self, borrower: str, loan_id: int) -> Optional[int]:
        """Slot of loan_id in list(borrower), or None if not indexed."""
        return self._positions.get(borrower, {}).get(loan_id)

    def count(self, borrower: str) -> int:
        return len(self._loans_by_borrower.get(borrower, ()))

    def borrowers(self) -> Set[str]:
        """Borrowers with at least one open loan."""
        return set(self._loans_by_borrower)

    def __contains__(self, item: object) -> bool:
        return item in self._loans_by_borrower
