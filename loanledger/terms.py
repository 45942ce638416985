"""
terms.py - Packed Loan Terms Codec

Loan terms travel as a single 256-bit word so that the originator of a loan
request can construct it independently. The layout is fixed, most-significant
byte first, with no padding between fields:

    byte  0..1    interest_rate      (2 bytes, basis 10,000)
    byte  2..6    start_at           (5 bytes, seconds since epoch)
    byte  7..11   duration           (5 bytes, seconds)
    byte 12..13   relayer_fee_rate   (2 bytes, basis 10,000)
    byte 14..16   gas_price          (3 bytes, 1e-9 asset units)
    byte 17..31   salt               (15 bytes, opaque)

TERMS_LAYOUT is the single source of truth for offsets and widths. Nothing
outside this module shifts or masks the terms word.

Example:
    terms = LoanTerms(interest_rate=500, start_at=1000, duration=86400,
                      relayer_fee_rate=1000, gas_price=0)
    word = terms.encode()
    assert LoanTerms.decode(word) == terms
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Dict, Tuple

from .core import WORD_BITS, EncodingOverflow


# field -> (byte offset from most significant byte, width in bytes)
TERMS_LAYOUT: Dict[str, Tuple[int, int]] = {
    'interest_rate': (0, 2),
    'start_at': (2, 5),
    'duration': (7, 5),
    'relayer_fee_rate': (12, 2),
    'gas_price': (14, 3),
    'salt': (17, 15),
}

WORD_BYTES = WORD_BITS // 8


def _field_shift(name: str) -> int:
    offset, width = TERMS_LAYOUT[name]
    return (WORD_BYTES - offset - width) * 8


def _field_mask(name: str) -> int:
    _, width = TERMS_LAYOUT[name]
    return (1 << (width * 8)) - 1


def field_max(name: str) -> int:
    """Largest value a terms field can hold."""
    return _field_mask(name)


@dataclass(frozen=True, slots=True)
class LoanTerms:
    """
    Decoded view of the packed terms word.

    All fields are unsigned ints bounded by their packed width. Range checks
    happen in encode(); a LoanTerms built by decode() is always in range.
    """
    interest_rate: int
    start_at: int
    duration: int
    relayer_fee_rate: int
    gas_price: int
    salt: int = 0

    @property
    def end_at(self) -> int:
        """Time after which the loan is overdue."""
        return self.start_at + self.duration

    def encode(self) -> int:
        return encode_terms(self)

    @classmethod
    def decode(cls, word: int) -> 'LoanTerms':
        return decode_terms(word)


def encode_terms(terms: LoanTerms) -> int:
    """
    Pack LoanTerms into a 256-bit word.

    Raises:
        EncodingOverflow: if any field is negative, not an int, or wider
            than its slot in TERMS_LAYOUT.
    """
    word = 0
    for f in fields(LoanTerms):
        value = getattr(terms, f.name)
        if not isinstance(value, int) or isinstance(value, bool):
            raise EncodingOverflow(f"{f.name} must be int, got {type(value).__name__}")
        if value < 0 or value > _field_mask(f.name):
            raise EncodingOverflow(
                f"{f.name}={value} does not fit in {TERMS_LAYOUT[f.name][1]} bytes"
            )
        word |= value << _field_shift(f.name)
    return word


def decode_terms(word: int) -> LoanTerms:
    """
    Unpack a 256-bit terms word.

    Raises:
        EncodingOverflow: if word is negative or wider than 256 bits.
    """
    if not isinstance(word, int) or isinstance(word, bool):
        raise EncodingOverflow(f"terms word must be int, got {type(word).__name__}")
    if word < 0 or word >> WORD_BITS:
        raise EncodingOverflow(f"terms word out of 256-bit range: {word:#x}")
    return LoanTerms(**{
        name: (word >> _field_shift(name)) & _field_mask(name)
        for name in TERMS_LAYOUT
    })
