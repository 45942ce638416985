"""
Terms Codec Conformance Tests

INVARIANT: Packing is lossless and fields never overlap.

    ∀ terms T with every field within its width:
        decode(encode(T)) = T
        encode(T) < 2^256

    ∀ word W < 2^256:
        encode(decode(W)) = W
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from loanledger import (
    LoanTerms, TERMS_LAYOUT, UINT256_MAX, decode_terms, encode_terms, field_max,
)


@st.composite
def loan_terms(draw):
    """Any LoanTerms whose fields fit the packed layout."""
    return LoanTerms(**{
        name: draw(st.integers(min_value=0, max_value=field_max(name)))
        for name in TERMS_LAYOUT
    })


class TestCodecProperties:

    @given(loan_terms())
    @settings(max_examples=300)
    def test_decode_inverts_encode(self, terms):
        word = encode_terms(terms)
        assert 0 <= word <= UINT256_MAX
        assert decode_terms(word) == terms

    @given(st.integers(min_value=0, max_value=UINT256_MAX))
    @settings(max_examples=300)
    def test_encode_inverts_decode(self, word):
        assert encode_terms(decode_terms(word)) == word

    @given(loan_terms(), st.sampled_from(list(TERMS_LAYOUT)),
           st.integers(min_value=0))
    @settings(max_examples=200)
    def test_changing_one_field_leaves_others(self, terms, name, value):
        """PROPERTY: Re-encoding with one field changed only changes that field."""
        value = value % (field_max(name) + 1)
        fields = {n: getattr(terms, n) for n in TERMS_LAYOUT}
        fields[name] = value
        decoded = decode_terms(encode_terms(LoanTerms(**fields)))
        for other in TERMS_LAYOUT:
            expected = value if other == name else getattr(terms, other)
            assert getattr(decoded, other) == expected

    @given(loan_terms())
    @settings(max_examples=100)
    def test_encoding_is_deterministic(self, terms):
        assert encode_terms(terms) == encode_terms(LoanTerms.decode(terms.encode()))
