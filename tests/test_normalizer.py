"""
Unit tests for name normalization and candidate generation

Tests cover:
1. normalize / normalize_text - comparable token projection
2. capitalize - display form
3. generate_candidates - first/last name splits
"""

import pytest

from member_import.normalizer import normalize, normalize_text, capitalize
from member_import.candidates import generate_candidates


# =============================================================================
# normalize Tests
# =============================================================================

class TestNormalize:
    """Tests for token normalization"""

    def test_basic_name(self):
        assert normalize("John Smith") == ["john", "smith"]

    def test_trims_and_collapses_whitespace(self):
        assert normalize("   JOHN \t\n  smith   ") == ["john", "smith"]

    def test_strips_punctuation_digits_and_hyphens(self):
        """Hyphens and apostrophes join their halves rather than splitting"""
        assert normalize("O'Brien, Jean-Paul 3") == ["obrien", "jeanpaul"]

    def test_diacritics_are_dropped(self):
        assert normalize("José Müller") == ["jos", "mller"]

    @pytest.mark.parametrize("raw", ["", "   ", "12345", "--- ,,, !!!", "2024/01/05", None])
    def test_no_alphabetic_content_is_empty(self, raw):
        assert normalize(raw) == []

    def test_normalize_text_joins_tokens(self):
        assert normalize_text("  Mary   UWASE ") == "mary uwase"


# =============================================================================
# capitalize Tests
# =============================================================================

class TestCapitalize:
    """Tests for display capitalization"""

    def test_mixed_case(self):
        assert capitalize("jOHN sMITH") == "John Smith"

    def test_keeps_spacing(self):
        assert capitalize("john  smith") == "John  Smith"

    def test_empty(self):
        assert capitalize("") == ""
        assert capitalize(None) == ""

    def test_non_letters_untouched(self):
        assert capitalize("o'brien 3rd") == "O'brien 3rd"


# =============================================================================
# generate_candidates Tests
# =============================================================================

class TestGenerateCandidates:
    """Tests for candidate split generation"""

    def test_single_token_has_no_candidates(self):
        assert generate_candidates(["x"]) is None

    def test_empty_has_no_candidates(self):
        assert generate_candidates([]) is None

    def test_two_tokens_include_reversed_order(self):
        split = generate_candidates(["smith", "john"])
        assert split.first_names == ("smith", "john")
        assert split.last_names == ("john", "smith")

    def test_interior_tokens_are_first_names_only(self):
        split = generate_candidates(["jean", "paul", "marie", "habimana"])
        assert split.first_names == ("jean", "paul", "marie")
        assert split.last_names == ("habimana",)

    def test_repeated_tokens_are_not_duplicated(self):
        split = generate_candidates(["john", "john"])
        assert split.first_names == ("john",)
        assert split.last_names == ("john",)
