"""Unit tests for string similarity functions."""

import pytest

from rentmatch.config import MatchConfig
from rentmatch.matching.normalizers import normalize_name
from rentmatch.matching.similarity import (
    are_names_similar,
    contains_significant,
    containment_ratio,
    jaro_similarity,
    jaro_winkler_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    name_similarity,
    name_sounds_like,
    soundex,
    sounds_like,
    token_set_similarity,
    token_sort_similarity,
)

SIMILARITY_FUNCTIONS = [
    levenshtein_similarity,
    jaro_similarity,
    jaro_winkler_similarity,
    token_set_similarity,
    token_sort_similarity,
    name_similarity,
    containment_ratio,
]

PAIRS = [
    ("juan dela cruz", "dela cruz juan"),
    ("jaun dela cruz", "juan dela cruz"),
    ("maria santos", "mario santos"),
    ("martha", "marhta"),
    ("jon smith", "john smyth"),
    ("ana", "anna reyes"),
    ("a", "b"),
    ("", "juan"),
]


class TestSimilarityProperties:
    """Symmetry, range and identity for every measure."""

    @pytest.mark.parametrize("func", SIMILARITY_FUNCTIONS)
    @pytest.mark.parametrize("a,b", PAIRS)
    def test_symmetric(self, func, a, b):
        """Test that argument order never changes the result."""
        assert func(a, b) == func(b, a)

    @pytest.mark.parametrize("func", SIMILARITY_FUNCTIONS)
    @pytest.mark.parametrize("a,b", PAIRS)
    def test_range(self, func, a, b):
        """Test results stay within [0, 1]."""
        assert 0.0 <= func(a, b) <= 1.0

    @pytest.mark.parametrize("func", SIMILARITY_FUNCTIONS)
    @pytest.mark.parametrize("value", ["juan dela cruz", "x", "maria  santos"])
    def test_identity(self, func, value):
        """Test a non-empty string is identical to itself."""
        assert func(value, value) == 1.0


class TestEditDistance:
    """Tests for Levenshtein measures."""

    def test_distance(self):
        """Test the classic example."""
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3

    def test_similarity_scaled_by_longest(self):
        """Test scaling by the longer string."""
        assert levenshtein_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_empty_strings(self):
        """Test the empty-pair convention."""
        assert levenshtein_similarity("", "") == 1.0
        assert levenshtein_similarity("", "a") == 0.0


class TestJaroWinkler:
    """Tests for Jaro and Jaro-Winkler."""

    def test_prefix_boost(self):
        """Test a shared prefix raises Jaro-Winkler over Jaro."""
        assert jaro_winkler_similarity("martha", "marhta") > jaro_similarity("martha", "marhta")

    def test_no_prefix_weight_equals_jaro(self):
        """Test a zero prefix weight reduces to Jaro."""
        assert jaro_winkler_similarity("dwayne", "duane", prefix_weight=0.0) == pytest.approx(
            jaro_similarity("dwayne", "duane")
        )

    def test_empty_side(self):
        """Test an empty side scores zero."""
        assert jaro_similarity("", "abc") == 0.0
        assert jaro_winkler_similarity("abc", "") == 0.0


class TestTokenSimilarity:
    """Tests for token-based measures."""

    def test_reordered_tokens(self):
        """Test pure reordering is a full match."""
        assert token_set_similarity("dela cruz juan", "juan dela cruz") == 1.0
        assert token_sort_similarity("cruz juan", "juan cruz") == 1.0

    def test_near_token_counts_as_match(self):
        """Test a transposed token is paired with its original."""
        assert token_set_similarity("jaun dela cruz", "juan dela cruz") == 1.0

    def test_strict_threshold_disables_near_match(self):
        """Test near pairing honors the threshold."""
        assert token_set_similarity("jaun dela cruz", "juan dela cruz", near_threshold=1.0) == (
            pytest.approx(2 / 4)
        )

    def test_disjoint_tokens(self):
        """Test unrelated token sets score zero."""
        assert token_set_similarity("pedro", "maria clara") == 0.0

    def test_extra_token_lowers_score(self):
        """Test missing middle names count against the union."""
        assert token_set_similarity("juan cruz", "juan dela cruz") == pytest.approx(2 / 3)


class TestNameSimilarity:
    """Tests for the combined name measure."""

    def test_reordered_full_name(self):
        """Test surname-first input matches the stored name."""
        a = normalize_name("Dela Cruz Juan")
        b = normalize_name("Juan Dela Cruz")

        assert name_similarity(a, b) >= 0.9

    def test_typo(self):
        """Test a single transposition stays highly similar."""
        assert name_similarity("jaun dela cruz", "juan dela cruz") >= 0.9

    def test_empty_is_no_signal(self):
        """Test empty names score zero, even against each other."""
        assert name_similarity("", "") == 0.0
        assert name_similarity("juan", "") == 0.0

    def test_different_people(self):
        """Test unrelated names stay well apart."""
        assert name_similarity("juan dela cruz", "maria clara santos") < 0.7

    @pytest.mark.parametrize(
        "a,b",
        [
            ("jose rizal", "andres bonifacio"),
            ("juan dela cruz", "maria clara santos"),
        ],
    )
    def test_strangers_below_noise_floor(self, a, b):
        """Test unrelated full names stay under the default noise floor."""
        assert name_similarity(a, b) < MatchConfig().name_noise_floor

    def test_are_names_similar(self):
        """Test the caller-supplied gate."""
        assert are_names_similar("juan dela cruz", "dela cruz juan", 0.85) is True
        assert are_names_similar("juan dela cruz", "maria clara santos", 0.85) is False


class TestPhonetic:
    """Tests for Soundex helpers."""

    @pytest.mark.parametrize(
        "value,code",
        [
            ("Robert", "R163"),
            ("Rupert", "R163"),
            ("Ashcraft", "A261"),
            ("Tymczak", "T522"),
            ("Pfister", "P236"),
            ("Lee", "L000"),
        ],
    )
    def test_soundex(self, value, code):
        """Test reference Soundex codes."""
        assert soundex(value) == code

    def test_soundex_without_letters(self):
        """Test input with no letters has no code."""
        assert soundex("123") == ""
        assert sounds_like("123", "456") is False

    def test_sounds_like(self):
        """Test common spelling variants."""
        assert sounds_like("Smith", "Smyth") is True
        assert sounds_like("Smith", "Jones") is False

    def test_name_sounds_like(self):
        """Test first and last names are compared token by token."""
        assert name_sounds_like("jon smith", "john smyth") is True
        assert name_sounds_like("jon smith", "john jones") is False

    def test_name_shape_must_agree(self):
        """Test a single name never sounds like a full name."""
        assert name_sounds_like("jon", "john smyth") is False
        assert name_sounds_like("jon", "john") is True


class TestContainment:
    """Tests for substring helpers."""

    def test_contains_significant(self):
        """Test the shorter string must be long enough."""
        assert contains_significant("juan dela cruz", "dela cruz") is True
        assert contains_significant("ab", "abc") is False
        assert contains_significant("abc", "xabcx") is True

    def test_containment_ratio(self):
        """Test ratio against the shorter string."""
        assert containment_ratio("abc", "xabcx") == 1.0
        assert containment_ratio("abcd", "abxx") == 0.5
        assert containment_ratio("", "abc") == 0.0
