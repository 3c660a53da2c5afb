"""String similarity for fuzzy name matching.

All functions operate on already-normalized strings, are symmetric and
return a similarity in [0.0, 1.0] where 1.0 means identical. Edit
distance and Jaro-Winkler come from RapidFuzz; arguments are put in a
canonical order first so that ``sim(a, b) == sim(b, a)`` holds exactly.

Different typo patterns favor different measures, so ``name_similarity``
takes the best of several:

    name_similarity("dela cruz juan", "juan dela cruz")  -> 1.0 (token set)
    name_similarity("jaun dela cruz", "juan dela cruz")  -> ~0.97 (Jaro-Winkler)
"""

from difflib import SequenceMatcher

from rapidfuzz.distance import Jaro, JaroWinkler, Levenshtein

from .normalizers import parse_name_parts

DEFAULT_PREFIX_WEIGHT = 0.1
DEFAULT_NEAR_TOKEN_THRESHOLD = 0.9

_SOUNDEX_CODES = {
    **dict.fromkeys("BFPV", "1"),
    **dict.fromkeys("CGJKQSXZ", "2"),
    **dict.fromkeys("DT", "3"),
    "L": "4",
    **dict.fromkeys("MN", "5"),
    "R": "6",
}


def _ordered(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


# =============================================================================
# Edit distance
# =============================================================================


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character inserts, deletes and substitutions."""
    return Levenshtein.distance(a, b)


def levenshtein_similarity(a: str, b: str) -> float:
    """Edit distance scaled to [0, 1] by the longer length.

    Two empty strings are 1.0 by convention; callers must treat empty
    input as "no signal", not as a match.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


# =============================================================================
# Jaro / Jaro-Winkler
# =============================================================================


def jaro_similarity(a: str, b: str) -> float:
    """Standard Jaro similarity."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    a, b = _ordered(a, b)
    return Jaro.similarity(a, b)


def jaro_winkler_similarity(
    a: str,
    b: str,
    prefix_weight: float = DEFAULT_PREFIX_WEIGHT,
) -> float:
    """Jaro similarity boosted by up to four matching leading characters."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    a, b = _ordered(a, b)
    return JaroWinkler.similarity(a, b, prefix_weight=prefix_weight)


# =============================================================================
# Token-based
# =============================================================================


def token_set_similarity(
    a: str,
    b: str,
    near_threshold: float = DEFAULT_NEAR_TOKEN_THRESHOLD,
) -> float:
    """Compare names as unordered token sets.

    Tokens match exactly or, failing that, when their Jaro-Winkler
    similarity reaches ``near_threshold``. Near pairs are claimed best
    first, ties broken alphabetically, so the pairing does not depend on
    argument order. Returns matched tokens over the union size.
    """
    tokens_a = set(a.split())
    tokens_b = set(b.split())
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0

    matched = len(tokens_a & tokens_b)
    rest_a = tokens_a - tokens_b
    rest_b = tokens_b - tokens_a

    pairs = []
    for token_a in rest_a:
        for token_b in rest_b:
            score = jaro_winkler_similarity(token_a, token_b)
            if score >= near_threshold:
                pairs.append((-score, *_ordered(token_a, token_b)))

    claimed: set[str] = set()
    for _, first, second in sorted(pairs):
        if first in claimed or second in claimed:
            continue
        claimed.update((first, second))
        matched += 1

    union = len(tokens_a) + len(tokens_b) - matched
    return matched / union


def token_sort_similarity(a: str, b: str) -> float:
    """Jaro-Winkler over alphabetically sorted tokens.

    Handles "cruz juan" versus "juan cruz" ordering differences.
    """
    sorted_a = " ".join(sorted(a.split()))
    sorted_b = " ".join(sorted(b.split()))
    return jaro_winkler_similarity(sorted_a, sorted_b)


# =============================================================================
# Names
# =============================================================================


def name_similarity(
    a: str,
    b: str,
    near_threshold: float = DEFAULT_NEAR_TOKEN_THRESHOLD,
) -> float:
    """Best of token-set, token-sort and direct Jaro-Winkler similarity.

    Taking the maximum avoids penalizing a pure reordering as if it were
    a misspelling. Returns 0.0 when either name is empty.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    return max(
        token_set_similarity(a, b, near_threshold=near_threshold),
        token_sort_similarity(a, b),
        jaro_winkler_similarity(a, b),
    )


def are_names_similar(a: str, b: str, threshold: float) -> bool:
    """Whether ``name_similarity`` reaches ``threshold``."""
    return name_similarity(a, b) >= threshold


# =============================================================================
# Phonetic
# =============================================================================


def soundex(value: str) -> str:
    """American Soundex code, e.g. ``soundex("Robert") == "R163"``.

    Returns an empty string when the input has no ASCII letters.
    """
    letters = [ch for ch in value.upper() if "A" <= ch <= "Z"]
    if not letters:
        return ""

    code = letters[0]
    previous = _SOUNDEX_CODES.get(letters[0], "")
    for ch in letters[1:]:
        digit = _SOUNDEX_CODES.get(ch, "")
        if digit and digit != previous:
            code += digit
            if len(code) == 4:
                break
        # H and W do not separate letters with the same code
        if ch not in "HW":
            previous = digit

    return code.ljust(4, "0")


def sounds_like(a: str, b: str) -> bool:
    """Whether both strings share a non-empty Soundex code."""
    code = soundex(a)
    return bool(code) and code == soundex(b)


def name_sounds_like(a: str, b: str) -> bool:
    """Whether first and last names sound alike token by token.

    Single-token names compare only their first token, and both names
    must have the same shape.
    """
    parts_a = parse_name_parts(a)
    parts_b = parse_name_parts(b)
    if not parts_a.first or not parts_b.first:
        return False
    if bool(parts_a.last) != bool(parts_b.last):
        return False
    if not sounds_like(parts_a.first, parts_b.first):
        return False
    return not parts_a.last or sounds_like(parts_a.last, parts_b.last)


# =============================================================================
# Containment
# =============================================================================


def contains_significant(a: str, b: str, min_length: int = 3) -> bool:
    """Whether the shorter string occurs inside the longer one.

    Strings shorter than ``min_length`` are never significant.
    """
    shorter, longer = sorted(_ordered(a, b), key=len)
    if len(shorter) < min_length:
        return False
    return shorter in longer


def containment_ratio(a: str, b: str) -> float:
    """Longest common substring as a fraction of the shorter string."""
    shortest = min(len(a), len(b))
    if shortest == 0:
        return 0.0
    a, b = _ordered(a, b)
    match = SequenceMatcher(None, a, b, autojunk=False).find_longest_match(
        0, len(a), 0, len(b)
    )
    return match.size / shortest
