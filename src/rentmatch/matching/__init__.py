"""Renter identity matching.

Normalizes partial identities, compares them with stored renter
profiles and ranks the candidates by confidence that they are the same
person.
"""

from .engine import MatchEngine
from .hints import GenericNameDetector, GenericNameHint
from .models import (
    CandidateData,
    ConfidenceLevel,
    Identifier,
    IdentifierKind,
    MatchPenalty,
    MatchResult,
    MatchSignal,
    MatchSignalType,
    NameParts,
    NormalizedIdentity,
    PenaltyReason,
    SearchInput,
    TextField,
)
from .normalizers import (
    NormalizationError,
    Normalizer,
    extract_facebook_id,
    generate_fingerprint,
    get_first_last_name,
    hash_identifier,
    normalize_email,
    normalize_email_strict,
    normalize_facebook_url,
    normalize_govt_id,
    normalize_location,
    normalize_name,
    normalize_phone,
    parse_name_parts,
    phone_last_digits,
    phone_variations,
)
from .providers import (
    CandidateProvider,
    CandidateQuery,
    InMemoryCandidateProvider,
    build_candidate_query,
)
from .ranking import PolicyOptions, Ranker
from .scoring import Scorer, calculate_match_score, confidence_to_label, score_to_confidence
from .similarity import (
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

__all__ = [
    # Engine
    "MatchEngine",
    "Scorer",
    "Ranker",
    "PolicyOptions",
    "calculate_match_score",
    "score_to_confidence",
    "confidence_to_label",
    # Models
    "CandidateData",
    "ConfidenceLevel",
    "Identifier",
    "IdentifierKind",
    "MatchPenalty",
    "MatchResult",
    "MatchSignal",
    "MatchSignalType",
    "NameParts",
    "NormalizedIdentity",
    "PenaltyReason",
    "SearchInput",
    "TextField",
    # Normalization
    "NormalizationError",
    "Normalizer",
    "extract_facebook_id",
    "generate_fingerprint",
    "get_first_last_name",
    "hash_identifier",
    "normalize_email",
    "normalize_email_strict",
    "normalize_facebook_url",
    "normalize_govt_id",
    "normalize_location",
    "normalize_name",
    "normalize_phone",
    "parse_name_parts",
    "phone_last_digits",
    "phone_variations",
    # Similarity
    "are_names_similar",
    "contains_significant",
    "containment_ratio",
    "jaro_similarity",
    "jaro_winkler_similarity",
    "levenshtein_distance",
    "levenshtein_similarity",
    "name_similarity",
    "name_sounds_like",
    "soundex",
    "sounds_like",
    "token_set_similarity",
    "token_sort_similarity",
    # Hints and candidate lookup
    "GenericNameDetector",
    "GenericNameHint",
    "CandidateProvider",
    "CandidateQuery",
    "InMemoryCandidateProvider",
    "build_candidate_query",
]
