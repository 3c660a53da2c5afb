"""Confidence scoring for renter matching.

Confidence answers one question: is this candidate the same person as
the one searched for? It is unrelated to how severe the candidate's
reports are.

Scoring model (0-100, default thresholds):
- 90-100: EXACT
- 70-89: HIGH
- 50-69: MEDIUM
- 25-49: LOW
- 0-24: NONE, dropped before results are returned

A single exact strong identifier (phone, email, Facebook, government
id) reaches HIGH or EXACT on its own. Name similarity alone tops out in
MEDIUM, and location only corroborates other evidence.
"""

from ..config import ConfidenceThresholds, MatchConfig
from ..logging import log_match_event
from .hints import GenericNameHint
from .models import (
    EXACT_SIGNAL_FOR_KIND,
    CandidateData,
    ConfidenceLevel,
    IdentifierKind,
    MatchPenalty,
    MatchResult,
    MatchSignal,
    MatchSignalType,
    NormalizedIdentity,
    PenaltyReason,
    SearchInput,
)
from .normalizers import Normalizer
from .similarity import contains_significant, name_similarity, name_sounds_like

# Exact comparison order; also the order signals are reported in
COMPARED_KINDS: tuple[IdentifierKind, ...] = (
    IdentifierKind.PHONE,
    IdentifierKind.EMAIL,
    IdentifierKind.FACEBOOK,
    IdentifierKind.GOVT_ID,
)

CONFIDENCE_LABELS = {
    ConfidenceLevel.EXACT: "Exact Match",
    ConfidenceLevel.HIGH: "High Confidence",
    ConfidenceLevel.MEDIUM: "Medium Confidence",
    ConfidenceLevel.LOW: "Low Confidence",
    ConfidenceLevel.NONE: "No Reliable Match",
}

# Shorter names are too unspecific for the containment fallback
MIN_CONTAINED_NAME_LENGTH = 5


def score_to_confidence(
    score: float,
    thresholds: ConfidenceThresholds | None = None,
) -> ConfidenceLevel:
    """Map a 0-100 score to its confidence band."""
    thresholds = thresholds or ConfidenceThresholds()
    if score >= thresholds.exact:
        return ConfidenceLevel.EXACT
    if score >= thresholds.high:
        return ConfidenceLevel.HIGH
    if score >= thresholds.medium:
        return ConfidenceLevel.MEDIUM
    if score >= thresholds.low:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.NONE


def confidence_to_label(confidence: ConfidenceLevel) -> str:
    """Human-readable label for a confidence band."""
    return CONFIDENCE_LABELS[ConfidenceLevel(confidence)]


class Scorer:
    """Turns the evidence between a search and a candidate into a score.

    Signals:
    - <KIND>_EXACT: normalized strong identifiers are equal
    - NAME_FUZZY: best name similarity against the name and aliases
    - LOCATION_MATCH: normalized locations are equal

    Penalties:
    - CONFLICTING_STRONG_IDENTIFIER: both sides give a kind but no value
      is shared, a sign of two different people with the same name
    - GENERIC_NAME_ONLY: the only identity evidence is a generic name
    """

    def __init__(
        self,
        config: MatchConfig | None = None,
        normalizer: Normalizer | None = None,
        generic_name_hint: GenericNameHint | None = None,
    ):
        """Initialize the scorer.

        Args:
            config: Weights, thresholds and name settings
            normalizer: Normalizer for both sides; built from config if omitted
            generic_name_hint: Source of the generic-name flag; when None the
                GENERIC_NAME_ONLY penalty only fires on an explicit hint
        """
        self.config = config or MatchConfig()
        self.normalizer = normalizer or Normalizer.from_config(self.config)
        self.generic_name_hint = generic_name_hint

    def calculate_match_score(
        self,
        search: SearchInput,
        candidate: CandidateData,
        generic_name: bool | None = None,
    ) -> MatchResult:
        """Score one candidate against a search input.

        Args:
            search: What the user entered
            candidate: A profile proposed by the coarse lookup
            generic_name: Caller's verdict on the searched name; overrides
                the configured hint source when not None

        Returns:
            MatchResult; confidence is NONE when below the LOW band
        """
        query = self.normalizer.normalize_search(search)
        return self.score_normalized(query, candidate, generic_name=generic_name)

    def score_normalized(
        self,
        query: NormalizedIdentity,
        candidate: CandidateData,
        generic_name: bool | None = None,
    ) -> MatchResult:
        """Score a candidate against an already normalized query."""
        profile = self.normalizer.normalize_candidate(candidate)
        signals: list[MatchSignal] = []
        penalties: list[MatchPenalty] = []

        for kind in COMPARED_KINDS:
            searched = query.values(kind)
            stored = profile.values(kind)
            if not searched or not stored:
                continue
            if searched & stored:
                signals.append(
                    MatchSignal(
                        type=EXACT_SIGNAL_FOR_KIND[kind],
                        strength=1.0,
                        description=f"{kind.value.lower()} matches",
                    )
                )
            else:
                penalties.append(self._conflict_penalty(kind))

        name_signal = self._compare_names(query, profile)
        if name_signal:
            signals.append(name_signal)

        # Location corroborates; it never stands alone
        if signals and query.location and query.location == profile.location:
            signals.append(
                MatchSignal(
                    type=MatchSignalType.LOCATION_MATCH,
                    strength=1.0,
                    description="location matches",
                )
            )

        score = self._combine(signals)
        score -= sum(penalty.amount for penalty in penalties) * 100

        has_strong = any(signal.is_strong for signal in signals)
        if name_signal and not has_strong and self._is_generic(query, generic_name):
            cap = self.config.generic_name_score_cap
            penalties.append(
                MatchPenalty(
                    reason=PenaltyReason.GENERIC_NAME_ONLY,
                    amount=max(0.0, score - cap) / 100,
                    description="only a generic name matches",
                )
            )
            score = min(score, cap)

        score = round(min(100.0, max(0.0, score)), 2)
        confidence = score_to_confidence(score, self.config.thresholds)

        result = MatchResult(
            renter_id=candidate.renter_id,
            score=score,
            confidence=confidence,
            signals=tuple(signals),
            penalties=tuple(penalties),
        )
        log_match_event(
            renter_id=result.renter_id,
            score=result.score,
            confidence=result.confidence.value,
            signal_types=[s.type.value for s in result.signals],
            penalty_reasons=[p.reason.value for p in result.penalties],
        )
        return result

    def signal_weight(self, signal_type: MatchSignalType) -> float:
        """Points a signal of ``signal_type`` earns at full strength."""
        weights = self.config.weights
        return {
            MatchSignalType.PHONE_EXACT: weights.phone_exact,
            MatchSignalType.EMAIL_EXACT: weights.email_exact,
            MatchSignalType.FACEBOOK_EXACT: weights.facebook_exact,
            MatchSignalType.GOVT_ID_EXACT: weights.govt_id_exact,
            MatchSignalType.NAME_FUZZY: weights.name_fuzzy,
            MatchSignalType.LOCATION_MATCH: weights.location_match,
        }[signal_type]

    def _combine(self, signals: list[MatchSignal]) -> float:
        """Sum signal contributions, one per type, capped at 100."""
        best: dict[MatchSignalType, float] = {}
        for signal in signals:
            contribution = self.signal_weight(signal.type) * signal.strength
            best[signal.type] = max(best.get(signal.type, 0.0), contribution)
        return min(100.0, sum(best.values()))

    def _conflict_penalty(self, kind: IdentifierKind) -> MatchPenalty:
        weight = self.signal_weight(EXACT_SIGNAL_FOR_KIND[kind])
        return MatchPenalty(
            reason=PenaltyReason.CONFLICTING_STRONG_IDENTIFIER,
            amount=self.config.conflict_penalty_ratio * weight / 100,
            kind=kind,
            description=f"{kind.value.lower()} differs from the stored profile",
        )

    def _compare_names(
        self,
        query: NormalizedIdentity,
        profile: NormalizedIdentity,
    ) -> MatchSignal | None:
        if not query.name or not profile.names:
            return None

        floor = self.config.name_noise_floor
        best = max(
            name_similarity(query.name, name, near_threshold=self.config.near_token_threshold)
            for name in profile.names
        )
        if best >= floor:
            return MatchSignal(
                type=MatchSignalType.NAME_FUZZY,
                strength=min(1.0, best),
                description=f"name {round(best * 100)}% similar",
            )

        # Phonetic and containment fallback keeps a true match in view
        # without ever lifting it past the noise floor.
        if self.config.phonetic_fallback and any(
            name_sounds_like(query.name, name)
            or contains_significant(query.name, name, MIN_CONTAINED_NAME_LENGTH)
            for name in profile.names
        ):
            return MatchSignal(
                type=MatchSignalType.NAME_FUZZY,
                strength=floor,
                description="name sounds alike",
            )
        return None

    def _is_generic(self, query: NormalizedIdentity, generic_name: bool | None) -> bool:
        if generic_name is not None:
            return generic_name
        if self.generic_name_hint is None or not query.name:
            return False
        return self.generic_name_hint.is_generic(query.name)


def calculate_match_score(
    search: SearchInput,
    candidate: CandidateData,
    config: MatchConfig | None = None,
    generic_name: bool | None = None,
) -> MatchResult:
    """Score one candidate with a default-configured Scorer."""
    return Scorer(config).calculate_match_score(search, candidate, generic_name=generic_name)
