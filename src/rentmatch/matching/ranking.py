"""Ranking and match policy.

The ranker turns raw candidate rows into a deduplicated, ordered list of
results. The policy gate then decides what a caller may be shown: only
results backed by an exact strong identifier keep HIGH or EXACT
confidence, and at most ``max_results`` are returned.
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from ..config import MatchConfig
from ..logging import get_context_logger, log_policy_downgrade, log_ranking_summary
from .models import (
    CandidateData,
    ConfidenceLevel,
    MatchResult,
    NormalizedIdentity,
    SearchInput,
)
from .scoring import Scorer

logger = get_context_logger(__name__, component="ranker")

_DOWNGRADED_LEVELS = frozenset({ConfidenceLevel.HIGH, ConfidenceLevel.EXACT})


class PolicyOptions(BaseModel):
    """Caller-facing limits applied after ranking."""

    max_results: int | None = Field(default=None, ge=1)
    min_score: float = Field(default=0.0, ge=0.0, le=100.0)
    require_strong_match: bool = False

    model_config = ConfigDict(frozen=True)


def sort_results(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Order by score descending, then renter id ascending."""
    return sorted(results, key=lambda r: (-r.score, r.renter_id))


def dedup_results(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Keep the highest-scoring result for each renter id.

    Scores of duplicates are never summed; first seen wins ties.
    """
    best: dict[str, MatchResult] = {}
    for result in results:
        existing = best.get(result.renter_id)
        if existing is None or result.score > existing.score:
            best[result.renter_id] = result
    return list(best.values())


class Ranker:
    """Scores candidate rows and applies the match policy."""

    def __init__(
        self,
        scorer: Scorer | None = None,
        config: MatchConfig | None = None,
    ):
        """Initialize the ranker.

        Args:
            scorer: Scorer for individual candidates
            config: Matching policy; defaults to the scorer's config
        """
        if scorer is None:
            scorer = Scorer(config)
        self.scorer = scorer
        self.config = config or scorer.config

    def score_and_rank_candidates(
        self,
        search: SearchInput,
        candidates: Iterable[CandidateData],
        generic_name: bool | None = None,
    ) -> list[MatchResult]:
        """Score, filter, deduplicate and sort candidate rows.

        The same renter may arrive several times from different lookup
        paths; exactly one result per renter id is returned.

        Args:
            search: What the user entered
            candidates: Raw candidate rows, possibly with duplicates
            generic_name: Optional caller verdict on the searched name

        Returns:
            Results at LOW or better, ordered by score then renter id
        """
        query = self.scorer.normalizer.normalize_search(search)
        return self.rank_normalized(query, candidates, generic_name=generic_name)

    def rank_normalized(
        self,
        query: NormalizedIdentity,
        candidates: Iterable[CandidateData],
        generic_name: bool | None = None,
    ) -> list[MatchResult]:
        """Rank against a query that was normalized once by the caller."""
        candidates_in = 0
        reportable = []
        for candidate in candidates:
            candidates_in += 1
            result = self.scorer.score_normalized(query, candidate, generic_name=generic_name)
            if result.is_reportable:
                reportable.append(result)

        ranked = sort_results(dedup_results(reportable))

        log_ranking_summary(
            candidates_in=candidates_in,
            results_out=len(ranked),
            duplicates_dropped=len(reportable) - len(ranked),
            below_threshold=candidates_in - len(reportable),
        )
        return ranked

    def enforce_match_policy(
        self,
        results: Iterable[MatchResult],
        options: PolicyOptions | None = None,
    ) -> list[MatchResult]:
        """Apply the strong-identifier rule, filters and top-K.

        HIGH and EXACT require an exact strong-identifier signal; without
        one the result drops to MEDIUM with its score held just below the
        HIGH threshold. Order is re-established before truncation.
        """
        options = options or PolicyOptions()
        max_results = options.max_results or self.config.max_results
        thresholds = self.config.thresholds
        # Just below HIGH, never below MEDIUM
        capped_score = max(thresholds.medium, thresholds.high - 1)

        kept = []
        for result in results:
            if result.confidence in _DOWNGRADED_LEVELS and not result.has_strong_match:
                log_policy_downgrade(
                    result.renter_id,
                    result.confidence.value,
                    ConfidenceLevel.MEDIUM.value,
                )
                result = result.model_copy(
                    update={
                        "confidence": ConfidenceLevel.MEDIUM,
                        "score": min(result.score, capped_score),
                    }
                )

            if not result.is_reportable or result.score < options.min_score:
                continue
            if options.require_strong_match and not result.has_strong_match:
                continue
            kept.append(result)

        policy_results = sort_results(kept)[:max_results]
        logger.debug(
            f"Policy kept {len(policy_results)} results",
            extra={"max_results": max_results, "min_score": options.min_score},
        )
        return policy_results
