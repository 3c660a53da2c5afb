"""Matching engine facade.

Wires normalizer, scorer and ranker for one matching policy. The engine
holds no mutable state; one instance can serve concurrent callers.

Usage:
    engine = MatchEngine.from_settings()
    results = engine.search(SearchInput(name="Juan Dela Cruz", phone="09171234567"), candidates)
"""

from typing import Iterable

from ..config import MatchConfig, Settings, get_settings
from ..logging import get_context_logger
from .hints import GenericNameHint
from .models import CandidateData, Identifier, MatchResult, SearchInput
from .normalizers import Normalizer, generate_fingerprint
from .providers import CandidateProvider, build_candidate_query
from .ranking import PolicyOptions, Ranker
from .scoring import Scorer

logger = get_context_logger(__name__, component="engine")


class MatchEngine:
    """Entity resolution over renter profiles."""

    def __init__(
        self,
        config: MatchConfig | None = None,
        generic_name_hint: GenericNameHint | None = None,
    ):
        """Initialize the engine.

        Args:
            config: Matching policy
            generic_name_hint: Optional source of the generic-name flag
        """
        self.config = config or MatchConfig()
        self.normalizer = Normalizer.from_config(self.config)
        self.scorer = Scorer(
            self.config,
            normalizer=self.normalizer,
            generic_name_hint=generic_name_hint,
        )
        self.ranker = Ranker(self.scorer, self.config)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        generic_name_hint: GenericNameHint | None = None,
    ) -> "MatchEngine":
        """Build an engine from application settings."""
        settings = settings or get_settings()
        return cls(settings.matching, generic_name_hint=generic_name_hint)

    def search(
        self,
        search: SearchInput,
        candidates: Iterable[CandidateData],
        options: PolicyOptions | None = None,
        generic_name: bool | None = None,
    ) -> list[MatchResult]:
        """Rank candidate rows and apply the match policy.

        An empty search input matches nothing and returns an empty list.
        """
        if search.is_empty:
            logger.debug("Empty search input; no candidates scored")
            return []

        ranked = self.ranker.score_and_rank_candidates(
            search, candidates, generic_name=generic_name
        )
        return self.ranker.enforce_match_policy(ranked, options)

    def search_provider(
        self,
        search: SearchInput,
        provider: CandidateProvider,
        options: PolicyOptions | None = None,
        generic_name: bool | None = None,
    ) -> list[MatchResult]:
        """Look up candidates through ``provider`` and search them."""
        query = build_candidate_query(search, self.normalizer)
        if query.is_empty:
            return []
        candidates = provider.find_candidates(query)
        return self.search(search, candidates, options=options, generic_name=generic_name)

    def fingerprint(self, name: str | None, identifiers: Iterable[Identifier]) -> str:
        """Dedup key for a new profile with ``name`` and ``identifiers``."""
        return generate_fingerprint(name, identifiers)

    def fingerprint_search(self, search: SearchInput) -> str:
        """Dedup key for the identity described by a report."""
        return self.normalizer.fingerprint_search(search)
