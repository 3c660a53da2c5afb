"""Coarse candidate lookup.

Before scoring, a cheap lookup proposes profiles that share at least
one normalized identifier or a phonetic name bucket with the search.
The lookup is deliberately loose: a profile reachable through several
paths is returned once per path and the ranker removes duplicates.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from ..logging import get_context_logger
from .models import CandidateData, IdentifierKind, SearchInput
from .normalizers import Normalizer, parse_name_parts
from .similarity import soundex

logger = get_context_logger(__name__, component="candidate_provider")


class CandidateQuery(BaseModel):
    """Normalized lookup keys derived from a search input."""

    identifiers: dict[IdentifierKind, tuple[str, ...]] = Field(default_factory=dict)
    name: str | None = None
    name_bucket: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.name_bucket and not any(self.identifiers.values())


def name_bucket(normalized_name: str | None) -> str | None:
    """Soundex of the last name, or of the only token of a single name."""
    parts = parse_name_parts(normalized_name)
    code = soundex(parts.last or parts.first)
    return code or None


def build_candidate_query(
    search: SearchInput,
    normalizer: Normalizer | None = None,
) -> CandidateQuery:
    """Derive lookup keys; unusable fields are left out."""
    normalizer = normalizer or Normalizer()
    identity = normalizer.normalize_search(search)
    return CandidateQuery(
        identifiers={
            kind: tuple(sorted(identity.values(kind)))
            for kind in IdentifierKind
            if identity.values(kind)
        },
        name=identity.name,
        name_bucket=name_bucket(identity.name),
    )


class CandidateProvider(ABC):
    """Source of candidate rows for a query."""

    @abstractmethod
    def find_candidates(self, query: CandidateQuery) -> list[CandidateData]:
        """Return candidate rows, possibly with repeated renter ids."""
        pass


class InMemoryCandidateProvider(CandidateProvider):
    """Indexes a fixed set of profiles by identifier and name bucket."""

    def __init__(
        self,
        profiles: Iterable[CandidateData],
        limit: int = 200,
        normalizer: Normalizer | None = None,
    ):
        """Initialize the provider.

        Args:
            profiles: Stored renter profiles
            limit: Maximum rows returned per query
            normalizer: Normalizer applied to stored values when indexing
        """
        self.limit = limit
        self.normalizer = normalizer or Normalizer()
        self._by_identifier: dict[tuple[IdentifierKind, str], list[CandidateData]] = (
            defaultdict(list)
        )
        self._by_bucket: dict[str, list[CandidateData]] = defaultdict(list)
        self._size = 0

        for profile in profiles:
            self.add(profile)

    def __len__(self) -> int:
        return self._size

    def add(self, profile: CandidateData) -> None:
        """Index one profile."""
        identity = self.normalizer.normalize_candidate(profile)
        for kind in IdentifierKind:
            for value in identity.values(kind):
                self._by_identifier[(kind, value)].append(profile)

        buckets = {name_bucket(name) for name in identity.names}
        for bucket in buckets:
            if bucket:
                self._by_bucket[bucket].append(profile)
        self._size += 1

    def find_candidates(self, query: CandidateQuery) -> list[CandidateData]:
        rows: list[CandidateData] = []
        for kind, values in query.identifiers.items():
            for value in values:
                rows.extend(self._by_identifier.get((kind, value), []))
        if query.name_bucket:
            rows.extend(self._by_bucket.get(query.name_bucket, []))

        if len(rows) > self.limit:
            logger.warning(
                f"Candidate lookup truncated to {self.limit} rows",
                extra={"rows": len(rows), "limit": self.limit},
            )
        return rows[: self.limit]
