"""Generic-name hints.

A name-only match on a common or low-specificity name ("juan", "maria
santos") says little about identity. The scorer asks a hint source
whether the queried name is generic and, if so, caps name-only scores
below MEDIUM. Without a hint source no name is treated as generic.
"""

from collections import Counter
from typing import Iterable, Mapping, Protocol

from .models import CandidateData
from .normalizers import NormalizationError, normalize_name


class GenericNameHint(Protocol):
    """Source of the low-specificity flag for a normalized name."""

    def is_generic(self, normalized_name: str) -> bool:
        ...


class GenericNameDetector:
    """Flags short, single-token or frequent names as generic.

    Frequency comes from a table of name counts, either supplied (e.g.
    from census data) or counted among the candidates of one search.
    """

    def __init__(
        self,
        common_names: Mapping[str, int] | None = None,
        min_occurrences: int = 3,
        min_length: int = 4,
        single_token_is_generic: bool = True,
    ):
        """Initialize the detector.

        Args:
            common_names: Normalized name -> occurrence count
            min_occurrences: Count at which a name is considered generic
            min_length: Names shorter than this are generic
            single_token_is_generic: Treat single-token names as generic
        """
        self.common_names = dict(common_names or {})
        self.min_occurrences = min_occurrences
        self.min_length = min_length
        self.single_token_is_generic = single_token_is_generic

    @classmethod
    def from_candidates(
        cls,
        candidates: Iterable[CandidateData],
        min_occurrences: int = 3,
        **kwargs,
    ) -> "GenericNameDetector":
        """Count verbatim name occurrences across distinct candidate profiles."""
        names: dict[str, str] = {}
        for candidate in candidates:
            try:
                names[candidate.renter_id] = normalize_name(candidate.name)
            except NormalizationError:
                continue
        return cls(
            common_names=Counter(names.values()),
            min_occurrences=min_occurrences,
            **kwargs,
        )

    def is_generic(self, normalized_name: str) -> bool:
        if not normalized_name:
            return False
        if len(normalized_name.replace(" ", "")) < self.min_length:
            return True
        if self.single_token_is_generic and " " not in normalized_name:
            return True
        return self.common_names.get(normalized_name, 0) >= self.min_occurrences
