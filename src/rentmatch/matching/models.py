"""Pydantic models for renter identity matching.

Every model here is immutable and computed per call; nothing is
persisted by the matching engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .normalizers import Normalizer


# =============================================================================
# Enumerations
# =============================================================================


class IdentifierKind(str, Enum):
    """Strong identifier kinds, ordered from strongest to weakest."""

    GOVT_ID = "GOVT_ID"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    FACEBOOK = "FACEBOOK"


class TextField(str, Enum):
    """Free-text fields that are normalized but never hashed."""

    NAME = "NAME"
    LOCATION = "LOCATION"


class MatchSignalType(str, Enum):
    """Evidence that a candidate is the queried person."""

    PHONE_EXACT = "PHONE_EXACT"
    EMAIL_EXACT = "EMAIL_EXACT"
    FACEBOOK_EXACT = "FACEBOOK_EXACT"
    GOVT_ID_EXACT = "GOVT_ID_EXACT"
    NAME_FUZZY = "NAME_FUZZY"
    LOCATION_MATCH = "LOCATION_MATCH"


class PenaltyReason(str, Enum):
    """Reasons a score is reduced."""

    CONFLICTING_STRONG_IDENTIFIER = "CONFLICTING_STRONG_IDENTIFIER"
    GENERIC_NAME_ONLY = "GENERIC_NAME_ONLY"


class ConfidenceLevel(str, Enum):
    """Coarse confidence band derived from the 0-100 score.

    NONE marks an evaluation below the LOW band; such results are
    dropped by the ranker and never returned.
    """

    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXACT = "EXACT"


# Fingerprint priority, strongest first
IDENTIFIER_PRIORITY: tuple[IdentifierKind, ...] = (
    IdentifierKind.GOVT_ID,
    IdentifierKind.PHONE,
    IdentifierKind.EMAIL,
    IdentifierKind.FACEBOOK,
)

EXACT_SIGNAL_FOR_KIND: dict[IdentifierKind, MatchSignalType] = {
    IdentifierKind.PHONE: MatchSignalType.PHONE_EXACT,
    IdentifierKind.EMAIL: MatchSignalType.EMAIL_EXACT,
    IdentifierKind.FACEBOOK: MatchSignalType.FACEBOOK_EXACT,
    IdentifierKind.GOVT_ID: MatchSignalType.GOVT_ID_EXACT,
}

STRONG_SIGNAL_TYPES = frozenset(EXACT_SIGNAL_FOR_KIND.values())


# =============================================================================
# Identity models
# =============================================================================


class Identifier(BaseModel):
    """A typed identifier with its canonical form."""

    kind: IdentifierKind
    raw: str
    normalized: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_raw(
        cls,
        kind: IdentifierKind,
        raw: str,
        normalizer: "Normalizer | None" = None,
    ) -> "Identifier":
        """Build an identifier, normalizing ``raw``.

        Raises:
            NormalizationError: If ``raw`` is empty or cannot denote ``kind``
        """
        from .normalizers import Normalizer

        normalizer = normalizer or Normalizer()
        return cls(kind=kind, raw=raw, normalized=normalizer.normalize(kind, raw))


class NameParts(BaseModel):
    """A normalized name split into tokens."""

    normalized_full: str
    tokens: tuple[str, ...] = ()
    first: str = ""
    last: str = ""

    model_config = ConfigDict(frozen=True)


class SearchInput(BaseModel):
    """The partial identity a user searched for or reported.

    All fields are optional; partial input is never rejected.
    """

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    facebook: str | None = None
    govt_id: str | None = None
    location: str | None = None

    # Extra identifiers supplied in a multi-identifier search
    additional_phones: tuple[str, ...] = ()
    additional_emails: tuple[str, ...] = ()
    additional_facebooks: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    def raw_identifiers(self, kind: IdentifierKind) -> list[str]:
        """Return every raw value supplied for ``kind``, primary first."""
        primary = {
            IdentifierKind.PHONE: self.phone,
            IdentifierKind.EMAIL: self.email,
            IdentifierKind.FACEBOOK: self.facebook,
            IdentifierKind.GOVT_ID: self.govt_id,
        }[kind]
        extra = {
            IdentifierKind.PHONE: self.additional_phones,
            IdentifierKind.EMAIL: self.additional_emails,
            IdentifierKind.FACEBOOK: self.additional_facebooks,
            IdentifierKind.GOVT_ID: (),
        }[kind]
        values = [primary] if primary else []
        values.extend(v for v in extra if v)
        return values

    @property
    def has_strong_input(self) -> bool:
        """Whether any strong identifier was supplied."""
        return any(self.raw_identifiers(kind) for kind in IdentifierKind)

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.location or self.has_strong_input)


class CandidateData(BaseModel):
    """Comparable fields of one stored renter profile."""

    renter_id: str
    name: str | None = None
    aliases: tuple[str, ...] = ()
    phones: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    facebooks: tuple[str, ...] = ()
    govt_ids: tuple[str, ...] = ()
    location: str | None = None
    fingerprint: str | None = None

    model_config = ConfigDict(frozen=True)

    def identifiers_of(self, kind: IdentifierKind) -> tuple[str, ...]:
        """Return the stored values for ``kind``."""
        return {
            IdentifierKind.PHONE: self.phones,
            IdentifierKind.EMAIL: self.emails,
            IdentifierKind.FACEBOOK: self.facebooks,
            IdentifierKind.GOVT_ID: self.govt_ids,
        }[kind]

    @classmethod
    def from_identifiers(
        cls,
        renter_id: str,
        identifiers: Iterable[Identifier],
        name: str | None = None,
        aliases: Iterable[str] = (),
        location: str | None = None,
        fingerprint: str | None = None,
    ) -> "CandidateData":
        """Group typed identifier rows into a candidate profile."""
        grouped: dict[IdentifierKind, list[str]] = {kind: [] for kind in IdentifierKind}
        for identifier in identifiers:
            if identifier.normalized not in grouped[identifier.kind]:
                grouped[identifier.kind].append(identifier.normalized)
        return cls(
            renter_id=renter_id,
            name=name,
            aliases=tuple(aliases),
            phones=tuple(grouped[IdentifierKind.PHONE]),
            emails=tuple(grouped[IdentifierKind.EMAIL]),
            facebooks=tuple(grouped[IdentifierKind.FACEBOOK]),
            govt_ids=tuple(grouped[IdentifierKind.GOVT_ID]),
            location=location,
            fingerprint=fingerprint,
        )


# =============================================================================
# Match evidence
# =============================================================================


class MatchSignal(BaseModel):
    """One piece of evidence produced by a comparison."""

    type: MatchSignalType
    strength: float = Field(ge=0.0, le=1.0)
    description: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_strong(self) -> bool:
        """Whether this is an exact strong-identifier match."""
        return self.type in STRONG_SIGNAL_TYPES


class MatchPenalty(BaseModel):
    """A negative adjustment; ``amount * 100`` is removed from the score."""

    reason: PenaltyReason
    amount: float = Field(ge=0.0, le=1.0)
    kind: IdentifierKind | None = None
    description: str = ""

    model_config = ConfigDict(frozen=True)


class MatchResult(BaseModel):
    """Outcome of comparing a search input with one candidate."""

    renter_id: str
    score: float = Field(ge=0.0, le=100.0)
    confidence: ConfidenceLevel
    signals: tuple[MatchSignal, ...] = ()
    penalties: tuple[MatchPenalty, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def has_strong_match(self) -> bool:
        """Whether at least one strong identifier matched exactly."""
        return any(signal.is_strong for signal in self.signals)

    @property
    def is_reportable(self) -> bool:
        """Whether the result reached at least the LOW band."""
        return self.confidence != ConfidenceLevel.NONE

    @property
    def signal_types(self) -> list[MatchSignalType]:
        return [signal.type for signal in self.signals]


@dataclass(frozen=True)
class NormalizedIdentity:
    """Canonical view of one side of a comparison."""

    name: str | None = None
    name_parts: NameParts | None = None
    aliases: tuple[str, ...] = ()
    identifiers: dict[IdentifierKind, frozenset[str]] = field(default_factory=dict)
    location: str | None = None

    def values(self, kind: IdentifierKind) -> frozenset[str]:
        return self.identifiers.get(kind, frozenset())

    @property
    def names(self) -> tuple[str, ...]:
        """Primary name followed by aliases."""
        return ((self.name,) if self.name else ()) + self.aliases
