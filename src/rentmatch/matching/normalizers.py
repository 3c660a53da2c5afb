"""Identifier normalization for renter matching.

Canonicalizes phones, emails, Facebook profiles, government ids, names
and locations so that equal identities compare equal. Every normalizer
is deterministic and idempotent: normalizing a normalized value returns
it unchanged.

Phone rules follow the configured default region (Philippines, +63):

    normalize_phone("0917-123-4567")  -> "+639171234567"
    normalize_phone("639171234567")   -> "+639171234567"
    normalize_phone("9171234567")     -> "+639171234567"
"""

import hashlib
import re
import unicodedata
from typing import Iterable
from urllib.parse import parse_qs, urlsplit

from ..config import MatchConfig
from ..logging import log_normalization_failure
from .models import (
    IDENTIFIER_PRIORITY,
    CandidateData,
    Identifier,
    IdentifierKind,
    NameParts,
    NormalizedIdentity,
    SearchInput,
    TextField,
)

DEFAULT_COUNTRY_CODE = "63"
DEFAULT_NATIONAL_NUMBER_LENGTH = 10

# Providers that ignore dots in the local part
DOT_INSENSITIVE_DOMAINS = frozenset({"gmail.com", "googlemail.com"})

HONORIFICS = frozenset({"mr", "mrs", "ms", "miss", "mx", "dr", "jr", "sr"})

FACEBOOK_DOMAINS = frozenset({"facebook.com", "fb.com", "fb.me"})
FACEBOOK_HOST_PREFIXES = ("www.", "m.", "mobile.", "touch.", "web.", "mbasic.")

# First path segments that never denote a person's profile
FACEBOOK_NON_PROFILE_PATHS = frozenset({
    "pages",
    "groups",
    "events",
    "marketplace",
    "watch",
    "gaming",
    "stories",
    "hashtag",
    "reel",
    "reels",
    "share",
    "sharer.php",
    "photo.php",
    "permalink.php",
    "story.php",
    "login",
    "login.php",
    "home.php",
})

_PHONE_CHARS = re.compile(r"[^\d+]")
_FACEBOOK_ID = re.compile(r"^[a-z0-9.]+$")
_APOSTROPHES = re.compile(r"['’`]")
_NAME_PUNCTUATION = re.compile(r"[^\w\s-]|_")


class NormalizationError(ValueError):
    """A required identifier is empty or cannot denote its kind.

    Callers treat this as "the field contributes no signal", never as a
    failure of the whole match attempt.
    """

    def __init__(self, kind: str, reason: str, message: str | None = None):
        self.kind = kind
        self.reason = reason
        super().__init__(message or f"Cannot normalize {kind}: {reason}")


def _require_text(value: str | None, kind: str) -> str:
    if value is None or not value.strip():
        raise NormalizationError(kind, "empty")
    return value.strip()


# =============================================================================
# Phone
# =============================================================================


def normalize_phone(
    raw: str | None,
    country_code: str = DEFAULT_COUNTRY_CODE,
    national_number_length: int = DEFAULT_NATIONAL_NUMBER_LENGTH,
) -> str:
    """Normalize a phone number to ``+<country code><digits>``.

    Numbers that match no rule are returned as their bare digit string;
    digits are never dropped.

    Raises:
        NormalizationError: If the input is empty or has no digits
    """
    value = _require_text(raw, IdentifierKind.PHONE.value)

    cleaned = _PHONE_CHARS.sub("", value)
    has_plus = cleaned.startswith("+")
    digits = cleaned.replace("+", "")
    if not digits:
        raise NormalizationError(IdentifierKind.PHONE.value, "no_digits")

    if has_plus:
        return f"+{digits}"

    # Trunk prefix: 09XXXXXXXXX
    if digits.startswith("0") and len(digits) - 1 in (9, 10):
        return f"+{country_code}{digits[1:]}"

    # Country code without the plus: 639XXXXXXXXX
    if digits.startswith(country_code) and len(digits) - len(country_code) in (9, 10):
        return f"+{digits}"

    # Bare national number: 9XXXXXXXXX
    if len(digits) == national_number_length:
        return f"+{country_code}{digits}"

    return digits


def phone_last_digits(
    raw: str | None,
    count: int = 4,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> str | None:
    """Return the last ``count`` digits of a phone, or None if too short."""
    try:
        normalized = normalize_phone(raw, country_code=country_code)
    except NormalizationError:
        return None
    digits = normalized.lstrip("+")
    if len(digits) < count:
        return None
    return digits[-count:]


def phone_variations(
    raw: str | None,
    country_code: str = DEFAULT_COUNTRY_CODE,
    national_number_length: int = DEFAULT_NATIONAL_NUMBER_LENGTH,
) -> list[str]:
    """Return the storage formats a phone may have been saved in.

    Used to build coarse lookups against legacy rows that predate
    normalization; ``+639171234567`` yields ``639171234567``,
    ``09171234567``, ``9171234567`` and the trailing seven digits.
    """
    try:
        normalized = normalize_phone(
            raw,
            country_code=country_code,
            national_number_length=national_number_length,
        )
    except NormalizationError:
        return []

    digits = normalized.lstrip("+")
    variations = [normalized, digits]

    prefix = f"+{country_code}"
    if normalized.startswith(prefix):
        national = normalized[len(prefix):]
        variations.extend([f"0{national}", national])

    if len(digits) >= 7:
        variations.append(digits[-7:])

    unique: list[str] = []
    for variation in variations:
        if variation not in unique:
            unique.append(variation)
    return unique


# =============================================================================
# Email
# =============================================================================


def normalize_email(raw: str | None) -> str:
    """Lowercase and trim an email address.

    Raises:
        NormalizationError: If the input is empty
    """
    return _require_text(raw, IdentifierKind.EMAIL.value).lower()


def normalize_email_strict(
    raw: str | None,
    dot_insensitive_domains: frozenset[str] = DOT_INSENSITIVE_DOMAINS,
) -> str:
    """Normalize an email for de-duplication only.

    Removes ``+tag`` sub-addressing and, for providers that ignore dots,
    the dots in the local part. Never use the result for display.
    """
    email = normalize_email(raw)
    local, sep, domain = email.rpartition("@")
    if not sep or not local:
        return email

    local = local.split("+", 1)[0] or local
    if domain in dot_insensitive_domains:
        local = local.replace(".", "") or local

    return f"{local}@{domain}"


# =============================================================================
# Facebook
# =============================================================================


def _facebook_domain(host: str) -> str | None:
    for prefix in FACEBOOK_HOST_PREFIXES:
        if host.startswith(prefix):
            host = host[len(prefix):]
            break
    return host if host in FACEBOOK_DOMAINS else None


def extract_facebook_id(raw: str | None) -> str:
    """Extract the canonical username or numeric id of a Facebook profile.

    Accepts bare usernames and facebook.com / fb.com / m.facebook.com
    URLs with or without scheme. Query strings are discarded except for
    ``profile.php?id=N``.

    Raises:
        NormalizationError: If empty, not a Facebook URL, or not a profile
    """
    kind = IdentifierKind.FACEBOOK.value
    value = _require_text(raw, kind).lower()

    if "://" not in value:
        head = value.split("/", 1)[0].split("?", 1)[0]
        if _facebook_domain(head):
            value = f"https://{value}"
        elif "/" not in value:
            username = value.split("?", 1)[0].lstrip("@")
            if _FACEBOOK_ID.match(username):
                return username
            raise NormalizationError(kind, "not_a_profile")
        else:
            raise NormalizationError(kind, "not_facebook")

    parsed = urlsplit(value)
    if not _facebook_domain(parsed.hostname or ""):
        raise NormalizationError(kind, "not_facebook")

    segments = [segment for segment in parsed.path.split("/") if segment]
    if not segments:
        raise NormalizationError(kind, "not_a_profile")

    first = segments[0]
    if first == "profile.php":
        profile_ids = parse_qs(parsed.query).get("id", [])
        if profile_ids and profile_ids[0].isdigit():
            return profile_ids[0]
        raise NormalizationError(kind, "not_a_profile")

    # facebook.com/people/Juan-Dela-Cruz/100012345678
    if first == "people" and len(segments) >= 3 and segments[2].isdigit():
        return segments[2]

    if first in FACEBOOK_NON_PROFILE_PATHS or not _FACEBOOK_ID.match(first):
        raise NormalizationError(kind, "not_a_profile")

    return first


def normalize_facebook_url(raw: str | None) -> str:
    """Return the canonical ``https://facebook.com/<id>`` form for storage."""
    return f"https://facebook.com/{extract_facebook_id(raw)}"


# =============================================================================
# Government id
# =============================================================================


def normalize_govt_id(raw: str | None) -> str:
    """Uppercase a government id and remove spaces and hyphens."""
    value = re.sub(r"[\s-]", "", _require_text(raw, IdentifierKind.GOVT_ID.value).upper())
    if not value:
        raise NormalizationError(IdentifierKind.GOVT_ID.value, "empty")
    return value


# =============================================================================
# Names and locations
# =============================================================================


def normalize_name(raw: str | None) -> str:
    """Normalize a person's name for comparison.

    Lowercases, strips diacritics and punctuation (hyphens survive),
    collapses whitespace and removes honorifics such as "Mr." or "Jr."
    from either end.

    Example:
        normalize_name("  Sr. José  Dela-Cruz, Jr. ") -> "jose dela-cruz"
    """
    kind = TextField.NAME.value
    value = unicodedata.normalize("NFKD", _require_text(raw, kind))
    # Lowercase after decomposition; compatibility forms can decompose to uppercase
    value = "".join(ch for ch in value if not unicodedata.combining(ch)).lower()
    value = _APOSTROPHES.sub("", value)
    value = _NAME_PUNCTUATION.sub(" ", value)

    tokens = [token.strip("-") for token in value.split()]
    tokens = [token for token in tokens if token]

    while len(tokens) > 1 and tokens[0] in HONORIFICS:
        tokens.pop(0)
    while len(tokens) > 1 and tokens[-1] in HONORIFICS:
        tokens.pop()

    if not tokens:
        raise NormalizationError(kind, "empty")
    return " ".join(tokens)


def parse_name_parts(raw: str | None) -> NameParts:
    """Split a name into tokens with first and last designations.

    Empty input yields empty parts rather than an error.
    """
    try:
        normalized = normalize_name(raw)
    except NormalizationError:
        return NameParts(normalized_full="")

    tokens = tuple(normalized.split(" "))
    return NameParts(
        normalized_full=normalized,
        tokens=tokens,
        first=tokens[0],
        last=tokens[-1] if len(tokens) > 1 else "",
    )


def get_first_last_name(raw: str | None) -> tuple[str, str]:
    """Return ``(first, last)``, using empty strings when absent."""
    parts = parse_name_parts(raw)
    return parts.first, parts.last


def normalize_location(raw: str | None) -> str:
    """Lowercase, trim and collapse whitespace. No aliasing."""
    return " ".join(_require_text(raw, TextField.LOCATION.value).lower().split())


# =============================================================================
# Fingerprints
# =============================================================================


def hash_identifier(value: str) -> str:
    """Return the SHA-256 hex digest of a normalized value."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_fingerprint(
    name: str | None,
    identifiers: Iterable[Identifier],
) -> str:
    """Derive the dedup key for a new renter profile.

    Uses the strongest available identifier (GOVT_ID > PHONE > EMAIL >
    FACEBOOK) with the normalized name. When a kind has several values
    the lexicographically smallest is used so the result does not depend
    on input order.

    Raises:
        NormalizationError: If neither a name nor an identifier is given
    """
    try:
        normalized_name = normalize_name(name)
    except NormalizationError:
        normalized_name = ""

    by_kind: dict[IdentifierKind, list[str]] = {}
    for identifier in identifiers:
        by_kind.setdefault(identifier.kind, []).append(identifier.normalized)

    for kind in IDENTIFIER_PRIORITY:
        if by_kind.get(kind):
            key = f"{kind.value}:{min(by_kind[kind])}|{normalized_name}"
            return hash_identifier(key)[:32]

    if not normalized_name:
        raise NormalizationError("FINGERPRINT", "empty", "Fingerprint needs a name or identifier")
    return hash_identifier(f"NAME:{normalized_name}")[:32]


# =============================================================================
# Configured normalizer
# =============================================================================


class Normalizer:
    """Normalizer bound to a phone region and email provider rules.

    Stateless apart from its configuration; safe to share across threads.
    """

    def __init__(
        self,
        default_country_code: str = DEFAULT_COUNTRY_CODE,
        national_number_length: int = DEFAULT_NATIONAL_NUMBER_LENGTH,
        dot_insensitive_domains: frozenset[str] = DOT_INSENSITIVE_DOMAINS,
    ):
        """Initialize the normalizer.

        Args:
            default_country_code: Country code applied to national numbers
            national_number_length: Digits in a national mobile number
            dot_insensitive_domains: Email domains that ignore local-part dots
        """
        self.default_country_code = default_country_code
        self.national_number_length = national_number_length
        self.dot_insensitive_domains = dot_insensitive_domains

    @classmethod
    def from_config(cls, config: MatchConfig) -> "Normalizer":
        """Build a normalizer for the phone region in ``config``."""
        return cls(
            default_country_code=config.default_country_code,
            national_number_length=config.national_number_length,
        )

    def normalize(self, kind: IdentifierKind | TextField | str, raw: str | None) -> str:
        """Normalize ``raw`` as a field of ``kind``.

        FACEBOOK values normalize to the bare profile id used for exact
        comparison; use ``normalize_facebook_url`` for storage.

        Raises:
            NormalizationError: If the value is empty or cannot denote ``kind``
        """
        kind = _coerce_kind(kind)
        if kind == IdentifierKind.PHONE:
            return self.normalize_phone(raw)
        if kind == IdentifierKind.EMAIL:
            return normalize_email(raw)
        if kind == IdentifierKind.FACEBOOK:
            return extract_facebook_id(raw)
        if kind == IdentifierKind.GOVT_ID:
            return normalize_govt_id(raw)
        if kind == TextField.NAME:
            return normalize_name(raw)
        return normalize_location(raw)

    def normalize_phone(self, raw: str | None) -> str:
        return normalize_phone(
            raw,
            country_code=self.default_country_code,
            national_number_length=self.national_number_length,
        )

    def normalize_email_strict(self, raw: str | None) -> str:
        return normalize_email_strict(raw, self.dot_insensitive_domains)

    def phone_variations(self, raw: str | None) -> list[str]:
        return phone_variations(
            raw,
            country_code=self.default_country_code,
            national_number_length=self.national_number_length,
        )

    def identifier(self, kind: IdentifierKind, raw: str) -> Identifier:
        """Build a typed identifier with this normalizer's rules."""
        return Identifier(kind=kind, raw=raw, normalized=self.normalize(kind, raw))

    def fingerprint_search(self, search: SearchInput) -> str:
        """Fingerprint the identity described by a report or search input."""
        identifiers = []
        for kind in IdentifierKind:
            for raw in search.raw_identifiers(kind):
                try:
                    identifiers.append(self.identifier(kind, raw))
                except NormalizationError as e:
                    log_normalization_failure(kind.value, e.reason, "fingerprint")
        return generate_fingerprint(search.name, identifiers)

    def normalize_search(self, search: SearchInput) -> NormalizedIdentity:
        """Canonicalize a search input; unusable fields are dropped."""
        name = self._optional(TextField.NAME, search.name, "search")
        return NormalizedIdentity(
            name=name,
            name_parts=parse_name_parts(name) if name else None,
            identifiers={
                kind: self._normalize_all(kind, search.raw_identifiers(kind), "search")
                for kind in IdentifierKind
            },
            location=self._optional(TextField.LOCATION, search.location, "search"),
        )

    def normalize_candidate(self, candidate: CandidateData) -> NormalizedIdentity:
        """Canonicalize a stored profile.

        Stored values are normally already canonical; normalizing again
        is a no-op for them and repairs legacy rows.
        """
        side = candidate.renter_id
        aliases = []
        for alias in candidate.aliases:
            normalized = self._optional(TextField.NAME, alias, side)
            if normalized and normalized not in aliases:
                aliases.append(normalized)

        name = self._optional(TextField.NAME, candidate.name, side)
        return NormalizedIdentity(
            name=name,
            name_parts=parse_name_parts(name) if name else None,
            aliases=tuple(aliases),
            identifiers={
                kind: self._normalize_all(kind, candidate.identifiers_of(kind), side)
                for kind in IdentifierKind
            },
            location=self._optional(TextField.LOCATION, candidate.location, side),
        )

    def _optional(self, kind: TextField, raw: str | None, side: str) -> str | None:
        if not raw:
            return None
        try:
            return self.normalize(kind, raw)
        except NormalizationError as e:
            log_normalization_failure(kind.value, e.reason, side)
            return None

    def _normalize_all(
        self, kind: IdentifierKind, values: Iterable[str], side: str
    ) -> frozenset[str]:
        normalized = set()
        for raw in values:
            try:
                normalized.add(self.normalize(kind, raw))
            except NormalizationError as e:
                log_normalization_failure(kind.value, e.reason, side)
        return frozenset(normalized)


def _coerce_kind(kind: IdentifierKind | TextField | str) -> IdentifierKind | TextField:
    if isinstance(kind, (IdentifierKind, TextField)):
        return kind
    value = str(kind).upper()
    try:
        return IdentifierKind(value)
    except ValueError:
        return TextField(value)
