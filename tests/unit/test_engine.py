"""End-to-end tests for the matching engine."""

import pytest

from rentmatch.config import MatchConfig, Settings
from rentmatch.matching.engine import MatchEngine
from rentmatch.matching.hints import GenericNameDetector
from rentmatch.matching.models import (
    CandidateData,
    ConfidenceLevel,
    Identifier,
    IdentifierKind,
    SearchInput,
)
from rentmatch.matching.providers import InMemoryCandidateProvider
from rentmatch.matching.ranking import PolicyOptions


class TestMatchEngineSearch:
    """Tests for MatchEngine.search."""

    def test_juan_dela_cruz_scenario(self, juan_search, juan_profile, namesake_profile):
        """Test the namesake with another phone never outranks the real match."""
        results = MatchEngine().search(juan_search, [namesake_profile, juan_profile])

        assert results[0].renter_id == "A"
        assert results[0].confidence in (ConfidenceLevel.EXACT, ConfidenceLevel.HIGH)
        for result in results[1:]:
            assert result.renter_id == "B"
            assert result.confidence in (ConfidenceLevel.MEDIUM, ConfidenceLevel.LOW)

    def test_namesake_is_omitted_by_default(self, juan_search, juan_profile, namesake_profile):
        """Test the conflicting namesake falls below LOW."""
        results = MatchEngine().search(juan_search, [namesake_profile, juan_profile])

        assert [r.renter_id for r in results] == ["A"]

    def test_empty_search_returns_nothing(self, juan_profile):
        """Test an empty input matches nothing rather than raising."""
        assert MatchEngine().search(SearchInput(), [juan_profile]) == []

    def test_partial_input(self, juan_profile):
        """Test a location-only search is accepted and finds nothing."""
        assert MatchEngine().search(SearchInput(location="Makati City"), [juan_profile]) == []

    def test_name_only_results_capped_at_medium(self):
        """Test no name-only result is ever shown as HIGH."""
        candidates = [
            CandidateData(renter_id="A", name="Juan Dela Cruz", location="Makati"),
        ]

        results = MatchEngine().search(
            SearchInput(name="Juan Dela Cruz", location="Makati"), candidates
        )

        assert results[0].confidence == ConfidenceLevel.MEDIUM

    def test_options_are_applied(self, juan_search, juan_profile):
        """Test policy options flow through."""
        other = CandidateData(renter_id="D", name="Juan Dela Cruz")
        results = MatchEngine().search(
            juan_search,
            [juan_profile, other],
            options=PolicyOptions(require_strong_match=True),
        )

        assert [r.renter_id for r in results] == ["A"]

    def test_generic_name_hint(self):
        """Test the injected hint lowers generic name-only matches."""
        engine = MatchEngine(generic_name_hint=GenericNameDetector())

        results = engine.search(
            SearchInput(name="Juan"),
            [CandidateData(renter_id="A", name="Juan")],
        )

        assert results[0].confidence == ConfidenceLevel.LOW
        assert results[0].score == pytest.approx(45.0)

    def test_from_settings(self):
        """Test policy is taken from settings."""
        settings = Settings(matching=MatchConfig(max_results=1))

        engine = MatchEngine.from_settings(settings)

        assert engine.config.max_results == 1
        assert engine.ranker.config.max_results == 1


class TestMatchEngineProvider:
    """Tests for MatchEngine.search_provider."""

    def test_provider_rows_are_deduplicated(self, juan_search, juan_profile, namesake_profile):
        """Test duplicate lookup rows produce one result."""
        provider = InMemoryCandidateProvider([juan_profile, namesake_profile])

        results = MatchEngine().search_provider(juan_search, provider)

        assert [r.renter_id for r in results] == ["A"]
        assert results[0].score == 100.0

    def test_empty_query_skips_lookup(self, juan_profile):
        """Test a query with no keys returns nothing."""
        provider = InMemoryCandidateProvider([juan_profile])

        assert MatchEngine().search_provider(SearchInput(location="Makati"), provider) == []


class TestMatchEngineFingerprint:
    """Tests for fingerprint helpers."""

    def test_fingerprint_matches_search_form(self):
        """Test both fingerprint entry points agree."""
        engine = MatchEngine()
        identifiers = [Identifier.from_raw(IdentifierKind.PHONE, "09171234567")]

        assert engine.fingerprint("Juan Dela Cruz", identifiers) == engine.fingerprint_search(
            SearchInput(name="Juan Dela Cruz", phone="+63 917 123 4567")
        )
