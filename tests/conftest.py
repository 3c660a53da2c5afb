"""Pytest fixtures for RentMatch unit tests."""

import pytest

from rentmatch.config import MatchConfig, get_settings
from rentmatch.matching.models import CandidateData, SearchInput


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset cached settings so environment overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def match_config() -> MatchConfig:
    """Default matching policy."""
    return MatchConfig()


@pytest.fixture
def juan_search() -> SearchInput:
    """Search for Juan Dela Cruz with a local-format mobile number."""
    return SearchInput(name="Juan Dela Cruz", phone="09171234567")


@pytest.fixture
def juan_profile() -> CandidateData:
    """Stored profile sharing the searched phone."""
    return CandidateData(
        renter_id="A",
        name="Juan Dela Cruz",
        phones=("+639171234567",),
        location="Makati City",
    )


@pytest.fixture
def namesake_profile() -> CandidateData:
    """Different person with the same name and another phone."""
    return CandidateData(
        renter_id="B",
        name="Juan Dela Cruz",
        phones=("+639998887777",),
    )


@pytest.fixture
def unrelated_profile() -> CandidateData:
    """Profile with nothing in common with the search."""
    return CandidateData(
        renter_id="C",
        name="Maria Clara Santos",
        emails=("maria.santos@example.com",),
    )
