"""Unit tests for configuration and logging setup."""

import json
import logging

import pytest
from pydantic import ValidationError

from rentmatch.config import ConfidenceThresholds, MatchConfig, Settings, get_settings
from rentmatch.logging import JSONFormatter, get_context_logger, log_match_event


class TestMatchConfig:
    """Tests for matching policy validation."""

    def test_defaults(self):
        """Test default weights and bands."""
        config = MatchConfig()

        assert config.default_country_code == "63"
        assert config.thresholds.high == 70.0
        assert config.weights.phone_exact == 80.0
        assert config.weights.name_fuzzy < config.thresholds.high
        assert config.generic_name_score_cap < config.thresholds.medium

    def test_thresholds_must_be_ordered(self):
        """Test out-of-order bands are rejected."""
        with pytest.raises(ValidationError):
            ConfidenceThresholds(exact=90, high=95, medium=50, low=25)

    def test_generic_cap_below_medium(self):
        """Test the generic-name cap must stay below MEDIUM."""
        with pytest.raises(ValidationError):
            MatchConfig(generic_name_score_cap=50)

    def test_name_weight_below_high(self):
        """Test name plus location can never reach HIGH on their own."""
        with pytest.raises(ValidationError):
            MatchConfig(weights={"name_fuzzy": 100.0})
        with pytest.raises(ValidationError):
            MatchConfig(weights={"name_fuzzy": 60.0, "location_match": 10.0})

    @pytest.mark.parametrize(
        "field", ["phone_exact", "email_exact", "facebook_exact", "govt_id_exact"]
    )
    def test_strong_weight_reaches_high(self, field):
        """Test each strong identifier weight is at least HIGH."""
        with pytest.raises(ValidationError):
            MatchConfig(weights={field: 30.0})

    def test_weights_checked_against_custom_thresholds(self):
        """Test weight bounds follow the configured bands."""
        config = MatchConfig(
            thresholds={"exact": 95, "high": 85, "medium": 60, "low": 30},
            weights={"phone_exact": 85.0, "email_exact": 90.0},
        )

        assert config.weights.phone_exact == 85.0

    def test_country_code_pattern(self):
        """Test country codes are digits only."""
        with pytest.raises(ValidationError):
            MatchConfig(default_country_code="+63")

    def test_frozen(self):
        """Test config cannot be mutated after construction."""
        config = MatchConfig()

        with pytest.raises(ValidationError):
            config.max_results = 5


class TestSettings:
    """Tests for environment-driven settings."""

    def test_environment_overrides(self, monkeypatch):
        """Test nested matching values come from the environment."""
        monkeypatch.setenv("RENTMATCH_LOG_FORMAT", "text")
        monkeypatch.setenv("RENTMATCH_MATCHING__NAME_NOISE_FLOOR", "0.6")

        settings = Settings()

        assert settings.log_format == "text"
        assert settings.matching.name_noise_floor == 0.6

    def test_get_settings_cached(self):
        """Test settings are built once."""
        assert get_settings() is get_settings()

    def test_environment_flags(self):
        """Test environment helpers."""
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_development is True


class TestLogging:
    """Tests for structured log output."""

    def test_json_formatter_includes_extras(self):
        """Test extra fields are serialized."""
        record = logging.LogRecord(
            "rentmatch.test", logging.INFO, __file__, 10, "hello", (), None
        )
        record.renter_id = "A"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["renter_id"] == "A"

    def test_match_event(self, caplog):
        """Test scored candidates are logged without raw identifiers."""
        caplog.set_level(logging.DEBUG, logger="rentmatch.matching")

        log_match_event("A", 80.0, "HIGH", ["PHONE_EXACT"], [])

        record = caplog.records[-1]
        assert record.event == "candidate_scored"
        assert record.signals == ["PHONE_EXACT"]

    def test_context_logger(self, caplog):
        """Test context fields are attached to every record."""
        caplog.set_level(logging.INFO)
        logger = get_context_logger("rentmatch.test", component="scorer")

        logger.info("scoring")

        assert caplog.records[-1].component == "scorer"
