"""Configuration management for RentMatch.

Uses pydantic-settings to load configuration from environment variables.
Matching policy (weights, thresholds, phone region) lives in ``MatchConfig``
so it can be passed explicitly to the scorer and ranker.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfidenceThresholds(BaseModel):
    """Score boundaries (0-100) for each confidence band."""

    exact: float = Field(default=90.0, ge=0.0, le=100.0)
    high: float = Field(default=70.0, ge=0.0, le=100.0)
    medium: float = Field(default=50.0, ge=0.0, le=100.0)
    low: float = Field(default=25.0, ge=0.0, le=100.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "ConfidenceThresholds":
        if not (self.low < self.medium < self.high < self.exact):
            raise ValueError(
                "thresholds must satisfy low < medium < high < exact"
            )
        return self


class SignalWeights(BaseModel):
    """Points each signal contributes at full strength."""

    phone_exact: float = Field(default=80.0, ge=0.0, le=100.0)
    email_exact: float = Field(default=75.0, ge=0.0, le=100.0)
    facebook_exact: float = Field(default=85.0, ge=0.0, le=100.0)
    govt_id_exact: float = Field(default=90.0, ge=0.0, le=100.0)
    name_fuzzy: float = Field(
        default=55.0,
        ge=0.0,
        le=100.0,
        description="Points for a name similarity of 1.0; scaled by strength",
    )
    location_match: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Bonus applied only alongside another signal",
    )

    model_config = ConfigDict(frozen=True)


class MatchConfig(BaseModel):
    """Tunable matching policy."""

    # Phone region
    default_country_code: str = Field(default="63", pattern=r"^\d{1,3}$")
    national_number_length: int = Field(default=10, ge=6, le=12)

    # Bands and weights
    thresholds: ConfidenceThresholds = Field(default_factory=ConfidenceThresholds)
    weights: SignalWeights = Field(default_factory=SignalWeights)

    # Name comparison
    name_noise_floor: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Below this no name signal is emitted"
    )
    name_similarity_threshold: float = Field(
        default=0.85, ge=0.0, le=1.0, description="Gate for are_names_similar"
    )
    near_token_threshold: float = Field(
        default=0.9, ge=0.0, le=1.0, description="Jaro-Winkler for near-exact tokens"
    )
    phonetic_fallback: bool = True

    # Penalties
    conflict_penalty_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Fraction of a kind's weight removed on a conflicting value",
    )
    generic_name_score_cap: float = Field(default=45.0, ge=0.0, le=100.0)

    # Policy
    max_results: int = Field(default=20, ge=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_generic_cap(self) -> "MatchConfig":
        if self.generic_name_score_cap >= self.thresholds.medium:
            raise ValueError("generic_name_score_cap must be below the MEDIUM threshold")
        return self

    @model_validator(mode="after")
    def _check_weights(self) -> "MatchConfig":
        weights = self.weights
        thresholds = self.thresholds

        # Name evidence alone stays in MEDIUM
        if weights.name_fuzzy + weights.location_match >= thresholds.high:
            raise ValueError("name_fuzzy + location_match must be below the HIGH threshold")

        # One exact strong identifier reaches HIGH
        strong = {
            "phone_exact": weights.phone_exact,
            "email_exact": weights.email_exact,
            "facebook_exact": weights.facebook_exact,
            "govt_id_exact": weights.govt_id_exact,
        }
        for name, weight in strong.items():
            if weight < thresholds.high:
                raise ValueError(f"{name} must be at least the HIGH threshold")
        return self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RENTMATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # Environment
    # =========================
    environment: Literal["development", "staging", "production"] = "development"

    # =========================
    # Logging
    # =========================
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # =========================
    # Matching policy
    # =========================
    matching: MatchConfig = Field(default_factory=MatchConfig)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
