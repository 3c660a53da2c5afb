"""Structured logging configuration for RentMatch.

Provides JSON-formatted logs for production and human-readable
logs for development.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import get_settings

# Attributes present on every LogRecord; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        # Add common fields from record
        if record.funcName:
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging() -> None:
    """Configure logging based on settings."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    logger = get_logger(__name__)
    logger.info(
        "Logging initialized",
        extra={
            "environment": settings.environment,
            "log_level": settings.log_level,
            "log_format": settings.log_format,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds context to all log messages."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Process the logging message and add extra context."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_context_logger(name: str, **context: Any) -> LoggerAdapter:
    """Get a logger with additional context.

    Args:
        name: Logger name
        **context: Context fields to add to all log messages

    Returns:
        Logger adapter with context

    Usage:
        logger = get_context_logger(__name__, component="scorer")
        logger.info("Scoring candidates")  # Includes component
    """
    return LoggerAdapter(get_logger(name), context)


# =========================
# Convenience functions
# =========================


def log_match_event(
    renter_id: str,
    score: float,
    confidence: str,
    signal_types: list[str],
    penalty_reasons: list[str],
) -> None:
    """Log the evaluation of a single candidate.

    Args:
        renter_id: Candidate profile identifier
        score: Final 0-100 score
        confidence: Confidence band name
        signal_types: Signal types that contributed
        penalty_reasons: Penalty reasons that were applied
    """
    logger = get_logger("rentmatch.matching")
    logger.debug(
        f"Scored candidate {renter_id}: {score:.1f} ({confidence})",
        extra={
            "renter_id": renter_id,
            "score": score,
            "confidence": confidence,
            "signals": signal_types,
            "penalties": penalty_reasons,
            "event": "candidate_scored",
        },
    )


def log_normalization_failure(field: str, reason: str, side: str) -> None:
    """Log a field that could not be normalized and contributes no signal.

    The raw value is never logged.

    Args:
        field: Field kind (PHONE, EMAIL, NAME, ...)
        reason: NormalizationError reason
        side: "search" or the renter id of the candidate
    """
    logger = get_logger("rentmatch.normalization")
    logger.debug(
        f"Ignoring unusable {field} on {side}: {reason}",
        extra={
            "field": field,
            "reason": reason,
            "side": side,
            "event": "normalization_failure",
        },
    )


def log_policy_downgrade(renter_id: str, from_confidence: str, to_confidence: str) -> None:
    """Log a result downgraded by the match policy."""
    logger = get_logger("rentmatch.policy")
    logger.info(
        f"Downgraded {renter_id} from {from_confidence} to {to_confidence}",
        extra={
            "renter_id": renter_id,
            "from_confidence": from_confidence,
            "to_confidence": to_confidence,
            "event": "policy_downgrade",
        },
    )


def log_ranking_summary(
    candidates_in: int,
    results_out: int,
    duplicates_dropped: int,
    below_threshold: int,
) -> None:
    """Log the outcome of a ranking pass.

    Args:
        candidates_in: Raw candidate rows received
        results_out: Distinct results returned
        duplicates_dropped: Rows discarded as duplicate renter ids
        below_threshold: Rows discarded below the LOW band
    """
    logger = get_logger("rentmatch.ranking")
    logger.debug(
        f"Ranked {candidates_in} candidates into {results_out} results",
        extra={
            "candidates_in": candidates_in,
            "results_out": results_out,
            "duplicates_dropped": duplicates_dropped,
            "below_threshold": below_threshold,
            "event": "ranking_complete",
        },
    )
