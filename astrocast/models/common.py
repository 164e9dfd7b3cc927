"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from enum import StrEnum


class FailureKind(StrEnum):
    NO_CREDENTIAL = "NoCredential"
    NO_LOCATION = "NoLocation"
    TRANSPORT_FAILURE = "TransportFailure"
    MALFORMED_PAYLOAD = "MalformedPayload"
    BAD_TIMESTAMP = "BadTimestamp"
    MISSING_CHANNEL = "MissingChannel"
    LENGTH_MISMATCH = "LengthMismatch"
    OUT_OF_RANGE = "OutOfRange"


def utc_now() -> datetime:
    return datetime.now(UTC)
