"""Deterministic cache keys for synthesis requests."""

import hashlib
import json

from ..dialects import Dialect


def _json_number(value: float) -> int | float:
    """Write integral numbers without a fractional part, as JSON producers usually do."""
    if float(value).is_integer():
        return int(value)
    return float(value)


def canonical_request(
    text: str, dialect: Dialect | str, voice_model: str, speed: float
) -> str:
    """Serialize the cache-relevant request fields.

    Keys are emitted in a fixed order (text, dialect, voice_model, speed) as
    compact JSON with non-ASCII characters left unescaped.
    """
    payload = {
        "text": text,
        "dialect": Dialect.parse(dialect).value,
        "voice_model": voice_model,
        "speed": _json_number(speed),
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def fingerprint(
    text: str, dialect: Dialect | str, voice_model: str, speed: float
) -> str:
    """Compute the SHA-256 cache fingerprint of a synthesis request.

    Args:
        text: Normalized text
        dialect: Pronunciation dialect
        voice_model: Effective synthesis model identifier
        speed: Speaking speed multiplier

    Returns:
        64-character lowercase hex digest

    Raises:
        ValueError: If any input is None or the dialect is unknown
    """
    if text is None or dialect is None or voice_model is None or speed is None:
        raise ValueError(
            "All parameters (text, dialect, voice_model, speed) must be non-None"
        )

    serialized = canonical_request(text, dialect, voice_model, speed)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
