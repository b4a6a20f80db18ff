"""Content-addressed audio cache for latinspeak."""

from .fingerprint import canonical_request, fingerprint
from .models import AudioAsset, storage_path_for
from .storage import AudioCacheStore

__all__ = [
    "AudioAsset",
    "AudioCacheStore",
    "canonical_request",
    "fingerprint",
    "storage_path_for",
]
