"""Custom latinspeak exceptions."""


class LatinspeakError(Exception):
    """Base exception for latinspeak errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ValidationError(LatinspeakError):
    """Exception raised for malformed synthesis requests.

    Raised before any I/O when:
    - text is missing, blank, or has no letters after normalization
    - dialect is missing or unknown
    - kind or speed is invalid
    """

    pass


class SynthesisProviderError(LatinspeakError):
    """Exception raised when the speech-synthesis provider fails.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - Network connectivity issues
    - The provider returns no audio
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class ProviderAuthError(SynthesisProviderError):
    """Exception raised for provider authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    - API key permissions are insufficient
    """

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message, 401, original_error)


class CacheStoreError(LatinspeakError):
    """Exception raised when a synthesized clip could not be cached.

    Never fatal to a request: the caller still receives audio, it just is not
    reused by later requests.
    """

    pass


class ReferencePropagationError(LatinspeakError):
    """Exception raised when a lesson item's audio shortcut could not be updated."""

    pass
