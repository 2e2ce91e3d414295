from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """
    Closed set of failure kinds every provider maps its errors onto.
    """
    CREDENTIAL_MISSING = "credential_missing"
    INVALID_ENDPOINT = "invalid_endpoint"
    NO_CONTENT = "no_content"
    REQUEST_FAILED = "request_failed"
    DECODING_ERROR = "decoding_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ErrorRecord:
    """
    A classified failure returned in place of response text.

    Attributes:
        kind: One of ErrorKind.
        message: Human-readable message. Never empty.
        http_status: Status code for REQUEST_FAILED when a response arrived.
        cause: Underlying exception, if any.
    """
    kind: ErrorKind
    message: str
    http_status: Optional[int] = None
    cause: Optional[BaseException] = None

    def describe(self) -> str:
        """
        Render the record as a single line suitable for display.
        """
        if self.kind is ErrorKind.REQUEST_FAILED and self.http_status is not None:
            return f"API request failed with status code {self.http_status}: {self.message}"
        return self.message

    # ==========================================================================
    # Constructors
    # ==========================================================================

    @classmethod
    def credential_missing(cls, provider: str) -> "ErrorRecord":
        return cls(ErrorKind.CREDENTIAL_MISSING, f"{provider} API key is missing.")

    @classmethod
    def invalid_endpoint(cls, url: str = "") -> "ErrorRecord":
        suffix = f": {url}" if url else ""
        return cls(ErrorKind.INVALID_ENDPOINT, f"The endpoint URL is invalid{suffix}.")

    @classmethod
    def no_content(cls) -> "ErrorRecord":
        return cls(
            ErrorKind.NO_CONTENT,
            "The API response did not contain any valid text content.",
        )

    @classmethod
    def request_failed(cls, message: str, http_status: Optional[int] = None,
                       cause: Optional[BaseException] = None) -> "ErrorRecord":
        return cls(ErrorKind.REQUEST_FAILED, message or "Unknown error", http_status, cause)

    @classmethod
    def decoding_error(cls, cause: BaseException) -> "ErrorRecord":
        return cls(
            ErrorKind.DECODING_ERROR,
            f"Failed to decode the response: {str(cause) or type(cause).__name__}",
            cause=cause,
        )

    @classmethod
    def timeout(cls, seconds: float, cause: Optional[BaseException] = None) -> "ErrorRecord":
        return cls(
            ErrorKind.TIMEOUT,
            f"The network request timed out after {seconds:g} seconds.",
            cause=cause,
        )


class ProviderError(Exception):
    """
    Raised inside a provider to abort a call with a classified failure.

    Caught at the provider boundary and turned into a failed ChatResult.
    """

    def __init__(self, record: ErrorRecord):
        super().__init__(record.describe())
        self.record = record
