"""
Custom exception classes for the SQS client.
"""
from typing import Optional


# Bounded prefix of a response body carried in DecodeError messages
BODY_PREFIX_LIMIT = 512


class SQSError(Exception):
    """Base class for every error raised by the SQS client."""

    def __init__(self, message: str):
        """
        Initialize SQS error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message


class AuthError(SQSError):
    """Exception raised when credentials are missing or malformed at signing time."""


class TransportError(SQSError):
    """Exception raised for network-level failures (DNS, connection, timeout)."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        """
        Initialize transport error.

        Args:
            message: Error message
            original: The underlying transport exception
        """
        super().__init__(message)
        self.original = original


class ServiceError(SQSError):
    """
    Exception raised for a non-200 response with a decodable error body.

    Carries the HTTP status and the service's error type, code and message
    together with the request id used for correlation.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str,
        error_type: str = "",
        code: str = "",
        message: str = "",
        request_id: str = ""
    ):
        """
        Initialize service error.

        Args:
            status_code: HTTP status code (400, 403, ...)
            status_text: HTTP status text ("Forbidden", "Bad Request", ...)
            error_type: Service error type ("Sender" or "Receiver")
            code: Service error code ("AccessDenied", ...)
            message: Service error message
            request_id: Request id reported by the service
        """
        self._status_code = status_code
        self._status_text = status_text
        self._error_type = error_type
        self._code = code
        self._request_id = request_id
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def error_type(self) -> str:
        return self._error_type

    @property
    def code(self) -> str:
        return self._code

    @property
    def request_id(self) -> str:
        return self._request_id

    def __str__(self) -> str:
        return (
            f"SQS Error [code={self.status_code} status={self.status_text!r} "
            f"request_id={self.request_id!r} sqs_type={self.error_type!r} "
            f"sqs_code={self.code!r} sqs_message={self.message!r}]"
        )


class DecodeError(SQSError):
    """Exception raised when a response body cannot be decoded into the expected shape."""

    def __init__(
        self,
        message: str,
        body: bytes = b"",
        status_code: Optional[int] = None
    ):
        """
        Initialize decode error.

        Args:
            message: Error message
            body: The raw response body that failed to decode
            status_code: HTTP status code of the response if available
        """
        prefix = body[:BODY_PREFIX_LIMIT].decode("utf-8", errors="replace")
        super().__init__(f"{message}: {prefix!r}")
        self.body = body
        self.status_code = status_code


class QueueNotFoundError(SQSError):
    """Exception raised when no queue matches a name exactly."""

    def __init__(self, queue_name: str):
        """
        Initialize queue-not-found error.

        Args:
            queue_name: The queue name that was looked up
        """
        super().__init__(f"Queue not found: {queue_name}")
        self.queue_name = queue_name
