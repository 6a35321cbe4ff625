"""Canonical error type raised by every SkillHub client operation."""

TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
UNKNOWN = "UNKNOWN"


class SkillHubError(Exception):
    """Normalized failure from the SkillHub API.

    status is the HTTP status code, or 0 when no HTTP response was received.
    code is the machine-readable error code, either one of the module
    constants or whatever the server put in its error envelope.
    """

    def __init__(
        self,
        message: str,
        status: int,
        code: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    @property
    def is_timeout(self) -> bool:
        return self.code == TIMEOUT

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def __repr__(self):
        return (
            f"SkillHubError(message={self.message!r}, status={self.status}, "
            f"code={self.code!r}, details={self.details!r})"
        )


def from_error_body(status: int, body) -> SkillHubError:
    """Build an error from a decoded `{"error": {...}}` envelope.

    Anything that doesn't look like an envelope falls back to a generic
    message carrying only the status.
    """
    envelope = body.get("error") if isinstance(body, dict) else None
    if not isinstance(envelope, dict):
        envelope = {}
    details = envelope.get("details")
    return SkillHubError(
        envelope.get("message") or f"Request failed with status {status}",
        status,
        envelope.get("code"),
        details if isinstance(details, dict) else None,
    )
