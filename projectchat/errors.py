"""
Error taxonomy shared by the services, the chat pipeline and the API layer.

Every error carries the HTTP status it maps to and a `detail` string that is
safe to show to the caller. The exception handlers in `projectchat.main`
turn them into `{"success": false, "error": detail}` responses.
"""


class ChatPlatformError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code = 500
    default_detail = "Something went wrong on the server!"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ChatPlatformError):
    """Malformed or missing input, detected before any side effect."""

    status_code = 400
    default_detail = "Invalid request"


class NotFoundOrForbidden(ChatPlatformError):
    """The resource does not exist or belongs to somebody else. Deliberately ambiguous."""

    status_code = 404
    default_detail = "Project not found or access denied"


class UpstreamAuthError(ChatPlatformError):
    """The completion provider rejected our credentials."""

    status_code = 401
    default_detail = "Invalid OpenAI API key, check the server configuration"


class UpstreamQuotaError(ChatPlatformError):
    """The completion provider reports exhausted credits or rate limits."""

    status_code = 402
    default_detail = "OpenAI credits low, please try again later"


class UpstreamTransientError(ChatPlatformError):
    """
    Any other provider failure. Absorbed by the chat pipeline's fallback.

    It never reaches an exception handler, so its 502 is never sent.
    """

    status_code = 502
    default_detail = "Completion provider unavailable"


class PersistenceError(ChatPlatformError):
    """The record store rejected a write or could not be reached."""

    status_code = 500
