"""Custom exceptions for API."""


class SessionNotFoundError(Exception):
    """Raised when an analytics session is not found."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class UploadTooLargeError(Exception):
    """Raised when an uploaded file exceeds the configured size limit."""

    pass
