class FeedbackError(Exception):
    """Base class for session store failures."""


class SessionNotFound(FeedbackError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionValidationError(FeedbackError):
    pass


class StorageFault(FeedbackError):
    """The durable collection could not be read, parsed, or written."""
