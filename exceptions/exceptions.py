"""
Custom exceptions for the Arena Copilot orchestrator.

These exceptions are intentionally simple and descriptive.
They are used across:

  - core/schema/
  - core/api/
  - runtime/session/
  - runtime/agents/ and runtime/api/

Placing them at the project root (exceptions/) avoids circular
imports and keeps exception types consistent across modules.

Every orchestrator operation either returns a fully-valid result or
raises one of these; nothing degrades silently.
"""


class SessionStateError(Exception):
    """
    Raised when a message is sent to a session that is not ACTIVE
    (never started, or already terminated).

    This is a programming error on the caller's side and is never retried.
    """

    def __init__(self, session_id, state, operation="send"):
        self.session_id = session_id
        self.state = state
        self.operation = operation
        msg = (
            f"Cannot {operation} on session '{session_id}': "
            f"state is {getattr(state, 'value', state)}, expected ACTIVE."
        )
        super().__init__(msg)


class TransportError(Exception):
    """
    Raised when the remote model provider fails mid-call or mid-stream,
    times out, or answers with nothing usable.

    The underlying provider exception, if any, is chained as __cause__.
    The core does not retry; the caller decides.
    """

    def __init__(self, operation, details=None):
        self.operation = operation
        self.details = details or "Provider request failed."
        msg = f"Transport failure during {operation}: {self.details}"
        super().__init__(msg)


class SchemaViolationError(Exception):
    """
    Raised when a structured reply cannot be parsed or does not match
    its SchemaDescriptor.

    Example:
        {"summary": "...", "objects": [], "actions": []}   <- no "transcript"
        raises this exception with path="transcript".
    """

    def __init__(self, path, details, raw_text=None):
        self.path = path
        self.details = details
        self.raw_text = raw_text
        msg = f"Schema violation at '{path}': {details}"
        super().__init__(msg)


class InvalidRequestError(ValueError):
    """
    Raised by the request builder when a request is malformed
    (no parts, bad media type, negative reasoning budget).
    """

    def __init__(self, details):
        self.details = details
        super().__init__(f"Invalid generation request: {details}")
