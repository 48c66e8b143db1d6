"""
Pipeline Errors

Exception hierarchy shared by every RAG component. Remote failures carry
the upstream status code and body so callers can report them.
"""

from typing import Optional


class RAGError(Exception):
    """Base class for all pipeline errors."""


class MissingCredential(RAGError):
    """An API key required by a remote service is not configured."""


class InvalidChunkConfig(RAGError, ValueError):
    """Chunk window/overlap combination would never make progress."""


class ExtractionError(RAGError):
    """Text could not be extracted from a document."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to extract text from {path}: {reason}")
        self.path = path
        self.reason = reason


class RemoteError(RAGError):
    """Base class for failures talking to a remote service."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RemoteUnavailable(RemoteError):
    """Network failure or timeout."""


class RemoteRejected(RemoteError):
    """The service answered with a non-success status."""


class MalformedResponse(RemoteError):
    """The service answered successfully but the body has the wrong shape."""


class GatewayError(RemoteRejected):
    """Qdrant answered with a non-success status."""


class SynthesisError(RemoteError):
    """The generation service failed to produce an answer."""
