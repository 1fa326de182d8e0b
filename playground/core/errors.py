"""Error taxonomy for request handling.

Detection misses are not errors; these cover only failures that abort a
request before or during generation.
"""

DETAILS_EXCERPT_CHARS = 500


class PlaygroundError(Exception):
    """Base class for request-fatal errors."""


class ConfigurationError(PlaygroundError):
    """A required setting (KB URL, API key) is missing."""


class KnowledgeBaseError(PlaygroundError):
    """The knowledge base could not be fetched or parsed."""

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.details = details[:DETAILS_EXCERPT_CHARS]


class GenerationError(PlaygroundError):
    """The text or image provider returned a non-success response."""

    def __init__(self, message: str, status_code: int = 502, details: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.details = details[:DETAILS_EXCERPT_CHARS]
