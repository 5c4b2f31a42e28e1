"""Exceptions for LLM module."""


class LLMError(Exception):
    """Base exception for LLM errors."""

    pass


class MalformedOutputError(LLMError):
    """Raised when model output is not a well-formed, schema-valid object."""

    def __init__(self, reason: str, raw: str = "") -> None:
        self.reason = reason
        self.raw = raw
        super().__init__(f"Malformed model output: {reason}")
