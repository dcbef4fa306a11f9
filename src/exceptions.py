"""
Custom exceptions for the VCT roster pipeline.
"""
from typing import Optional


class RosterPipelineError(Exception):
    """Base exception for all custom errors."""
    pass


class UpstreamError(RosterPipelineError):
    """Raised when Liquipedia fails at transport level or reports an API error."""

    def __init__(self, message: str, status_code: Optional[int] = None, page: Optional[str] = None):
        self.status_code = status_code
        self.page = page
        super().__init__(message)


class ValidationError(RosterPipelineError):
    """Raised when a caller-supplied value has the wrong shape."""
    pass
