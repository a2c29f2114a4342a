"""
Exception types raised across the pipeline.
"""

from __future__ import annotations


class MeetnoteError(RuntimeError):
    pass


class ConfigurationError(MeetnoteError):
    """Missing credential or template; raised before any network call."""


class TranscriptionFailure(MeetnoteError):
    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class AnalysisFailure(MeetnoteError):
    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class SynthesisError(MeetnoteError):
    """The note could not be read or written."""
