"""Exception hierarchy shared by the parser, storage and query layers.

Every error the core raises derives from :class:`SolveLogError`, so the HTTP
layer can flatten any of them into a single human-readable ``message``.
"""
from __future__ import annotations

from typing import Literal

ParseStage = Literal["header", "params", "template"]


class SolveLogError(Exception):
    """Base class for all SolveLog errors."""


class LogReadError(SolveLogError):
    """The log file could not be read."""


class LogFormatError(SolveLogError):
    """The log text does not follow the expected layout.

    Args:
        message: Human-readable description.
        stage: Which parsing stage rejected the input.
    """

    def __init__(self, message: str, *, stage: ParseStage) -> None:
        super().__init__(message)
        self.stage: ParseStage = stage

    def __str__(self) -> str:
        return f"Log format error ({self.stage}): {self.args[0]}"


class StorageError(SolveLogError):
    """A connection, query or transaction failed."""


class JobNotFoundError(StorageError):
    """The requested job id does not exist."""


class JobConflictError(StorageError):
    """A job with the same id has already been imported."""


class CacheError(StorageError):
    """A cache entry could not be stored."""


class SerializationError(SolveLogError):
    """The aggregate payload could not be encoded."""
