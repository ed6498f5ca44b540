"""
Decode failures as values.

Every decoder returns either a result or one of these errors. Nothing here is
raised during normal evaluation: the only exception type, DecodeFailed, exists
for callers that prefer try/except over branching on a result.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Stable identifiers for each class of decode failure."""
    FIELD_MISSING = "E_FIELD_MISSING"
    TYPE_MISMATCH = "E_TYPE_MISMATCH"
    FAILURE = "E_FAILURE"
    DEPTH_EXCEEDED = "E_DEPTH_EXCEEDED"


@dataclass(frozen=True, slots=True)
class DecodeError:
    """
    Base decode failure.

    - path:    field names from the subject node to the failing field,
               e.g. ("parentElement", "childNodes", "2", "tagName")
    - message: human-readable reason
    """
    path: tuple[str, ...]
    message: str

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.FAILURE

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path) if self.path else "<node>"

    def at(self, *prefix: str) -> DecodeError:
        """Same error, reported relative to a node `prefix` steps further up."""
        return dataclasses.replace(self, path=tuple(prefix) + self.path)

    def __str__(self) -> str:
        return f"{self.dotted_path}: {self.message}"


@dataclass(frozen=True, slots=True)
class FieldMissing(DecodeError):
    message: str = "field is missing"

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.FIELD_MISSING


@dataclass(frozen=True, slots=True)
class TypeMismatch(DecodeError):
    expected: str = ""
    actual: Any = None

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.TYPE_MISMATCH


@dataclass(frozen=True, slots=True)
class Failure(DecodeError):
    pass


@dataclass(frozen=True, slots=True)
class DepthExceeded(DecodeError):
    limit: int = 0

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.DEPTH_EXCEEDED


def field_missing(*path: str) -> FieldMissing:
    return FieldMissing(path=tuple(path))


def type_mismatch(expected: str, actual: Any, *path: str) -> TypeMismatch:
    return TypeMismatch(
        path=tuple(path),
        message=f"expected {expected}, got {type(actual).__name__} {actual!r:.40}",
        expected=expected,
        actual=actual,
    )


def depth_exceeded(limit: int, *path: str) -> DepthExceeded:
    return DepthExceeded(
        path=tuple(path),
        message=f"walk exceeded {limit} steps (cyclic or unexpectedly deep tree?)",
        limit=limit,
    )


class DecodeFailed(Exception):
    """Raised by decode_or_raise; wraps the DecodeError value."""

    def __init__(self, error: DecodeError):
        super().__init__(str(error))
        self.error = error
