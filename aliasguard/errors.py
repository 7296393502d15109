"""Error taxonomy and the result value returned by fallible operations"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class AliasGuardError(Exception):
    """Base class for alias and backup failures"""


class ValidationError(AliasGuardError):
    """Alias name or command rejected"""


class NotFoundError(AliasGuardError):
    """Tracked file, snapshot or alias is missing"""


class IOFailure(AliasGuardError):
    """Copy, compression or permission failure"""


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or an error, plus non-fatal warnings.

    Public operations hand these back instead of raising, so callers can
    always build a user-facing message from ``message``.
    """
    value: Optional[T] = None
    error: Optional[AliasGuardError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""

    @classmethod
    def success(cls, value: Optional[T] = None, warnings: Optional[List[str]] = None) -> "Outcome[T]":
        return cls(value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: AliasGuardError, warnings: Optional[List[str]] = None) -> "Outcome[T]":
        return cls(error=error, warnings=list(warnings or []))

    def __bool__(self) -> bool:
        return self.ok
