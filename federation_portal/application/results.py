from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    INVALID_FORMAT = "INVALID_FORMAT"
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    MISMATCH = "MISMATCH"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"
    RATE_LIMITED = "RATE_LIMITED"
    DELIVERY_FAILED = "DELIVERY_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    success: bool = True


@dataclass(frozen=True)
class Err:
    kind: AuthErrorKind
    message: str
    success: bool = False


Result = Union[Ok[T], Err]
