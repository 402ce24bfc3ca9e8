"""Tagged results returned by the external service adapters.

Adapters never raise provider errors to their callers. They return either
``Success(payload)`` or ``Fallback(reason, placeholder, message)`` and the
caller branches on the tag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class FallbackReason(str, Enum):
    """Why an adapter could not deliver a real result."""

    NOT_CONFIGURED = "not_configured"
    UNAUTHORIZED = "unauthorized"
    QUOTA_EXCEEDED = "quota_exceeded"
    PROVIDER_ERROR = "provider_error"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass
class Success(Generic[T]):
    """The provider delivered a usable result."""

    payload: T

    ok = True


@dataclass
class Fallback(Generic[T]):
    """The provider was unavailable; ``placeholder`` may stand in for it."""

    reason: FallbackReason
    placeholder: Optional[T] = None
    message: str = ""

    ok = False


AdapterResult = Union[Success[T], Fallback[T]]
