"""
Error types for the simulated host.

Every error carries a machine-readable `code`, a human `message` and an
optional `context` mapping, and renders to a plain dict via `to_dict()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass
class MockVmError(Exception):
    """
    Structured error raised by the simulated host.

    Supported call patterns:

        MockVmError("simple message")
        MockVmError("message", code="some_code", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging
    """

    code: str
    message: str
    context: Dict[str, Any]

    default_code = "mockvm_error"

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        code = str(kwargs.pop("code", self.default_code))
        ctx = kwargs.pop("context", None)
        if kwargs:
            raise TypeError(f"unexpected keyword arguments: {sorted(kwargs)}")

        super().__init__(message)

        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", str(message))
        object.__setattr__(self, "context", dict(ctx) if isinstance(ctx, Mapping) else {})

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class DecodeError(MockVmError):
    """Bytes are not a well-formed encoding of the expected record shape."""

    default_code = "decode_error"


class EncodeError(MockVmError):
    """A record holds a value that cannot be encoded (out of range, wrong type)."""

    default_code = "encode_error"


class StoreError(MockVmError):
    """Invalid namespace, key or value handed to the store."""

    default_code = "store_invalid"


class AuthorityError(MockVmError):
    """Raised by require_authority when the account is not authorized."""

    default_code = "authority_denied"


__all__ = [
    "MockVmError",
    "DecodeError",
    "EncodeError",
    "StoreError",
    "AuthorityError",
]
