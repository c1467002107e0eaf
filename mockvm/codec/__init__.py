"""
mockvm.codec
============

Encoding adapter for the simulated host: scalar/list value records,
structured chain records, and the canonical CBOR encode/decode pair.

Everything here is pure and stateless.
"""

from __future__ import annotations

from .encoding import *  # noqa: F401,F403
from .records import *  # noqa: F401,F403
from .value import *  # noqa: F401,F403

from .encoding import __all__ as _all_encoding
from .records import __all__ as _all_records
from .value import __all__ as _all_value

__all__ = tuple(dict.fromkeys((*_all_value, *_all_records, *_all_encoding)))
