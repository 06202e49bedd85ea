"""
Engine error types.

UnparsableElementError never escapes the normalizer: the element is dropped
and the failure recorded in parse_warnings. MalformedBatchError is surfaced
to the caller, who decides whether to keep the previous record set.
"""

from __future__ import annotations


class UnparsableElementError(ValueError):
    """One batch element could not be decoded under any known shape."""


class MalformedBatchError(ValueError):
    """The top-level payload is not array-like under any recognised shape."""
