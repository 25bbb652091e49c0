"""Structured error types for keyspec.

All errors inherit from both ``KeySpecError`` and ``ValueError`` so that
callers catching ``ValueError`` keep working unchanged.

Hierarchy::

    KeySpecError (Exception)
    +-- CodecError
    |   +-- EncodeError        record cannot be encoded (negative integer, bad type)
    |   +-- DecodeError        malformed or truncated payload
    +-- UnknownKeyTypeError    no key format registered for a type URL
    +-- UnknownTemplateError   no catalog entry under that name
    +-- UnknownHashError       hash type has no concrete algorithm
    +-- ConfigurationError     invalid preference value
"""

from __future__ import annotations


class KeySpecError(Exception):
    """Base class for all keyspec errors."""


class CodecError(KeySpecError, ValueError):
    """Structured encoding or decoding failed."""


class EncodeError(CodecError):
    """A record holds a value the wire format cannot represent."""


class DecodeError(CodecError):
    """Encoded bytes are malformed (truncated, bad varint, wrong wire type)."""


class UnknownKeyTypeError(KeySpecError, ValueError):
    """No key format schema is registered for the given type URL."""


class UnknownTemplateError(KeySpecError, ValueError):
    """No named key template matches the requested name."""


class UnknownHashError(KeySpecError, ValueError):
    """Hash type does not map to a concrete hash algorithm."""


class ConfigurationError(KeySpecError, ValueError):
    """A preference value is invalid."""
