"""Core descriptor modules."""

from .errors import (  # noqa: F401
    CodecError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    KeySpecError,
    UnknownHashError,
    UnknownKeyTypeError,
    UnknownTemplateError,
)
