"""
Error taxonomy for metadata digestion and artifact generation.

Every error carries the offending OData identifier and the category of shape
that was expected, so failures in third-party metadata can be traced without
stepping through the pipeline.
"""

from typing import Optional


class CodegenError(Exception):
    """Base class for all digestion and generation failures."""

    def __init__(self, message: str, identifier: Optional[str] = None, expected: Optional[str] = None):
        super().__init__(message)
        self.identifier = identifier
        self.expected = expected


class SchemaError(CodegenError, ValueError):
    """A property, parameter or return type has a shape that cannot be resolved."""


class MetadataParseError(SchemaError):
    """The metadata document itself is malformed (not EDMX, no Schema, unknown version)."""


class IllegalStateError(CodegenError, RuntimeError):
    """A bound operation was declared without any parameter."""


class ReferenceLookupError(CodegenError, LookupError):
    """Reference to an undeclared model type, enum, root operation or container entry."""


class ConfigurationError(CodegenError, ValueError):
    """Invalid naming or generation option combination, including naming collisions."""
