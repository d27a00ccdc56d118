"""Pydantic domain models for tokenloom."""

from tokenloom.models.errors import (
    AliasError,
    Diagnostic,
    DiagnosticNode,
    DocumentSafetyError,
    GroupError,
    MissingPropertyError,
    SourceSpan,
    TokenRangeError,
    TokensError,
    TokenSyntaxError,
    TokenTypeError,
)
from tokenloom.models.tokens import (
    DEFAULT_MODE,
    AliasRef,
    GroupSpec,
    ModeEntry,
    NormalizedToken,
    TokenTable,
    TokenType,
)

__all__ = [
    "DEFAULT_MODE",
    "AliasError",
    "AliasRef",
    "Diagnostic",
    "DiagnosticNode",
    "DocumentSafetyError",
    "GroupError",
    "GroupSpec",
    "MissingPropertyError",
    "ModeEntry",
    "NormalizedToken",
    "SourceSpan",
    "TokenRangeError",
    "TokenSyntaxError",
    "TokenTable",
    "TokenType",
    "TokenTypeError",
    "TokensError",
]
