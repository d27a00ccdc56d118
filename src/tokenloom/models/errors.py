"""Structured diagnostics with source position tracking."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel


class SourceSpan(BaseModel):
    """Points to an exact character range in the token source.

    ``line`` and ``column`` are 1-based, ``offset`` is the 0-based character
    index of the first character and ``length`` the number of characters.
    """

    line: int = 1
    column: int = 1
    offset: int = 0
    length: int = 0
    file: str | None = None

    model_config = {"frozen": True}


class DiagnosticNode(BaseModel):
    """The offending node: its JS-like type name and location."""

    type: str
    loc: SourceSpan


class Diagnostic(BaseModel):
    """A single fatal pipeline violation."""

    kind: str
    message: str
    node: DiagnosticNode


class TokensError(Exception):
    """Base class for every fatal pipeline error.

    ``str(error)`` is the rendered message (plain message, blank line, source
    frame). ``error.diagnostic`` carries the bare message and location for
    programmatic consumers.
    """

    kind: ClassVar[str] = "Error"

    def __init__(self, diagnostic: Diagnostic, rendered: str | None = None) -> None:
        self.diagnostic = diagnostic
        super().__init__(rendered if rendered is not None else diagnostic.message)

    @property
    def node(self) -> DiagnosticNode:
        return self.diagnostic.node

    @property
    def span(self) -> SourceSpan:
        return self.diagnostic.node.loc


class TokenSyntaxError(TokensError):
    """Malformed source text or malformed alias braces."""

    kind = "SyntaxError"


class TokenTypeError(TokensError):
    """A value's shape does not match the grammar of its ``$type``."""

    kind = "TypeError"


class TokenRangeError(TokensError):
    """A numeric or enumerated value is outside its allowed domain."""

    kind = "RangeError"


class MissingPropertyError(TokensError):
    """A required property of a composite value is absent."""

    kind = "MissingPropertyError"


class AliasError(TokensError):
    """Circular, dangling or type-mismatched alias."""

    kind = "AliasError"


class GroupError(TokensError):
    """A token lacks a resolvable ``$type`` or a name is unusable as an id segment."""

    kind = "GroupError"


class DocumentSafetyError(TokensError):
    """Input exceeds the size, node-count or nesting limits.

    Distinct from syntax errors: these indicate oversized or potentially
    malicious input (e.g. YAML anchor expansion, excessive nesting).
    """

    kind = "SafetyError"
