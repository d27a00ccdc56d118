"""Alias syntax: ``{path.to.token}`` and ``{path.to.token#mode}``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import AliasError, TokenSyntaxError
from tokenloom.models.tokens import AliasRef, TokenType
from tokenloom.parser.nodes import RawNode

if TYPE_CHECKING:
    from tokenloom.parser.grouping import TokenDraft

_ALIAS_RE = re.compile(r"^\{([^{}#.]+(?:\.[^{}#.]+)*)(?:#([^{}#]+))?\}$")


@dataclass(frozen=True)
class PendingAlias:
    """An alias found during validation, not yet substituted.

    ``expected`` holds the token types acceptable at this position (``None``
    accepts any type). ``spread`` splices a list-valued target into the
    enclosing array instead of nesting it.
    """

    ref: AliasRef
    node: RawNode
    expected: frozenset[TokenType] | None = None
    spread: bool = False


def looks_like_alias(node: RawNode) -> bool:
    return node.is_string and str(node.value).startswith("{")


def parse_alias(raw: str) -> AliasRef | None:
    """Parse alias syntax, returning ``None`` when ``raw`` is malformed."""
    match = _ALIAS_RE.match(raw)
    if match is None:
        return None
    return AliasRef(target_id=match.group(1), target_mode=match.group(2))


def read_alias(
    node: RawNode,
    reporter: DiagnosticReporter,
    expected: frozenset[TokenType] | None = None,
    *,
    spread: bool = False,
) -> PendingAlias | None:
    """Return a ``PendingAlias`` if ``node`` is an alias string.

    Strings starting with ``{`` that are not well-formed aliases raise
    ``TokenSyntaxError`` right away.
    """
    if not looks_like_alias(node):
        return None
    ref = parse_alias(str(node.value))
    if ref is None:
        reporter.fail(TokenSyntaxError, f'Invalid alias: "{node.value}"', node)
    return PendingAlias(ref=ref, node=node, expected=expected, spread=spread)


def infer_alias_types(tokens: dict[str, TokenDraft], reporter: DiagnosticReporter) -> None:
    """Give untyped tokens the type of the token their ``$value`` aliases.

    Chains of untyped aliases are followed; dangling targets and cycles are
    reported as ``AliasError``.
    """
    for draft in tokens.values():
        if draft.type is not None:
            continue
        chain = [draft.id]
        current = draft
        while current.type is None:
            ref = parse_alias(str(current.value_node.value))
            assert ref is not None  # checked by the grouping pass
            target = tokens.get(ref.target_id)
            if target is None:
                reporter.fail(
                    AliasError,
                    f'Alias "{ref.as_alias()}" not found (referenced by "{current.id}")',
                    current.value_node,
                )
            if target.id in chain:
                cycle = " -> ".join(f'"{tid}"' for tid in [*chain, target.id])
                reporter.fail(AliasError, f"Circular alias detected: {cycle}", draft.value_node)
            chain.append(target.id)
            current = target
        for token_id in chain:
            tokens[token_id].type = current.type
