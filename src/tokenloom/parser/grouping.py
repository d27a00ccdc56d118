"""Type inheritance and grouping pass over the raw tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import GroupError, TokenRangeError, TokenTypeError
from tokenloom.models.tokens import DEFAULT_MODE, GroupSpec, TokenType
from tokenloom.parser.aliases import read_alias
from tokenloom.parser.nodes import RawNode
from tokenloom.parser.validators import join_choices

logger = logging.getLogger("tokenloom.parser")

_FORBIDDEN_NAME_CHARS = frozenset(".{}#")
_TYPE_NAMES = [t.value for t in TokenType]


@dataclass
class TokenDraft:
    """A token found by the grouping pass, before validation.

    ``type`` is ``None`` only for untyped tokens whose ``$value`` is an alias;
    it is filled in from the alias target before validation.
    """

    id: str
    type: TokenType | None
    node: RawNode
    value_node: RawNode
    mode_nodes: dict[str, RawNode] = field(default_factory=dict)
    description: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)
    group_id: str | None = None


@dataclass
class GroupingResult:
    tokens: dict[str, TokenDraft]
    groups: dict[str, GroupSpec]


@dataclass
class _GroupState:
    id: str
    type: TokenType | None
    description: str | None
    extensions: dict[str, Any]
    member_ids: list[str] = field(default_factory=list)
    has_tokens: bool = False


class GroupingPass:
    """Walks the mapping tree depth-first, collecting tokens and groups.

    The effective ``$type`` is threaded downward as an argument; sibling
    subtrees never share state.
    """

    def __init__(self, reporter: DiagnosticReporter) -> None:
        self._reporter = reporter

    def run(self, root: RawNode) -> GroupingResult:
        if not root.is_mapping:
            self._reporter.fail(
                TokenTypeError, f"Expected object, received {root.type_name}", root
            )
        tokens: dict[str, TokenDraft] = {}
        groups: dict[str, _GroupState] = {}
        root_type = self._read_type(root)
        self._walk_children(root, [], root_type, None, tokens, groups)

        specs = {
            gid: GroupSpec(
                id=state.id,
                type=state.type,
                description=state.description,
                extensions=state.extensions,
                member_ids=list(state.member_ids),
            )
            for gid, state in groups.items()
            if state.has_tokens
        }
        logger.debug("grouping pass found %d tokens in %d groups", len(tokens), len(specs))
        return GroupingResult(tokens=tokens, groups=specs)

    # -- walk ----------------------------------------------------------------

    def _walk_children(
        self,
        node: RawNode,
        path: list[str],
        inherited: TokenType | None,
        parent: _GroupState | None,
        tokens: dict[str, TokenDraft],
        groups: dict[str, _GroupState],
    ) -> None:
        for member in node.members:
            if member.key.startswith("$"):
                continue
            if _FORBIDDEN_NAME_CHARS.intersection(member.key) or not member.key:
                self._reporter.fail(
                    GroupError,
                    f'Invalid name "{member.key}": names may not be empty or contain '
                    f'".", "{{", "}}" or "#"',
                    span=member.key_span,
                    node_type="Member",
                )
            child = member.value
            if not child.is_mapping:
                self._reporter.fail(
                    TokenTypeError,
                    f"Expected token or group object, received {child.type_name}",
                    child,
                )
            child_path = [*path, member.key]
            child_id = ".".join(child_path)
            effective = self._read_type(child) or inherited

            if "$value" in child:
                tokens[child_id] = self._make_token(child_id, child, effective, parent)
                if parent is not None:
                    parent.member_ids.append(child_id)
                    self._mark_has_tokens(parent, groups)
                continue

            state = _GroupState(
                id=child_id,
                type=effective,
                description=self._read_description(child),
                extensions=self._read_extensions(child),
            )
            groups[child_id] = state
            self._walk_children(child, child_path, effective, state, tokens, groups)

    @staticmethod
    def _mark_has_tokens(group: _GroupState, groups: dict[str, _GroupState]) -> None:
        segments = group.id.split(".")
        for depth in range(len(segments), 0, -1):
            ancestor = groups.get(".".join(segments[:depth]))
            if ancestor is None or ancestor.has_tokens:
                break
            ancestor.has_tokens = True

    def _make_token(
        self,
        token_id: str,
        node: RawNode,
        token_type: TokenType | None,
        parent: _GroupState | None,
    ) -> TokenDraft:
        value_node = node.get("$value")
        assert value_node is not None
        if token_type is None:
            # untyped aliases inherit their target's type later
            if read_alias(value_node, self._reporter) is None:
                self._reporter.fail(GroupError, 'Missing required property "$type"', node)

        extensions = self._read_extensions(node)
        mode_nodes: dict[str, RawNode] = {}
        ext_node = node.get("$extensions")
        mode_node = ext_node.get("mode") if ext_node is not None else None
        if mode_node is not None:
            if not mode_node.is_mapping:
                self._reporter.fail(
                    TokenTypeError, f"Expected object, received {mode_node.type_name}", mode_node
                )
            for member in mode_node.members:
                if member.key == DEFAULT_MODE:
                    self._reporter.fail(
                        TokenRangeError,
                        f'Mode name "{DEFAULT_MODE}" is reserved for the default value',
                        span=member.key_span,
                        node_type="Member",
                    )
                mode_nodes[member.key] = member.value
            extensions.pop("mode", None)

        return TokenDraft(
            id=token_id,
            type=token_type,
            node=node,
            value_node=value_node,
            mode_nodes=mode_nodes,
            description=self._read_description(node),
            extensions=extensions,
            group_id=parent.id if parent is not None else None,
        )

    # -- metadata ------------------------------------------------------------

    def _read_type(self, node: RawNode) -> TokenType | None:
        type_node = node.get("$type")
        if type_node is None:
            return None
        if not type_node.is_string:
            self._reporter.fail(
                TokenTypeError, f"Expected string, received {type_node.type_name}", type_node
            )
        try:
            return TokenType(type_node.value)
        except ValueError:
            self._reporter.fail(
                TokenRangeError,
                f'Unknown $type "{type_node.value}". Expected one of: {join_choices(_TYPE_NAMES)}.',
                type_node,
            )

    def _read_description(self, node: RawNode) -> str | None:
        desc = node.get("$description")
        if desc is None:
            return None
        if not desc.is_string:
            self._reporter.fail(
                TokenTypeError, f"Expected string, received {desc.type_name}", desc
            )
        return str(desc.value)

    def _read_extensions(self, node: RawNode) -> dict[str, Any]:
        ext = node.get("$extensions")
        if ext is None:
            return {}
        if not ext.is_mapping:
            self._reporter.fail(
                TokenTypeError, f"Expected object, received {ext.type_name}", ext
            )
        return ext.to_python()

