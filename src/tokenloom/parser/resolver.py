"""Whole-document alias resolution over a networkx dependency graph.

Every ``(token id, mode)`` pair is a graph node; an alias adds an edge from
its target to the referrer, so a topological order resolves targets first.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from typing import Any

import networkx as nx

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import AliasError
from tokenloom.models.tokens import (
    DEFAULT_MODE,
    AliasRef,
    GroupSpec,
    ModeEntry,
    NormalizedToken,
    TokenTable,
    TokenType,
)
from tokenloom.parser.aliases import PendingAlias
from tokenloom.parser.grouping import TokenDraft
from tokenloom.parser.validators import gamut_variants, join_choices

logger = logging.getLogger("tokenloom.parser")

Slot = tuple[str, str]
Path = tuple[str | int, ...]


def iter_aliases(value: Any, path: Path = ()) -> Iterator[tuple[Path, PendingAlias]]:
    """Yield ``(path, alias)`` for every pending alias inside ``value``."""
    if isinstance(value, PendingAlias):
        yield path, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from iter_aliases(item, (*path, key))
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from iter_aliases(item, (*path, index))


def _label(slot: Slot) -> str:
    token_id, mode = slot
    return token_id if mode == DEFAULT_MODE else f"{token_id}#{mode}"


class AliasGraph:
    """Dependency graph of ``(token id, mode)`` slots."""

    def __init__(self) -> None:
        self.graph: nx.DiGraph = nx.DiGraph()
        self._order: dict[Slot, tuple[int, int]] = {}

    def add_slot(self, slot: Slot, order: tuple[int, int]) -> None:
        self.graph.add_node(slot)
        self._order[slot] = order

    def add_alias(self, target: Slot, referrer: Slot, alias: PendingAlias) -> None:
        if not self.graph.has_edge(target, referrer):
            self.graph.add_edge(target, referrer, alias=alias)

    def find_cycle(self) -> tuple[list[Slot], PendingAlias] | None:
        """Return the referrer-to-target chain of one cycle and its first alias."""
        try:
            edges = nx.find_cycle(self.graph)
        except nx.NetworkXNoCycle:
            return None
        backwards = list(reversed(edges))
        chain = [edges[0][0]] + [target for target, _ in backwards]
        first = backwards[0]
        return chain, self.graph.edges[first[0], first[1]]["alias"]

    def resolution_order(self) -> list[Slot]:
        """Targets before referrers; document order breaks ties."""
        return list(nx.lexicographical_topological_sort(self.graph, key=self._order.__getitem__))


class ReferenceResolver:
    """Checks, orders and substitutes every alias, then freezes the table."""

    def __init__(self, reporter: DiagnosticReporter) -> None:
        self._reporter = reporter

    def resolve(
        self,
        drafts: dict[str, TokenDraft],
        values: dict[str, dict[str, Any]],
        groups: dict[str, GroupSpec] | None = None,
    ) -> TokenTable:
        groups = groups or {}
        graph = self._build_graph(drafts, values)

        cycle = graph.find_cycle()
        if cycle is not None:
            chain, alias = cycle
            rendered = " -> ".join(f'"{_label(slot)}"' for slot in chain)
            self._reporter.fail(AliasError, f"Circular alias detected: {rendered}", alias.node)

        resolved: dict[Slot, Any] = {}
        for token_id, mode in graph.resolution_order():
            resolved[(token_id, mode)] = self._substitute(values[token_id][mode], resolved)
        logger.debug(
            "resolved %d aliases across %d mode values",
            graph.graph.number_of_edges(),
            len(resolved),
        )

        tokens: dict[str, NormalizedToken] = {}
        for token_id, draft in drafts.items():
            assert draft.type is not None
            modes = {
                mode: self._entry(draft.type, raw, resolved[(token_id, mode)])
                for mode, raw in values[token_id].items()
            }
            base_alias = modes[DEFAULT_MODE].alias_of
            tokens[token_id] = NormalizedToken(
                id=token_id,
                type=draft.type,
                modes=modes,
                alias_of=base_alias.target_id if base_alias is not None else None,
                group=groups.get(draft.group_id) if draft.group_id else None,
                source_node=draft.node.span,
                description=draft.description,
                extensions=draft.extensions,
            )
        return TokenTable(tokens, groups)

    # -- graph ---------------------------------------------------------------

    def _build_graph(
        self, drafts: dict[str, TokenDraft], values: dict[str, dict[str, Any]]
    ) -> AliasGraph:
        graph = AliasGraph()
        for index, token_id in enumerate(drafts):
            for mode_index, mode in enumerate(values[token_id]):
                graph.add_slot((token_id, mode), (index, mode_index))

        for token_id, modes in values.items():
            for mode, value in modes.items():
                for _, alias in iter_aliases(value):
                    target = self._check(drafts, values, token_id, alias)
                    graph.add_alias(target, (token_id, mode), alias)
        return graph

    def _check(
        self,
        drafts: dict[str, TokenDraft],
        values: dict[str, dict[str, Any]],
        referrer: str,
        alias: PendingAlias,
    ) -> Slot:
        ref = alias.ref
        target = drafts.get(ref.target_id)
        if target is None:
            self._reporter.fail(
                AliasError,
                f'Alias "{ref.as_alias()}" not found (referenced by "{referrer}")',
                alias.node,
            )
        if ref.mode not in values[ref.target_id]:
            self._reporter.fail(
                AliasError,
                f'Mode "{ref.mode}" not found on "{ref.target_id}" '
                f'(referenced by "{referrer}")',
                alias.node,
            )
        if alias.expected is not None and target.type not in alias.expected:
            expected = join_choices(sorted(t.value for t in alias.expected))
            self._reporter.fail(
                AliasError,
                f'Alias "{ref.as_alias()}" points to a {target.type} token, expected {expected}',
                alias.node,
            )
        return (ref.target_id, ref.mode)

    # -- substitution --------------------------------------------------------

    def _substitute(self, value: Any, resolved: dict[Slot, Any]) -> Any:
        if isinstance(value, PendingAlias):
            return copy.deepcopy(resolved[(value.ref.target_id, value.ref.mode)])
        if isinstance(value, dict):
            return {key: self._substitute(item, resolved) for key, item in value.items()}
        if isinstance(value, list):
            items: list[Any] = []
            for item in value:
                if isinstance(item, PendingAlias) and item.spread:
                    target = copy.deepcopy(resolved[(item.ref.target_id, item.ref.mode)])
                    items.extend(target if isinstance(target, list) else [target])
                else:
                    items.append(self._substitute(item, resolved))
            return items
        return value

    def _entry(self, token_type: TokenType, raw: Any, value: Any) -> ModeEntry:
        alias_of: AliasRef | None = None
        partial: dict[Any, Any] | None = None
        if isinstance(raw, PendingAlias):
            alias_of = raw.ref
        else:
            for path, alias in iter_aliases(raw):
                partial = partial or {}
                node = partial
                for key in path[:-1]:
                    node = node.setdefault(key, {})
                node[path[-1]] = alias.ref
        variants = gamut_variants(value) if token_type is TokenType.COLOR else {}
        return ModeEntry(
            value=value, partial_alias_of=partial, alias_of=alias_of, variants=variants
        )
