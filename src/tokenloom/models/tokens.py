"""Normalized token table: token types, mode entries, groups and aliases."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field

from tokenloom.models.errors import SourceSpan

DEFAULT_MODE = "."


class TokenType(StrEnum):
    BOOLEAN = "boolean"
    BORDER = "border"
    COLOR = "color"
    CUBIC_BEZIER = "cubicBezier"
    DIMENSION = "dimension"
    DURATION = "duration"
    FONT_FAMILY = "fontFamily"
    FONT_WEIGHT = "fontWeight"
    GRADIENT = "gradient"
    LINK = "link"
    NUMBER = "number"
    SHADOW = "shadow"
    STRING = "string"
    STROKE_STYLE = "strokeStyle"
    TRANSITION = "transition"
    TYPOGRAPHY = "typography"


class AliasRef(BaseModel):
    """Reference to another token, optionally pinned to one of its modes."""

    target_id: str = Field(alias="targetId")
    target_mode: str | None = Field(None, alias="targetMode")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def mode(self) -> str:
        return self.target_mode or DEFAULT_MODE

    def as_alias(self) -> str:
        """Render back to ``{id}`` / ``{id#mode}`` syntax."""
        if self.target_mode:
            return f"{{{self.target_id}#{self.target_mode}}}"
        return f"{{{self.target_id}}}"


class ModeEntry(BaseModel):
    """The resolved value of a token in one mode.

    ``partial_alias_of`` mirrors the shape of ``value`` (field names or array
    indices) for sub-fields that were aliases; ``alias_of`` is set only when the
    whole value was a single alias.
    """

    value: Any
    partial_alias_of: dict[Any, Any] | None = Field(None, alias="partialAliasOf")
    alias_of: AliasRef | None = Field(None, alias="aliasOf")
    variants: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True, "populate_by_name": True}


class GroupSpec(BaseModel):
    """A non-leaf node aggregating the tokens directly beneath it."""

    id: str
    type: TokenType | None = Field(None, alias="$type")
    description: str | None = Field(None, alias="$description")
    extensions: dict[str, Any] = Field(default_factory=dict, alias="$extensions")
    member_ids: list[str] = Field(default_factory=list, alias="tokens")

    model_config = {"frozen": True, "populate_by_name": True}


class NormalizedToken(BaseModel):
    """A fully validated, alias-resolved token with all of its modes."""

    id: str
    type: TokenType = Field(alias="$type")
    modes: dict[str, ModeEntry]
    alias_of: str | None = Field(None, alias="aliasOf")
    group: GroupSpec | None = None
    source_node: SourceSpan = Field(alias="sourceNode")
    description: str | None = Field(None, alias="$description")
    extensions: dict[str, Any] = Field(default_factory=dict, alias="$extensions")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def value(self) -> Any:
        """Resolved value of the default mode."""
        return self.modes[DEFAULT_MODE].value

    def mode(self, name: str) -> ModeEntry:
        return self.modes[name]


class TokenTable(Mapping[str, NormalizedToken]):
    """Read-only ``id -> NormalizedToken`` mapping in document order."""

    def __init__(
        self,
        tokens: dict[str, NormalizedToken],
        groups: dict[str, GroupSpec] | None = None,
    ) -> None:
        self._tokens = dict(tokens)
        self._groups = dict(groups or {})

    def __getitem__(self, token_id: str) -> NormalizedToken:
        return self._tokens[token_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"TokenTable({len(self._tokens)} tokens, {len(self._groups)} groups)"

    @property
    def groups(self) -> Mapping[str, GroupSpec]:
        return MappingProxyType(self._groups)

    def to_document(self) -> dict[str, Any]:
        """Re-serialize into a nested token document.

        Aliases are written back as alias strings so that parsing the result
        yields an identical table (apart from source spans).
        """
        document: dict[str, Any] = {}
        for token in self._tokens.values():
            parent = document
            segments = token.id.split(".")
            for depth in range(1, len(segments)):
                group_id = ".".join(segments[:depth])
                if segments[depth - 1] not in parent:
                    parent[segments[depth - 1]] = self._group_header(group_id)
                parent = parent[segments[depth - 1]]

            node: dict[str, Any] = {"$type": token.type.value}
            if token.description is not None:
                node["$description"] = token.description
            node["$value"] = self._serialize_entry(token, token.modes[DEFAULT_MODE])
            extensions = dict(token.extensions)
            overrides = {
                name: self._serialize_entry(token, entry)
                for name, entry in token.modes.items()
                if name != DEFAULT_MODE
            }
            if overrides:
                extensions["mode"] = overrides
            if extensions:
                node["$extensions"] = extensions
            parent[segments[-1]] = node
        return document

    def _group_header(self, group_id: str) -> dict[str, Any]:
        group = self._groups.get(group_id)
        header: dict[str, Any] = {}
        if group is None:
            return header
        if group.type is not None:
            header["$type"] = group.type.value
        if group.description is not None:
            header["$description"] = group.description
        if group.extensions:
            header["$extensions"] = dict(group.extensions)
        return header

    def _serialize_entry(self, token: NormalizedToken, entry: ModeEntry) -> Any:
        if entry.alias_of is not None:
            return entry.alias_of.as_alias()
        if not entry.partial_alias_of:
            return entry.value
        if token.type is TokenType.FONT_FAMILY:
            return self._restore_font_family(entry.value, entry.partial_alias_of)
        if token.type is TokenType.TYPOGRAPHY and isinstance(entry.value, dict):
            partial = dict(entry.partial_alias_of)
            families = partial.get("fontFamily")
            if isinstance(families, dict):
                del partial["fontFamily"]
                restored = _restore_partial(entry.value, partial)
                restored["fontFamily"] = self._restore_font_family(
                    entry.value["fontFamily"], families
                )
                return restored
        return _restore_partial(entry.value, entry.partial_alias_of)

    def _restore_font_family(self, value: list[str], partial: dict[Any, Any]) -> list[str]:
        # Element aliases were spliced in, so walk the original slots.
        restored: list[str] = []
        position = 0
        slot = 0
        while position < len(value):
            ref = partial.get(slot)
            if ref is None:
                restored.append(value[position])
                position += 1
            else:
                target = self._tokens[ref.target_id].modes[ref.mode].value
                restored.append(ref.as_alias())
                position += len(target) if isinstance(target, list) else 1
            slot += 1
        return restored


def _restore_partial(value: Any, partial: dict[Any, Any]) -> Any:
    if isinstance(value, dict):
        restored: Any = dict(value)
    elif isinstance(value, list):
        restored = list(value)
    else:
        return value
    for key, ref in partial.items():
        if isinstance(ref, AliasRef):
            restored[key] = ref.as_alias()
        else:
            restored[key] = _restore_partial(restored[key], ref)
    return restored
