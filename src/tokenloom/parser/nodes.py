"""Raw document tree: scalars, sequences and mappings with source spans."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from tokenloom.models.errors import SourceSpan


class NodeKind(StrEnum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    NULL = "null"


@dataclass(frozen=True)
class RawMember:
    """One ``key: value`` pair of a mapping, with the key's own span."""

    key: str
    key_span: SourceSpan
    value: RawNode


@dataclass(frozen=True)
class RawNode:
    """A decoded document node. Immutable once built."""

    kind: NodeKind
    span: SourceSpan
    value: str | int | float | bool | None = None
    items: tuple[RawNode, ...] = ()
    members: tuple[RawMember, ...] = ()
    _index: dict[str, RawMember] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind is NodeKind.MAPPING and not self._index:
            object.__setattr__(self, "_index", {m.key: m for m in self.members})

    # -- constructors --------------------------------------------------------

    @classmethod
    def scalar(cls, value: str | int | float | bool, span: SourceSpan) -> RawNode:
        return cls(kind=NodeKind.SCALAR, span=span, value=value)

    @classmethod
    def null(cls, span: SourceSpan) -> RawNode:
        return cls(kind=NodeKind.NULL, span=span)

    @classmethod
    def sequence(cls, items: list[RawNode], span: SourceSpan) -> RawNode:
        return cls(kind=NodeKind.SEQUENCE, span=span, items=tuple(items))

    @classmethod
    def mapping(cls, members: list[RawMember], span: SourceSpan) -> RawNode:
        return cls(kind=NodeKind.MAPPING, span=span, members=tuple(members))

    # -- mapping access ------------------------------------------------------

    def get(self, key: str) -> RawNode | None:
        member = self._index.get(key)
        return member.value if member is not None else None

    def member(self, key: str) -> RawMember | None:
        return self._index.get(key)

    def keys(self) -> list[str]:
        return [m.key for m in self.members]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    # -- type predicates -----------------------------------------------------

    @property
    def is_mapping(self) -> bool:
        return self.kind is NodeKind.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind is NodeKind.SEQUENCE

    @property
    def is_string(self) -> bool:
        return self.kind is NodeKind.SCALAR and isinstance(self.value, str)

    @property
    def is_boolean(self) -> bool:
        return self.kind is NodeKind.SCALAR and isinstance(self.value, bool)

    @property
    def is_number(self) -> bool:
        return (
            self.kind is NodeKind.SCALAR
            and isinstance(self.value, (int, float))
            and not isinstance(self.value, bool)
        )

    @property
    def type_name(self) -> str:
        """JS-like type name used in diagnostics (``String``, ``Number``, ...)."""
        if self.kind is NodeKind.MAPPING:
            return "Object"
        if self.kind is NodeKind.SEQUENCE:
            return "Array"
        if self.kind is NodeKind.NULL:
            return "Null"
        if isinstance(self.value, bool):
            return "Boolean"
        if isinstance(self.value, str):
            return "String"
        return "Number"

    def to_python(self) -> Any:
        """Convert back to plain ``dict`` / ``list`` / scalar values."""
        if self.kind is NodeKind.MAPPING:
            return {m.key: m.value.to_python() for m in self.members}
        if self.kind is NodeKind.SEQUENCE:
            return [item.to_python() for item in self.items]
        return self.value
