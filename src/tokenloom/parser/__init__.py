"""Document decoding, grouping, validation and alias resolution for tokenloom."""

from tokenloom.parser.aliases import PendingAlias, infer_alias_types, parse_alias, read_alias
from tokenloom.parser.grouping import GroupingPass, GroupingResult, TokenDraft
from tokenloom.parser.loader import Document, TrackedLoader, decode, load_file
from tokenloom.parser.modes import ModeMerger
from tokenloom.parser.nodes import NodeKind, RawMember, RawNode
from tokenloom.parser.resolver import AliasGraph, ReferenceResolver
from tokenloom.parser.validators import ValueValidator

__all__ = [
    "AliasGraph",
    "Document",
    "GroupingPass",
    "GroupingResult",
    "ModeMerger",
    "NodeKind",
    "PendingAlias",
    "RawMember",
    "RawNode",
    "ReferenceResolver",
    "TokenDraft",
    "TrackedLoader",
    "ValueValidator",
    "decode",
    "infer_alias_types",
    "load_file",
    "parse_alias",
    "read_alias",
]
