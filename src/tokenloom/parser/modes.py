"""Combine a token's base ``$value`` with its ``$extensions.mode`` overrides."""

from __future__ import annotations

from typing import Any

from tokenloom.models.tokens import DEFAULT_MODE
from tokenloom.parser.grouping import TokenDraft
from tokenloom.parser.validators import ValueValidator


class ModeMerger:
    """Validates every mode of a token with the validator of its type.

    Overrides are complete values, not deltas over the base value.
    """

    def __init__(self, validator: ValueValidator) -> None:
        self._validator = validator

    def merge(self, draft: TokenDraft) -> dict[str, Any]:
        """Return ``{mode: value}`` with ``.`` first, then overrides in document order."""
        if draft.type is None:
            raise ValueError(f"token {draft.id!r} has no type; run alias type inference first")
        modes = {DEFAULT_MODE: self._validator.validate(draft.type, draft.value_node)}
        for name, node in draft.mode_nodes.items():
            modes[name] = self._validator.validate(draft.type, node)
        return modes
