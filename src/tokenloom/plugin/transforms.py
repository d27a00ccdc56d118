"""Store of per-token output fragments keyed by format, local id, mode and variant."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase

from tokenloom.models.tokens import DEFAULT_MODE

TransformKey = tuple[str, str, str, str, str | None]


@dataclass(frozen=True)
class TransformEntry:
    """One output fragment for one token in one mode (and optional variant)."""

    token_id: str
    format: str
    local_id: str
    value: str
    mode: str = DEFAULT_MODE
    variant: str | None = None


def matches_any(token_id: str, patterns: list[str]) -> bool:
    """Glob match a token id (``color.*``, ``shadow.dark``)."""
    return any(fnmatchcase(token_id, pattern) for pattern in patterns)


class TransformStore:
    """Insertion-ordered transform registry; a repeated key replaces its value."""

    def __init__(self) -> None:
        self._entries: dict[TransformKey, TransformEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def set_transform(
        self,
        token_id: str,
        *,
        format: str,
        value: str,
        local_id: str | None = None,
        mode: str = DEFAULT_MODE,
        variant: str | None = None,
    ) -> None:
        entry = TransformEntry(
            token_id=token_id,
            format=format,
            local_id=local_id or token_id,
            value=value,
            mode=mode,
            variant=variant,
        )
        self._entries[(token_id, format, entry.local_id, mode, variant)] = entry

    def get_transforms(
        self,
        *,
        format: str,
        token_ids: list[str] | None = None,
        mode: str | None = None,
        variant: str | None = None,
    ) -> list[TransformEntry]:
        """Filter by format and, when given, id globs, mode and variant."""
        return [
            entry
            for entry in self._entries.values()
            if entry.format == format
            and (token_ids is None or matches_any(entry.token_id, token_ids))
            and (mode is None or entry.mode == mode)
            and (variant is None or entry.variant == variant)
        ]
