"""Abstract output plugin and the contexts handed to its two phases."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from tokenloom.models.tokens import DEFAULT_MODE, TokenTable
from tokenloom.plugin.transforms import TransformEntry, TransformStore


class PluginError(Exception):
    """Raised when plugins produce conflicting or invalid output."""


@dataclass
class TransformContext:
    """Passed to ``Plugin.transform``: the table plus a write handle on the store."""

    tokens: TokenTable
    store: TransformStore

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
        self.store.set_transform(
            token_id, format=format, value=value, local_id=local_id, mode=mode, variant=variant
        )


@dataclass
class BuildContext:
    """Passed to ``Plugin.build``: read access to all transforms, plus output files."""

    tokens: TokenTable
    store: TransformStore
    outputs: dict[str, str] = field(default_factory=dict)
    plugin_name: str = ""

    def get_transforms(
        self,
        *,
        format: str,
        token_ids: list[str] | None = None,
        mode: str | None = None,
        variant: str | None = None,
    ) -> list[TransformEntry]:
        return self.store.get_transforms(
            format=format, token_ids=token_ids, mode=mode, variant=variant
        )

    def output_file(self, filename: str, contents: str) -> None:
        if filename in self.outputs:
            raise PluginError(
                f"Plugin '{self.plugin_name}' tried to overwrite output file '{filename}'"
            )
        self.outputs[filename] = contents


class Plugin(ABC):
    """Abstract base for all output plugins.

    ``transform`` runs for every plugin before any ``build`` runs, so a plugin
    may read transforms registered by another.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def transform(self, context: TransformContext) -> None:
        """Register per-token, per-mode output fragments."""

    @abstractmethod
    def build(self, context: BuildContext) -> None:
        """Assemble registered fragments into output files."""
