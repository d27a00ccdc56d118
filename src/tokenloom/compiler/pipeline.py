"""Orchestrates the full pipeline: Decode → Grouping → Validation → Resolution."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.tokens import TokenTable
from tokenloom.parser.aliases import infer_alias_types
from tokenloom.parser.grouping import GroupingPass
from tokenloom.parser.loader import Document, TrackedLoader
from tokenloom.parser.modes import ModeMerger
from tokenloom.parser.resolver import ReferenceResolver
from tokenloom.parser.validators import ValueValidator
from tokenloom.settings import Settings

logger = logging.getLogger("tokenloom.pipeline")


class TokenPipeline:
    """Orchestrates: Document → Grouping → Validation → Resolution → TokenTable.

    Phases run strictly in sequence over one immutable raw tree; the first
    diagnostic raised by any phase aborts the run.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._loader = TrackedLoader(self._settings)

    def parse(
        self,
        source: str | dict[str, Any] | list[Any],
        *,
        filename: str = "<string>",
        render_source: bool = True,
    ) -> TokenTable:
        """Parse JSON/YAML text or structured data into a ``TokenTable``."""
        if isinstance(source, str):
            document = self._loader.load_string(source, filename)
        else:
            document = self._loader.load_data(source, render_source=render_source)
        return self.run(document)

    def parse_file(self, path: Path | str) -> TokenTable:
        return self.run(self._loader.load(Path(path)))

    def run(self, document: Document) -> TokenTable:
        """Run every phase after decoding."""
        reporter = DiagnosticReporter(
            document.source, document.filename, color=self._settings.color_enabled
        )

        # Phase 1: Grouping and $type inheritance
        grouped = GroupingPass(reporter).run(document.root)

        # Phase 1.5: Untyped aliases take their target's type
        infer_alias_types(grouped.tokens, reporter)

        # Phase 2: Validation of every mode value
        merger = ModeMerger(ValueValidator(reporter))
        values = {token_id: merger.merge(draft) for token_id, draft in grouped.tokens.items()}

        # Phase 3: Alias resolution
        table = ReferenceResolver(reporter).resolve(grouped.tokens, values, grouped.groups)
        logger.debug(
            "parsed %s: %d tokens, %d groups", document.filename, len(table), len(table.groups)
        )
        return table


def parse(
    source: str | dict[str, Any] | list[Any],
    *,
    filename: str = "<string>",
    settings: Settings | None = None,
    render_source: bool = True,
) -> TokenTable:
    return TokenPipeline(settings).parse(source, filename=filename, render_source=render_source)


def parse_file(path: Path | str, settings: Settings | None = None) -> TokenTable:
    return TokenPipeline(settings).parse_file(path)
