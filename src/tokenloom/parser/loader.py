"""Source decoders: JSON and YAML text (or in-memory data) to a raw node tree.

Both syntaxes are composed with ruamel.yaml, which keeps start/end marks on
every node, so every raw node carries an exact ``SourceSpan``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import DocumentSafetyError, SourceSpan, TokenSyntaxError
from tokenloom.parser.nodes import RawMember, RawNode
from tokenloom.settings import Settings

logger = logging.getLogger("tokenloom.parser")

Syntax = Literal["json", "yaml", "data"]

_NULL_TAG = "tag:yaml.org,2002:null"


@dataclass(frozen=True)
class Document:
    """A decoded token document: raw tree plus the text its spans refer to."""

    root: RawNode
    source: str
    syntax: Syntax
    filename: str = "<string>"


def _span(node: Node) -> SourceSpan:
    start, end = node.start_mark, node.end_mark
    return SourceSpan(
        line=start.line + 1,
        column=start.column + 1,
        offset=start.index,
        length=max(end.index - start.index, 0),
    )


class TrackedLoader:
    """Composes YAML/JSON text into ``RawNode`` trees with source positions.

    Uses ruamel.yaml's pure-Python composer, which preserves line, column and
    character index on every node.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._yaml = YAML(typ="safe", pure=True)

    # -- safety checks -------------------------------------------------------

    def _check_size(self, content: str, reporter: DiagnosticReporter) -> None:
        limit = self._settings.max_document_size
        if len(content) > limit:
            reporter.fail(
                DocumentSafetyError,
                f"Document exceeds maximum size ({len(content):,} chars > {limit:,} limit)",
                node_type="Document",
            )

    # -- public loading API --------------------------------------------------

    def load_json(self, content: str, filename: str = "<string>") -> Document:
        """Decode JSON text.

        Syntax errors are reported with the ``json`` module's own message and
        position; valid JSON is then composed as YAML 1.2 for node marks.
        """
        reporter = self._reporter(content, filename)
        self._check_size(content, reporter)
        try:
            json.loads(content)
        except json.JSONDecodeError as exc:
            reporter.fail(
                TokenSyntaxError,
                f"parse:json: {exc.msg} ({exc.lineno}:{exc.colno})",
                span=SourceSpan(line=exc.lineno, column=exc.colno, offset=exc.pos),
                node_type="Document",
            )
        root = self._compose(content, reporter, "json")
        return Document(root=root, source=content, syntax="json", filename=filename)

    def load_yaml(self, content: str, filename: str = "<string>") -> Document:
        """Decode YAML text."""
        reporter = self._reporter(content, filename)
        self._check_size(content, reporter)
        root = self._compose(content, reporter, "yaml")
        return Document(root=root, source=content, syntax="yaml", filename=filename)

    def load_string(self, content: str, filename: str = "<string>") -> Document:
        """Sniff the syntax of ``content`` and decode it."""
        if content.lstrip()[:1] in ("{", "["):
            return self.load_json(content, filename)
        return self.load_yaml(content, filename)

    def load_data(self, data: Any, *, render_source: bool = True) -> Document:
        """Wrap an already-structured value.

        By default the value is rendered as indented JSON and decoded, so that
        diagnostics can show a frame over that rendering. With
        ``render_source=False`` nodes get zero-width spans and no source.
        """
        if render_source:
            content = json.dumps(data, indent=2, ensure_ascii=False)
            document = self.load_json(content, "<data>")
            return Document(root=document.root, source=content, syntax="data", filename="<data>")
        reporter = self._reporter("", "<data>")
        counter = [0]
        root = self._wrap(data, reporter, counter, 0)
        return Document(root=root, source="", syntax="data", filename="<data>")

    def load(self, path: Path) -> Document:
        """Load a token file; the extension picks the syntax, otherwise sniffed."""
        content = path.read_text(encoding="utf-8")
        filename = self._display_name(path)
        suffix = path.suffix.lower()
        if suffix == ".json":
            return self.load_json(content, filename)
        if suffix in (".yaml", ".yml"):
            return self.load_yaml(content, filename)
        return self.load_string(content, filename)

    # -- internals -----------------------------------------------------------

    def _reporter(self, content: str, filename: str) -> DiagnosticReporter:
        return DiagnosticReporter(content, filename, color=self._settings.color_enabled)

    def _display_name(self, path: Path) -> str:
        try:
            return str(path.resolve().relative_to(self._settings.cwd.resolve()))
        except ValueError:
            return str(path)

    def _compose(self, content: str, reporter: DiagnosticReporter, syntax: str) -> RawNode:
        try:
            node = self._yaml.compose(content)
        except MarkedYAMLError as exc:
            mark = exc.problem_mark or exc.context_mark
            span = (
                SourceSpan(line=mark.line + 1, column=mark.column + 1, offset=mark.index)
                if mark is not None
                else SourceSpan()
            )
            problem = exc.problem or exc.context or "invalid document"
            reporter.fail(
                TokenSyntaxError, f"parse:{syntax}: {problem}", span=span, node_type="Document"
            )
        except YAMLError as exc:
            reporter.fail(TokenSyntaxError, f"parse:{syntax}: {exc}", node_type="Document")
        if node is None:
            return RawNode.mapping([], SourceSpan())
        counter = [0]
        root = self._convert(node, reporter, counter, 0)
        logger.debug("decoded %s document with %d nodes", syntax, counter[0])
        return root

    def _count(
        self, reporter: DiagnosticReporter, counter: list[int], depth: int, span: SourceSpan
    ) -> None:
        counter[0] += 1
        if counter[0] > self._settings.max_node_count:
            reporter.fail(
                DocumentSafetyError,
                f"Document exceeds maximum node count ({self._settings.max_node_count:,})",
                span=span,
                node_type="Document",
            )
        if depth > self._settings.max_depth:
            reporter.fail(
                DocumentSafetyError,
                f"Document exceeds maximum nesting depth ({self._settings.max_depth})",
                span=span,
                node_type="Document",
            )

    def _convert(
        self, node: Node, reporter: DiagnosticReporter, counter: list[int], depth: int
    ) -> RawNode:
        span = _span(node)
        self._count(reporter, counter, depth, span)
        if isinstance(node, MappingNode):
            members: list[RawMember] = []
            seen: set[str] = set()
            for key_node, value_node in node.value:
                if not isinstance(key_node, ScalarNode):
                    reporter.fail(
                        TokenSyntaxError,
                        "Mapping keys must be strings",
                        span=_span(key_node),
                        node_type="Member",
                    )
                key = str(key_node.value)
                if key in seen:
                    reporter.fail(
                        TokenSyntaxError,
                        f'Duplicate key "{key}"',
                        span=_span(key_node),
                        node_type="Member",
                    )
                seen.add(key)
                members.append(
                    RawMember(
                        key=key,
                        key_span=_span(key_node),
                        value=self._convert(value_node, reporter, counter, depth + 1),
                    )
                )
            return RawNode.mapping(members, span)
        if isinstance(node, SequenceNode):
            items = [self._convert(item, reporter, counter, depth + 1) for item in node.value]
            return RawNode.sequence(items, span)
        if node.tag == _NULL_TAG:
            return RawNode.null(span)
        value = self._yaml.constructor.construct_object(node)
        if value is None:
            return RawNode.null(span)
        if not isinstance(value, (str, int, float, bool)):
            # timestamps, binary and other YAML-only scalars stay textual
            value = str(node.value)
        return RawNode.scalar(value, span)

    def _wrap(
        self, data: Any, reporter: DiagnosticReporter, counter: list[int], depth: int
    ) -> RawNode:
        span = SourceSpan()
        self._count(reporter, counter, depth, span)
        if isinstance(data, dict):
            members = [
                RawMember(
                    key=str(key),
                    key_span=span,
                    value=self._wrap(value, reporter, counter, depth + 1),
                )
                for key, value in data.items()
            ]
            return RawNode.mapping(members, span)
        if isinstance(data, (list, tuple)):
            return RawNode.sequence(
                [self._wrap(item, reporter, counter, depth + 1) for item in data], span
            )
        if data is None:
            return RawNode.null(span)
        if isinstance(data, (str, int, float, bool)):
            return RawNode.scalar(data, span)
        return RawNode.scalar(str(data), span)


def decode(
    source: str | dict[str, Any] | list[Any],
    *,
    filename: str = "<string>",
    settings: Settings | None = None,
    render_source: bool = True,
) -> Document:
    """Decode text (JSON or YAML, sniffed) or structured data into a ``Document``."""
    loader = TrackedLoader(settings)
    if isinstance(source, str):
        return loader.load_string(source, filename)
    return loader.load_data(source, render_source=render_source)


def load_file(path: Path | str, settings: Settings | None = None) -> Document:
    return TrackedLoader(settings).load(Path(path))
