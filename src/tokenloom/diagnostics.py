"""Source-frame rendering and the reporter that raises typed diagnostics."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from tokenloom.models.errors import (
    Diagnostic,
    DiagnosticNode,
    SourceSpan,
    TokensError,
)

if TYPE_CHECKING:
    from tokenloom.parser.nodes import RawNode

_CONTEXT_LINES = 2

_RESET = "\x1b[0m"
_BOLD = "\x1b[1m"
_DIM = "\x1b[2m"
_RED = "\x1b[31m"


def _style(text: str, codes: str, enabled: bool) -> str:
    return f"{codes}{text}{_RESET}" if enabled and text else text


def render_code_frame(source: str, span: SourceSpan, *, color: bool = False) -> str:
    """Render the lines around ``span`` with a ``>`` marker and a caret.

    Up to two lines of context are shown on either side of the offending line.
    Tabs before the offending column are kept in the caret line so the ``^``
    lands under the first offending character.
    """
    if not source:
        return ""
    lines = source.split("\n")
    line_index = min(max(span.line, 1), len(lines)) - 1
    start = max(line_index - _CONTEXT_LINES, 0)
    end = min(line_index + _CONTEXT_LINES + 1, len(lines))
    width = len(str(end))

    frame: list[str] = []
    for index in range(start, end):
        text = lines[index]
        number = str(index + 1).rjust(width)
        is_target = index == line_index
        gutter = f" {number} |"
        marker = _style(">", _BOLD + _RED, color) if is_target else " "
        frame.append(f"{marker}{_style(gutter, _DIM, color)}" + (f" {text}" if text else ""))
        if is_target:
            prefix = text[: max(span.column - 1, 0)]
            padding = "".join("\t" if ch == "\t" else " " for ch in prefix)
            caret_gutter = f" {' ' * width} |"
            frame.append(
                f" {_style(caret_gutter, _DIM, color)} {padding}{_style('^', _BOLD + _RED, color)}"
            )
    return "\n".join(frame)


def format_diagnostic(
    message: str, source: str, span: SourceSpan, *, color: bool = False
) -> str:
    """Message line, blank line, then the source frame (when source is known)."""
    frame = render_code_frame(source, span, color=color)
    heading = _style(message, _BOLD, color)
    if not frame:
        return heading
    return f"{heading}\n\n{frame}"


class DiagnosticReporter:
    """Raises fatal diagnostics pinned to raw nodes of one document.

    The color flag is fixed at construction; nothing is read from the process
    environment at render time.
    """

    def __init__(self, source: str, filename: str | None = None, color: bool = False) -> None:
        self.source = source
        self.filename = filename
        self.color = color

    def fail(
        self,
        error_class: type[TokensError],
        message: str,
        node: RawNode | None = None,
        *,
        span: SourceSpan | None = None,
        node_type: str | None = None,
    ) -> NoReturn:
        """Raise ``error_class`` for ``node`` (or an explicit span)."""
        raise self.build(error_class, message, node, span=span, node_type=node_type)

    def build(
        self,
        error_class: type[TokensError],
        message: str,
        node: RawNode | None = None,
        *,
        span: SourceSpan | None = None,
        node_type: str | None = None,
    ) -> TokensError:
        loc = span if span is not None else (node.span if node is not None else SourceSpan())
        if self.filename and loc.file is None:
            loc = loc.model_copy(update={"file": self.filename})
        diagnostic = Diagnostic(
            kind=error_class.kind,
            message=message,
            node=DiagnosticNode(
                type=node_type or (node.type_name if node is not None else "Document"),
                loc=loc,
            ),
        )
        rendered = format_diagnostic(message, self.source, loc, color=self.color)
        return error_class(diagnostic, rendered)
