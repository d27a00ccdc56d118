"""CSS custom properties output plugin."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from tokenloom.models.tokens import DEFAULT_MODE, AliasRef, ModeEntry, NormalizedToken, TokenType
from tokenloom.parser.validators import to_color
from tokenloom.plugin.base import BuildContext, Plugin, TransformContext
from tokenloom.plugin.registry import PluginRegistry
from tokenloom.plugin.transforms import TransformEntry, matches_any

logger = logging.getLogger("tokenloom.plugin")

FORMAT_ID = "css"

FILE_PREFIX = """/* -------------------------------------------
 *  Autogenerated by tokenloom. DO NOT EDIT!
 * ------------------------------------------- */"""

P3_QUERY = "@supports (color(display-p3 0 0 0))"

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_GENERIC_FAMILIES = frozenset(
    {"serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui", "ui-monospace"}
)


def kebab(name: str) -> str:
    return _CAMEL_RE.sub("-", name).replace(" ", "-").lower()


def make_css_var(token_id: str) -> str:
    """``color.blue.7`` -> ``--color-blue-7``; camelCase segments are kebab-cased."""
    return "--" + "-".join(kebab(segment) for segment in token_id.split("."))


def css_color(value: dict[str, Any], gamut: str = "srgb") -> str:
    space = "srgb" if gamut == "srgb" else "display-p3"
    return to_color(value).convert(space, fit=True).to_string()


def css_font_family(families: list[str]) -> str:
    return ", ".join(
        name if name in _GENERIC_FAMILIES or " " not in name else f'"{name}"' for name in families
    )


def css_number(value: int | float) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def css_percent(position: int | float) -> str:
    return f"{round(position * 100, 4):g}%"


class ModeSelector(BaseModel):
    """Emit the values of one mode under extra CSS selectors.

    Selectors starting with ``@`` (media queries) wrap a ``:root`` block.
    ``tokens`` optionally limits the block to token id globs.
    """

    mode: str
    selectors: list[str]
    tokens: list[str] | None = None


@PluginRegistry.register
class CSSPlugin(Plugin):
    """Custom properties in ``:root``, P3 overrides and mode selector blocks."""

    def __init__(
        self,
        filename: str = "index.css",
        exclude: list[str] | None = None,
        mode_selectors: list[ModeSelector] | None = None,
        variable_name: Callable[[str], str] | None = None,
    ) -> None:
        self.filename = filename
        self.exclude = list(exclude or [])
        self.mode_selectors = list(mode_selectors or [])
        self._variable_name = variable_name or make_css_var

    @property
    def name(self) -> str:
        return "css"

    # -- transform -----------------------------------------------------------

    def transform(self, context: TransformContext) -> None:
        for token in context.tokens.values():
            local_id = self._variable_name(token.id)
            for mode, entry in token.modes.items():
                alias = entry.alias_of
                if alias is not None and alias.target_mode is None:
                    context.set_transform(
                        token.id,
                        format=FORMAT_ID,
                        local_id=local_id,
                        value=self._var(alias.target_id),
                        mode=mode,
                    )
                    continue
                for sub_id, value, variant in self._values(token, local_id, entry):
                    context.set_transform(
                        token.id,
                        format=FORMAT_ID,
                        local_id=sub_id,
                        value=value,
                        mode=mode,
                        variant=variant,
                    )

    def _var(self, token_id: str) -> str:
        return f"var({self._variable_name(token_id)})"

    def _part(self, partial: dict[Any, Any] | None, key: str | int, literal: str) -> str:
        """``var()`` for an aliased sub-field, ``literal`` otherwise."""
        ref = partial.get(key) if partial else None
        if isinstance(ref, AliasRef) and ref.target_mode is None:
            return self._var(ref.target_id)
        return literal

    def _values(
        self, token: NormalizedToken, local_id: str, entry: ModeEntry
    ) -> list[tuple[str, str, str | None]]:
        value = entry.value
        partial = entry.partial_alias_of
        match token.type:
            case TokenType.COLOR:
                return [
                    (local_id, to_color(entry.variants["srgb"]).to_string(), "srgb"),
                    (local_id, to_color(entry.variants["p3"]).to_string(), "p3"),
                ]
            case TokenType.BORDER:
                return self._longhands(
                    local_id,
                    {
                        "width": self._part(partial, "width", str(value["width"])),
                        "color": self._part(partial, "color", css_color(value["color"])),
                        "style": self._part(partial, "style", self._stroke(value["style"])),
                    },
                )
            case TokenType.TRANSITION:
                return self._longhands(
                    local_id,
                    {
                        "duration": self._part(partial, "duration", str(value["duration"])),
                        "delay": self._part(partial, "delay", str(value["delay"])),
                        "timingFunction": self._part(
                            partial, "timingFunction", self._cubic_bezier(value["timingFunction"])
                        ),
                    },
                )
            case TokenType.TYPOGRAPHY:
                if isinstance(value, str):
                    return [(local_id, value, None)]
                return [
                    (
                        f"{local_id}-{kebab(prop)}",
                        self._part(partial, prop, self._typography(prop, v)),
                        None,
                    )
                    for prop, v in value.items()
                ]
            case TokenType.CUBIC_BEZIER:
                points = [self._part(partial, i, css_number(p)) for i, p in enumerate(value)]
                return [(local_id, f"cubic-bezier({', '.join(points)})", None)]
            case TokenType.GRADIENT:
                stops = [
                    f"{self._part((partial or {}).get(i), 'color', css_color(stop['color']))} "
                    f"{css_percent(stop['position'])}"
                    for i, stop in enumerate(value)
                ]
                return [(local_id, ", ".join(stops), None)]
            case TokenType.SHADOW:
                return [(local_id, self._shadow(value, partial), None)]
            case TokenType.BOOLEAN:
                return [(local_id, "1" if value else "0", None)]
            case TokenType.FONT_FAMILY:
                return [(local_id, css_font_family(value), None)]
            case TokenType.LINK:
                return [(local_id, f'url("{value}")', None)]
            case TokenType.STROKE_STYLE:
                return [(local_id, self._stroke(value), None)]
            case TokenType.NUMBER:
                return [(local_id, css_number(value), None)]
            case _:
                # dimension, duration, fontWeight, string
                return [(local_id, str(value), None)]

    def _longhands(
        self, local_id: str, parts: dict[str, str]
    ) -> list[tuple[str, str, str | None]]:
        shorthand = " ".join(f"var({local_id}-{name})" for name in parts)
        return [(local_id, shorthand, None)] + [
            (f"{local_id}-{name}", part, None) for name, part in parts.items()
        ]

    @staticmethod
    def _stroke(value: str | dict[str, Any]) -> str:
        # object stroke styles have no CSS keyword
        return value if isinstance(value, str) else "dashed"

    @staticmethod
    def _cubic_bezier(points: list[int | float]) -> str:
        return f"cubic-bezier({', '.join(css_number(p) for p in points)})"

    @staticmethod
    def _typography(prop: str, value: Any) -> str:
        if prop == "fontFamily":
            return css_font_family(value)
        if isinstance(value, (int, float)):
            return css_number(value)
        return str(value)

    def _shadow(self, layers: list[dict[str, Any]], partial: dict[Any, Any] | None) -> str:
        rendered: list[str] = []
        for index, layer in enumerate(layers):
            layer_partial = (partial or {}).get(index)
            parts = ["inset"] if layer.get("inset") else []
            for key in ("offsetX", "offsetY", "blur", "spread"):
                if key in layer:
                    parts.append(self._part(layer_partial, key, str(layer[key])))
            parts.append(self._part(layer_partial, "color", css_color(layer["color"])))
            rendered.append(" ".join(parts))
        return ", ".join(rendered)

    # -- build ---------------------------------------------------------------

    def build(self, context: BuildContext) -> None:
        lines = [FILE_PREFIX, "", ":root {"]
        base = context.get_transforms(format=FORMAT_ID, mode=DEFAULT_MODE)
        lines.extend(self._declarations(base, indent=2))
        lines.append("}")

        p3 = [
            entry
            for entry in context.get_transforms(format=FORMAT_ID, mode=DEFAULT_MODE, variant="p3")
            if not matches_any(entry.token_id, self.exclude)
        ]
        if p3:
            lines.extend(["", f"{P3_QUERY} {{", "  :root {"])
            lines.extend(f"    {entry.local_id}: {entry.value};" for entry in p3)
            lines.extend(["  }", "}"])

        for selector in self.mode_selectors:
            entries = context.get_transforms(
                format=FORMAT_ID, token_ids=selector.tokens, mode=selector.mode
            )
            declarations = self._declarations(entries, indent=2)
            if not declarations:
                logger.warning("css: no tokens found for mode %r", selector.mode)
                continue
            for css_selector in selector.selectors:
                lines.append("")
                if css_selector.startswith("@"):
                    lines.extend([f"{css_selector} {{", "  :root {"])
                    lines.extend(self._declarations(entries, indent=4))
                    lines.extend(["  }", "}"])
                else:
                    lines.append(f"{css_selector} {{")
                    lines.extend(declarations)
                    lines.append("}")

        context.output_file(self.filename, "\n".join(lines) + "\n")

    def _declarations(self, entries: list[TransformEntry], indent: int) -> list[str]:
        pad = " " * indent
        return [
            f"{pad}{entry.local_id}: {entry.value};"
            for entry in entries
            if entry.variant in (None, "srgb") and not matches_any(entry.token_id, self.exclude)
        ]
