"""Per-type value validators.

Each validator takes the raw ``$value`` node (or a mode override) and returns
the normalized value, with ``PendingAlias`` in every position that held an
alias. Errors are pinned to the smallest offending node.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable
from typing import Any, NoReturn

from coloraide import Color

from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import (
    MissingPropertyError,
    TokenRangeError,
    TokenTypeError,
)
from tokenloom.models.tokens import TokenType
from tokenloom.parser.aliases import PendingAlias, read_alias
from tokenloom.parser.nodes import RawNode

FONT_WEIGHTS: dict[str, int] = {
    "thin": 100,
    "hairline": 100,
    "extra-light": 200,
    "ultra-light": 200,
    "light": 300,
    "normal": 400,
    "regular": 400,
    "book": 400,
    "medium": 500,
    "semi-bold": 600,
    "demi-bold": 600,
    "bold": 700,
    "extra-bold": 800,
    "ultra-bold": 800,
    "black": 900,
    "heavy": 900,
    "extra-black": 950,
    "ultra-black": 950,
}

STROKE_STYLES = ["solid", "dashed", "dotted", "double", "groove", "ridge", "outset", "inset"]
LINE_CAPS = ["round", "butt", "square"]

DURATION_UNITS = ("ms", "s")

# Leading magnitude of a dimension/duration string. "1em" must leave "em".
_MAGNITUDE_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_UNIT_RE = re.compile(r"^[a-zA-Z%]+$")

_TYPOGRAPHY_FIELDS: dict[str, frozenset[TokenType]] = {
    "fontFamily": frozenset({TokenType.FONT_FAMILY}),
    "fontSize": frozenset({TokenType.DIMENSION}),
    "fontWeight": frozenset({TokenType.FONT_WEIGHT}),
    "letterSpacing": frozenset({TokenType.DIMENSION}),
    "lineHeight": frozenset({TokenType.NUMBER, TokenType.DIMENSION}),
}


def join_choices(choices: Iterable[str]) -> str:
    """``a, b, or c`` list formatting used by enumeration errors."""
    items = list(choices)
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} or {items[1]}"
    return ", ".join(items[:-1]) + f", or {items[-1]}"


def color_value(color: Color) -> dict[str, Any]:
    """Normalized ``{colorSpace, channels, alpha}`` shape of a parsed color."""
    channels = [0.0 if math.isnan(c) else float(c) for c in color.coords()]
    alpha = color.alpha()
    return {
        "colorSpace": color.space(),
        "channels": channels,
        "alpha": 1.0 if math.isnan(alpha) else float(alpha),
    }


def to_color(value: dict[str, Any]) -> Color:
    return Color(value["colorSpace"], value["channels"], value["alpha"])


def gamut_variants(value: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """sRGB and wide-gamut (Display P3) renditions of a normalized color."""
    color = to_color(value)
    return {
        "srgb": color_value(color.convert("srgb", fit=True)),
        "p3": color_value(color.convert("display-p3", fit=True)),
    }


class ValueValidator:
    """Validates raw values against the grammar of their ``$type``."""

    def __init__(self, reporter: DiagnosticReporter) -> None:
        self._reporter = reporter
        self._validators: dict[TokenType, Callable[[RawNode], Any]] = {
            TokenType.BOOLEAN: self._boolean,
            TokenType.BORDER: self._border,
            TokenType.COLOR: self._color,
            TokenType.CUBIC_BEZIER: self._cubic_bezier,
            TokenType.DIMENSION: self._dimension,
            TokenType.DURATION: self._duration,
            TokenType.FONT_FAMILY: self._font_family,
            TokenType.FONT_WEIGHT: self._font_weight,
            TokenType.GRADIENT: self._gradient,
            TokenType.LINK: self._link,
            TokenType.NUMBER: self._number,
            TokenType.SHADOW: self._shadow,
            TokenType.STRING: self._string,
            TokenType.STROKE_STYLE: self._stroke_style,
            TokenType.TRANSITION: self._transition,
            TokenType.TYPOGRAPHY: self._typography,
        }

    @property
    def supported_types(self) -> frozenset[TokenType]:
        return frozenset(self._validators)

    def validate(self, token_type: TokenType, node: RawNode) -> Any:
        """Validate a whole token value; a top-level alias is returned as-is."""
        return self._field(token_type, node)

    # -- helpers -------------------------------------------------------------

    def _field(
        self,
        token_type: TokenType,
        node: RawNode,
        expected: frozenset[TokenType] | None = None,
    ) -> Any:
        alias = read_alias(node, self._reporter, expected or frozenset({token_type}))
        if alias is not None:
            return alias
        return self._validators[token_type](node)

    def _fail_type(self, message: str, node: RawNode) -> NoReturn:
        self._reporter.fail(TokenTypeError, message, node)

    def _require_object(self, node: RawNode) -> None:
        if not node.is_mapping:
            self._fail_type(f"Expected object, received {node.type_name}", node)

    def _require(self, node: RawNode, properties: Iterable[str]) -> None:
        for prop in properties:
            if prop not in node:
                self._reporter.fail(
                    MissingPropertyError, f'Missing required property "{prop}"', node
                )

    def _sub(self, node: RawNode, key: str) -> RawNode:
        child = node.get(key)
        assert child is not None
        return child

    # -- primitives ----------------------------------------------------------

    def _boolean(self, node: RawNode) -> bool:
        if not node.is_boolean:
            self._fail_type(f"Expected boolean, received {node.type_name}", node)
        return bool(node.value)

    def _number(self, node: RawNode) -> int | float:
        if not node.is_number:
            self._fail_type(f"Expected number, received {node.type_name}", node)
        return node.value  # type: ignore[return-value]

    def _string(self, node: RawNode) -> str:
        if not node.is_string:
            self._fail_type(f"Expected string, received {node.type_name}", node)
        return str(node.value)

    def _link(self, node: RawNode) -> str:
        value = self._string(node)
        if value == "":
            self._fail_type("Expected URL, received empty string", node)
        return value

    def _dimension(self, node: RawNode) -> str | int:
        if node.is_number and node.value == 0:
            return 0
        value = self._string(node)
        if value == "":
            self._fail_type("Expected dimension, received empty string", node)
        match = _MAGNITUDE_RE.match(value)
        if match is None:
            self._fail_type(f'Expected dimension with units, received "{value}"', node)
        unit = value[match.end() :]
        if not unit:
            self._fail_type("Missing units", node)
        if not _UNIT_RE.match(unit):
            self._fail_type(f'Expected dimension with units, received "{value}"', node)
        return value

    def _duration(self, node: RawNode) -> str | int:
        if node.is_number and node.value == 0:
            return 0
        value = self._string(node)
        if value == "":
            self._fail_type("Expected duration, received empty string", node)
        match = _MAGNITUDE_RE.match(value)
        unit = value[match.end() :] if match is not None else None
        if unit == "":
            self._fail_type('Missing unit "ms" or "s"', node)
        if unit not in DURATION_UNITS:
            self._fail_type(f'Expected duration in `ms` or `s`, received "{value}"', node)
        return value

    # -- color ---------------------------------------------------------------

    def _color(self, node: RawNode) -> dict[str, Any]:
        if node.is_mapping:
            return self._color_object(node)
        value = self._string(node)
        if value == "":
            self._fail_type("Expected color, received empty string", node)
        try:
            color = Color(value)
        except ValueError:
            self._fail_type(f'Unable to parse color "{value}"', node)
        return color_value(color)

    def _color_object(self, node: RawNode) -> dict[str, Any]:
        """Accept the normalized object form so re-serialized tables parse back."""
        self._require(node, ["colorSpace"])
        self._require(node, ["channels"])
        space_node = self._sub(node, "colorSpace")
        space = self._string(space_node)
        channels_node = self._sub(node, "channels")
        if not channels_node.is_sequence or not all(i.is_number for i in channels_node.items):
            self._fail_type("Expected an array of numbers", channels_node)
        channels = [item.value for item in channels_node.items]
        alpha_node = node.get("alpha")
        alpha = self._number(alpha_node) if alpha_node is not None else 1
        try:
            Color(space, channels, alpha)
        except ValueError:
            self._reporter.fail(TokenRangeError, f'Unknown color space "{space}"', space_node)
        return {"colorSpace": space, "channels": channels, "alpha": alpha}

    # -- fonts ---------------------------------------------------------------

    def _font_family(self, node: RawNode) -> list[Any]:
        if node.is_string:
            if node.value == "":
                self._fail_type("Expected font family name, received empty string", node)
            return [node.value]
        if not node.is_sequence:
            self._fail_type(
                f"Expected string or array of strings, received {node.type_name}", node
            )
        families: list[Any] = []
        for item in node.items:
            alias = read_alias(
                item, self._reporter, frozenset({TokenType.FONT_FAMILY}), spread=True
            )
            if alias is not None:
                families.append(alias)
            elif item.is_string and item.value != "":
                families.append(item.value)
            else:
                families = []
                break
        if not families:
            self._fail_type(
                "Expected an array of strings, received some non-strings or empty strings", node
            )
        return families

    def _font_weight(self, node: RawNode) -> int:
        if node.is_number:
            value = node.value
            assert isinstance(value, (int, float))
            if not float(value).is_integer() or not 0 <= value <= 1000:
                self._reporter.fail(
                    TokenRangeError, f"Expected number 0–1000, received {value}", node
                )
            return int(value)
        if node.is_string:
            weight = FONT_WEIGHTS.get(str(node.value))
            if weight is None:
                self._reporter.fail(
                    TokenRangeError,
                    f'Unknown font weight "{node.value}". '
                    f"Expected one of: {join_choices(FONT_WEIGHTS)}.",
                    node,
                )
            return weight
        self._fail_type(f"Expected string or number, received {node.type_name}", node)

    # -- composite -----------------------------------------------------------

    def _cubic_bezier(self, node: RawNode) -> list[Any]:
        if not node.is_sequence:
            self._fail_type(f"Expected an array of 4 numbers, received {node.type_name}", node)
        if len(node.items) != 4:
            self._fail_type(f"Expected an array of 4 numbers, received {len(node.items)}", node)
        points: list[Any] = []
        for item in node.items:
            alias = read_alias(item, self._reporter, frozenset({TokenType.NUMBER}))
            if alias is None and not item.is_number:
                self._fail_type("Expected an array of 4 numbers, received some non-numbers", node)
            points.append(alias if alias is not None else item.value)
        return points

    def _stroke_style(self, node: RawNode) -> str | dict[str, Any]:
        if node.is_string:
            if node.value not in STROKE_STYLES:
                self._reporter.fail(
                    TokenRangeError,
                    f'Unknown stroke style "{node.value}". '
                    f"Expected one of: {join_choices(STROKE_STYLES)}.",
                    node,
                )
            return str(node.value)
        if not node.is_mapping:
            self._fail_type(f"Expected string or object, received {node.type_name}", node)
        self._require(node, ["dashArray", "lineCap"])

        cap_node = self._sub(node, "lineCap")
        line_cap = self._string(cap_node)
        if line_cap not in LINE_CAPS:
            self._reporter.fail(
                TokenRangeError,
                f'Unknown line cap "{line_cap}". Expected one of: {join_choices(LINE_CAPS)}.',
                cap_node,
            )

        dash_node = self._sub(node, "dashArray")
        message = "Expected array of strings, recieved some non-strings or empty strings."
        if not dash_node.is_sequence:
            self._fail_type(message, dash_node)
        dashes: list[Any] = []
        for item in dash_node.items:
            alias = read_alias(item, self._reporter, frozenset({TokenType.DIMENSION}))
            if alias is not None:
                dashes.append(alias)
                continue
            if not item.is_string or item.value == "":
                self._fail_type(message, item)
            dashes.append(self._dimension(item))
        return {"lineCap": line_cap, "dashArray": dashes}

    def _border(self, node: RawNode) -> dict[str, Any]:
        self._require_object(node)
        self._require(node, ["color", "width", "style"])
        return {
            "color": self._field(TokenType.COLOR, self._sub(node, "color")),
            "width": self._field(TokenType.DIMENSION, self._sub(node, "width")),
            "style": self._field(TokenType.STROKE_STYLE, self._sub(node, "style")),
        }

    def _gradient(self, node: RawNode) -> list[dict[str, Any]]:
        if not node.is_sequence:
            self._fail_type(f"Expected array of gradient stops, received {node.type_name}", node)
        # Stop shapes and positions are checked for every stop before colors are parsed.
        positions: list[Any] = []
        for stop in node.items:
            self._require_object(stop)
            self._require(stop, ["color", "position"])
            positions.append(self._field(TokenType.NUMBER, self._sub(stop, "position")))
        return [
            {"color": self._field(TokenType.COLOR, self._sub(stop, "color")), "position": position}
            for stop, position in zip(node.items, positions, strict=True)
        ]

    def _shadow(self, node: RawNode) -> list[dict[str, Any]]:
        if node.is_mapping:
            layers: tuple[RawNode, ...] = (node,)
        elif node.is_sequence:
            layers = node.items
        else:
            self._fail_type(
                f"Expected shadow object or array of shadow objects, received {node.type_name}",
                node,
            )
        shadows: list[dict[str, Any]] = []
        for layer in layers:
            self._require_object(layer)
            self._require(layer, ["color", "offsetX", "offsetY", "blur"])
            shadow = {"color": self._field(TokenType.COLOR, self._sub(layer, "color"))}
            for key in ("offsetX", "offsetY", "blur", "spread"):
                if key in layer:
                    shadow[key] = self._field(TokenType.DIMENSION, self._sub(layer, key))
            if "inset" in layer:
                shadow["inset"] = self._field(TokenType.BOOLEAN, self._sub(layer, "inset"))
            shadows.append(shadow)
        return shadows

    def _transition(self, node: RawNode) -> dict[str, Any]:
        self._require_object(node)
        self._require(node, ["duration", "timingFunction"])
        delay_node = node.get("delay")
        return {
            "duration": self._field(TokenType.DURATION, self._sub(node, "duration")),
            "delay": (
                self._field(TokenType.DURATION, delay_node) if delay_node is not None else 0
            ),
            "timingFunction": self._field(
                TokenType.CUBIC_BEZIER, self._sub(node, "timingFunction")
            ),
        }

    def _typography(self, node: RawNode) -> str | dict[str, Any]:
        if node.is_string:
            if node.value == "":
                self._fail_type("Expected typography shorthand, received empty string", node)
            return str(node.value)
        if not node.is_mapping:
            self._fail_type(f"Expected string or object, received {node.type_name}", node)
        properties: dict[str, Any] = {}
        for member in node.members:
            value_node = member.value
            expected = _TYPOGRAPHY_FIELDS.get(member.key)
            alias = read_alias(value_node, self._reporter, expected)
            if alias is not None:
                properties[member.key] = alias
            elif member.key == "lineHeight":
                properties[member.key] = (
                    value_node.value if value_node.is_number else self._dimension(value_node)
                )
            elif expected is not None:
                (field_type,) = expected
                properties[member.key] = self._validators[field_type](value_node)
            elif value_node.is_string or value_node.is_number:
                properties[member.key] = value_node.value
            else:
                self._fail_type(
                    f"Expected string or number, received {value_node.type_name}", value_node
                )
        return properties


def contains_alias(value: Any) -> bool:
    if isinstance(value, PendingAlias):
        return True
    if isinstance(value, dict):
        return any(contains_alias(v) for v in value.values())
    if isinstance(value, list):
        return any(contains_alias(v) for v in value)
    return False
