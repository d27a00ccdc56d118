"""Tests for the per-type value validators."""

from __future__ import annotations

from typing import Any

import pytest

from tests.conftest import single_token
from tokenloom.compiler.pipeline import TokenPipeline
from tokenloom.diagnostics import DiagnosticReporter
from tokenloom.models.errors import (
    AliasError,
    MissingPropertyError,
    TokenRangeError,
    TokensError,
    TokenSyntaxError,
    TokenTypeError,
)
from tokenloom.models.tokens import TokenType
from tokenloom.parser.validators import FONT_WEIGHTS, STROKE_STYLES, ValueValidator, join_choices


def _value(pipeline: TokenPipeline, token_type: str, value: Any) -> Any:
    return pipeline.parse(single_token(token_type, value))["token"].value


def _error(
    pipeline: TokenPipeline, error_class: type[TokensError], token_type: str, value: Any
) -> TokensError:
    with pytest.raises(error_class) as exc_info:
        pipeline.parse(single_token(token_type, value))
    return exc_info.value


class TestDispatch:
    def test_every_token_type_has_a_validator(self) -> None:
        validator = ValueValidator(DiagnosticReporter(""))
        assert validator.supported_types == frozenset(TokenType)

    def test_join_choices(self) -> None:
        assert join_choices(["a"]) == "a"
        assert join_choices(["a", "b"]) == "a or b"
        assert join_choices(["a", "b", "c"]) == "a, b, or c"


class TestPrimitives:
    def test_boolean(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "boolean", False) is False
        error = _error(pipeline, TokenTypeError, "boolean", "true")
        assert error.diagnostic.message == "Expected boolean, received String"

    def test_number(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "number", 1.5) == 1.5
        error = _error(pipeline, TokenTypeError, "number", "1")
        assert error.diagnostic.message == "Expected number, received String"

    def test_number_rejects_boolean(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "number", True)
        assert error.diagnostic.message == "Expected number, received Boolean"

    def test_string_allows_empty(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "string", "") == ""
        error = _error(pipeline, TokenTypeError, "string", 42)
        assert error.diagnostic.message == "Expected string, received Number"

    def test_link(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "link", "https://example.com") == "https://example.com"
        error = _error(pipeline, TokenTypeError, "link", "")
        assert error.diagnostic.message == "Expected URL, received empty string"


class TestDimension:
    def test_valid(self, pipeline: TokenPipeline) -> None:
        table = pipeline.parse({"xs": {"$type": "dimension", "$value": "0.5rem"}})
        assert table["xs"].type is TokenType.DIMENSION
        assert list(table["xs"].modes) == ["."]
        assert table["xs"].modes["."].value == "0.5rem"

    @pytest.mark.parametrize("value", ["16px", "-2px", ".5em", "1e3px", "100%", "2ex"])
    def test_accepted_forms(self, pipeline: TokenPipeline, value: str) -> None:
        assert _value(pipeline, "dimension", value) == value

    def test_zero_needs_no_unit(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "dimension", 0) == 0

    def test_unit_only(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "dimension", "rem")
        assert error.diagnostic.message == 'Expected dimension with units, received "rem"'

    def test_missing_units(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "dimension", "16")
        assert error.diagnostic.message == "Missing units"

    def test_empty_string(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "dimension", "")
        assert error.diagnostic.message == "Expected dimension, received empty string"

    def test_non_zero_number(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "dimension", 16)
        assert error.diagnostic.message == "Expected string, received Number"

    def test_garbage_unit(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "dimension", "16 px")
        assert error.diagnostic.message == 'Expected dimension with units, received "16 px"'

    def test_yaml_frame(self, pipeline: TokenPipeline) -> None:
        source = "size:\n  $type: dimension\n  sm:\n    $value: rem\n"
        with pytest.raises(TokenTypeError) as exc_info:
            pipeline.parse(source)
        assert str(exc_info.value) == "\n".join(
            [
                'Expected dimension with units, received "rem"',
                "",
                "  2 |   $type: dimension",
                "  3 |   sm:",
                "> 4 |     $value: rem",
                "    |             ^",
                "  5 |",
            ]
        )


class TestDuration:
    @pytest.mark.parametrize("value", ["100ms", "0.25s"])
    def test_valid(self, pipeline: TokenPipeline, value: str) -> None:
        assert _value(pipeline, "duration", value) == value

    def test_zero(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "duration", 0) == 0

    def test_missing_unit(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "duration", "250")
        assert error.diagnostic.message == 'Missing unit "ms" or "s"'

    @pytest.mark.parametrize("value", ["1h", "fast"])
    def test_wrong_unit(self, pipeline: TokenPipeline, value: str) -> None:
        error = _error(pipeline, TokenTypeError, "duration", value)
        assert error.diagnostic.message == f'Expected duration in `ms` or `s`, received "{value}"'

    def test_empty(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "duration", "")
        assert error.diagnostic.message == "Expected duration, received empty string"


class TestColor:
    def test_hex(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "color", "#8ec8f6") == {
            "colorSpace": "srgb",
            "channels": [142 / 255, 200 / 255, 246 / 255],
            "alpha": 1,
        }

    def test_hex_alpha(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "color", "#00000020")["alpha"] == 0.12549019607843137

    def test_functional_notation(self, pipeline: TokenPipeline) -> None:
        value = _value(pipeline, "color", "color(display-p3 1 0 0)")
        assert value["colorSpace"] == "display-p3"
        assert value["channels"] == [1, 0, 0]

    def test_object_form(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline, "color", {"colorSpace": "srgb", "channels": [1, 0.5, 0], "alpha": 0.5}
        )
        assert value == {"colorSpace": "srgb", "channels": [1, 0.5, 0], "alpha": 0.5}

    def test_object_form_unknown_space(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline, TokenRangeError, "color", {"colorSpace": "cmyk-ish", "channels": [1, 0, 0]}
        )
        assert error.diagnostic.message == 'Unknown color space "cmyk-ish"'

    def test_empty_string_frame(self, pipeline: TokenPipeline) -> None:
        with pytest.raises(TokenTypeError) as exc_info:
            pipeline.parse({"color": {"$type": "color", "$value": ""}})
        assert str(exc_info.value) == "\n".join(
            [
                "Expected color, received empty string",
                "",
                '  2 |   "color": {',
                '  3 |     "$type": "color",',
                '> 4 |     "$value": ""',
                "    |               ^",
                "  5 |   }",
                "  6 | }",
            ]
        )

    def test_unparseable(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "color", "#xyz")
        assert error.diagnostic.message == 'Unable to parse color "#xyz"'

    def test_non_string(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "color", 255)
        assert error.diagnostic.message == "Expected string, received Number"


class TestFontFamily:
    def test_string_becomes_list(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "fontFamily", "Inter") == ["Inter"]

    def test_list(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "fontFamily", ["Inter", "sans-serif"]) == ["Inter", "sans-serif"]

    def test_empty_name(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "fontFamily", "")
        assert error.diagnostic.message == "Expected font family name, received empty string"

    def test_bad_element_pinned_to_array(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "fontFamily", ["Inter", ""])
        assert error.diagnostic.message == (
            "Expected an array of strings, received some non-strings or empty strings"
        )
        assert error.node.type == "Array"
        assert (error.span.line, error.span.column) == (4, 15)

    def test_wrong_type(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "fontFamily", 42)
        assert error.diagnostic.message == "Expected string or array of strings, received Number"


class TestFontWeight:
    def test_names_table(self) -> None:
        assert len(FONT_WEIGHTS) == 18
        assert FONT_WEIGHTS["thin"] == 100
        assert FONT_WEIGHTS["ultra-black"] == 950

    @pytest.mark.parametrize(("name", "weight"), [("bold", 700), ("book", 400), ("heavy", 900)])
    def test_named(self, pipeline: TokenPipeline, name: str, weight: int) -> None:
        assert _value(pipeline, "fontWeight", name) == weight

    def test_numeric(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "fontWeight", 450) == 450

    def test_unknown_name_lists_all(self, pipeline: TokenPipeline) -> None:
        with pytest.raises(TokenRangeError) as exc_info:
            pipeline.parse({"bold": {"$type": "fontWeight", "$value": "thinnish"}})
        message = exc_info.value.diagnostic.message
        assert message == (
            'Unknown font weight "thinnish". Expected one of: thin, hairline, extra-light, '
            "ultra-light, light, normal, regular, book, medium, semi-bold, demi-bold, bold, "
            "extra-bold, ultra-bold, black, heavy, extra-black, or ultra-black."
        )

    def test_out_of_range(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenRangeError, "fontWeight", 9001)
        assert error.diagnostic.message == "Expected number 0–1000, received 9001"

    def test_wrong_type(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "fontWeight", True)
        assert error.diagnostic.message == "Expected string or number, received Boolean"


class TestCubicBezier:
    def test_valid(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "cubicBezier", [0.33, 1, 0.68, 1]) == [0.33, 1, 0.68, 1]

    def test_wrong_length(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "cubicBezier", [0, 0, 1])
        assert error.diagnostic.message == "Expected an array of 4 numbers, received 3"

    def test_non_numbers(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "cubicBezier", [0, "a", 1, 1])
        assert error.diagnostic.message == (
            "Expected an array of 4 numbers, received some non-numbers"
        )
        assert error.node.type == "Array"


class TestStrokeStyle:
    @pytest.mark.parametrize("style", STROKE_STYLES)
    def test_keywords(self, pipeline: TokenPipeline, style: str) -> None:
        assert _value(pipeline, "strokeStyle", style) == style

    def test_unknown_keyword(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenRangeError, "strokeStyle", "thicc")
        assert error.diagnostic.message == (
            'Unknown stroke style "thicc". Expected one of: solid, dashed, dotted, double, '
            "groove, ridge, outset, or inset."
        )

    def test_object(self, pipeline: TokenPipeline) -> None:
        value = {"dashArray": ["4px", "2px"], "lineCap": "round"}
        assert _value(pipeline, "strokeStyle", value) == {
            "lineCap": "round",
            "dashArray": ["4px", "2px"],
        }

    def test_dash_array_element_pinned(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline, TokenTypeError, "strokeStyle", {"dashArray": ["4px", ""], "lineCap": "round"}
        )
        assert error.diagnostic.message == (
            "Expected array of strings, recieved some non-strings or empty strings."
        )
        assert (error.span.line, error.span.column) == (7, 9)

    def test_missing_line_cap(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, MissingPropertyError, "strokeStyle", {"dashArray": ["4px"]})
        assert error.diagnostic.message == 'Missing required property "lineCap"'

    def test_unknown_line_cap(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline, TokenRangeError, "strokeStyle", {"dashArray": ["4px"], "lineCap": "pointy"}
        )
        assert error.diagnostic.message == (
            'Unknown line cap "pointy". Expected one of: round, butt, or square.'
        )


class TestBorder:
    def test_valid(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline, "border", {"color": "#00000020", "width": "1px", "style": "solid"}
        )
        assert value["width"] == "1px"
        assert value["style"] == "solid"
        assert value["color"]["alpha"] == 0.12549019607843137

    def test_missing_width_pinned_to_value(self, pipeline: TokenPipeline) -> None:
        value = {"color": "#fff", "style": "solid"}
        error = _error(pipeline, MissingPropertyError, "border", value)
        assert error.diagnostic.message == 'Missing required property "width"'
        assert (error.span.line, error.span.column) == (4, 15)

    def test_sub_field_errors_use_field_validator(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline, TokenTypeError, "border", {"color": "#fff", "width": "1", "style": "solid"}
        )
        assert error.diagnostic.message == "Missing units"

    def test_not_an_object(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "border", "1px solid red")
        assert error.diagnostic.message == "Expected object, received String"


class TestGradient:
    def test_valid(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline,
            "gradient",
            [{"color": "#000", "position": 0}, {"color": "#fff", "position": 1}],
        )
        assert [stop["position"] for stop in value] == [0, 1]
        assert value[1]["color"]["channels"] == [1, 1, 1]

    def test_missing_position_pinned_to_stop(self, pipeline: TokenPipeline) -> None:
        with pytest.raises(MissingPropertyError) as exc_info:
            pipeline.parse({"g": {"$type": "gradient", "$value": [{"color": "#fff"}]}})
        error = exc_info.value
        assert error.diagnostic.message == 'Missing required property "position"'
        assert error.node.type == "Object"
        assert (error.span.line, error.span.column) == (5, 7)

    def test_positions_checked_before_colors(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline,
            MissingPropertyError,
            "gradient",
            [{"color": "not-a-color", "position": 0}, {"color": "#fff"}],
        )
        assert error.diagnostic.message == 'Missing required property "position"'


class TestShadow:
    def test_single_object_becomes_list(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline,
            "shadow",
            {"color": "#000", "offsetX": "0px", "offsetY": "2px", "blur": "4px", "spread": 0},
        )
        assert len(value) == 1
        assert value[0]["offsetY"] == "2px"
        assert value[0]["spread"] == 0

    def test_layers(self, pipeline: TokenPipeline) -> None:
        layer = {"color": "#000", "offsetX": 0, "offsetY": "1px", "blur": "2px"}
        value = _value(pipeline, "shadow", [layer, {**layer, "inset": True}])
        assert len(value) == 2
        assert value[1]["inset"] is True

    def test_missing_color(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline, MissingPropertyError, "shadow", {"offsetX": 0, "offsetY": 0, "blur": 0}
        )
        assert error.diagnostic.message == 'Missing required property "color"'


class TestTransition:
    def test_delay_defaults_to_zero(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline, "transition", {"duration": "100ms", "timingFunction": [0, 0, 1, 1]}
        )
        assert value == {"duration": "100ms", "delay": 0, "timingFunction": [0, 0, 1, 1]}

    @pytest.mark.parametrize("missing", ["duration", "timingFunction"])
    def test_required(self, pipeline: TokenPipeline, missing: str) -> None:
        value = {"duration": "100ms", "timingFunction": [0, 0, 1, 1]}
        del value[missing]
        error = _error(pipeline, MissingPropertyError, "transition", value)
        assert error.diagnostic.message == f'Missing required property "{missing}"'


class TestTypography:
    def test_properties_normalized(self, pipeline: TokenPipeline) -> None:
        value = _value(
            pipeline,
            "typography",
            {
                "fontFamily": "Inter",
                "fontSize": "16px",
                "fontWeight": "bold",
                "lineHeight": 1.5,
                "letterSpacing": "0.01em",
                "textTransform": "uppercase",
            },
        )
        assert value == {
            "fontFamily": ["Inter"],
            "fontSize": "16px",
            "fontWeight": 700,
            "lineHeight": 1.5,
            "letterSpacing": "0.01em",
            "textTransform": "uppercase",
        }

    def test_line_height_dimension(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "typography", {"lineHeight": "24px"}) == {"lineHeight": "24px"}

    def test_shorthand(self, pipeline: TokenPipeline) -> None:
        assert _value(pipeline, "typography", "bold 16px/1.5 Inter") == "bold 16px/1.5 Inter"

    def test_unknown_property_must_be_scalar(self, pipeline: TokenPipeline) -> None:
        error = _error(pipeline, TokenTypeError, "typography", {"textTransform": ["a"]})
        assert error.diagnostic.message == "Expected string or number, received Array"


class TestAliasSyntax:
    def test_invalid_alias_in_sub_field(self, pipeline: TokenPipeline) -> None:
        error = _error(
            pipeline,
            TokenSyntaxError,
            "border",
            {"color": "{color.blue", "width": "1px", "style": "solid"},
        )
        assert error.diagnostic.message == 'Invalid alias: "{color.blue"'

    def test_alias_type_checked_after_resolution(self, pipeline: TokenPipeline) -> None:
        with pytest.raises(AliasError) as exc_info:
            pipeline.parse(
                {
                    "size": {"$type": "dimension", "$value": "1px"},
                    "line": {
                        "$type": "border",
                        "$value": {"color": "{size}", "width": "1px", "style": "solid"},
                    },
                }
            )
        assert exc_info.value.diagnostic.message == (
            'Alias "{size}" points to a dimension token, expected color'
        )
