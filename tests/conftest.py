"""Shared test fixtures for tokenloom."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tokenloom.compiler.pipeline import TokenPipeline
from tokenloom.models.tokens import TokenTable
from tokenloom.parser.loader import TrackedLoader
from tokenloom.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
TOKENS_JSON = FIXTURES_DIR / "tokens.json"
TOKENS_YAML = FIXTURES_DIR / "tokens.yaml"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(color=False, cwd=tmp_path)


@pytest.fixture
def loader(settings: Settings) -> TrackedLoader:
    return TrackedLoader(settings)


@pytest.fixture
def pipeline(settings: Settings) -> TokenPipeline:
    return TokenPipeline(settings)


@pytest.fixture
def sample_table(pipeline: TokenPipeline) -> TokenTable:
    """The JSON fixture document, parsed and resolved."""
    return pipeline.parse_file(TOKENS_JSON)


def single_token(token_type: str, value: Any, name: str = "token") -> dict[str, Any]:
    """A one-token document: ``{name: {"$type": token_type, "$value": value}}``."""
    return {name: {"$type": token_type, "$value": value}}


SAMPLE_TOKENS_YAML = """\
color:
  $type: color
  blue:
    7:
      $value: "#8ec8f6"
    8:
      $value: "#5eb1ef"
  action:
    $value: "{color.blue.8}"
size:
  $type: dimension
  sm:
    $value: 0.5rem
"""
