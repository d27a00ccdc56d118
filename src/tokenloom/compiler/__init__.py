"""Token pipeline for tokenloom."""

from tokenloom.compiler.pipeline import TokenPipeline, parse, parse_file

__all__ = [
    "TokenPipeline",
    "parse",
    "parse_file",
]
