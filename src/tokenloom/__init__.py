"""tokenloom: design token parsing, validation and alias resolution."""

__version__ = "0.1.0"
