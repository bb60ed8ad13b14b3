"""Drawing rule checker - matches building-code rules against drawing text."""

__version__ = "0.1.0"
