"""vibex: prepare source trees for AI tools."""

__version__ = "0.2.0"
