"""Rewrite image paragraphs followed by a ``: caption`` paragraph into figures."""

from .version import __version__

__all__ = ["__version__"]
