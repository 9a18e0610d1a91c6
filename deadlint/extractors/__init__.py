"""Fact extractors turning file contents into graph facts."""

from __future__ import annotations

from .base import Extractor
from .source import CODE_SUFFIXES, SourceExtractor
from .style import STYLE_SUFFIXES, StyleExtractor

__all__ = [
    "CODE_SUFFIXES",
    "Extractor",
    "STYLE_SUFFIXES",
    "SourceExtractor",
    "StyleExtractor",
]
