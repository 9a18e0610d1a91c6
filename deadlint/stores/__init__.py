"""Persistent stores used by deadlint."""

from .facts_cache import FactsCache

__all__ = ["FactsCache"]
