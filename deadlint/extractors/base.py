"""Base classes for fact extractors."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

FactsT = TypeVar("FactsT")


class Extractor(ABC, Generic[FactsT]):
    """Contract for extractors that turn file contents into graph facts."""

    #: Bumped whenever the produced facts change shape or meaning.
    cache_version = "1"

    @abstractmethod
    def supports(self, path: str) -> bool:
        """Return True when this extractor understands ``path``."""

    @abstractmethod
    def extract(self, identity: str, content: str) -> FactsT:
        """Produce facts for one file. Syntax errors yield partial facts."""
