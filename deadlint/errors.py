"""Exception hierarchy for deadlint."""

from __future__ import annotations


class DeadlintError(RuntimeError):
    """Base class for errors raised by deadlint."""


class ConfigError(DeadlintError):
    """Raised when the configuration file cannot be parsed."""


class FactSchemaError(DeadlintError):
    """Raised when extracted facts do not match the expected schema."""


class ExtractionError(DeadlintError):
    """Raised when a single file's facts cannot be produced."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = ["ConfigError", "DeadlintError", "ExtractionError", "FactSchemaError"]
