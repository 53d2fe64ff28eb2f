"""Exception hierarchy shared by the generator components."""

from __future__ import annotations


class QgenError(Exception):
    """Base class for every error raised by the query generator."""


class DistributionLoadError(QgenError, ValueError):
    """A distribution resource is missing or malformed."""


class MacroParseError(QgenError, ValueError):
    """Macro text matches no known form."""

    def __init__(self, text: str, source: str | None = None) -> None:
        self.text = text
        self.source = source if source is not None else text
        message = f"unknown substitution: {text}"
        if self.source != text:
            message += f" (original={self.source})"
        super().__init__(message)


class UnknownReferenceError(QgenError, LookupError):
    """A named substitution, distribution or relation does not exist."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"unknown {kind}: {name}")

    def __str__(self) -> str:
        return self.args[0]


class InvariantViolation(QgenError, RuntimeError):
    """Internal state that correct loaders can never produce."""


class TemplateNotFoundError(QgenError, FileNotFoundError):
    """No template file exists for the requested query."""


__all__ = [
    "QgenError",
    "DistributionLoadError",
    "MacroParseError",
    "UnknownReferenceError",
    "InvariantViolation",
    "TemplateNotFoundError",
]
