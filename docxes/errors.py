"""Exception hierarchy shared by the docxes build and read paths.

Missing documents and directories are never raised; they surface as ``None``
or empty collections. The exceptions below cover the failures that do abort
work: a single document (:class:`ReadFailure`, :class:`CompileFailure`) or
the whole build (:class:`BuildError`).
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class DocxesError(Exception):
    """Base class for all docxes errors."""


class ConfigError(DocxesError, ValueError):
    """Raised when the engine configuration is invalid or incomplete."""


class ReadFailure(DocxesError, OSError):
    """Raised when a required file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read '{path}': {reason}")


class CompileFailure(DocxesError):
    """Raised when the parser or compiler rejects a document.

    Attributes
    ----------
    key : str
        Document key (``"<version>/<slug>"``) that failed.
    line : int | None
        1-based source line reported by the failing tool, when available.
    column : int | None
        1-based source column reported by the failing tool, when available.
    """

    def __init__(
        self,
        key: str,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.key = key
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" at line {line}"
            if column is not None:
                location = f"{location}, column {column}"
        super().__init__(f"Failed to compile '{key}'{location}: {message}")


class BuildError(DocxesError, RuntimeError):
    """Raised when a builder-scoped failure aborts the whole build."""


__all__ = [
    "BuildError",
    "CompileFailure",
    "ConfigError",
    "DocxesError",
    "ReadFailure",
]
