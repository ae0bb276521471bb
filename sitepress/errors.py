from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class SiteError(Exception):
    def __init__(self, message: str, path: Optional[PathLike] = None, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        self.line = line

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        location = str(self.path)
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class SiteIOError(SiteError):
    """A source path could not be read or an output path could not be written."""


class ParseError(SiteError):
    """Malformed metadata preamble."""


class ValidationError(SiteError):
    """Post metadata is missing, invalid, or collides with another post."""


class TemplateError(SiteError):
    """A component required for composition is missing."""


class CompileError(SiteError):
    """Stylesheet compilation failed."""


class BuildError(SiteError):
    """A build stage failed. Wraps the underlying error and names the stage."""

    def __init__(self, stage: object, error: SiteError) -> None:
        super().__init__(error.message, error.path, error.line)
        self.stage = stage
        self.error = error

    def __str__(self) -> str:
        stage = getattr(self.stage, "value", self.stage)
        return f"Build failed at stage '{stage}': {self.error}"
