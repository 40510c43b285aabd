from __future__ import annotations

from typing import Optional

class StaticBuilderError(Exception):
    """Base for every failure that aborts a build. `path` is the file being compiled."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

class ConfigError(StaticBuilderError):
    pass

class NotFoundError(StaticBuilderError):
    pass

class ParseError(StaticBuilderError):
    pass

class SerializeError(StaticBuilderError):
    pass

class CompileError(StaticBuilderError):
    pass

class OutputCountError(StaticBuilderError):
    pass

class FileSystemError(StaticBuilderError):
    pass
