"""Compiler exceptions."""

from typing import Optional, Tuple


class SFCCompileError(Exception):
    """Base class for every error raised while compiling a component file."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        location = self.file_path or "<unknown>"
        if self.line is not None:
            location += f":{self.line}"
            if self.column is not None:
                location += f":{self.column}"
        elif self.offset is not None:
            location += f"@{self.offset}"
        return f"{location}: {self.message}"

    def with_source(self, source: str, file_path: Optional[str] = None) -> "SFCCompileError":
        """Attach the file path and derive line/column from the offset."""
        if file_path and not self.file_path:
            self.file_path = file_path
        if self.offset is not None and self.line is None:
            self.line, self.column = offset_to_position(source, self.offset)
        self.args = (str(self),)
        return self


class MalformedSourceError(SFCCompileError):
    """Block structure of the file is invalid."""


class TemplateSyntaxError(SFCCompileError):
    """Markup inside the template block is invalid."""


class DuplicateKeyError(SFCCompileError):
    """The same key is bound twice on one element."""


class CodeGenError(SFCCompileError):
    """A node carries something the code generator cannot emit."""


class ResolutionOrderError(SFCCompileError):
    """A block id was requested before its owning file was resolved."""


def offset_to_position(source: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based line and 0-based column of ``offset``."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start
