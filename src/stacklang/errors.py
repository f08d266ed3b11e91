"""
stacklang Error Hierarchy
=========================

This module defines the exception hierarchy for the whole toolchain.
All exceptions inherit from StackLangError, allowing callers to catch
every compiler or build error with a single except clause if desired.

Exception Hierarchy
-------------------
StackLangError (base)
├── CompilerError (source-level errors, with location)
│   ├── ControlFlowError - malformed if/else/end structure
│   │   ├── UnmatchedElseError - else with no open if
│   │   ├── DuplicateElseError - second else in the same block
│   │   ├── UnmatchedEndError - end with no open block
│   │   └── UnclosedBlockError - if/else still open at end of input
│   └── CompilationError - aggregate report of several errors
└── ToolchainError (external assembler/linker/program)
    ├── ToolNotFoundError - executable not on PATH
    ├── ToolInvocationError - tool exited with a non-zero status
    └── UnsupportedPlatformError - host cannot run the toolchain

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)

Unrecognised words are never errors: the lexer lowers them to pushes and
leaves their validation to the assembler.
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class StackLangError(Exception):
    """
    Base exception for all stacklang errors.

        try:
            compile_source("1 if 2 .")
        except StackLangError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text, used for diagnostics.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Compiler Exceptions
# =============================================================================

class CompilerError(StackLangError):
    """
    Base exception for errors found in source programs.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.sl:3:5: error: 'end' without an open 'if'
                1 . end
                    ^
            hint: remove the 'end' or add a matching 'if'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class CompilationError(CompilerError):
    """
    Aggregate error holding a report of several compiler errors.

    The message is already a formatted report from ErrorCollector and is
    passed through untouched.
    """

    def __init__(self, message: str, errors: Optional[List[CompilerError]] = None):
        self.errors = list(errors or [])
        super().__init__(message)

    def _format_message(self) -> str:
        return self.message


class ControlFlowError(CompilerError):
    """
    Malformed if/else/end structure.

    Raised while linking conditional blocks, before any assembly is
    emitted, so an unbalanced program never produces half-resolved labels.
    """
    pass


class UnmatchedElseError(ControlFlowError):
    """An 'else' appeared with no 'if' block open."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "'else' without an open 'if'",
            location=location,
            hint="'else' must appear between an 'if' and its 'end'",
            source_line=source_line,
        )


class DuplicateElseError(ControlFlowError):
    """A second 'else' appeared inside the same 'if' block."""

    def __init__(
        self,
        else_location: Optional[SourceLocation] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.else_location = else_location
        hint = "an 'if' block may contain at most one 'else'"
        if else_location:
            hint = f"this block already has an 'else' at {else_location}"
        super().__init__(
            "'else' can only follow an 'if' block",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnmatchedEndError(ControlFlowError):
    """An 'end' appeared with no block open."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "'end' without an open 'if'",
            location=location,
            hint="remove the 'end' or add a matching 'if'",
            source_line=source_line,
        )


class UnclosedBlockError(ControlFlowError):
    """An 'if' (or its 'else') was never closed by 'end'."""

    def __init__(
        self,
        keyword: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.keyword = keyword
        super().__init__(
            f"'{keyword}' block is never closed",
            location=location,
            hint="add 'end' to close the block",
            source_line=source_line,
        )


# =============================================================================
# Toolchain Exceptions
# =============================================================================

class ToolchainError(StackLangError):
    """Base exception for failures of the external build tools."""
    pass


class ToolNotFoundError(ToolchainError):
    """
    An external tool could not be started.

    Attributes:
        tool: The executable that was looked up
    """

    def __init__(self, tool: str, description: str = ""):
        self.tool = tool
        what = f"{description} " if description else ""
        super().__init__(f"{what}executable '{tool}' not found - is it installed and on PATH?")


class ToolInvocationError(ToolchainError):
    """
    An external tool ran and reported failure.

    The tool's own output is kept verbatim so it can be shown to the user
    exactly as the assembler or linker printed it.

    Attributes:
        command: The argument list that was executed
        stdout: Captured standard output
        stderr: Captured standard error
        return_code: The process exit status
    """

    def __init__(
        self,
        description: str,
        command: List[str],
        stdout: str = "",
        stderr: str = "",
        return_code: Optional[int] = None,
    ):
        self.description = description
        self.command = list(command)
        self.stdout = stdout
        self.stderr = stderr
        self.return_code = return_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [
            f"{self.description} failed, output:",
            f"stdout: {self.stdout}",
            f"stderr: {self.stderr}",
            f"exit code: {self.return_code}",
        ]
        return "\n".join(lines)


class UnsupportedPlatformError(ToolchainError):
    """The host platform cannot run the ELF64 assembler/linker pipeline."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(
            f"building executables is not supported on {platform} yet, "
            f"please try WSL or a VM"
        )


# =============================================================================
# Error Collection
# =============================================================================

class ErrorCollector:
    """
    Collects multiple compiler errors for batch reporting.

    Used by the block linker so that every unbalanced 'if', 'else' and
    'end' in a program is reported in one run.

    Example:
        collector = ErrorCollector()
        collector.add(UnmatchedEndError(location))
        collector.raise_if_errors()
    """

    def __init__(self):
        self.errors: List[CompilerError] = []

    def add(self, error: CompilerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def report(self) -> str:
        """Format all errors for display, followed by the error count."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if any errors were collected."""
        if self.has_errors():
            raise CompilationError(self.report(), self.errors)
