"""
stacklang - Stack Language to x86-64 Compiler
=============================================

This package compiles stacklang, a minimal whitespace-delimited stack
language, ahead of time into NASM assembly for x86-64 Linux, and drives
nasm and ld to produce a native executable.

Main Components
---------------
- **compiler**: lexer and code generator (slc)
    Converts source files (.sl) to assembly (.asm)

- **toolchain**: external assembler/linker driver
    Assembles, links and optionally runs the generated program

Quick Start
-----------
Compile to assembly:
    >>> from stacklang import compile_source
    >>> asm = compile_source("34 35 + .")

Or use the command-line tools:
    $ slc hello.sl -o hello.asm
    $ slbuild hello.sl -o hello --run

Language
--------
Words are separated by whitespace. Integers (any word that is not a
keyword) are pushed; + - * / = operate on the top two values; . prints
the top value; if ... else ... end branches on the top value.

Version History
---------------
1.0.0 - Initial release with compiler, nasm/ld driver, slc and slbuild
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from stacklang.compiler import (
    StackCompiler,
    CompilerOptions,
    CompilerResult,
    CodeGenerator,
    Lexer,
    Operation,
    OpType,
    compile_source,
    compile_file,
    lower,
)
from stacklang.config import ToolchainConfig
from stacklang.errors import (
    StackLangError,
    SourceLocation,
    CompilerError,
    CompilationError,
    ControlFlowError,
    UnmatchedElseError,
    DuplicateElseError,
    UnmatchedEndError,
    UnclosedBlockError,
    ToolchainError,
    ToolNotFoundError,
    ToolInvocationError,
    UnsupportedPlatformError,
)

__all__ = [
    "__version__",
    # Compiler
    "StackCompiler",
    "CompilerOptions",
    "CompilerResult",
    "CodeGenerator",
    "Lexer",
    "Operation",
    "OpType",
    "compile_source",
    "compile_file",
    "lower",
    # Configuration
    "ToolchainConfig",
    # Errors
    "StackLangError",
    "SourceLocation",
    "CompilerError",
    "CompilationError",
    "ControlFlowError",
    "UnmatchedElseError",
    "DuplicateElseError",
    "UnmatchedEndError",
    "UnclosedBlockError",
    "ToolchainError",
    "ToolNotFoundError",
    "ToolInvocationError",
    "UnsupportedPlatformError",
]
