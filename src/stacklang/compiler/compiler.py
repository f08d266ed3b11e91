"""
stacklang Compiler Main Module
==============================

This module provides the main compiler interface. It runs the two
compilation stages in sequence:

    Source → Lower → Link blocks + Generate → Assembly

Usage
-----
Command line:
    $ slc hello.sl -o hello.asm

Programmatic:
    >>> from stacklang.compiler import compile_source
    >>> asm = compile_source('34 35 + .')

The generated assembly is NASM x86-64 source for Linux, ready for
`nasm -f elf64` and `ld`; see stacklang.toolchain to run those.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stacklang.compiler.lexer import Lexer
from stacklang.compiler.codegen import CodeGenerator
from stacklang.compiler.ops import Operation


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        emit_comments: Annotate each generated block with its source word
                       and location
    """
    emit_comments: bool = False


class StackCompiler:
    """
    Compiler from stacklang source to x86-64 assembly.

    Example:
        compiler = StackCompiler()
        result = compiler.compile_file("hello.sl")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> "CompilerResult":
        """
        Compile source text to assembly.

        Args:
            source: stacklang source text
            filename: Source filename for error messages

        Returns:
            CompilerResult with the assembly and the lowered operations

        Raises:
            CompilationError: If conditional blocks are unbalanced
        """
        result = CompilerResult(filename=filename)

        # Stage 1: Lowering
        lexer = Lexer(source, filename)
        operations = list(lexer.tokenize())
        result.operations = operations
        logger.debug(f"{filename}: lowered {len(operations)} operations")

        # Stage 2: Code generation
        generator = CodeGenerator(emit_comments=self.options.emit_comments)
        result.assembly = generator.generate(operations, lexer.source_lines())

        result.success = True
        return result

    def compile_file(self, filepath) -> "CompilerResult":
        """
        Compile a source file to assembly.

        Raises:
            CompilationError: If conditional blocks are unbalanced
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding='utf-8')
        return self.compile_source(source, str(filepath))


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        assembly: Generated assembly text (if successful)
        operations: The lowered instruction sequence
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    operations: list = None

    def __post_init__(self):
        if self.operations is None:
            self.operations = []

    @property
    def operation_count(self) -> int:
        return len(self.operations)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(source: str, filename: str = "<input>", emit_comments: bool = False) -> str:
    """
    Compile stacklang source to assembly text.

    Example:
        >>> asm = compile_source("1 1 = .")
        >>> "call dump" in asm
        True
    """
    compiler = StackCompiler(CompilerOptions(emit_comments=emit_comments))
    return compiler.compile_source(source, filename).assembly


def compile_file(filepath, output_path: Optional[str] = None) -> str:
    """
    Compile a source file, optionally writing the assembly to output_path.

    Raises:
        CompilationError: If conditional blocks are unbalanced
        FileNotFoundError: If source file not found
    """
    result = StackCompiler().compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.assembly, encoding='utf-8')
        logger.info(f"Wrote {output_path}")

    return result.assembly


def format_operations(operations: list[Operation]) -> str:
    """Render an instruction sequence one operation per line, with positions."""
    lines = []
    for position, op in enumerate(operations):
        where = f"  ; {op.location}" if op.location else ""
        lines.append(f"{position:4d}  {op}{where}")
    return "\n".join(lines)
