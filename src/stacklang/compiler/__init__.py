"""
stacklang Compiler
==================

Translates stacklang, a whitespace-delimited stack language, into NASM
assembly for x86-64 Linux.

- A lexer that lowers each word to one operation
- A code generator emitting a stack machine on the native stack

Pipeline
--------
    Source → Lexer → [Operation, ...] → Code Generator → Assembly

Usage
-----
>>> from stacklang.compiler import compile_source
>>> asm_output = compile_source("34 35 + .")
"""

from stacklang.compiler.compiler import (
    StackCompiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    compile_file,
    format_operations,
)
from stacklang.compiler.lexer import Lexer, KEYWORDS, lower
from stacklang.compiler.codegen import CodeGenerator, link_blocks
from stacklang.compiler.ops import Operation, OpType

__all__ = [
    # Main API
    "StackCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "compile_file",
    "format_operations",
    # Lexer
    "Lexer",
    "KEYWORDS",
    "lower",
    # Code Generator
    "CodeGenerator",
    "link_blocks",
    # Operations
    "Operation",
    "OpType",
]
