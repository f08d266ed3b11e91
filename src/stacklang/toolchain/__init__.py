"""
stacklang Toolchain Driver
==========================

Runs the external assembler (nasm) and linker (ld) on generated
assembly, and optionally the resulting program.

>>> from stacklang.toolchain import build_executable
>>> build_executable(asm, Path("hello"), Path("/tmp/work"), run=True)
"""

from stacklang.toolchain.runner import ToolResult, run_tool
from stacklang.toolchain.build import (
    BuildResult,
    assemble,
    build_executable,
    check_platform,
    link,
    run_executable,
)

__all__ = [
    "ToolResult",
    "run_tool",
    "BuildResult",
    "assemble",
    "build_executable",
    "check_platform",
    "link",
    "run_executable",
]
