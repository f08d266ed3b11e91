"""
Assemble, Link and Run
======================

Turns generated assembly into a native executable with the external
toolchain, one stage at a time:

    ┌───────────┐      ┌──────────┐      ┌────────────┐      ┌─────────┐
    │ .asm text │─────▶│ .o file  │─────▶│ executable │─────▶│ (run)   │
    │           │ nasm │          │  ld  │            │      │ stdout  │
    └───────────┘      └──────────┘      └────────────┘      └─────────┘

Each stage is checked before the next one starts. The first failing
stage raises a ToolchainError carrying the tool's output verbatim, and
later stages are never attempted.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stacklang.config import ToolchainConfig
from stacklang.errors import UnsupportedPlatformError
from stacklang.toolchain.runner import ToolResult, run_tool


logger = logging.getLogger(__name__)


def check_platform(platform: Optional[str] = None) -> None:
    """
    Refuse to build on hosts that cannot run the ELF64 toolchain.

    Raises:
        UnsupportedPlatformError: On Windows
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        raise UnsupportedPlatformError("windows")


def assemble(
    source_asm: Path,
    output_obj: Path,
    config: Optional[ToolchainConfig] = None,
) -> ToolResult:
    """
    Assemble a .asm file into a relocatable object.

    Raises:
        ToolNotFoundError: If the assembler is not installed
        ToolInvocationError: If the assembler rejects the source
    """
    config = config or ToolchainConfig()
    command = config.assemble_command(str(source_asm), str(output_obj))
    result = run_tool(command, config.assembler)
    logger.info(f"Assembled {source_asm} -> {output_obj}")
    return result


def link(
    object_file: Path,
    output_exe: Path,
    config: Optional[ToolchainConfig] = None,
) -> ToolResult:
    """
    Link an object file into an executable.

    Raises:
        ToolNotFoundError: If the linker is not installed
        ToolInvocationError: If linking fails
    """
    config = config or ToolchainConfig()
    command = config.link_command(str(object_file), str(output_exe))
    result = run_tool(command, config.linker)
    logger.info(f"Linked {object_file} -> {output_exe}")
    return result


def run_executable(executable: Path) -> ToolResult:
    """
    Run a produced program and capture its output.

    The program's exit status is returned rather than raised: a crash of
    the compiled program is the program's outcome, not a build failure.
    """
    executable = Path(executable).resolve()
    result = run_tool([executable], executable.name, check=False)
    if not result.success:
        logger.warning(f"{executable.name} exited with status {result.return_code}")
    return result


@dataclass
class BuildResult:
    """
    Outcome of a complete build.

    Attributes:
        asm_file: The assembly file that was assembled
        object_file: The object file produced by the assembler
        executable: The linked executable
        run_result: Output of the program, if it was run
    """
    asm_file: Path
    object_file: Path
    executable: Path
    run_result: Optional[ToolResult] = None


def build_executable(
    assembly: str,
    output_exe: Path,
    work_dir: Path,
    config: Optional[ToolchainConfig] = None,
    run: bool = False,
) -> BuildResult:
    """
    Write assembly to work_dir, assemble it, link it, and optionally run it.

    Args:
        assembly: Generated assembly text
        output_exe: Path of the executable to produce
        work_dir: Directory for the intermediate .asm and .o files
        config: Toolchain configuration (defaults if None)
        run: If True, execute the program after linking

    Returns:
        BuildResult describing the produced files

    Raises:
        UnsupportedPlatformError: On Windows
        ToolchainError: From the first stage that fails
    """
    check_platform()
    config = config or ToolchainConfig()

    work_dir = Path(work_dir)
    stem = Path(output_exe).name
    asm_file = work_dir / f"{stem}.asm"
    object_file = work_dir / f"{stem}.o"

    asm_file.write_text(assembly, encoding='utf-8')
    logger.debug(f"Wrote {len(assembly)} bytes of assembly to {asm_file}")

    assemble(asm_file, object_file, config)
    link(object_file, output_exe, config)

    result = BuildResult(asm_file=asm_file, object_file=object_file, executable=Path(output_exe))

    if run:
        result.run_result = run_executable(output_exe)

    return result
