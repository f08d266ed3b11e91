"""
External Process Runner
=======================

Runs one external tool synchronously and checks its result. Output is
captured as text and kept verbatim, so a failing assembler or linker can
be reported exactly as it printed.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from stacklang.errors import ToolNotFoundError, ToolInvocationError


logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """
    Outcome of one external process.

    Attributes:
        command: The argument list that was executed
        stdout: Captured standard output
        stderr: Captured standard error
        return_code: Process exit status (negative if killed by a signal)
    """
    command: list
    stdout: str
    stderr: str
    return_code: int

    @property
    def success(self) -> bool:
        return self.return_code == 0


def run_tool(
    command: Sequence[str],
    description: str,
    cwd: Optional[Path] = None,
    check: bool = True,
) -> ToolResult:
    """
    Run an external tool and wait for it to finish.

    Args:
        command: Executable and arguments
        description: Human-readable name used in errors (e.g. "nasm")
        cwd: Working directory for the process
        check: If True, a non-zero exit status raises ToolInvocationError

    Returns:
        ToolResult with the captured output

    Raises:
        ToolNotFoundError: If the executable cannot be started
        ToolInvocationError: If check is True and the tool fails
    """
    command = [str(part) for part in command]
    logger.debug(f"Running: {shlex.join(command)}")

    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            cwd=str(cwd) if cwd is not None else None,
        )
    except FileNotFoundError:
        raise ToolNotFoundError(command[0], description)

    result = ToolResult(
        command=command,
        stdout=completed.stdout,
        stderr=completed.stderr,
        return_code=completed.returncode,
    )

    if check and not result.success:
        raise ToolInvocationError(
            description,
            command,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.return_code,
        )

    logger.debug(f"{description} exited with {result.return_code}")
    return result
