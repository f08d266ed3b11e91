"""
stacklang Toolchain Configuration
=================================

Names and flags of the external tools used to turn generated assembly
into an executable. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options of slbuild (which take precedence)
"""

from dataclasses import dataclass
import os


@dataclass
class ToolchainConfig:
    """
    Configuration for the assembler and linker.

    Attributes:
        assembler: Assembler executable (default: "nasm")
        object_format: Object format passed to the assembler with -f
        linker: Linker executable (default: "ld")
    """

    assembler: str = "nasm"
    object_format: str = "elf64"
    linker: str = "ld"

    @classmethod
    def from_env(cls) -> "ToolchainConfig":
        """
        Create a ToolchainConfig from environment variables.

        Environment variables (all optional):
            STACKLANG_NASM: Assembler executable
            STACKLANG_OBJECT_FORMAT: Object format (e.g. "elf64")
            STACKLANG_LD: Linker executable
        """
        config = cls()

        if assembler := os.environ.get("STACKLANG_NASM"):
            config.assembler = assembler

        if object_format := os.environ.get("STACKLANG_OBJECT_FORMAT"):
            config.object_format = object_format

        if linker := os.environ.get("STACKLANG_LD"):
            config.linker = linker

        return config

    def assemble_command(self, source_asm: str, output_obj: str) -> list[str]:
        return [self.assembler, "-f", self.object_format, source_asm, "-o", output_obj]

    def link_command(self, object_file: str, output_exe: str) -> list[str]:
        return [self.linker, "-o", output_exe, object_file]
