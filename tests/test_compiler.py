"""
stacklang Compiler Test Suite
=============================

End-to-end tests of the compiler driver (lowering followed by code
generation), the convenience functions, and the toolchain configuration.
"""

import dataclasses

import pytest

from stacklang import __version__
from stacklang.compiler import (
    StackCompiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    compile_file,
    format_operations,
    lower,
)
from stacklang.compiler.ops import Operation, OpType
from stacklang.config import ToolchainConfig
from stacklang.errors import CompilationError, StackLangError


# =============================================================================
# Compiler Driver Tests
# =============================================================================

class TestStackCompiler:
    """Tests for StackCompiler."""

    def test_compile_source(self):
        result = StackCompiler().compile_source("34 35 + .", "add.sl")
        assert isinstance(result, CompilerResult)
        assert result.success
        assert result.filename == "add.sl"
        assert result.operations == [
            Operation.push("34"),
            Operation.push("35"),
            Operation(OpType.ADD),
            Operation(OpType.PRINT),
        ]
        assert result.operation_count == 4
        assert "call dump" in result.assembly

    def test_equal_scenario(self):
        result = StackCompiler().compile_source("1 1 = .")
        assert [op.type for op in result.operations] == [
            OpType.PUSH, OpType.PUSH, OpType.EQ, OpType.PRINT
        ]
        assert "cmove rcx, rdx" in result.assembly

    def test_empty_source(self):
        result = StackCompiler().compile_source("  \n ")
        assert result.operations == []
        assert result.assembly.endswith("_start:\n    mov rax, 60\n    mov rdi, 0\n    syscall\n")

    def test_idempotent(self):
        """Compiling the same text twice gives byte-identical assembly."""
        source = "1 if 2 . else 3 . end 0 if 4 . end"
        compiler = StackCompiler()
        first = compiler.compile_source(source).assembly
        second = compiler.compile_source(source).assembly
        assert first == second

    def test_layout_does_not_change_output(self):
        assert compile_source("1 2 +") == compile_source("1\n2\n+")
        assert compile_source("1 2 +") == compile_source("1  2   +")

    def test_comments_option(self):
        compiler = StackCompiler(CompilerOptions(emit_comments=True))
        assert "; 1:1 42" in compiler.compile_source("42").assembly

    def test_control_flow_error_propagates(self):
        with pytest.raises(CompilationError) as exc_info:
            StackCompiler().compile_source("1 if .", "bad.sl")
        assert "bad.sl:1:3: error: 'if' block is never closed" in str(exc_info.value)
        assert isinstance(exc_info.value, StackLangError)

    def test_failure_carries_structured_errors(self):
        """A failed compile reports through the exception, not a result."""
        with pytest.raises(CompilationError) as exc_info:
            StackCompiler().compile_source("end 1 if", "bad.sl")
        assert [e.location.column for e in exc_info.value.errors] == [1, 7]
        assert [f.name for f in dataclasses.fields(CompilerResult)] == [
            "filename", "success", "assembly", "operations"
        ]

    def test_unknown_words_are_not_errors(self):
        """Validation of literals is left to the assembler."""
        assert "push banana" in compile_source("banana .")


# =============================================================================
# File Compilation Tests
# =============================================================================

class TestCompileFile:
    """Tests for compiling from and to files."""

    def test_compile_file(self, tmp_path):
        source = tmp_path / "prog.sl"
        source.write_text("2 3 * .\n", encoding="utf-8")
        result = StackCompiler().compile_file(source)
        assert result.filename == str(source)
        assert "imul rbx, rax" in result.assembly

    def test_compile_file_writes_output(self, tmp_path):
        source = tmp_path / "prog.sl"
        source.write_text("2 3 * .", encoding="utf-8")
        output = tmp_path / "prog.asm"
        asm = compile_file(source, str(output))
        assert output.read_text(encoding="utf-8") == asm

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Source file not found"):
            StackCompiler().compile_file(tmp_path / "missing.sl")

    def test_error_quotes_source_line(self, tmp_path):
        source = tmp_path / "bad.sl"
        source.write_text("1 2 +\n  else .\n", encoding="utf-8")
        with pytest.raises(CompilationError) as exc_info:
            compile_file(source)
        message = str(exc_info.value)
        assert ":2:3: error: 'else' without an open 'if'" in message
        assert "      else ." in message


# =============================================================================
# Utility Tests
# =============================================================================

class TestFormatOperations:
    """Tests for the operation listing used by slc --ops."""

    def test_listing(self):
        listing = format_operations(lower("1 .", "p.sl"))
        assert listing.splitlines() == [
            "   0  PUSH 1  ; p.sl:1:1",
            "   1  PRINT  ; p.sl:1:3",
        ]

    def test_empty(self):
        assert format_operations([]) == ""


class TestToolchainConfig:
    """Tests for ToolchainConfig."""

    def test_defaults(self):
        config = ToolchainConfig()
        assert config.assembler == "nasm"
        assert config.object_format == "elf64"
        assert config.linker == "ld"

    def test_commands(self):
        config = ToolchainConfig()
        assert config.assemble_command("a.asm", "a.o") == [
            "nasm", "-f", "elf64", "a.asm", "-o", "a.o"
        ]
        assert config.link_command("a.o", "a") == ["ld", "-o", "a", "a.o"]

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STACKLANG_NASM", "/opt/nasm")
        monkeypatch.setenv("STACKLANG_LD", "ld.gold")
        monkeypatch.setenv("STACKLANG_OBJECT_FORMAT", "elfx32")
        config = ToolchainConfig.from_env()
        assert config.assembler == "/opt/nasm"
        assert config.linker == "ld.gold"
        assert config.object_format == "elfx32"

    def test_from_env_empty(self, monkeypatch):
        for name in ("STACKLANG_NASM", "STACKLANG_LD", "STACKLANG_OBJECT_FORMAT"):
            monkeypatch.delenv(name, raising=False)
        assert ToolchainConfig.from_env() == ToolchainConfig()

    def test_every_field_is_configurable(self, monkeypatch):
        """Each field can be overridden from the environment."""
        overrides = {
            "assembler": ("STACKLANG_NASM", "yasm"),
            "object_format": ("STACKLANG_OBJECT_FORMAT", "elf32"),
            "linker": ("STACKLANG_LD", "ld.lld"),
        }
        assert [f.name for f in dataclasses.fields(ToolchainConfig)] == list(overrides)
        for name, value in overrides.values():
            monkeypatch.setenv(name, value)
        config = ToolchainConfig.from_env()
        for field_name, (_, value) in overrides.items():
            assert getattr(config, field_name) == value


def test_version():
    assert __version__ == "1.0.0"
