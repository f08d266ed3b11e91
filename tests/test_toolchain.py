"""
Tests for the Toolchain Driver
==============================

These tests verify the nasm/ld pipeline without the real tools by
replacing subprocess.run with a recorder that returns scripted results.
"""

import subprocess
from pathlib import Path

import pytest

from stacklang.config import ToolchainConfig
from stacklang.errors import (
    ToolInvocationError,
    ToolNotFoundError,
    ToolchainError,
    UnsupportedPlatformError,
)
from stacklang.toolchain import (
    assemble,
    build_executable,
    check_platform,
    link,
    run_executable,
    run_tool,
)


class FakeRunner:
    """
    Stand-in for subprocess.run.

    Results are looked up by executable name; unknown executables
    succeed with no output.
    """

    def __init__(self, results=None, missing=()):
        self.results = results or {}
        self.missing = set(missing)
        self.calls: list[list[str]] = []

    def __call__(self, command, capture_output, text, cwd=None):
        assert capture_output and text
        self.calls.append(list(command))
        name = Path(command[0]).name
        if name in self.missing:
            raise FileNotFoundError(command[0])
        returncode, stdout, stderr = self.results.get(name, (0, "", ""))
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)

    @property
    def tools(self) -> list[str]:
        return [Path(call[0]).name for call in self.calls]


@pytest.fixture
def fake_run(monkeypatch):
    """Install a FakeRunner; tests configure it through the returned object."""
    runner = FakeRunner()
    monkeypatch.setattr("stacklang.toolchain.runner.subprocess.run", runner)
    return runner


# =============================================================================
# run_tool
# =============================================================================

class TestRunTool:
    """Tests for run_tool()."""

    def test_success(self, fake_run):
        fake_run.results["echo"] = (0, "hi\n", "")
        result = run_tool(["echo", "hi"], "echo")
        assert result.success
        assert result.stdout == "hi\n"
        assert result.command == ["echo", "hi"]

    def test_arguments_stringified(self, fake_run):
        run_tool(["tool", Path("a/b.asm")], "tool")
        assert fake_run.calls == [["tool", str(Path("a/b.asm"))]]

    def test_failure_keeps_output_verbatim(self, fake_run):
        fake_run.results["nasm"] = (1, "out text", "prog.asm:5: error: symbol `foo' not defined")
        with pytest.raises(ToolInvocationError) as exc_info:
            run_tool(["nasm", "prog.asm"], "nasm")
        error = exc_info.value
        assert error.return_code == 1
        assert error.stdout == "out text"
        assert error.stderr == "prog.asm:5: error: symbol `foo' not defined"
        assert error.command == ["nasm", "prog.asm"]
        message = str(error)
        assert message.startswith("nasm failed, output:")
        assert "stderr: prog.asm:5: error: symbol `foo' not defined" in message
        assert "exit code: 1" in message

    def test_failure_without_check(self, fake_run):
        fake_run.results["prog"] = (3, "", "")
        result = run_tool(["prog"], "prog", check=False)
        assert not result.success
        assert result.return_code == 3

    def test_missing_tool(self, fake_run):
        fake_run.missing.add("nasm")
        with pytest.raises(ToolNotFoundError) as exc_info:
            run_tool(["nasm"], "assembler")
        assert exc_info.value.tool == "nasm"
        assert "not found" in str(exc_info.value)
        assert isinstance(exc_info.value, ToolchainError)


# =============================================================================
# Pipeline Stages
# =============================================================================

class TestStages:
    """Tests for assemble(), link() and run_executable()."""

    def test_assemble_command(self, fake_run):
        assemble(Path("p.asm"), Path("p.o"))
        assert fake_run.calls == [["nasm", "-f", "elf64", "p.asm", "-o", "p.o"]]

    def test_link_command(self, fake_run):
        link(Path("p.o"), Path("p"))
        assert fake_run.calls == [["ld", "-o", "p", "p.o"]]

    def test_custom_tools(self, fake_run):
        config = ToolchainConfig(assembler="yasm", linker="ld.lld")
        assemble(Path("p.asm"), Path("p.o"), config)
        link(Path("p.o"), Path("p"), config)
        assert fake_run.tools == ["yasm", "ld.lld"]

    def test_run_executable_uses_absolute_path(self, fake_run, tmp_path):
        fake_run.results["prog"] = (0, "69\n", "")
        result = run_executable(tmp_path / "prog")
        assert result.stdout == "69\n"
        assert Path(fake_run.calls[0][0]).is_absolute()

    def test_run_executable_reports_crash(self, fake_run, tmp_path):
        fake_run.results["prog"] = (-11, "", "")
        result = run_executable(tmp_path / "prog")
        assert result.return_code == -11
        assert not result.success


# =============================================================================
# Full Build
# =============================================================================

class TestBuildExecutable:
    """Tests for build_executable()."""

    ASM = "segment .text\nglobal _start\n_start:\n"

    def test_stages_in_order(self, fake_run, tmp_path, monkeypatch):
        monkeypatch.setattr("stacklang.toolchain.build.sys.platform", "linux")
        exe = tmp_path / "hello"
        result = build_executable(self.ASM, exe, tmp_path)
        assert fake_run.tools == ["nasm", "ld"]
        assert result.asm_file == tmp_path / "hello.asm"
        assert result.asm_file.read_text(encoding="utf-8") == self.ASM
        assert result.object_file == tmp_path / "hello.o"
        assert result.executable == exe
        assert result.run_result is None

    def test_run(self, fake_run, tmp_path, monkeypatch):
        monkeypatch.setattr("stacklang.toolchain.build.sys.platform", "linux")
        fake_run.results["hello"] = (0, "69\n", "")
        result = build_executable(self.ASM, tmp_path / "hello", tmp_path, run=True)
        assert fake_run.tools == ["nasm", "ld", "hello"]
        assert result.run_result.stdout == "69\n"

    def test_assembler_failure_stops_pipeline(self, fake_run, tmp_path, monkeypatch):
        """The linker must never run after the assembler fails."""
        monkeypatch.setattr("stacklang.toolchain.build.sys.platform", "linux")
        fake_run.results["nasm"] = (1, "", "error: parser: instruction expected")
        with pytest.raises(ToolInvocationError):
            build_executable(self.ASM, tmp_path / "hello", tmp_path, run=True)
        assert fake_run.tools == ["nasm"]

    def test_linker_failure_stops_pipeline(self, fake_run, tmp_path, monkeypatch):
        monkeypatch.setattr("stacklang.toolchain.build.sys.platform", "linux")
        fake_run.results["ld"] = (1, "", "ld: cannot find entry symbol _start")
        with pytest.raises(ToolInvocationError) as exc_info:
            build_executable(self.ASM, tmp_path / "hello", tmp_path, run=True)
        assert exc_info.value.stderr == "ld: cannot find entry symbol _start"
        assert fake_run.tools == ["nasm", "ld"]

    def test_windows_refused(self, fake_run, tmp_path, monkeypatch):
        monkeypatch.setattr("stacklang.toolchain.build.sys.platform", "win32")
        with pytest.raises(UnsupportedPlatformError):
            build_executable(self.ASM, tmp_path / "hello", tmp_path)
        assert fake_run.calls == []


class TestCheckPlatform:
    """Tests for check_platform()."""

    def test_linux(self):
        check_platform("linux")

    def test_windows(self):
        with pytest.raises(UnsupportedPlatformError, match="not supported on windows"):
            check_platform("win32")
