"""
slbuild - Unified Build Tool for stacklang
==========================================

Combines the whole toolchain (slc → nasm → ld) into a single command
that turns a stacklang source file into a native x86-64 Linux
executable, and can run the result.

Pipeline Architecture
---------------------
    ┌──────────┐     ┌──────────┐     ┌──────────┐     ┌──────────┐
    │ .sl file │────▶│ .asm file│────▶│  .o file │────▶│executable│
    │ (source) │ slc │  (temp)  │nasm │  (temp)  │ ld  │ (output) │
    └──────────┘     └──────────┘     └──────────┘     └──────────┘

Each stage must succeed before the next one starts. When nasm or ld
fails, its stdout, stderr and exit code are printed exactly as the tool
produced them and the build stops.

Usage Examples
--------------
Build a program:
    $ slbuild hello.sl -o hello

Build and run it:
    $ slbuild -r hello.sl

Keep the intermediate .asm and .o files:
    $ slbuild -k hello.sl

Exit Codes
----------
0 - Success
1 - Build failed (compilation, assembly, or linking error)
2 - Invalid arguments or file not found
3 - Internal error
4 - The program was run with -r and exited with a non-zero status
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Optional

import click

from stacklang import __version__
from stacklang.cli import setup_logging
from stacklang.cli.errors import ExitCode, handle_cli_exception
from stacklang.compiler import StackCompiler, CompilerOptions
from stacklang.config import ToolchainConfig
from stacklang.toolchain import build_executable, check_platform


def resolve_output_path(output: Optional[Path], source_file: Path) -> Path:
    """
    Determine the executable path.

    Without -o, the executable is named after the source file (without
    extension) and placed in the current working directory.

    Examples:
        hello.sl     → ./hello
        dir/calc.sl  → ./calc
    """
    if output is not None:
        return output

    name = source_file.stem
    if not name:
        raise click.BadParameter(
            f"Cannot derive an executable name from '{source_file}'",
            param_hint="INPUT_FILE or -o/--output",
        )
    return Path.cwd() / name


def build_config(nasm: Optional[str], ld: Optional[str]) -> ToolchainConfig:
    """Environment configuration with command-line overrides applied."""
    config = ToolchainConfig.from_env()
    if nasm:
        config.assembler = nasm
    if ld:
        config.linker = ld
    return config


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output executable (default: source name in the current directory)",
)
@click.option(
    "-r", "--run",
    is_flag=True,
    help="Run the program after a successful build and show its output",
)
@click.option(
    "-k", "--keep",
    is_flag=True,
    help="Keep intermediate files (.asm annotated with source words, .o) "
         "next to the executable",
)
@click.option(
    "--nasm",
    default=None,
    help="Assembler executable (default: $STACKLANG_NASM or nasm)",
)
@click.option(
    "--ld",
    default=None,
    help="Linker executable (default: $STACKLANG_LD or ld)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show detailed progress for each build stage",
)
@click.version_option(version=__version__, prog_name="slbuild")
def main(
    input_file: Path,
    output: Optional[Path],
    run: bool,
    keep: bool,
    nasm: Optional[str],
    ld: Optional[str],
    verbose: bool,
) -> None:
    """
    Build a native executable from stacklang source.

    INPUT_FILE is the source file (.sl) to build.

    \b
    Examples:
        slbuild hello.sl              # Builds ./hello
        slbuild hello.sl -o app       # Custom output name
        slbuild -r hello.sl           # Build and run
        slbuild -k hello.sl           # Keep hello.asm and hello.o
        slbuild --nasm yasm hello.sl  # Use another assembler

    \b
    Requirements:
        - Linux (x86-64)
        - nasm and ld on PATH
    """
    setup_logging(verbose)

    try:
        check_platform()

        output_exe = resolve_output_path(output, input_file)
        config = build_config(nasm, ld)
        total_steps = 4 if run else 3

        if verbose:
            click.echo(f"Building {input_file}")
            click.echo(f"Output: {output_exe}")
            click.echo(f"Assembler: {config.assembler} -f {config.object_format}")
            click.echo(f"Linker: {config.linker}")
            click.echo()

        # =====================================================================
        # Step 1: Compile to assembly
        # =====================================================================
        if verbose:
            click.echo(f"[1/{total_steps}] Compiling {input_file.name}")

        compiler = StackCompiler(CompilerOptions(emit_comments=keep))
        result = compiler.compile_file(input_file)

        if verbose:
            click.echo(f"      Lowered {result.operation_count} operations")
            click.echo(f"[2/{total_steps}] Assembling with {config.assembler}")
            click.echo(f"[3/{total_steps}] Linking with {config.linker}")
            if run:
                click.echo(f"[4/{total_steps}] Running {output_exe.name}")

        # =====================================================================
        # Steps 2-4: Assemble, link, run
        # =====================================================================
        with tempfile.TemporaryDirectory(prefix="slbuild_") as temp_dir:
            build = build_executable(
                result.assembly,
                output_exe,
                Path(temp_dir),
                config=config,
                run=run,
            )

            if keep:
                output_dir = output_exe.parent
                for intermediate in (build.asm_file, build.object_file):
                    kept = output_dir / intermediate.name
                    shutil.copyfile(intermediate, kept)
                    if verbose:
                        click.echo(f"Kept: {kept}")

        click.echo(f"Built {output_exe}")

        if build.run_result is not None:
            click.echo()
            click.echo(build.run_result.stdout, nl=False)
            if build.run_result.stderr:
                click.echo(build.run_result.stderr, err=True, nl=False)
            if not build.run_result.success:
                click.echo(
                    f"{output_exe.name} exited with status {build.run_result.return_code}",
                    err=True,
                )
                sys.exit(ExitCode.PROGRAM_FAILED)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Build")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
