"""
slc - stacklang Compiler Command-Line Interface
===============================================

Compiles a stacklang source file to NASM x86-64 assembly.

Usage Examples
--------------
Basic compilation:
    $ slc hello.sl

With output file:
    $ slc hello.sl -o hello.asm

Show the lowered operations instead of compiling:
    $ slc --ops hello.sl

Full pipeline by hand:
    $ slc hello.sl && nasm -f elf64 hello.asm -o hello.o && ld -o hello hello.o
"""

from pathlib import Path
from typing import Optional

import click

from stacklang import __version__
from stacklang.cli import setup_logging
from stacklang.cli.errors import handle_cli_exception
from stacklang.compiler import StackCompiler, CompilerOptions, format_operations, lower


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
    help="Output assembly file (default: input.asm)",
)
@click.option(
    "--ops",
    is_flag=True,
    help="Print the lowered operations and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output; also annotates the assembly with source words",
)
@click.version_option(version=__version__, prog_name="slc")
def main(
    input_file: Path,
    output: Optional[Path],
    ops: bool,
    verbose: bool,
) -> None:
    """
    Compile stacklang source code to x86-64 assembly.

    INPUT_FILE is the source file (.sl) to compile.

    The compiler produces NASM assembly for Linux that can be assembled
    with `nasm -f elf64` and linked with `ld`, or use slbuild to do all
    of it in one step.

    \b
    Examples:
        slc hello.sl                 # Outputs hello.asm
        slc hello.sl -o out.asm      # Specify output file
        slc --ops hello.sl           # Show lowered operations
        slc -v hello.sl              # Verbose output

    \b
    Language:
        <number>         push a 64-bit integer
        + - * / =        binary operations on the top two values
        .                print the top value
        if ... else ... end
        nop
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".asm")

    options = CompilerOptions(emit_comments=verbose)

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        source = input_file.read_text(encoding='utf-8')

        # Lowering never fails, so this works for unbalanced programs too
        if ops:
            click.echo(format_operations(lower(source, str(input_file))))
            return

        if output.resolve() == input_file.resolve():
            raise click.BadParameter(
                f"Output would overwrite the input file '{input_file}'",
                param_hint="-o/--output",
            )

        compiler = StackCompiler(options)
        result = compiler.compile_source(source, str(input_file))

        output.write_text(result.assembly, encoding='utf-8')

        if verbose:
            click.echo(f"Lowered: {result.operation_count} operations")
            click.echo(f"Wrote {len(result.assembly)} bytes to {output}")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Compilation")


if __name__ == "__main__":
    main()
