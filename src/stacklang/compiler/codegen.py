"""
x86-64 Code Generator for stacklang
===================================

This module turns a lowered instruction sequence into NASM assembly for
x86-64 Linux. The result can be assembled with `nasm -f elf64` and
linked with `ld` into a static executable.

Code Generation Strategy
------------------------
The language's operand stack is the machine stack. Every operation pops
its inputs with POP, computes in scratch registers and pushes its result
back, so no stack depth is tracked at compile time:

| Register | Usage                                       |
|----------|---------------------------------------------|
| RAX, RBX | Operands of binary operations               |
| RCX, RDX | Comparison result / constant 1 for CMOVE    |
| RDI      | Argument to the print routine, exit status  |

For binary operations the value pushed first ("a") is popped second, so
`a b -` computes a - b and `a b /` computes a / b.

Generated Assembly Layout
-------------------------
    segment .text
    dump:               ; decimal print routine (always emitted)
        ...
    global _start
    _start:
        ...             ; one block per operation, in source order
        mov rax, 60     ; exit(0)
        mov rdi, 0
        syscall

The program always exits with status 0; values it computes never become
the exit status.

Conditional Blocks
------------------
Every operation is identified by its position in the sequence, and
labels are named after positions (`.addr_N`). Before anything is
emitted, a linking pass pairs each IF with its ELSE/END using a stack of
pending branch sites:

    IF   at i:  jz   .addr_T    T = (matching ELSE) + 1, or matching END
    ELSE at j:  jmp  .addr_E    E = matching END
                .addr_{j+1}:
    END  at k:  .addr_k:

Because positions are unique, any number of conditionals (nested or
sequential) get distinct labels. Unbalanced blocks are reported as
ControlFlowErrors instead of producing assembly with dangling labels.

Usage
-----
>>> from stacklang.compiler.lexer import lower
>>> from stacklang.compiler.codegen import CodeGenerator
>>> asm = CodeGenerator().generate(lower("34 35 + ."))
"""

import logging
from typing import Optional, Sequence

from stacklang.compiler.ops import Operation, OpType
from stacklang.errors import (
    ErrorCollector,
    UnmatchedElseError,
    DuplicateElseError,
    UnmatchedEndError,
    UnclosedBlockError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Runtime Routines
# =============================================================================

# Prints the unsigned 64-bit value in RDI as decimal followed by a newline.
# Digits are produced right to left into a 32-byte buffer on the stack by
# multiplying with the reciprocal of 10 (0xCCCCCCCCCCCCCCCD), then written
# to stdout with a single write(1, buf, len) syscall.
PRINT_ROUTINE = """\
dump:
    mov     r8, -3689348814741910323
    sub     rsp, 40
    mov     BYTE [rsp+31], 10
    lea     rcx, [rsp+30]
.L2:
    mov     rax, rdi
    mul     r8
    mov     rax, rdi
    shr     rdx, 3
    lea     rsi, [rdx+rdx*4]
    add     rsi, rsi
    sub     rax, rsi
    mov     rsi, rcx
    sub     rcx, 1
    add     eax, 48
    mov     BYTE [rcx+1], al
    mov     rax, rdi
    mov     rdi, rdx
    cmp     rax, 9
    ja      .L2
    lea     rdx, [rsp+32]
    mov     edi, 1
    sub     rdx, rsi
    mov     rax, 1
    syscall
    add     rsp, 40
    ret
"""

# Instruction bodies for operations without payload or labels
_SIMPLE_OPS: dict[OpType, tuple[str, ...]] = {
    OpType.ADD: ("pop rax", "pop rbx", "add rax, rbx", "push rax"),
    OpType.SUB: ("pop rax", "pop rbx", "sub rbx, rax", "push rbx"),
    OpType.MUL: ("pop rax", "pop rbx", "imul rbx, rax", "push rbx"),
    OpType.DIV: ("pop rbx", "pop rax", "cqo", "idiv rbx", "push rax"),
    OpType.EQ: (
        "mov rcx, 0",
        "mov rdx, 1",
        "pop rax",
        "pop rbx",
        "cmp rax, rbx",
        "cmove rcx, rdx",
        "push rcx",
    ),
    OpType.PRINT: ("pop rdi", "call dump"),
    OpType.NOP: ("nop",),
}

ENTRY_LABEL = "_start"


def label_name(position: int) -> str:
    """Return the label for a position in the instruction sequence."""
    return f".addr_{position}"


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates NASM x86-64 assembly from an instruction sequence.

    A generator keeps no state between calls to generate(), so the same
    sequence always yields byte-identical text.

    Attributes:
        emit_comments: Emit a comment with the source word before each block
    """

    INDENT = "    "

    def __init__(self, emit_comments: bool = False):
        self.emit_comments = emit_comments

        # Assembly output lines
        self._output: list[str] = []

        # Labels already defined in the current output
        self._defined_labels: set[int] = set()

        # Jump target position for every IF and ELSE
        self._targets: dict[int, int] = {}

    def generate(
        self,
        program: Sequence[Operation],
        source_lines: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Generate a complete assembly program.

        Args:
            program: The lowered operations, in source order
            source_lines: Source text lines, used to quote the offending
                          line in control-flow errors

        Returns:
            NASM source text

        Raises:
            CompilationError: If if/else/end blocks are unbalanced
        """
        self._output = []
        self._defined_labels = set()
        self._targets = link_blocks(program, source_lines)

        self._emit_header()

        for position, op in enumerate(program):
            self._generate_operation(position, op)

        self._emit_exit()

        logger.debug(
            f"Generated {len(self._output)} lines of assembly "
            f"for {len(program)} operations"
        )
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        self._output.append(line)

    def _emit_instruction(self, instruction: str) -> None:
        self._emit(f"{self.INDENT}{instruction}")

    def _emit_label(self, position: int) -> None:
        """Define the label for a position once; later requests are no-ops."""
        if position in self._defined_labels:
            return
        self._defined_labels.add(position)
        self._emit(f"{label_name(position)}:")

    def _emit_header(self) -> None:
        self._emit("segment .text")
        self._emit(PRINT_ROUTINE)
        self._emit(f"global {ENTRY_LABEL}")
        self._emit(f"{ENTRY_LABEL}:")

    def _emit_exit(self) -> None:
        self._emit_instruction("mov rax, 60")
        self._emit_instruction("mov rdi, 0")
        self._emit_instruction("syscall")

    # =========================================================================
    # Operation Generation
    # =========================================================================

    def _generate_operation(self, position: int, op: Operation) -> None:
        if self.emit_comments:
            where = f"{op.location.line}:{op.location.column} " if op.location else ""
            word = op.value if op.type == OpType.PUSH else op.type.name.lower()
            self._emit_instruction(f"; {where}{word}")

        if op.type == OpType.PUSH:
            self._emit_instruction(f"push {op.value}")

        elif op.type == OpType.IF:
            # Zero is false: skip the then-branch
            self._emit_instruction("pop rax")
            self._emit_instruction("test rax, rax")
            self._emit_instruction(f"jz {label_name(self._targets[position])}")

        elif op.type == OpType.ELSE:
            # End of then-branch jumps over the else-branch, which starts here
            self._emit_instruction(f"jmp {label_name(self._targets[position])}")
            self._emit_label(position + 1)

        elif op.type == OpType.END:
            self._emit_label(position)

        else:
            for instruction in _SIMPLE_OPS[op.type]:
                self._emit_instruction(instruction)


# =============================================================================
# Block Linking
# =============================================================================

def link_blocks(
    program: Sequence[Operation],
    source_lines: Optional[Sequence[str]] = None,
) -> dict[int, int]:
    """
    Resolve the jump target of every IF and ELSE in a program.

    IF jumps to the position just after its ELSE (where the else-branch
    label is defined), or to its END when there is no ELSE. ELSE jumps to
    its END.

    Args:
        program: The lowered operations
        source_lines: Optional source lines for error context

    Returns:
        Mapping from IF/ELSE position to target position

    Raises:
        CompilationError: Listing every unbalanced if/else/end
    """
    errors = ErrorCollector()
    targets: dict[int, int] = {}
    pending: list[int] = []

    def context(op: Operation) -> dict:
        line = None
        if source_lines is not None and op.location is not None:
            if 0 < op.location.line <= len(source_lines):
                line = source_lines[op.location.line - 1]
        return {"location": op.location, "source_line": line}

    for position, op in enumerate(program):
        if not op.is_control_flow:
            continue

        if op.type == OpType.IF:
            pending.append(position)

        elif op.type == OpType.ELSE:
            if not pending:
                errors.add(UnmatchedElseError(**context(op)))
                continue
            site = pending.pop()
            if program[site].type != OpType.IF:
                errors.add(DuplicateElseError(program[site].location, **context(op)))
                # Keep the first else so the matching end still resolves
                pending.append(site)
                continue
            targets[site] = position + 1
            pending.append(position)

        elif op.type == OpType.END:
            if not pending:
                errors.add(UnmatchedEndError(**context(op)))
                continue
            targets[pending.pop()] = position

    for site in pending:
        op = program[site]
        errors.add(UnclosedBlockError(op.type.name.lower(), **context(op)))

    errors.raise_if_errors()

    logger.debug(f"Linked {len(targets)} branch sites")
    return targets
