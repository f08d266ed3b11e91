"""
stacklang Lexer (Tokenizer/Lowerer)
===================================

Converts source text straight into the flat list of operations consumed
by the code generator. Words are separated by any whitespace, including
newlines, and each word lowers to exactly one operation through the
KEYWORDS table. Anything that is not a keyword becomes a PUSH of the
word's text.

Lowering cannot fail. A word like "foo" becomes PUSH "foo" and it is the
assembler that later rejects it; the lexer stays total so every program
reaches code generation.

Example Usage
-------------
>>> from stacklang.compiler.lexer import lower
>>> for op in lower("34 35 + ."):
...     print(op)
PUSH 34
PUSH 35
ADD
PRINT
"""

import re
from typing import Iterator

from stacklang.errors import SourceLocation
from stacklang.compiler.ops import Operation, OpType


# =============================================================================
# Keyword Mapping
# =============================================================================

KEYWORDS: dict[str, OpType] = {
    # Arithmetic
    "+": OpType.ADD,
    "-": OpType.SUB,
    "*": OpType.MUL,
    "/": OpType.DIV,

    # Comparison and output
    "=": OpType.EQ,
    ".": OpType.PRINT,

    # Control flow
    "if": OpType.IF,
    "else": OpType.ELSE,
    "end": OpType.END,

    # Other
    "nop": OpType.NOP,
}

# Unicode White_Space characters. Python's \s and str.split() also treat
# the ASCII separators U+001C..U+001F as whitespace; here they stay inside
# words.
WHITESPACE = (
    "\t\n\v\f\r \x85\xa0\u1680\u2000-\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)

_WORD_PATTERN = re.compile(f"[^{WHITESPACE}]+")


def split_lines(source: str) -> list[str]:
    """Split on LF only, dropping the CR of CRLF line endings."""
    return [line.removesuffix("\r") for line in source.split("\n")]


def lower_word(word: str, location: SourceLocation = None) -> Operation:
    """Map one word to its operation, falling back to a literal push."""
    op_type = KEYWORDS.get(word)
    if op_type is None:
        return Operation.push(word, location)
    return Operation(op_type, None, location)


# =============================================================================
# Lexer Class
# =============================================================================

class Lexer:
    """
    Lowers stacklang source text to operations.

    Example:
        lexer = Lexer("1 2 +", "prog.sl")
        ops = list(lexer.tokenize())

    Attributes:
        source: The source text
        filename: Name used in operation locations
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def tokenize(self) -> Iterator[Operation]:
        """Yield one operation per word, in source order."""
        for line_number, line in enumerate(split_lines(self.source), start=1):
            for match in _WORD_PATTERN.finditer(line):
                location = SourceLocation(self.filename, line_number, match.start() + 1)
                yield lower_word(match.group(), location)

    def source_lines(self) -> list[str]:
        return split_lines(self.source)


def lower(source: str, filename: str = "<input>") -> list[Operation]:
    """Lower a complete source text to its instruction sequence."""
    return list(Lexer(source, filename).tokenize())
