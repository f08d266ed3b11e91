"""
Stack Machine Operations
========================

The lowered form of a stacklang program is a flat list of Operation
values in source order. There is no tree: the only structure is the
pairing of IF, ELSE and END by position, which the code generator
resolves when it links conditional blocks.

| Word   | OpType | Stack effect                      |
|--------|--------|-----------------------------------|
| <word> | PUSH   | ( -- v )                          |
| +      | ADD    | ( a b -- a+b )                    |
| -      | SUB    | ( a b -- a-b )                    |
| *      | MUL    | ( a b -- a*b )                    |
| /      | DIV    | ( a b -- a/b )  signed, truncating |
| =      | EQ     | ( a b -- a==b )                   |
| .      | PRINT  | ( a -- )                          |
| if     | IF     | ( a -- )                          |
| else   | ELSE   | ( -- )                            |
| end    | END    | ( -- )                            |
| nop    | NOP    | ( -- )                            |
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from stacklang.errors import SourceLocation


class OpType(Enum):
    """Kinds of operation. Only PUSH carries a payload."""

    PUSH = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    EQ = auto()
    PRINT = auto()
    IF = auto()
    ELSE = auto()
    END = auto()
    NOP = auto()


# Operations that open, split or close a conditional block
CONTROL_FLOW_OPS = frozenset({OpType.IF, OpType.ELSE, OpType.END})


@dataclass(frozen=True)
class Operation:
    """
    A single lowered operation.

    Attributes:
        type: The operation kind
        value: The literal word for PUSH, kept verbatim; None otherwise
        location: Where the word appeared. Ignored by equality so that
                  programs differing only in layout compare equal.
    """
    type: OpType
    value: Optional[str] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @classmethod
    def push(cls, value: str, location: Optional[SourceLocation] = None) -> "Operation":
        return cls(OpType.PUSH, value, location)

    @property
    def is_control_flow(self) -> bool:
        return self.type in CONTROL_FLOW_OPS

    def __str__(self) -> str:
        if self.type == OpType.PUSH:
            return f"PUSH {self.value}"
        return self.type.name
