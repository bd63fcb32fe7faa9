from dataclasses import dataclass
from typing import Any


KEYWORDS = {
    "and",
    "class",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "nil",
    "or",
    "print",
    "return",
    "super",
    "this",
    "true",
    "var",
    "while",
}


@dataclass(frozen=True)
class Token:
    type: str
    lexeme: str
    literal: Any
    line: int

    def __str__(self):
        return f"{self.type} {self.lexeme} {self.literal}"
