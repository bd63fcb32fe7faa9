from lox.cli import Lox, main
from lox.errors import LoxRuntimeError, Reporter
from lox.interpreter import Interpreter, interpret
from lox.parser import parse
from lox.resolver import resolve
from lox.scanner import scan

__all__ = [
    "Interpreter",
    "Lox",
    "LoxRuntimeError",
    "Reporter",
    "interpret",
    "main",
    "parse",
    "resolve",
    "scan",
]
