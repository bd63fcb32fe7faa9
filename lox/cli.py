import argparse
import sys

from lox.errors import LoxRuntimeError, Reporter
from lox.interpreter import Interpreter
from lox.parser import Parser
from lox.resolver import Resolver
from lox.scanner import Scanner

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70


class Lox:
    """One interpreter session: global state survives across `run` calls."""

    def __init__(self, stdout=None, stderr=None):
        self.reporter = Reporter(stderr)
        self.interpreter = Interpreter(self.reporter, stdout)

    def run(self, source):
        tokens = Scanner(source, self.reporter).scan_tokens()
        statements = Parser(tokens, self.reporter).parse()

        if self.reporter.had_error:
            return

        # nodes carry no position of their own, so host stack exhaustion
        # outside a call is reported at the end of the source
        end = tokens[-1]
        try:
            locals = Resolver(self.reporter).resolve(statements)
        except RecursionError:
            self.reporter.token_error(end, "Too much nesting.")
            return

        if self.reporter.had_error:
            return

        try:
            self.interpreter.interpret(statements, locals)
        except RecursionError:
            self.reporter.runtime_error(LoxRuntimeError(end, "Stack overflow."))

    def run_file(self, filename):
        with open(filename, "r", encoding="utf-8") as file:
            self.run(file.read())

        if self.reporter.had_error:
            return EX_DATAERR
        if self.reporter.had_runtime_error:
            return EX_SOFTWARE
        return EX_OK

    def run_prompt(self, stdin=None):
        stdin = stdin if stdin is not None else sys.stdin
        while True:
            print("> ", end="", flush=True, file=self.interpreter.stdout)
            line = stdin.readline()
            if not line:
                print(file=self.interpreter.stdout)
                break
            self.run(line)
            self.reporter.reset()
        return EX_OK


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pylox", description="Run Lox scripts")
    parser.add_argument("script", nargs="?",
                        help="script to run; starts a prompt when omitted")
    parser.add_argument("--recursion-limit", type=int, default=None,
                        help="host recursion limit, bounds Lox call depth")
    return parser


def main(argv=None):
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as error:
        return EX_OK if error.code == 0 else EX_USAGE

    if args.recursion_limit is not None:
        sys.setrecursionlimit(args.recursion_limit)

    lox = Lox()
    if args.script is not None:
        try:
            return lox.run_file(args.script)
        except OSError as error:
            print(f"pylox: {args.script}: {error.strerror}", file=sys.stderr)
            return EX_USAGE
    return lox.run_prompt()
