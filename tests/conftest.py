"""Pytest configuration for the interpreter test suite."""

from dataclasses import dataclass

import pytest

from lox.cli import Lox


@dataclass
class Outcome:
    """What a single `Lox.run` produced."""

    output: list[str]
    errors: str
    had_error: bool
    had_runtime_error: bool


@pytest.fixture
def run(capsys):
    def run(source, session=None):
        lox = session if session is not None else Lox()
        lox.run(source)
        captured = capsys.readouterr()
        return Outcome(
            output=captured.out.splitlines(),
            errors=captured.err,
            had_error=lox.reporter.had_error,
            had_runtime_error=lox.reporter.had_runtime_error,
        )

    return run
