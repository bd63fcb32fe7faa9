import io

import pytest

from lox.errors import Reporter
from lox.interpreter import Interpreter, is_equal, is_truthy, stringify
from lox.parser import parse
from lox.resolver import resolve
from lox.scanner import scan


@pytest.mark.parametrize("source,expected", [
    ('print "a" + "b";', "ab"),
    ("print 1 + 2;", "3"),
    ("print 7 - 2 * 3;", "1"),
    ("print (7 - 2) * 3;", "15"),
    ("print 1 / 4;", "0.25"),
    ("print -(3);", "-3"),
    ("print !nil;", "true"),
    ("print !0;", "false"),
    ('print !"";', "false"),
    ("print nil == nil;", "true"),
    ("print 0 == false;", "false"),
    ('print 1 == "1";', "false"),
    ("print 1 != 2;", "true"),
    ("print 2 >= 2 and 1 < 2;", "true"),
    ("print nil;", "nil"),
    ("print 1 / 0;", "Infinity"),
    ("print -1 / 0;", "-Infinity"),
    ("print 0 / 0;", "NaN"),
    ("print 0 / 0 == 0 / 0;", "false"),
])
def test_expressions(run, source, expected):
    outcome = run(source)
    assert not outcome.had_error, outcome.errors
    assert not outcome.had_runtime_error, outcome.errors
    assert outcome.output == [expected]


@pytest.mark.parametrize("source,message", [
    ('print 1 + "b";', "Operands must be two numbers or two strings."),
    ('print "a" - "b";', "Operands must be numbers."),
    ("print 1 < nil;", "Operands must be numbers."),
    ('print -"a";', "Operand must be a number."),
    ("print undefined;", "Undefined variable 'undefined'."),
    ("undefined = 1;", "Undefined variable 'undefined'."),
    ('"text"();', "Can only call functions and classes."),
    ("fun f(a) {} f();", "Expected 1 arguments but got 0."),
    ("fun f() {} f(1, 2);", "Expected 0 arguments but got 2."),
    ("print 1.x;", "Only instances have properties."),
    ('var s = "str"; s.x = 1;', "Only instances have fields."),
    ("var NotAClass = 1; class A < NotAClass {}", "Superclass must be a class."),
])
def test_runtime_errors(run, source, message):
    outcome = run(source)
    assert not outcome.had_error, outcome.errors
    assert outcome.had_runtime_error
    assert outcome.errors == f"{message}\n[line 1]\n"


def test_runtime_error_aborts_remaining_statements(run):
    outcome = run('print "before";\nprint nil + 1;\nprint "after";')
    assert outcome.output == ["before"]
    assert outcome.errors.endswith("[line 2]\n")


def test_static_error_prevents_execution(run):
    outcome = run('print "never";\nvar = 1;')
    assert outcome.had_error
    assert outcome.output == []


def test_resolve_error_prevents_execution(run):
    outcome = run('print "never";\nvar a = a;')
    assert outcome.had_error
    assert outcome.output == []


def test_block_scoping_shadows_and_restores(run):
    outcome = run("var a = 1; { var a = 2; print a; } print a;")
    assert outcome.output == ["2", "1"]


def test_assignment_reaches_enclosing_scope(run):
    outcome = run("var a = 1; { a = 2; } print a;")
    assert outcome.output == ["2"]


def test_global_may_be_defined_after_the_function_using_it(run):
    outcome = run("fun show() { print later; } var later = \"ok\"; show();")
    assert outcome.output == ["ok"]


def test_logical_operators_short_circuit(run):
    outcome = run(
        'fun boom() { print "evaluated"; return true; }\n'
        'print false and boom();\n'
        'print true or boom();\n'
        'print nil or "fallback";\n'
        'print 1 and 2;')
    assert outcome.output == ["false", "true", "fallback", "2"]


def test_arguments_evaluate_left_to_right(run):
    outcome = run(
        'fun show(x) { print x; return x; }\n'
        'fun three(a, b, c) {}\n'
        'three(show(1), show(2), show(3));')
    assert outcome.output == ["1", "2", "3"]


def test_while_and_for_loops(run):
    outcome = run(
        "var i = 0; while (i < 3) { print i; i = i + 1; }\n"
        "for (var j = 10; j > 8; j = j - 1) print j;")
    assert outcome.output == ["0", "1", "2", "10", "9"]


def test_for_loop_variable_is_scoped_to_loop(run):
    outcome = run("for (var i = 0; i < 1; i = i + 1) {} print i;")
    assert outcome.had_runtime_error
    assert "Undefined variable 'i'." in outcome.errors


def test_if_else(run):
    outcome = run('if (0) print "zero is truthy"; else print "no";\n'
                  'if (nil) print "yes"; else print "nil is falsy";')
    assert outcome.output == ["zero is truthy", "nil is falsy"]


def test_return_unwinds_through_nested_blocks_and_loops(run):
    outcome = run(
        "fun find() {\n"
        "  var i = 0;\n"
        "  while (true) {\n"
        "    { if (i == 3) { return i; } }\n"
        "    i = i + 1;\n"
        "  }\n"
        "  print \"unreachable\";\n"
        "}\n"
        "print find();")
    assert outcome.output == ["3"]


def test_function_without_return_yields_nil(run):
    outcome = run("fun f() {} print f();")
    assert outcome.output == ["nil"]


def test_recursion(run):
    outcome = run(
        "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }\n"
        "print fib(15);")
    assert outcome.output == ["610"]


def test_unbounded_recursion_is_a_runtime_error(run):
    outcome = run("fun f() { f(); }\nf();")
    assert outcome.had_runtime_error
    assert outcome.errors.startswith("Stack overflow.\n")


def test_printing_callables(run):
    outcome = run("fun f() {} print f; print fun () {}; print clock;")
    assert outcome.output == ["<fn f>", "<fn lambda>", "<native fn>"]


def test_clock_returns_a_number(run):
    outcome = run("print clock() > 0;")
    assert outcome.output == ["true"]


def test_interpret_returns_the_runtime_error():
    stream = io.StringIO()
    reporter = Reporter(stream)
    statements = parse(scan("print 1;\nprint -nil;", reporter), reporter)
    locals = resolve(statements, reporter)
    out = io.StringIO()
    error = Interpreter(reporter, out).interpret(statements, locals)
    assert error is not None
    assert error.message == "Operand must be a number."
    assert error.token.line == 2
    assert out.getvalue() == "1\n"


def test_interpret_returns_none_on_success():
    reporter = Reporter(io.StringIO())
    statements = parse(scan("var a = 1;", reporter), reporter)
    interpreter = Interpreter(reporter, io.StringIO())
    assert interpreter.interpret(statements, resolve(statements, reporter)) is None
    assert interpreter.globals.values["a"] == 1.0


def test_truthiness():
    assert not is_truthy(None)
    assert not is_truthy(False)
    assert is_truthy(0.0)
    assert is_truthy("")
    assert is_truthy(True)


def test_equality_requires_same_kind():
    assert is_equal(None, None)
    assert not is_equal(None, False)
    assert not is_equal(0.0, False)
    assert not is_equal(1.0, True)
    assert is_equal("a", "a")


@pytest.mark.parametrize("value,text", [
    (None, "nil"),
    (True, "true"),
    (False, "false"),
    (3.0, "3"),
    (-0.5, "-0.5"),
    ("hi", "hi"),
])
def test_stringify(value, text):
    assert stringify(value) == text


@pytest.mark.parametrize("value,text", [
    (1e21, "1.0E21"),
    (-1e21, "-1.0E21"),
    (123456789012345680.0, "1.2345678901234568E17"),
    (12345678.0, "1.2345678E7"),
    (9999999.0, "9999999"),
    (0.001, "0.001"),
    (0.0001, "1.0E-4"),
    (2.5e-7, "2.5E-7"),
    (-0.0, "-0"),
])
def test_stringify_large_and_small_numbers(value, text):
    assert stringify(value) == text


def test_printing_large_number_literal(run):
    outcome = run("print 1000000000000000000000;")
    assert outcome.output == ["1.0E21"]
