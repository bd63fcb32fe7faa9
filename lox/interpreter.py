import math
from decimal import Decimal

from lox.ast import Expr, Stmt
from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.runtime import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance


class Return:
    """Outcome of a statement that hit `return`; `None` means normal completion."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


class Interpreter(Expr.Visitor, Stmt.Visitor):
    def __init__(self, reporter, stdout=None):
        self.reporter = reporter
        self.stdout = stdout
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}

        for name, native in NATIVES.items():
            self.globals.define(name, native)

    def interpret(self, statements, locals=None):
        if locals:
            self.locals.update(locals)
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            self.reporter.runtime_error(error)
            return error
        return None

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                if (signal := self.execute(statement)) is not None:
                    return signal
            return None
        finally:
            self.environment = previous

    def visit_block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class_stmt(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(
                    stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        static_methods = {
            method.name.lexeme: LoxFunction(method, self.environment)
            for method in stmt.static_methods}

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {
            method.name.lexeme: LoxFunction(
                method, self.environment, method.name.lexeme == "init")
            for method in stmt.methods}

        klass = LoxClass(stmt.name.lexeme, superclass, methods, static_methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(stmt.name, klass)

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_function_stmt(self, stmt):
        function = LoxFunction(stmt, self.environment)
        self.environment.define(stmt.name.lexeme, function)

    def visit_if_stmt(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_print_stmt(self, stmt):
        value = self.evaluate(stmt.expression)
        print(stringify(value), file=self.stdout)

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return Return(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def visit_while_stmt(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            if (signal := self.execute(stmt.body)) is not None:
                return signal
        return None

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)
        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name.lexeme, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        match operator.type:
            case "BANG_EQUAL": return not is_equal(left, right)
            case "EQUAL_EQUAL": return is_equal(left, right)
            case "GREATER":
                check_number_operands(operator, left, right)
                return left > right
            case "GREATER_EQUAL":
                check_number_operands(operator, left, right)
                return left >= right
            case "LESS":
                check_number_operands(operator, left, right)
                return left < right
            case "LESS_EQUAL":
                check_number_operands(operator, left, right)
                return left <= right
            case "MINUS":
                check_number_operands(operator, left, right)
                return left - right
            case "PLUS":
                if is_number(left) and is_number(right):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(
                    operator, "Operands must be two numbers or two strings.")
            case "SLASH":
                check_number_operands(operator, left, right)
                return divide(left, right)
            case "STAR":
                check_number_operands(operator, left, right)
                return left * right
        return None

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(
                expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def visit_get_expr(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, (LoxInstance, LoxClass)):
            return obj.get(expr.name)
        raise LoxRuntimeError(
            expr.name, "Only instances have properties.")

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_lambda_expr(self, expr):
        return LoxFunction(expr, self.environment)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)
        if expr.operator.type == "OR":
            if is_truthy(left):
                return left
        else:
            if not is_truthy(left):
                return left
        return self.evaluate(expr.right)

    def visit_set_expr(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(
                expr.name, "Only instances have fields.")
        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super_expr(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        # 'this' lives in the frame bound just inside the 'super' frame
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(
                expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    def visit_this_expr(self, expr):
        return self.lookup_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)
        match expr.operator.type:
            case "BANG": return not is_truthy(right)
            case "MINUS":
                check_number_operand(expr.operator, right)
                return -right
        return None

    def visit_variable_expr(self, expr):
        return self.lookup_variable(expr.name, expr)

    def lookup_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)


def is_number(value):
    return isinstance(value, float)


def is_truthy(value):
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    if left is None:
        return right is None
    # bool is an int subclass in Python, so compare kinds before values
    return type(left) is type(right) and left == right


def divide(left, right):
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def check_number_operand(operator, operand):
    if not is_number(operand):
        raise LoxRuntimeError(operator, "Operand must be a number.")


def check_number_operands(operator, left, right):
    if not (is_number(left) and is_number(right)):
        raise LoxRuntimeError(operator, "Operands must be numbers.")


def format_number(value):
    """Shortest round-trip digits, laid out like Java's `Double.toString`:
    plain decimal for magnitudes in [1e-3, 1e7), otherwise `d.dddE<exp>`.
    """
    if value == 0 or 1e-3 <= abs(value) < 1e7:
        return repr(value)
    sign, digits, exponent = Decimal(repr(value)).as_tuple()
    exponent += len(digits) - 1
    digits = "".join(map(str, digits)).rstrip("0") or "0"
    mantissa = f"{digits[0]}.{digits[1:] or '0'}"
    return f"{'-' if sign else ''}{mantissa}E{exponent}"


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = format_number(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


def interpret(statements, locals, reporter, stdout=None):
    return Interpreter(reporter, stdout).interpret(statements, locals)
