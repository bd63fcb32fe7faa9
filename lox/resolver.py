from lox.ast import Expr, Stmt


class Resolver(Expr.Visitor, Stmt.Visitor):
    """Static pass recording, per local variable use, how many scopes to hop.

    Only block, function and class scopes are tracked; a name found in none of
    them is left out of the table and looked up in the globals at run time.
    """

    def __init__(self, reporter):
        self.reporter = reporter
        self.scopes = []
        self.locals = {}
        # top-level names whose initializer is being resolved
        self.initializing_globals = set()
        self.current_function = "NONE"
        self.current_class = "NONE"

    def resolve(self, target):
        if isinstance(target, list):
            for node in target:
                node.accept(self)
        else:
            target.accept(self)
        return self.locals

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def visit_class_stmt(self, stmt):
        enclosing_class = self.current_class
        self.current_class = "CLASS"

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.reporter.token_error(
                    stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = "SUBCLASS"
            self.resolve(stmt.superclass)

        # static methods close over the class's declaring scope, outside
        # both the 'super' and 'this' scopes
        for method in stmt.static_methods:
            if method.name.lexeme == "init":
                self.reporter.token_error(
                    method.name, "Init method of a class cannot be static.")
            class_kind = self.current_class
            self.current_class = "STATIC"
            self.resolve_function(method, "METHOD")
            self.current_class = class_kind

        if stmt.superclass is not None:
            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            kind = "METHOD"
            if method.name.lexeme == "init":
                kind = "INITIALIZER"
            self.resolve_function(method, kind)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_function_stmt(self, stmt):
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, "FUNCTION")

    def visit_if_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.then_branch)
        if stmt.else_branch is not None:
            self.resolve(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_return_stmt(self, stmt):
        if self.current_function == "NONE":
            self.reporter.token_error(
                stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self.current_function == "INITIALIZER":
                self.reporter.token_error(
                    stmt.keyword, "Can't return a value from an initializer.")
            self.resolve(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            if not self.scopes:
                self.initializing_globals.add(stmt.name.lexeme)
            self.resolve(stmt.initializer)
            self.initializing_globals.discard(stmt.name.lexeme)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.body)

    def visit_assign_expr(self, expr):
        self.resolve(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_call_expr(self, expr):
        self.resolve(expr.callee)
        self.resolve(expr.arguments)

    def visit_get_expr(self, expr):
        self.resolve(expr.object)

    def visit_grouping_expr(self, expr):
        self.resolve(expr.expression)

    def visit_lambda_expr(self, expr):
        self.resolve_function(expr, "FUNCTION")

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_set_expr(self, expr):
        self.resolve(expr.value)
        self.resolve(expr.object)

    def visit_super_expr(self, expr):
        match self.current_class:
            case "NONE":
                self.reporter.token_error(
                    expr.keyword, "Can't use 'super' outside of a class.")
            case "STATIC":
                self.reporter.token_error(
                    expr.keyword, "Can't use 'super' in a static method.")
            case "CLASS":
                self.reporter.token_error(
                    expr.keyword, "Can't use 'super' in a class with no superclass.")
            case _:
                self.resolve_local(expr, expr.keyword)

    def visit_this_expr(self, expr):
        match self.current_class:
            case "NONE":
                self.reporter.token_error(
                    expr.keyword, "Can't use 'this' outside of a class.")
            case "STATIC":
                self.reporter.token_error(
                    expr.keyword, "Can't use 'this' in a static method.")
            case _:
                self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self.resolve(expr.right)

    def visit_variable_expr(self, expr):
        if self.scopes:
            ready = self.scopes[-1].get(expr.name.lexeme)
        else:
            ready = expr.name.lexeme not in self.initializing_globals
        if ready is False:
            self.reporter.token_error(
                expr.name, "Can't read a variable in its own initializer.")
        self.resolve_local(expr, expr.name)

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(
                name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()
        self.current_function = enclosing_function

    def resolve_local(self, expr, name):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return


def resolve(statements, reporter):
    return Resolver(reporter).resolve(statements)
