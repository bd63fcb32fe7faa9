from lox.ast import Expr, Stmt

MAX_ARGUMENTS = 255

STATEMENT_KEYWORDS = {"CLASS", "FUN", "VAR", "FOR", "IF", "WHILE", "PRINT", "RETURN"}


class Parser:
    class Error(RuntimeError):
        pass

    def __init__(self, tokens, reporter):
        self.tokens = tokens
        self.reporter = reporter
        self.current = 0

    def parse(self):
        statements = []
        while not self.at_end():
            try:
                statement = self.declaration()
            except RecursionError:
                # the partial tree is never run once an error is reported
                self.error(self.peek(), "Too much nesting.")
                break
            if statement is not None:
                statements.append(statement)
        return statements

    def declaration(self):
        try:
            if self.match("CLASS"):
                return self.class_declaration()
            if self.peek().type == "FUN" and self.peek_next().type == "IDENTIFIER":
                self.advance()
                return self.function("function")
            if self.match("VAR"):
                return self.var_declaration()
            return self.statement()
        except Parser.Error:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume("IDENTIFIER", "Expected class name.")

        superclass = None
        if self.match("LESS"):
            superclass = Expr.Variable(self.consume(
                "IDENTIFIER", "Expected superclass name."))

        self.consume("LEFT_BRACE", "Expected '{' before class body.")

        methods = []
        static_methods = []
        while not self.at_end() and self.peek().type != "RIGHT_BRACE":
            if self.match("CLASS"):
                static_methods.append(self.function("method"))
            else:
                methods.append(self.function("method"))

        self.consume("RIGHT_BRACE", "Expected '}' after class body.")
        return Stmt.Class(name, superclass, methods, static_methods)

    def function(self, kind):
        name = self.consume("IDENTIFIER", f"Expected {kind} name.")
        self.consume("LEFT_PAREN", f"Expected '(' after {kind} name.")
        params = self.parameters()
        self.consume("LEFT_BRACE", f"Expected '{{' before {kind} body.")
        return Stmt.Function(name, params, self.block())

    def parameters(self):
        params = []
        if self.peek().type != "RIGHT_PAREN":
            params.append(self.consume(
                "IDENTIFIER", "Expected parameter name."))
            while self.match("COMMA"):
                if len(params) >= MAX_ARGUMENTS:
                    self.error(
                        self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(
                    "IDENTIFIER", "Expected parameter name."))
        self.consume("RIGHT_PAREN", "Expected ')' after parameters.")
        return params

    def statement(self):
        if self.match("FOR"):
            return self.for_statement()
        if self.match("IF"):
            return self.if_statement()
        if self.match("PRINT"):
            return self.print_statement()
        if self.match("LEFT_BRACE"):
            return Stmt.Block(self.block())
        if keyword := self.match("RETURN"):
            return self.return_statement(keyword)
        if self.match("WHILE"):
            return self.while_statement()
        return self.expression_statement()

    def block(self):
        statements = []
        while self.peek().type != "RIGHT_BRACE" and not self.at_end():
            if (statement := self.declaration()) is not None:
                statements.append(statement)
        self.consume("RIGHT_BRACE", "Expected '}' after block.")
        return statements

    def for_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'for'.")

        initializer = None
        if self.match("SEMICOLON"):
            pass
        elif self.match("VAR"):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if self.peek().type != "SEMICOLON":
            condition = self.expression()
        self.consume("SEMICOLON", "Expected ';' after loop condition.")

        increment = None
        if self.peek().type != "RIGHT_PAREN":
            increment = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = Stmt.Block([body, Stmt.Expression(increment)])
        if condition is None:
            condition = Expr.Literal(True)
        body = Stmt.While(condition, body)
        if initializer is not None:
            body = Stmt.Block([initializer, body])
        return body

    def if_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'if'.")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after if condition.")
        then_branch = self.statement()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.statement()
        return Stmt.If(condition, then_branch, else_branch)

    def expression_statement(self):
        expression = self.expression()
        self.consume("SEMICOLON", "Expected ';' after expression.")
        return Stmt.Expression(expression)

    def print_statement(self):
        expression = self.expression()
        self.consume("SEMICOLON", "Expected ';' after value.")
        return Stmt.Print(expression)

    def return_statement(self, keyword):
        value = None
        if self.peek().type != "SEMICOLON":
            value = self.expression()
        self.consume("SEMICOLON", "Expected ';' after return value.")
        return Stmt.Return(keyword, value)

    def var_declaration(self):
        name = self.consume("IDENTIFIER", "Expected variable name.")
        initializer = None
        if self.match("EQUAL"):
            initializer = self.expression()
        self.consume("SEMICOLON", "Expected ';' after variable declaration.")
        return Stmt.Var(name, initializer)

    def while_statement(self):
        self.consume("LEFT_PAREN", "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after condition.")
        body = self.statement()
        return Stmt.While(condition, body)

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()
        if equals := self.match("EQUAL"):
            value = self.assignment()
            if isinstance(expr, Expr.Variable):
                return Expr.Assign(expr.name, value)
            elif isinstance(expr, Expr.Get):
                return Expr.Set(expr.object, expr.name, value)
            # reported without unwinding; the parser is not confused
            self.error(equals, "Invalid assignment target.")
        return expr

    def logic_or(self):
        return self.left_associative(Expr.Logical, self.logic_and, "OR")

    def logic_and(self):
        return self.left_associative(Expr.Logical, self.equality, "AND")

    def equality(self):
        return self.left_associative(
            Expr.Binary, self.comparison, "BANG_EQUAL", "EQUAL_EQUAL")

    def comparison(self):
        return self.left_associative(
            Expr.Binary, self.term, "GREATER", "GREATER_EQUAL", "LESS", "LESS_EQUAL")

    def term(self):
        return self.left_associative(Expr.Binary, self.factor, "MINUS", "PLUS")

    def factor(self):
        return self.left_associative(Expr.Binary, self.unary, "SLASH", "STAR")

    def left_associative(self, node, operand, *operators):
        expr = operand()
        while operator := self.match(*operators):
            expr = node(expr, operator, operand())
        return expr

    def unary(self):
        if operator := self.match("BANG", "MINUS"):
            return Expr.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()
        while True:
            if self.match("LEFT_PAREN"):
                expr = self.finish_call(expr)
            elif self.match("DOT"):
                name = self.consume(
                    "IDENTIFIER", "Expected property name after '.'.")
                expr = Expr.Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee):
        arguments = []
        if self.peek().type != "RIGHT_PAREN":
            arguments.append(self.expression())
            while self.match("COMMA"):
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(
                        self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
        paren = self.consume("RIGHT_PAREN", "Expected ')' after arguments.")
        return Expr.Call(callee, paren, arguments)

    def primary(self):
        if self.match("FALSE"):
            return Expr.Literal(False)
        if self.match("TRUE"):
            return Expr.Literal(True)
        if self.match("NIL"):
            return Expr.Literal(None)
        if token := self.match("NUMBER", "STRING"):
            return Expr.Literal(token.literal)
        if self.match("LEFT_PAREN"):
            expr = self.expression()
            self.consume("RIGHT_PAREN", "Expected ')' after expression.")
            return Expr.Grouping(expr)
        if keyword := self.match("FUN"):
            return self.lambda_expression(keyword)
        if keyword := self.match("SUPER"):
            self.consume("DOT", "Expected '.' after 'super'.")
            method = self.consume(
                "IDENTIFIER", "Expected superclass method name.")
            return Expr.Super(keyword, method)
        if keyword := self.match("THIS"):
            return Expr.This(keyword)
        if token := self.match("IDENTIFIER"):
            return Expr.Variable(token)
        raise self.error(self.peek(), "Expected expression.")

    def lambda_expression(self, keyword):
        self.consume("LEFT_PAREN", "Expected '(' after 'fun'.")
        params = self.parameters()
        self.consume("LEFT_BRACE", "Expected '{' before lambda body.")
        return Expr.Lambda(keyword, params, self.block())

    def synchronize(self):
        previous = self.advance()
        while not self.at_end():
            if previous.type == "SEMICOLON":
                return
            if self.peek().type in STATEMENT_KEYWORDS:
                return
            previous = self.advance()

    def consume(self, token_type, message):
        if token := self.match(token_type):
            return token
        raise self.error(self.peek(), message)

    def match(self, *token_types):
        if self.peek().type in token_types:
            return self.advance()
        return None

    def advance(self):
        token = self.peek()
        if not self.at_end():
            self.current += 1
        return token

    def at_end(self):
        return self.peek().type == "EOF"

    def peek(self):
        return self.tokens[self.current]

    def peek_next(self):
        if self.at_end():
            return self.peek()
        return self.tokens[self.current + 1]

    def error(self, token, message):
        self.reporter.token_error(token, message)
        return Parser.Error()


def parse(tokens, reporter):
    return Parser(tokens, reporter).parse()
