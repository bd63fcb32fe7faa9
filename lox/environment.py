from lox.errors import LoxRuntimeError


class Environment:
    """One frame of the scope chain.

    Frames are shared by reference: a closure keeps its defining frame alive
    for as long as the closure itself is reachable.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        self.values[name] = value

    def assign(self, name, value):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise LoxRuntimeError(
            name, f"Undefined variable '{name.lexeme}'.")

    def get(self, name):
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise LoxRuntimeError(
            name, f"Undefined variable '{name.lexeme}'.")

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name] = value
        return value

    def get_at(self, distance, name):
        return self.ancestor(distance).values[name]

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment
