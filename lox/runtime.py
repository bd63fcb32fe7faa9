import time

from lox.ast import Expr
from lox.environment import Environment
from lox.errors import LoxRuntimeError


class LoxCallable:
    def arity(self):
        raise NotImplementedError()

    def call(self, interpreter, arguments):
        raise NotImplementedError()


class NativeFunction(LoxCallable):
    def __init__(self, arity, function):
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    """A function declaration, method or lambda closed over its defining frame."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance):
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        signal = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if signal is not None:
            return signal.value
        return None

    def __str__(self):
        if isinstance(self.declaration, Expr.Lambda):
            return "<fn lambda>"
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    def __init__(self, name, superclass, methods, static_methods=None):
        self.name = name
        self.superclass = superclass
        self.methods = methods
        self.static_methods = static_methods or {}

    def arity(self):
        if initializer := self.find_method("init"):
            return initializer.arity()
        return 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        if initializer := self.find_method("init"):
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def find_method(self, name):
        if method := self.methods.get(name):
            return method
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def find_static_method(self, name):
        if method := self.static_methods.get(name):
            return method
        if self.superclass is not None:
            return self.superclass.find_static_method(name)
        return None

    def get(self, name):
        if method := self.find_static_method(name.lexeme):
            return method
        raise LoxRuntimeError(
            name, f"Undefined static method '{name.lexeme}'.")

    def __str__(self):
        return self.name


class LoxInstance:
    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        if method := self.klass.find_method(name.lexeme):
            return method.bind(self)
        raise LoxRuntimeError(
            name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"


def clock():
    return time.time()


NATIVES = {
    "clock": NativeFunction(0, clock),
}
