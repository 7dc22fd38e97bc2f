"""Callable values: anything that can appear to the left of "(...)" in a Hezarfen program."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from hezarfen.core.environment import Environment


@dataclass
class ReturnValue:
    """Outcome of a statement that executed a 'return'. Statements hand it up until the enclosing call unwraps it,
    which keeps returns out of the error channel altogether.
    """
    value: object


class HezarfenCallable(ABC):
    """Capability shared by native and user-defined functions."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Runs this callable with already-evaluated arguments. Assumes len(arguments) == arity()."""


class NativeFunction(HezarfenCallable):
    """Function implemented in Python, e.g. clock."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"

    def __repr__(self):
        return f"NativeFunction('{self.name}')"


class HezarfenFunction(HezarfenCallable):
    """Function declared in a Hezarfen program, closing over the Environment it was declared in."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        """Binds the arguments in a new Environment under the closure (not the caller's Environment) and runs the
        body there. Falling off the end of the body returns nil.
        """
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        outcome = interpreter.execute_block(self.declaration.body, environment)
        if isinstance(outcome, ReturnValue):
            return outcome.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"HezarfenFunction('{self.declaration.name.lexeme}')"


def clock():
    """Seconds since the epoch, as a Number."""
    return float(time.time())


NATIVES = [
    NativeFunction("clock", 0, clock),
]
