"""Runtime scopes. An Environment maps names to values and points at its enclosing Environment; the globals are the
Environment without one. Blocks and function calls each get a fresh Environment, and every function keeps a reference
to the Environment it was declared in (its closure), so one Environment can be shared by a function value and all of
its activations.
"""

from hezarfen.lang.error import RuntimeException


class Environment:
    """Chained symbol table. Lookups and assignments walk outwards; definitions always land in this Environment."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this Environment, shadowing any outer binding. Redefinition is allowed."""
        self.values[name] = value

    def get(self, name):
        """Returns the value bound to the name token in the nearest Environment that has it."""
        owner = self.find_owner(name.lexeme)
        if owner is None:
            raise RuntimeException(name, f"Undefined variable '{name.lexeme}'.")
        return owner.values[name.lexeme]

    def assign(self, name, value):
        """Rebinds the name token in the nearest Environment that already has it. Never creates a binding."""
        owner = self.find_owner(name.lexeme)
        if owner is None:
            raise RuntimeException(name, f"Undefined variable '{name.lexeme}'.")
        owner.values[name.lexeme] = value

    def find_owner(self, key):
        """Finds the Environment in the chain (self -> enclosing -> ...) that binds key, or None."""
        environment = self
        while environment is not None:
            if key in environment.values:
                return environment
            environment = environment.enclosing
        return None

    def __contains__(self, key):
        return self.find_owner(key) is not None

    def __repr__(self):
        depth = 0
        environment = self.enclosing
        while environment is not None:
            depth += 1
            environment = environment.enclosing
        return f"Environment(names={sorted(self.values)}, depth={depth})"
