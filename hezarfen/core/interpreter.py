"""Tree-walking interpreter for the Hezarfen language.

Runtime values map onto Python values:

```
nil      -> None
boolean  -> bool
number   -> float
string   -> str
callable -> HezarfenCallable
```

Expressions evaluate to values. Statements evaluate to None, or to a ReturnValue when a 'return' was executed: blocks,
loops and ifs pass a ReturnValue straight up without running anything else, and HezarfenFunction.call unwraps it.
Variables are looked up at run time by walking the Environment chain.
"""

import math
import sys

from hezarfen.core.callable import NATIVES, HezarfenCallable, HezarfenFunction, ReturnValue
from hezarfen.core.environment import Environment
from hezarfen.core.syntax import ExprVisitor, StmtVisitor
from hezarfen.core.tokens import TokenType
from hezarfen.lang.error import RuntimeException

# every Hezarfen call takes about a dozen Python frames
RECURSION_LIMIT = 10000
sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))


class Interpreter(ExprVisitor, StmtVisitor):
    """Runs statements against its own globals. Use a fresh Interpreter per independent program."""

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out  # where 'print' writes; None means sys.stdout at the time of printing

        self.globals = Environment()
        self.environment = self.globals  # innermost Environment of the code being run

        for native in NATIVES:
            self.globals.define(native.name, native)

    def interpret(self, statements):
        """Runs statements in order. The first runtime error is reported and stops the run."""
        try:
            for statement in statements:
                self.execute(statement)
        except RuntimeException as error:
            self.error_handler.runtime_error(error)

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        """Runs statements in environment, then restores the previous Environment whatever happens. Returns the
        ReturnValue of a 'return' executed inside, if any.
        """
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                outcome = self.execute(statement)
                if outcome is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    # -----------------------------------------------------------------------------------------------------------------
    # statements
    # -----------------------------------------------------------------------------------------------------------------

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_print_stmt(self, stmt):
        value = self.evaluate(stmt.expression)
        print(Interpreter.stringify(value), file=self.out if self.out is not None else sys.stdout)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)  # before define: 'var x = x;' reads an outer x
        self.environment.define(stmt.name.lexeme, value)

    def visit_block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_if_stmt(self, stmt):
        if Interpreter.is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            return self.execute(stmt.else_branch)

    def visit_while_stmt(self, stmt):
        while Interpreter.is_truthy(self.evaluate(stmt.condition)):
            outcome = self.execute(stmt.body)
            if outcome is not None:
                return outcome

    def visit_function_stmt(self, stmt):
        function = HezarfenFunction(stmt, self.environment)
        self.environment.define(stmt.name.lexeme, function)

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnValue(value)

    # -----------------------------------------------------------------------------------------------------------------
    # expressions
    # -----------------------------------------------------------------------------------------------------------------

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.BANG:
            return not Interpreter.is_truthy(right)

        # TokenType.MINUS
        Interpreter.check_number_operand(expr.operator, right)
        return -right

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        op_type = operator.type

        if op_type is TokenType.COMMA:
            return right

        if op_type is TokenType.EQUAL_EQUAL:
            return Interpreter.is_equal(left, right)
        if op_type is TokenType.BANG_EQUAL:
            return not Interpreter.is_equal(left, right)

        if op_type is TokenType.PLUS:
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            if Interpreter.is_number(left) and Interpreter.is_number(right):
                return left + right
            if isinstance(left, str) and Interpreter.is_number(right):
                return left + Interpreter.stringify(right)
            if Interpreter.is_number(left) and isinstance(right, str):
                return Interpreter.stringify(left) + right
            raise RuntimeException(operator, "Operands must be two numbers or two strings.")

        Interpreter.check_number_operands(operator, left, right)

        if op_type is TokenType.MINUS:
            return left - right
        if op_type is TokenType.STAR:
            return left * right
        if op_type is TokenType.SLASH:
            return Interpreter.divide(left, right)
        if op_type is TokenType.GREATER:
            return left > right
        if op_type is TokenType.GREATER_EQUAL:
            return left >= right
        if op_type is TokenType.LESS:
            return left < right
        if op_type is TokenType.LESS_EQUAL:
            return left <= right

        raise RuntimeException(operator, f"Unknown binary operator '{operator.lexeme}'.")

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.type is TokenType.OR:
            if Interpreter.is_truthy(left):
                return left
        elif not Interpreter.is_truthy(left):  # TokenType.AND
            return left

        return self.evaluate(expr.right)

    def visit_ternary_expr(self, expr):
        # all three operands are evaluated before choosing, so side effects of both branches happen
        condition = self.evaluate(expr.condition)
        then_value = self.evaluate(expr.then_branch)
        else_value = self.evaluate(expr.else_branch)

        return then_value if Interpreter.is_truthy(condition) else else_value

    def visit_variable_expr(self, expr):
        return self.environment.get(expr.name)

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)
        self.environment.assign(expr.name, value)
        return value

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, HezarfenCallable):
            raise RuntimeException(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise RuntimeException(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise RuntimeException(expr.paren, "Stack overflow.")

    # -----------------------------------------------------------------------------------------------------------------
    # value helpers
    # -----------------------------------------------------------------------------------------------------------------

    @staticmethod
    def is_truthy(value):
        """nil and false are falsy, everything else (0 and "" included) is truthy."""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    @staticmethod
    def is_equal(a, b):
        """Never fails. Values of different types are never equal, so true != 1. Numbers compare by identity of
        value: NaN equals NaN, and 0 and -0 differ.
        """
        if a is None and b is None:
            return True
        if a is None:
            return False
        if type(a) is not type(b):
            return False
        if isinstance(a, float):
            if math.isnan(a) or math.isnan(b):
                return math.isnan(a) and math.isnan(b)
            return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
        return a == b

    @staticmethod
    def is_number(value):
        return isinstance(value, float)

    @staticmethod
    def check_number_operand(operator, operand):
        if not Interpreter.is_number(operand):
            raise RuntimeException(operator, "Operand must be a number.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if not (Interpreter.is_number(left) and Interpreter.is_number(right)):
            raise RuntimeException(operator, "Operands must be numbers.")

    @staticmethod
    def divide(left, right):
        """IEEE-754 division: x / 0 is +-Infinity, 0 / 0 is NaN."""
        try:
            return left / right
        except ZeroDivisionError:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)

    @staticmethod
    def stringify(value):
        """Text shown by 'print'. Integral numbers below 1e21 are written out in full without a fraction, and -0 prints
        as 0.
        """
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if math.isnan(value):
                return "NaN"
            if math.isinf(value):
                return "Infinity" if value > 0 else "-Infinity"
            if value.is_integer() and abs(value) < 1e21:
                return "%d" % value
            return repr(value)
        return str(value)
