"""Parenthesized prefix rendering of syntax trees, for debugging (--ast) and for checking the parser's precedence and
associativity in tests.

Format:
    -123 * (45.67)        ->  (* (- 123) (group 45.67))
    a = b ? 1 : 2         ->  (= a (?: b 1 2))
    var a = 1;            ->  (var a 1)
    fun f(x) { return x; } -> (fun f (x) (return x))
"""

from hezarfen.core.interpreter import Interpreter
from hezarfen.core.syntax import ExprVisitor, StmtVisitor


class AstPrinter(ExprVisitor, StmtVisitor):
    """Renders expressions and statements. Stateless, so one instance can be reused."""

    def print(self, node):
        return node.accept(self)

    def parenthesize(self, name, *parts):
        """parts may be nodes (rendered recursively) or plain strings."""
        rendered = [name]
        for part in parts:
            rendered.append(part if isinstance(part, str) else part.accept(self))
        return "(" + " ".join(rendered) + ")"

    def visit_literal_expr(self, expr):
        if isinstance(expr.value, str):
            return f"\"{expr.value}\""
        return Interpreter.stringify(expr.value)

    def visit_grouping_expr(self, expr):
        return self.parenthesize("group", expr.expression)

    def visit_unary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_binary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_logical_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_ternary_expr(self, expr):
        return self.parenthesize("?:", expr.condition, expr.then_branch, expr.else_branch)

    def visit_variable_expr(self, expr):
        return expr.name.lexeme

    def visit_assign_expr(self, expr):
        return self.parenthesize("=", expr.name.lexeme, expr.value)

    def visit_call_expr(self, expr):
        return self.parenthesize("call", expr.callee, *expr.arguments)

    def visit_expression_stmt(self, stmt):
        return self.parenthesize(";", stmt.expression)

    def visit_print_stmt(self, stmt):
        return self.parenthesize("print", stmt.expression)

    def visit_var_stmt(self, stmt):
        if stmt.initializer is None:
            return self.parenthesize("var", stmt.name.lexeme)
        return self.parenthesize("var", stmt.name.lexeme, stmt.initializer)

    def visit_block_stmt(self, stmt):
        return self.parenthesize("block", *stmt.statements)

    def visit_if_stmt(self, stmt):
        if stmt.else_branch is None:
            return self.parenthesize("if", stmt.condition, stmt.then_branch)
        return self.parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_while_stmt(self, stmt):
        return self.parenthesize("while", stmt.condition, stmt.body)

    def visit_function_stmt(self, stmt):
        params = "(" + " ".join(param.lexeme for param in stmt.params) + ")"
        return self.parenthesize("fun", stmt.name.lexeme, params, *stmt.body)

    def visit_return_stmt(self, stmt):
        if stmt.value is None:
            return self.parenthesize("return")
        return self.parenthesize("return", stmt.value)
