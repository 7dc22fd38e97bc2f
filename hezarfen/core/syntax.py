"""Abstract syntax tree for the Hezarfen language.

There are two closed families of nodes: expressions (produce values) and statements (produce effects). Each node only
holds its own fields and dispatches to a visitor through accept, so the parser, the interpreter and the printer can walk
the same tree without the nodes knowing about any of them.

Nodes compare equal field by field, which makes whole trees comparable in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from hezarfen.core.tokens import Token


class ExprVisitor(ABC):
    """Visitor over every expression node."""

    @abstractmethod
    def visit_literal_expr(self, expr): ...

    @abstractmethod
    def visit_grouping_expr(self, expr): ...

    @abstractmethod
    def visit_unary_expr(self, expr): ...

    @abstractmethod
    def visit_binary_expr(self, expr): ...

    @abstractmethod
    def visit_logical_expr(self, expr): ...

    @abstractmethod
    def visit_ternary_expr(self, expr): ...

    @abstractmethod
    def visit_variable_expr(self, expr): ...

    @abstractmethod
    def visit_assign_expr(self, expr): ...

    @abstractmethod
    def visit_call_expr(self, expr): ...


class StmtVisitor(ABC):
    """Visitor over every statement node."""

    @abstractmethod
    def visit_expression_stmt(self, stmt): ...

    @abstractmethod
    def visit_print_stmt(self, stmt): ...

    @abstractmethod
    def visit_var_stmt(self, stmt): ...

    @abstractmethod
    def visit_block_stmt(self, stmt): ...

    @abstractmethod
    def visit_if_stmt(self, stmt): ...

    @abstractmethod
    def visit_while_stmt(self, stmt): ...

    @abstractmethod
    def visit_function_stmt(self, stmt): ...

    @abstractmethod
    def visit_return_stmt(self, stmt): ...


class Expr(ABC):
    """Superclass of all expression nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Calls the visit method of visitor that matches this node and returns its result."""


class Stmt(ABC):
    """Superclass of all statement nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Calls the visit method of visitor that matches this node and returns its result."""


# ---------------------------------------------------------------------------------------------------------------------
# expressions
# ---------------------------------------------------------------------------------------------------------------------

@dataclass
class Literal(Expr):
    value: object  # None, bool, float or str

    def accept(self, visitor):
        return visitor.visit_literal_expr(self)


@dataclass
class Grouping(Expr):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_grouping_expr(self)


@dataclass
class Unary(Expr):
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_unary_expr(self)


@dataclass
class Binary(Expr):
    """Arithmetic, comparison, equality and comma-series operators."""
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_binary_expr(self)


@dataclass
class Logical(Expr):
    """Short-circuiting 'and'/'or'."""
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_logical_expr(self)


@dataclass
class Ternary(Expr):
    """condition ? then_branch : else_branch. operator is the '?' token."""
    operator: Token
    condition: Expr
    then_branch: Expr
    else_branch: Expr

    def accept(self, visitor):
        return visitor.visit_ternary_expr(self)


@dataclass
class Variable(Expr):
    name: Token

    def accept(self, visitor):
        return visitor.visit_variable_expr(self)


@dataclass
class Assign(Expr):
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_assign_expr(self)


@dataclass
class Call(Expr):
    """paren is the closing ')' token, kept for error locations."""
    callee: Expr
    paren: Token
    arguments: List[Expr]

    def accept(self, visitor):
        return visitor.visit_call_expr(self)


# ---------------------------------------------------------------------------------------------------------------------
# statements
# ---------------------------------------------------------------------------------------------------------------------

@dataclass
class Expression(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_expression_stmt(self)


@dataclass
class Print(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_print_stmt(self)


@dataclass
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]

    def accept(self, visitor):
        return visitor.visit_var_stmt(self)


@dataclass
class Block(Stmt):
    statements: List[Stmt]

    def accept(self, visitor):
        return visitor.visit_block_stmt(self)


@dataclass
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]

    def accept(self, visitor):
        return visitor.visit_if_stmt(self)


@dataclass
class While(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor):
        return visitor.visit_while_stmt(self)


@dataclass
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]

    def accept(self, visitor):
        return visitor.visit_function_stmt(self)


@dataclass
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]

    def accept(self, visitor):
        return visitor.visit_return_stmt(self)
