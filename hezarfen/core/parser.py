"""Recursive descent parser for the Hezarfen language. Turns the scanner's tokens into a list of statements.

Grammar, from the top (lowest precedence first for expressions):

```
program     ::= declaration* EOF
declaration ::= "fun" function | "var" varDecl | statement
function    ::= IDENTIFIER "(" parameters? ")" block
parameters  ::= IDENTIFIER ( "," IDENTIFIER )*                  ; at most 255
varDecl     ::= IDENTIFIER ( "=" expression )? ";"
statement   ::= exprStmt | forStmt | ifStmt | printStmt | returnStmt | whileStmt | block
exprStmt    ::= expression ";"
forStmt     ::= "for" "(" ( varDecl | exprStmt | ";" ) expression? ";" expression? ")" statement
ifStmt      ::= "if" "(" expression ")" statement ( "else" statement )?
printStmt   ::= "print" expression ";"
returnStmt  ::= "return" expression? ";"
whileStmt   ::= "while" "(" expression ")" statement
block       ::= "{" declaration* "}"

expression  ::= assignment
assignment  ::= IDENTIFIER "=" assignment | series
series      ::= conditional ( "," conditional )*
conditional ::= logic_or ( "?" expression ":" conditional )?     ; right-associative
logic_or    ::= logic_and ( "or" logic_and )*
logic_and   ::= equality ( "and" equality )*
equality    ::= comparison ( ( "!=" | "==" ) comparison )*
comparison  ::= term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        ::= factor ( ( "-" | "+" ) factor )*
factor      ::= unary ( ( "/" | "*" ) unary )*
unary       ::= ( "!" | "-" ) unary | call
call        ::= primary ( "(" arguments? ")" )*
arguments   ::= argument ( "," argument )*                      ; at most 255
argument    ::= IDENTIFIER "=" argument | conditional           ; no series, "," separates arguments
primary     ::= "true" | "false" | "nil" | NUMBER | STRING | IDENTIFIER | "(" expression ")"
```

'for' loops have no node of their own: they are rewritten into Block/While while parsing.
"""

from hezarfen.core.syntax import (
    Assign, Binary, Block, Call, Expression, Function, Grouping, If, Literal, Logical, Print, Return, Ternary, Unary,
    Var, Variable, While
)
from hezarfen.core.tokens import TokenType
from hezarfen.lang.error import ParseError


class Parser:
    """Parses one token list. A syntax error only discards the statement it occurs in: the parser reports it,
    synchronizes to the next statement boundary and keeps going, so that as many errors as possible are reported at once.
    """
    MAX_ARGS = 255
    SYNC_KEYWORDS = {
        TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR, TokenType.IF, TokenType.WHILE, TokenType.PRINT,
        TokenType.RETURN
    }

    def __init__(self, tokens, error_handler, interactive=False):
        self.tokens = tokens
        self.error_handler = error_handler
        self.interactive = interactive  # if True, a trailing expression without ";" is printed

        self.current = 0
        self.function_depth = 0  # > 0 while parsing a function body
        self.had_error = False

    def parse(self):
        """Parses every statement. Check had_error (or the error handler) before running the result."""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # -----------------------------------------------------------------------------------------------------------------
    # statements
    # -----------------------------------------------------------------------------------------------------------------

    def declaration(self):
        """Returns None if the declaration was malformed (after reporting and synchronizing)."""
        try:
            if self.match(TokenType.FUN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def function(self, kind):
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.function_depth -= 1

        return Function(name, params, body)

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """Desugars for (init; cond; incr) body into { init; while (cond) { body; incr; } }."""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = Block([body, Expression(increment)])
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block([initializer, body])

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):  # dangling else binds to the nearest if
            else_branch = self.statement()

        return If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def return_statement(self):
        keyword = self.previous()
        if self.function_depth == 0:
            self.error(keyword, "Can't return from top-level code.")

        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.statement()

        return While(condition, body)

    def block(self):
        """Parses declarations up to the closing '}'. Assumes the opening '{' has been consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expr = self.expression()

        if self.interactive and self.is_at_end():
            return Print(expr)

        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    # -----------------------------------------------------------------------------------------------------------------
    # expressions
    # -----------------------------------------------------------------------------------------------------------------

    def expression(self):
        return self.assignment()

    def assignment(self):
        return self._assignment(self.series)

    def argument(self):
        """Like assignment, but stops below the comma series so that ',' can separate call arguments."""
        return self._assignment(self.conditional)

    def _assignment(self, operand):
        expr = operand()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self._assignment(operand)  # right-associative

            if isinstance(expr, Variable):
                return Assign(expr.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, but no need to synchronize

        return expr

    def series(self):
        return self._left_associative(Binary, self.conditional, TokenType.COMMA)

    def conditional(self):
        expr = self.logic_or()

        if self.match(TokenType.QUESTION):
            question = self.previous()
            then_branch = self.expression()
            self.consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self.conditional()
            expr = Ternary(question, expr, then_branch, else_branch)

        return expr

    def logic_or(self):
        return self._left_associative(Logical, self.logic_and, TokenType.OR)

    def logic_and(self):
        return self._left_associative(Logical, self.equality, TokenType.AND)

    def equality(self):
        return self._left_associative(Binary, self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self._left_associative(
            Binary, self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL
        )

    def term(self):
        return self._left_associative(Binary, self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self._left_associative(Binary, self.unary, TokenType.SLASH, TokenType.STAR)

    def _left_associative(self, node_cls, operand, *types):
        """Parses operand ( <types> operand )* into a left-leaning tree of node_cls."""
        expr = operand()

        while self.match(*types):
            operator = self.previous()
            right = operand()
            expr = node_cls(expr, operator, right)

        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return Unary(operator, right)

        return self.call()

    def call(self):
        expr = self.primary()

        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self.argument())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenType.FALSE):
            return Literal(False)
        if self.match(TokenType.TRUE):
            return Literal(True)
        if self.match(TokenType.NIL):
            return Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self.previous().literal)

        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # -----------------------------------------------------------------------------------------------------------------
    # token helpers
    # -----------------------------------------------------------------------------------------------------------------

    def match(self, *types):
        """Consumes the next token if it has one of types."""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type, message):
        """Consumes and returns the next token, which must have token_type."""
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def check(self, token_type):
        if self.is_at_end():
            return False
        return self.peek().type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Reports a syntax error and returns (does not raise) the ParseError, so callers decide whether to unwind."""
        self.error_handler.error(token, message)
        self.had_error = True
        return ParseError(message, token)

    def synchronize(self):
        """Discards tokens until the start of what is probably the next statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.SYNC_KEYWORDS:
                return
            self.advance()
