"""Lexical analysis for the Hezarfen language. Converts source text into a list of Tokens without any knowledge of the
grammar.

Lexical grammar, loosely:

```
<number>     ::= <digit>+ ( "." <digit>+ )?     ; "1." is NUMBER(1) followed by DOT
<string>     ::= '"' <char except '"'>* '"'     ; may span lines, no escapes
<identifier> ::= <alpha> ( <alpha> | <digit> )* ; <alpha> is [a-zA-Z_]; reserved words become keywords
<comment>    ::= "//" <char>* "\n"
               | "/*" <char>* "*/"              ; not nested
```

Scanning never fails: bad characters and unterminated strings/comments are reported to the error handler and skipped.
"""

from hezarfen.core.tokens import DOUBLES, KEYWORDS, SINGLES, Token, TokenType


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Scanner:
    """Single-pass scanner with one character of lookahead (peek, peek_next)."""
    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # first character of the lexeme being scanned
        self.current = 0  # character about to be considered
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source. The returned list always ends with an EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in SINGLES:
            self.add_token(SINGLES[char])

        elif char in DOUBLES:
            alone, with_equal = DOUBLES[char]
            self.add_token(with_equal if self.match("=") else alone)

        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():  # comment goes until the end of the line
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)

        elif char in Scanner.WHITESPACE:
            pass

        elif char == "\n":
            self.line += 1

        elif char == "\"":
            self.string()

        elif is_digit(char):
            self.number()

        elif is_alpha(char):
            self.identifier()

        else:
            self.error_handler.report(self.line, "", f"Unexpected character '{char}'.")

    def block_comment(self):
        """Consumes everything up to and including the closing '*/', counting newlines on the way."""
        while not self.is_at_end():
            if self.peek() == "*" and self.peek_next() == "/":
                self.advance()
                self.advance()
                return
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        self.error_handler.report(self.line, "", "Unterminated block comment.")

    def string(self):
        while self.peek() != "\"" and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error_handler.report(self.line, "", "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        # a fractional part needs at least one digit after the "."
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def match(self, expected):
        """Consumes the next character only if it is expected."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        if self.is_at_end():
            return "\0"
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def advance(self):
        self.current += 1
        return self.source[self.current - 1]

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))

    def is_at_end(self):
        return self.current >= len(self.source)
