"""
Kestrel lexer
Pull-based tokenizer: each call to next_token() yields exactly one token
"""

from typing import Iterator, List

from tokens import SINGLE_CHAR_TOKENS, Token, TokenType, lookup_ident


# Marks the cursor running past the end of input
EOF_CHAR = "\0"


def is_letter(ch: str) -> bool:
    """ASCII letters and underscore start and continue identifiers"""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Kestrel tokenizer over a single source string"""

    def __init__(self, source: str):
        self.source = source
        self.position = 0        # offset of self.ch
        self.read_position = 0   # offset of the next character to read
        self.ch = EOF_CHAR
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including EOF"""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Produce the next token; EOF repeats once input is exhausted"""
        self._skip_whitespace()

        start = self.position
        ch = self.ch

        if ch == "=":
            if self._peek_char() == "=":
                self._read_char()
                tok = Token(TokenType.EQ, "==", start)
            else:
                tok = Token(TokenType.ASSIGN, ch, start)
        elif ch == "!":
            if self._peek_char() == "=":
                self._read_char()
                tok = Token(TokenType.NOT_EQ, "!=", start)
            else:
                tok = Token(TokenType.BANG, ch, start)
        elif ch == '"':
            return self._read_string()
        elif ch in SINGLE_CHAR_TOKENS:
            tok = Token(SINGLE_CHAR_TOKENS[ch], ch, start)
        elif ch == EOF_CHAR and self.position >= len(self.source):
            return Token(TokenType.EOF, "", len(self.source))
        elif is_letter(ch):
            literal = self._read_while(is_letter)
            return Token(lookup_ident(literal), literal, start)
        elif is_digit(ch):
            return Token(TokenType.INT, self._read_while(is_digit), start)
        else:
            tok = Token(TokenType.ILLEGAL, ch, start)

        self._read_char()
        return tok

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _read_char(self):
        if self.read_position >= len(self.source):
            self.ch = EOF_CHAR
            self.position = len(self.source)
        else:
            self.ch = self.source[self.read_position]
            self.position = self.read_position
            self.read_position += 1

    def _peek_char(self) -> str:
        if self.read_position >= len(self.source):
            return EOF_CHAR
        return self.source[self.read_position]

    def _skip_whitespace(self):
        while self.ch in (" ", "\t", "\n", "\r"):
            self._read_char()

    def _read_while(self, predicate) -> str:
        """Greedily consume characters matching predicate"""
        start = self.position
        while self.position < len(self.source) and predicate(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_string(self) -> Token:
        """Consume a double-quoted literal; unterminated strings are ILLEGAL"""
        start = self.position
        self._read_char()  # opening quote
        body_start = self.position

        while self.position < len(self.source) and self.ch != '"':
            self._read_char()

        if self.position >= len(self.source):
            return Token(TokenType.ILLEGAL, self.source[start:], start)

        literal = self.source[body_start:self.position]
        self._read_char()  # closing quote
        return Token(TokenType.STRING, literal, start)


def tokenize(source: str) -> Lexer:
    """Create a token producer for source"""
    return Lexer(source)


def tokenize_all(source: str) -> List[Token]:
    """Eagerly collect every token including the trailing EOF"""
    return list(Lexer(source))
