"""
Kestrel Programming Language Parser
Precedence-climbing (Pratt) parser producing an AST plus collected syntax errors
"""

from dataclasses import fields, is_dataclass
from enum import IntEnum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from error_handling import KestrelParseError, build_diagnostics
from lexer import Lexer
from syntax import (
    BlockStatement, BooleanLiteral, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, Identifier, IfExpression, InfixExpression, IntegerLiteral,
    LetStatement, Node, PrefixExpression, Program, ReturnStatement, Statement,
    StringLiteral
)
from tokens import Token, TokenType


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # > or <
    SUM = 4          # +
    PRODUCT = 5      # *
    PREFIX = 6       # -X or !X
    CALL = 7         # myFunction(X)


PRECEDENCES = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
}


PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class ParseResult(NamedTuple):
    """Outcome of parsing one source text"""
    program: Program
    errors: List[str]
    diagnostics: List[Dict]

    @property
    def ok(self) -> bool:
        return not self.errors


class Parser:
    """Pratt parser over a token producer (anything with next_token())"""

    def __init__(self, lexer, debug: bool = False):
        self.lexer = lexer
        self.debug = debug
        self.errors: List[str] = []
        self.issues: List[Tuple[str, int]] = []

        # Rule tables belong to this instance only
        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {}
        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {}
        self._register_rules()

        self.cur_token: Token = Token(TokenType.ILLEGAL, "")
        self.peek_token: Token = Token(TokenType.ILLEGAL, "")
        self.advance()
        self.advance()

    def _register_rules(self):
        """Setup the prefix and infix rule tables"""
        self.register_prefix(TokenType.IDENT, self.parse_identifier)
        self.register_prefix(TokenType.INT, self.parse_integer_literal)
        self.register_prefix(TokenType.STRING, self.parse_string_literal)
        self.register_prefix(TokenType.TRUE, self.parse_boolean)
        self.register_prefix(TokenType.FALSE, self.parse_boolean)
        self.register_prefix(TokenType.BANG, self.parse_prefix_expression)
        self.register_prefix(TokenType.MINUS, self.parse_prefix_expression)
        self.register_prefix(TokenType.LPAREN, self.parse_grouped_expression)
        self.register_prefix(TokenType.IF, self.parse_if_expression)
        self.register_prefix(TokenType.FUNCTION, self.parse_function_literal)

        for operator in (TokenType.PLUS, TokenType.MINUS, TokenType.SLASH, TokenType.ASTERISK,
                         TokenType.EQ, TokenType.NOT_EQ, TokenType.LT, TokenType.GT):
            self.register_infix(operator, self.parse_infix_expression)
        self.register_infix(TokenType.LPAREN, self.parse_call_expression)

    def register_prefix(self, token_type: TokenType, fn: PrefixParseFn):
        self.prefix_parse_fns[token_type] = fn

    def register_infix(self, token_type: TokenType, fn: InfixParseFn):
        self.infix_parse_fns[token_type] = fn

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def advance(self):
        """Shift the lookahead into current and pull a fresh lookahead"""
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, token_type: TokenType) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> bool:
        """Advance if the lookahead matches, otherwise record an error"""
        if self.peek_token_is(token_type):
            self.advance()
            return True
        self.peek_error(token_type)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _error(self, message: str, token: Token):
        self.errors.append(message)
        self.issues.append((message, token.offset))

    def peek_error(self, token_type: TokenType):
        self._error(f"Expected '{token_type}' got {self.peek_token.type}", self.peek_token)

    def no_prefix_parse_fn_error(self, token_type: TokenType):
        self._error(f"No prefix parse function found for {token_type}", self.cur_token)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF, skipping any that fail"""
        statements = []
        while not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.advance()
        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        if self.debug:
            print(f"Parsing statement: {self.cur_token}")

        if self.cur_token.type == TokenType.LET:
            return self.parse_let_statement()
        elif self.cur_token.type == TokenType.RETURN:
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token

        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)

        if not self.expect_peek(TokenType.ASSIGN):
            return None
        self.advance()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.advance()
        return LetStatement(token, name, value)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        token = self.cur_token
        self.advance()

        return_value = self.parse_expression(Precedence.LOWEST)
        if return_value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.advance()
        return ReturnStatement(token, return_value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        token = self.cur_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.advance()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> BlockStatement:
        """Parse statements up to the closing brace or EOF"""
        token = self.cur_token
        statements = []
        self.advance()

        while not self.cur_token_is(TokenType.RBRACE) and not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.advance()

        return BlockStatement(token, tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        """Precedence climbing: fold infix rules while they bind tighter"""
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None

        left = prefix()
        if left is None:
            return None

        while not self.peek_token_is(TokenType.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.advance()
            left = infix(left)
            if left is None:
                return None

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[Expression]:
        try:
            value = int(self.cur_token.literal)
        except ValueError:
            self._error(f"Invalid literal '{self.cur_token.literal}': expecting 'int'", self.cur_token)
            return None
        return IntegerLiteral(self.cur_token, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Optional[Expression]:
        token = self.cur_token
        self.advance()

        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(token, token.literal, right)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        precedence = self.cur_precedence()
        self.advance()

        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(token, left, token.literal, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.advance()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None
        self.advance()

        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None
        if not self.expect_peek(TokenType.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.advance()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()

        return IfExpression(token, condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()

        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> Optional[Tuple[Identifier, ...]]:
        """Comma-separated identifiers up to ')'; the empty list is allowed"""
        identifiers = []

        if self.peek_token_is(TokenType.RPAREN):
            self.advance()
            return ()

        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        while self.peek_token_is(TokenType.COMMA):
            self.advance()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        token = self.cur_token

        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(token, function, arguments)

    def parse_call_arguments(self) -> Optional[Tuple[Expression, ...]]:
        """Comma-separated expressions up to ')'; the empty list is allowed"""
        args = []

        if self.peek_token_is(TokenType.RPAREN):
            self.advance()
            return ()

        self.advance()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)

        while self.peek_token_is(TokenType.COMMA):
            self.advance()
            self.advance()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return tuple(args)


# ============================================================================
# ENTRY POINTS
# ============================================================================

def parse(source: str, debug: bool = False) -> ParseResult:
    """Parse source text into a program and its syntax errors"""
    parser = Parser(Lexer(source), debug=debug)
    program = parser.parse_program()
    return ParseResult(program, parser.errors, build_diagnostics(source, parser.issues))


def parse_or_raise(source: str, filename: str = "<input>", debug: bool = False) -> Program:
    """Parse source text, raising KestrelParseError if any syntax error was found"""
    result = parse(source, debug=debug)
    if not result.ok:
        raise KestrelParseError(result.diagnostics, filename)
    return result.program


class KestrelParser:
    """Main Kestrel parser front end"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_file(self, filepath: str) -> Program:
        """Parse a Kestrel source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return parse_or_raise(content, filepath, self.debug)

    def parse_string(self, text: str) -> ParseResult:
        """Parse Kestrel source code from string"""
        return parse(text, self.debug)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> KestrelParser:
    """Create a Kestrel parser"""
    return KestrelParser(debug=debug)


def create_debug_parser() -> KestrelParser:
    """Create a Kestrel parser with debug enabled"""
    return KestrelParser(debug=True)


# Utility functions for working with the AST
def find_nodes_by_type(root: Node, node_type: type) -> List[Node]:
    """Find all nodes of a specific class in the tree"""
    result = []

    def search(node: Node):
        if isinstance(node, node_type):
            result.append(node)
        for child in _children(node):
            search(child)

    search(root)
    return result


def _children(node: Node) -> List[Node]:
    children = []
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, tuple):
            children.extend(v for v in value if isinstance(v, Node))
        elif isinstance(value, Node):
            children.append(value)
    return children


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    result = "  " * indent + type(node).__name__
    if is_dataclass(node):
        scalars = [
            f"{f.name}={getattr(node, f.name)!r}" for f in fields(node)
            if f.name != 'token' and not isinstance(getattr(node, f.name), (Node, tuple))
        ]
        if scalars:
            result += f"({', '.join(scalars)})"
    result += "\n"

    for child in _children(node):
        result += pretty_print_ast(child, indent + 1)

    return result
