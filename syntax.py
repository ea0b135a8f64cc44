"""
Kestrel abstract syntax tree
Immutable node catalogue built by the parser and read by the interpreter
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from tokens import Token


class Node:
    """Base for every AST node"""
    token: Token

    def token_literal(self) -> str:
        """Literal text of the token the node began with"""
        return self.token.literal

    def as_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.as_string()


class Statement(Node):
    pass


class Expression(Node):
    pass


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    token: Token
    value: str

    def as_string(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    token: Token
    value: int

    def as_string(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    token: Token
    value: bool

    def as_string(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class StringLiteral(Expression):
    token: Token
    value: str

    def as_string(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class PrefixExpression(Expression):
    token: Token
    operator: str
    right: Expression

    def as_string(self) -> str:
        return f"({self.operator}{self.right.as_string()})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    token: Token
    left: Expression
    operator: str
    right: Expression

    def as_string(self) -> str:
        return f"({self.left.as_string()} {self.operator} {self.right.as_string()})"


@dataclass(frozen=True)
class IfExpression(Expression):
    token: Token
    condition: Expression
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None

    def as_string(self) -> str:
        out = f"if{self.condition.as_string()} {self.consequence.as_string()}"
        if self.alternative is not None:
            out += f"else {self.alternative.as_string()}"
        return out


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    token: Token
    parameters: Tuple[Identifier, ...]
    body: "BlockStatement"

    def as_string(self) -> str:
        params = ", ".join(p.as_string() for p in self.parameters)
        return f"{self.token_literal()}({params}){self.body.as_string()}"


@dataclass(frozen=True)
class CallExpression(Expression):
    token: Token  # the '(' token
    function: Expression
    arguments: Tuple[Expression, ...] = ()

    def as_string(self) -> str:
        args = ", ".join(a.as_string() for a in self.arguments)
        return f"{self.function.as_string()}({args})"


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    token: Token
    name: Identifier
    value: Expression

    def as_string(self) -> str:
        return f"{self.token_literal()} {self.name.as_string()} = {self.value.as_string()};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    token: Token
    return_value: Expression

    def as_string(self) -> str:
        return f"{self.token_literal()} {self.return_value.as_string()};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    token: Token
    expression: Expression

    def as_string(self) -> str:
        return self.expression.as_string()


@dataclass(frozen=True)
class BlockStatement(Statement):
    token: Token  # the '{' token
    statements: Tuple[Statement, ...] = ()

    def as_string(self) -> str:
        return "".join(s.as_string() for s in self.statements)


@dataclass(frozen=True)
class Program(Node):
    """Parse root: ordered top-level statements"""
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        if not self.statements:
            return ""
        return self.statements[0].token_literal()

    def as_string(self) -> str:
        return "".join(s.as_string() for s in self.statements)
