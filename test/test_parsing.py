"""
Parser tests for the Kestrel language
Precedence, statement forms and best-effort error recovery
"""

import pytest
from error_handling import KestrelParseError
from parsing import (
    Parser, create_debug_parser, create_parser, find_nodes_by_type, parse,
    parse_or_raise, pretty_print_ast
)
from syntax import (
    BooleanLiteral, CallExpression, ExpressionStatement, FunctionLiteral, Identifier,
    IfExpression, InfixExpression, IntegerLiteral, LetStatement, PrefixExpression,
    ReturnStatement, StringLiteral
)
from tokens import Token, TokenType


def single_expression(parse_clean, source):
  program = parse_clean(source)
  assert len(program.statements) == 1
  stmt = program.statements[0]
  assert isinstance(stmt, ExpressionStatement)
  return stmt.expression


class TestStatements:
  """let, return and expression statements"""

  def test_let_statements(self, parse_clean):
    """Test parsing of let statements"""
    program = parse_clean("let x = 5;\nlet y = true;\nlet foobar = y;")
    assert len(program.statements) == 3
    names = [stmt.name.value for stmt in program.statements]
    assert names == ["x", "y", "foobar"]
    assert all(isinstance(stmt, LetStatement) for stmt in program.statements)
    assert all(stmt.token_literal() == "let" for stmt in program.statements)
    assert program.statements[0].value == IntegerLiteral(Token(TokenType.INT, "5", 8), 5)
    assert isinstance(program.statements[2].value, Identifier)

  def test_return_statements(self, parse_clean):
    """Test parsing of return statements"""
    program = parse_clean("return 5; return 10; return add(1, 2);")
    assert len(program.statements) == 3
    assert all(isinstance(stmt, ReturnStatement) for stmt in program.statements)
    assert all(stmt.token_literal() == "return" for stmt in program.statements)
    assert isinstance(program.statements[2].return_value, CallExpression)

  def test_semicolons_are_optional(self, parse_clean):
    """Test parsing without semicolons"""
    program = parse_clean("let a = 1 let b = 2 a + b")
    assert [type(s).__name__ for s in program.statements] == [
        "LetStatement", "LetStatement", "ExpressionStatement"
    ]

  def test_empty_program(self, parse_clean):
    """Test parsing of an empty program"""
    program = parse_clean("")
    assert program.statements == ()
    assert program.token_literal() == ""


class TestLiterals:
  """Prefix rules for literals and identifiers"""

  def test_identifier(self, parse_clean):
    """Test parsing of an identifier expression"""
    expr = single_expression(parse_clean, "foobar;")
    assert isinstance(expr, Identifier)
    assert expr.value == "foobar"
    assert expr.token_literal() == "foobar"

  def test_integer_literal(self, parse_clean):
    """Test parsing of an integer literal"""
    expr = single_expression(parse_clean, "5;")
    assert isinstance(expr, IntegerLiteral)
    assert expr.value == 5

  @pytest.mark.parametrize("source,expected", [("true;", True), ("false;", False)])
  def test_boolean_literal(self, parse_clean, source, expected):
    """Test parsing of boolean literals"""
    expr = single_expression(parse_clean, source)
    assert isinstance(expr, BooleanLiteral)
    assert expr.value is expected

  def test_string_literal(self, parse_clean):
    """Test parsing of a string literal"""
    expr = single_expression(parse_clean, '"hello world";')
    assert isinstance(expr, StringLiteral)
    assert expr.value == "hello world"

  @pytest.mark.parametrize("source,operator,value", [
      ("!5;", "!", 5),
      ("-15;", "-", 15),
  ])
  def test_prefix_expressions(self, parse_clean, source, operator, value):
    """Test parsing of prefix expressions"""
    expr = single_expression(parse_clean, source)
    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert expr.right.value == value

  @pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
  def test_infix_expressions(self, parse_clean, operator):
    """Test parsing of infix expressions"""
    expr = single_expression(parse_clean, f"5 {operator} 6;")
    assert isinstance(expr, InfixExpression)
    assert expr.left.value == 5
    assert expr.operator == operator
    assert expr.right.value == 6


class TestOperatorPrecedence:
  """as_string() exposes the grouping chosen by the parser"""

  @pytest.mark.parametrize("source,expected", [
      ("-a * b", "((-a) * b)"),
      ("!-a", "(!(-a))"),
      ("a + b + c", "((a + b) + c)"),
      ("a + b - c", "((a + b) - c)"),
      ("a * b * c", "((a * b) * c)"),
      ("a * b / c", "((a * b) / c)"),
      ("a + b / c", "(a + (b / c))"),
      ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
      ("3 + 4; -5 * 5", "(3 + 4)((-5) * 5)"),
      ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
      ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
      ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
      ("true", "true"),
      ("false", "false"),
      ("3 > 5 == false", "((3 > 5) == false)"),
      ("3 < 5 == true", "((3 < 5) == true)"),
      ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
      ("(5 + 5) * 2", "((5 + 5) * 2)"),
      ("2 / (5 + 5)", "(2 / (5 + 5))"),
      ("-(5 + 5)", "(-(5 + 5))"),
      ("!(true == true)", "(!(true == true))"),
      ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
      ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
       "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
      ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
  ])
  def test_precedence(self, parse_clean, source, expected):
    """Test operator precedence and grouping"""
    assert parse_clean(source).as_string() == expected


class TestCompoundExpressions:
  """if, fn and call forms"""

  def test_if_expression(self, parse_clean):
    """Test parsing of an if expression"""
    expr = single_expression(parse_clean, "if (x < y) { x }")
    assert isinstance(expr, IfExpression)
    assert expr.condition.as_string() == "(x < y)"
    assert len(expr.consequence.statements) == 1
    assert expr.consequence.statements[0].expression.value == "x"
    assert expr.alternative is None

  def test_if_else_expression(self, parse_clean):
    """Test parsing of an if/else expression"""
    expr = single_expression(parse_clean, "if (x < y) { x } else { y }")
    assert isinstance(expr, IfExpression)
    assert expr.alternative is not None
    assert expr.alternative.statements[0].expression.value == "y"
    assert expr.as_string() == "if(x < y) xelse y"

  def test_function_literal(self, parse_clean):
    """Test parsing of a function literal"""
    expr = single_expression(parse_clean, "fn(x, y) { x + y; }")
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert expr.body.as_string() == "(x + y)"
    assert expr.as_string() == "fn(x, y)(x + y)"

  @pytest.mark.parametrize("source,expected", [
      ("fn() {};", []),
      ("fn(x) {};", ["x"]),
      ("fn(x, y, z) {};", ["x", "y", "z"]),
  ])
  def test_function_parameters(self, parse_clean, source, expected):
    """Test parsing of parameter lists"""
    expr = single_expression(parse_clean, source)
    assert [p.value for p in expr.parameters] == expected

  def test_call_expression(self, parse_clean):
    """Test parsing of a call expression"""
    expr = single_expression(parse_clean, "add(1, 2 * 3, 4 + 5);")
    assert isinstance(expr, CallExpression)
    assert expr.function.value == "add"
    assert [a.as_string() for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]
    assert expr.token_literal() == "("

  def test_call_without_arguments(self, parse_clean):
    """Test parsing of a call with no arguments"""
    expr = single_expression(parse_clean, "f()")
    assert isinstance(expr, CallExpression)
    assert expr.arguments == ()

  def test_call_on_function_literal(self, parse_clean):
    """Test calling a function literal directly"""
    expr = single_expression(parse_clean, "fn(x) { x }(5)")
    assert isinstance(expr, CallExpression)
    assert isinstance(expr.function, FunctionLiteral)

  def test_chained_calls(self, parse_clean):
    """Test parsing of chained calls"""
    assert parse_clean("f(1)(2)").as_string() == "f(1)(2)"

  def test_block_may_end_at_eof(self, parse_clean):
    """Test a block closed by end of input"""
    expr = single_expression(parse_clean, "if (x) { y")
    assert expr.consequence.statements[0].expression.value == "y"


class TestParseErrors:
  """Errors are collected, never raised, and parsing continues"""

  def test_let_errors(self):
    """Test errors from malformed let statements"""
    result = parse("let x 5; let = 10; let 838383;")
    assert result.errors == [
        "Expected '=' got INT",
        "Expected 'IDENT' got =",
        "No prefix parse function found for =",
        "Expected 'IDENT' got INT",
    ]
    assert not result.ok

  def test_recovery_keeps_later_statements(self):
    """Test that parsing continues after an error"""
    result = parse("let = 1; let y = 2;")
    lets = [s for s in result.program.statements if isinstance(s, LetStatement)]
    assert [s.name.value for s in lets] == ["y"]

  def test_missing_prefix_rule(self):
    """Test the missing prefix rule error"""
    result = parse("*5")
    assert result.errors == ["No prefix parse function found for *"]
    assert [s.as_string() for s in result.program.statements] == ["5"]

  def test_missing_close_paren(self):
    """Test an unclosed parenthesis"""
    result = parse("(1 + 2")
    assert result.errors == ["Expected ')' got EOF"]
    assert result.program.statements == ()

  def test_illegal_token(self):
    """Test an ILLEGAL token in an expression"""
    result = parse("let a = @;")
    assert result.errors[0] == "No prefix parse function found for ILLEGAL"

  def test_bad_function_parameters(self):
    """Test a non-identifier parameter"""
    result = parse("fn(1) { 1 }")
    assert result.errors[0] == "Expected 'IDENT' got INT"

  def test_if_requires_parenthesis(self):
    """Test an if condition without parentheses"""
    result = parse("if x { 1 }")
    assert result.errors[0] == "Expected '(' got IDENT"

  def test_invalid_integer_literal(self):
    """Test the invalid integer literal error"""
    class FixedTokens:
      def __init__(self, tokens):
        self.tokens = list(tokens)

      def next_token(self):
        if len(self.tokens) > 1:
          return self.tokens.pop(0)
        return self.tokens[0]

    parser = Parser(FixedTokens([Token(TokenType.INT, "12x"), Token(TokenType.EOF, "")]))
    program = parser.parse_program()
    assert parser.errors == ["Invalid literal '12x': expecting 'int'"]
    assert program.statements == ()

  def test_diagnostics_are_located(self):
    """Test line and column in diagnostics"""
    result = parse("let x = 1;\nlet = 2;")
    first = result.diagnostics[0]
    assert first['message'] == "Expected 'IDENT' got ="
    assert (first['line'], first['column']) == (2, 5)
    assert first['got'] == "'= 2;'"

  def test_parse_or_raise(self):
    """Test that parse_or_raise raises on errors"""
    with pytest.raises(KestrelParseError) as exc_info:
      parse_or_raise("let = 1;", filename="bad.ks")
    assert exc_info.value.messages[0] == "Expected 'IDENT' got ="
    assert "bad.ks:1:5" in str(exc_info.value)

  def test_parse_or_raise_clean(self):
    """Test parse_or_raise on clean input"""
    assert parse_or_raise("1 + 2").as_string() == "(1 + 2)"


class TestParserFrontEnd:
  """Factories, file parsing and AST utilities"""

  def test_factories(self):
    """Test parser factory functions"""
    assert create_parser().debug is False
    assert create_debug_parser().debug is True

  def test_rule_tables_are_per_instance(self):
    """Test that parsers do not share rule tables"""
    from lexer import Lexer
    first = Parser(Lexer("1"))
    second = Parser(Lexer("2"))
    first.register_prefix(TokenType.ASTERISK, first.parse_identifier)
    assert TokenType.ASTERISK not in second.prefix_parse_fns

  def test_parse_file(self, tmp_path):
    """Test parsing a script file"""
    script = tmp_path / "prog.ks"
    script.write_text("let a = 1; a * 2")
    program = create_parser().parse_file(str(script))
    assert program.as_string() == "let a = 1;(a * 2)"

  def test_debug_parser_traces(self, capsys):
    """Test debug parser output"""
    create_debug_parser().parse_string("1;")
    assert "Parsing statement: INT('1')" in capsys.readouterr().out

  def test_find_nodes_by_type(self, parse_clean):
    """Test collecting nodes of one type"""
    program = parse_clean("let f = fn(a) { a + 1 }; f(2) + 3")
    infixes = find_nodes_by_type(program, InfixExpression)
    assert [n.as_string() for n in infixes] == ["(a + 1)", "(f(2) + 3)"]
    assert len(find_nodes_by_type(program, Identifier)) == 4

  def test_pretty_print_ast(self, parse_clean):
    """Test the indented AST dump"""
    text = pretty_print_ast(parse_clean("-x"))
    assert text.splitlines() == [
        "Program",
        "  ExpressionStatement",
        "    PrefixExpression(operator='-')",
        "      Identifier(value='x')",
    ]
