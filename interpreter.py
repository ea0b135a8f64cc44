"""
Kestrel Interpreter
Tree-walking evaluator over the AST. Runtime failures and early returns are
ordinary values (Error, ReturnValue) that every rule checks and forwards.
"""

from typing import List, Optional, Sequence, Union

from environment import Environment
from objects import (
  NULL, Error, Function, Integer, KObject, ObjectType, ReturnValue, String,
  native_bool_to_boolean
)
from syntax import (
  BlockStatement, BooleanLiteral, CallExpression, Expression, ExpressionStatement,
  FunctionLiteral, Identifier, IfExpression, InfixExpression, IntegerLiteral,
  LetStatement, Node, PrefixExpression, Program, ReturnStatement, StringLiteral
)
from utilities import (
  KestrelRuntimeError,
  arity_error,
  division_by_zero_error,
  identifier_not_found_error,
  is_error,
  is_truthy,
  not_a_function_error,
  type_mismatch_error,
  unknown_infix_operator_error,
  unknown_prefix_operator_error
)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def evaluate(node: Node, env: Environment, debug: bool = False) -> KObject:
  """
  Evaluate a node in env and return its runtime value.
  A ReturnValue never escapes this entry point.
  """
  if not isinstance(node, Node):
    raise KestrelRuntimeError(f"Cannot evaluate {type(node).__name__}: not an AST node")

  result = eval_node(node, env, debug)
  if isinstance(result, ReturnValue):
    return result.value
  return result


def eval_node(node: Node, env: Environment, debug: bool = False) -> KObject:
  """Dispatch on node kind; kinds without a rule evaluate to NULL"""
  if debug:
    print(f"Evaluating: {type(node).__name__}")

  # Statements
  if isinstance(node, Program):
    return eval_program(node, env, debug)
  elif isinstance(node, ExpressionStatement):
    return eval_node(node.expression, env, debug)
  elif isinstance(node, BlockStatement):
    return eval_block_statement(node, env, debug)
  elif isinstance(node, ReturnStatement):
    value = eval_node(node.return_value, env, debug)
    if is_error(value):
      return value
    return ReturnValue(value)
  elif isinstance(node, LetStatement):
    return eval_let_statement(node, env, debug)

  # Literals
  elif isinstance(node, IntegerLiteral):
    return Integer(node.value)
  elif isinstance(node, BooleanLiteral):
    return native_bool_to_boolean(node.value)
  elif isinstance(node, StringLiteral):
    return String(node.value)

  # Expressions
  elif isinstance(node, PrefixExpression):
    right = eval_node(node.right, env, debug)
    if is_error(right):
      return right
    return eval_prefix_expression(node.operator, right)
  elif isinstance(node, InfixExpression):
    left = eval_node(node.left, env, debug)
    if is_error(left):
      return left
    right = eval_node(node.right, env, debug)
    if is_error(right):
      return right
    return eval_infix_expression(node.operator, left, right)
  elif isinstance(node, IfExpression):
    return eval_if_expression(node, env, debug)
  elif isinstance(node, Identifier):
    return eval_identifier(node, env)
  elif isinstance(node, FunctionLiteral):
    return Function(node.parameters, node.body, env)
  elif isinstance(node, CallExpression):
    return eval_call_expression(node, env, debug)

  if debug:
    print(f"No evaluation rule for {type(node).__name__}")
  return NULL


def eval_program(program: Program, env: Environment, debug: bool = False) -> KObject:
  """Run top-level statements; a return or an error ends the program"""
  result: KObject = NULL

  for statement in program.statements:
    result = eval_node(statement, env, debug)

    if isinstance(result, ReturnValue):
      return result.value
    if is_error(result):
      return result

  return result


def eval_block_statement(block: BlockStatement, env: Environment, debug: bool = False) -> KObject:
  """Like eval_program, but a ReturnValue stays wrapped for the enclosing call"""
  result: KObject = NULL

  for statement in block.statements:
    result = eval_node(statement, env, debug)

    if result.kind() in (ObjectType.RETURN_VALUE, ObjectType.ERROR):
      return result

  return result


def eval_let_statement(node: LetStatement, env: Environment, debug: bool = False) -> KObject:
  value = eval_node(node.value, env, debug)
  if is_error(value):
    return value

  env.set(node.name.value, value)
  if debug:
    print(f"  Bound: {node.name.value} = {value.inspect()}")
  return NULL


def eval_identifier(node: Identifier, env: Environment) -> KObject:
  """Resolve a name along the environment chain"""
  value = env.get(node.value)
  if value is None:
    return identifier_not_found_error(node.value)
  return value


def eval_if_expression(node: IfExpression, env: Environment, debug: bool = False) -> KObject:
  condition = eval_node(node.condition, env, debug)
  if is_error(condition):
    return condition

  if is_truthy(condition):
    return eval_node(node.consequence, env, debug)
  elif node.alternative is not None:
    return eval_node(node.alternative, env, debug)
  return NULL


# ============================================================================
# OPERATORS
# ============================================================================

def eval_prefix_expression(operator: str, right: KObject) -> KObject:
  if operator == "!":
    return eval_bang_operator_expression(right)
  elif operator == "-":
    return eval_minus_prefix_operator_expression(right)
  return unknown_prefix_operator_error(operator, right)


def eval_bang_operator_expression(right: KObject) -> KObject:
  return native_bool_to_boolean(not is_truthy(right))


def eval_minus_prefix_operator_expression(right: KObject) -> KObject:
  if right.kind() != ObjectType.INTEGER:
    return unknown_prefix_operator_error("-", right)
  return Integer(-right.value)


def eval_infix_expression(operator: str, left: KObject, right: KObject) -> KObject:
  if left.kind() == ObjectType.INTEGER and right.kind() == ObjectType.INTEGER:
    return eval_integer_infix_expression(operator, left, right)
  elif left.kind() == ObjectType.STRING and right.kind() == ObjectType.STRING:
    return eval_string_infix_expression(operator, left, right)
  elif operator == "==":
    return native_bool_to_boolean(left is right)
  elif operator == "!=":
    return native_bool_to_boolean(left is not right)
  elif left.kind() != right.kind():
    return type_mismatch_error(left, operator, right)
  return unknown_infix_operator_error(left, operator, right)


def eval_integer_infix_expression(operator: str, left: Integer, right: Integer) -> KObject:
  left_val = left.value
  right_val = right.value

  if operator == "+":
    return Integer(left_val + right_val)
  elif operator == "-":
    return Integer(left_val - right_val)
  elif operator == "*":
    return Integer(left_val * right_val)
  elif operator == "/":
    if right_val == 0:
      return division_by_zero_error()
    # Integer values floor, so division floors as well
    return Integer(left_val // right_val)
  elif operator == "<":
    return native_bool_to_boolean(left_val < right_val)
  elif operator == ">":
    return native_bool_to_boolean(left_val > right_val)
  elif operator == "==":
    return native_bool_to_boolean(left_val == right_val)
  elif operator == "!=":
    return native_bool_to_boolean(left_val != right_val)
  return unknown_infix_operator_error(left, operator, right)


def eval_string_infix_expression(operator: str, left: String, right: String) -> KObject:
  if operator == "+":
    return String(left.value + right.value)
  elif operator == "==":
    return native_bool_to_boolean(left.value == right.value)
  elif operator == "!=":
    return native_bool_to_boolean(left.value != right.value)
  return unknown_infix_operator_error(left, operator, right)


# ============================================================================
# FUNCTION APPLICATION
# ============================================================================

def eval_call_expression(node: CallExpression, env: Environment, debug: bool = False) -> KObject:
  function = eval_node(node.function, env, debug)
  if is_error(function):
    return function
  if not isinstance(function, Function):
    return not_a_function_error(function)

  args = eval_expressions(node.arguments, env, debug)
  if isinstance(args, Error):
    return args

  return apply_function(function, args, debug)


def eval_expressions(
  exprs: Sequence[Expression],
  env: Environment,
  debug: bool = False
) -> Union[List[KObject], Error]:
  """Evaluate left to right, stopping at the first Error"""
  result = []
  for expr in exprs:
    evaluated = eval_node(expr, env, debug)
    if is_error(evaluated):
      return evaluated
    result.append(evaluated)
  return result


def apply_function(function: Function, args: List[KObject], debug: bool = False) -> KObject:
  if len(args) != len(function.parameters):
    return arity_error(len(function.parameters), len(args))

  call_env = extend_function_env(function, args)
  evaluated = eval_node(function.body, call_env, debug)
  return unwrap_return_value(evaluated)


def extend_function_env(function: Function, args: List[KObject]) -> Environment:
  """New frame whose outer is the defining scope, not the caller's"""
  env = Environment.enclosed(function.env)
  for param, arg in zip(function.parameters, args):
    env.set(param.value, arg)
  return env


def unwrap_return_value(obj: KObject) -> KObject:
  if isinstance(obj, ReturnValue):
    return obj.value
  return obj


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class KestrelInterpreter:
  """Evaluates programs against one long-lived global environment"""

  def __init__(self, debug: bool = False, env: Optional[Environment] = None):
    self.debug = debug
    self.global_env = env if env is not None else Environment()

  def interpret(self, program: Program) -> KObject:
    return evaluate(program, self.global_env, self.debug)


def create_interpreter(debug: bool = False) -> KestrelInterpreter:
  """Factory function returning an interpreter"""
  return KestrelInterpreter(debug=debug)


def create_debug_interpreter() -> KestrelInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
