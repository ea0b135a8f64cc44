"""
Utilities module for the Kestrel interpreter
Error-value builders and value predicates shared by the evaluation rules
"""

from typing import Optional

from objects import FALSE, NULL, Error, KObject, ObjectType


class KestrelRuntimeError(Exception):
  """Host-level failure: an interpreter invariant was broken"""

  def __init__(self, message: str, source_line: Optional[str] = None):
    self.message = message
    self.source_line = source_line
    super().__init__(message)


# ==================== TYPE CHECKING UTILITIES ====================

def type_name(val: Optional[KObject]) -> str:
  """
  Runtime type tag of a value as it appears in error messages

  Args:
    val: Runtime value (None is reported as NULL)

  Returns:
    Type tag string such as "INTEGER"
  """
  if val is None:
    return str(ObjectType.NULL)
  return str(val.kind())


def is_error(val: Optional[KObject]) -> bool:
  return val is not None and val.kind() == ObjectType.ERROR


def is_truthy(val: KObject) -> bool:
  """Only NULL and false are falsy; everything else, 0 included, is truthy"""
  return not (val is NULL or val is FALSE)


# ==================== ERROR VALUE BUILDERS ====================

def type_mismatch_error(left: KObject, operator: str, right: KObject) -> Error:
  """
  Generate type mismatch error

  Args:
    left: Left operand
    operator: Infix operator
    right: Right operand

  Returns:
    Error value with formatted message
  """
  return Error(f"type mismatch: {type_name(left)} {operator} {type_name(right)}")


def unknown_infix_operator_error(left: KObject, operator: str, right: KObject) -> Error:
  return Error(f"unknown operator: {type_name(left)} {operator} {type_name(right)}")


def unknown_prefix_operator_error(operator: str, right: KObject) -> Error:
  return Error(f"unknown operator: {operator}{type_name(right)}")


def identifier_not_found_error(name: str) -> Error:
  return Error(f"identifier not found: {name}")


def not_a_function_error(val: KObject) -> Error:
  return Error(f"Not a function: {type_name(val)}")


def arity_error(expected: int, got: int) -> Error:
  """
  Generate arity mismatch error

  Args:
    expected: Number of declared parameters
    got: Number of supplied arguments

  Returns:
    Error value with formatted message
  """
  return Error(f"wrong number of arguments: want={expected}, got={got}")


def division_by_zero_error() -> Error:
  return Error("division by zero")
