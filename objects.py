"""
Kestrel runtime object model
Tagged runtime values produced by the interpreter
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from environment import Environment
from syntax import BlockStatement, Identifier


class ObjectType(Enum):
  INTEGER = "INTEGER"
  BOOLEAN = "BOOLEAN"
  STRING = "STRING"
  NULL = "NULL"
  FUNCTION = "FUNCTION"
  ERROR = "ERROR"
  RETURN_VALUE = "RETURN_VALUE"

  def __str__(self) -> str:
    return self.value


class KObject:
  """Base for every runtime value"""

  def kind(self) -> ObjectType:
    raise NotImplementedError

  def inspect(self) -> str:
    raise NotImplementedError


@dataclass(frozen=True)
class Integer(KObject):
  value: int

  def kind(self) -> ObjectType:
    return ObjectType.INTEGER

  def inspect(self) -> str:
    return str(self.value)


@dataclass(frozen=True)
class Boolean(KObject):
  value: bool

  def kind(self) -> ObjectType:
    return ObjectType.BOOLEAN

  def inspect(self) -> str:
    return "true" if self.value else "false"


@dataclass(frozen=True)
class String(KObject):
  value: str

  def kind(self) -> ObjectType:
    return ObjectType.STRING

  def inspect(self) -> str:
    return self.value


class Null(KObject):
  def kind(self) -> ObjectType:
    return ObjectType.NULL

  def inspect(self) -> str:
    return "null"

  def __repr__(self) -> str:
    return "Null()"


@dataclass(frozen=True)
class Error(KObject):
  message: str

  def kind(self) -> ObjectType:
    return ObjectType.ERROR

  def inspect(self) -> str:
    return f"ERROR: {self.message}"


@dataclass(frozen=True)
class ReturnValue(KObject):
  """Carries a returned value up to the enclosing call or program"""
  value: KObject

  def kind(self) -> ObjectType:
    return ObjectType.RETURN_VALUE

  def inspect(self) -> str:
    return self.value.inspect()


@dataclass(frozen=True, eq=False)
class Function(KObject):
  """A closure: parameters and body plus the environment it was defined in"""
  parameters: Tuple[Identifier, ...]
  body: BlockStatement
  env: Environment = field(repr=False)

  def kind(self) -> ObjectType:
    return ObjectType.FUNCTION

  def inspect(self) -> str:
    params = ", ".join(p.as_string() for p in self.parameters)
    return f"fn({params}) {{\n{self.body.as_string()}\n}}"


# Canonical singletons
TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
  return TRUE if value else FALSE
