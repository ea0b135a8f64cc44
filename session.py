"""
Kestrel sessions
A session owns one global environment so bindings persist across inputs.
SessionActor runs a private session on its own thread via pykka.
"""

from typing import Dict, List, NamedTuple, Optional

import pykka

from environment import Environment
from interpreter import evaluate
from objects import KObject, ObjectType
from parsing import parse
from syntax import Program
from utilities import KestrelRuntimeError


class SessionResult(NamedTuple):
  """Outcome of running one input: parse errors, or the evaluated value"""
  errors: List[str]
  diagnostics: List[Dict]
  value: Optional[KObject]
  program: Program

  @property
  def ok(self) -> bool:
    return not self.errors and not (self.value is not None and self.value.kind() == ObjectType.ERROR)

  def display(self) -> str:
    """Text a REPL would print for this input"""
    if self.errors:
      return "\n".join(self.errors)
    return self.value.inspect()


class Session:
  """Parse-then-evaluate loop state for one REPL or host conversation"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.env = Environment()
    self.history: List[str] = []

  def run(self, source: str) -> SessionResult:
    """Parse source; evaluate it only when the parse is clean"""
    self.history.append(source)
    try:
      result = parse(source, debug=self.debug)
    except RecursionError as e:
      raise KestrelRuntimeError("maximum nesting depth exceeded", source) from e
    if not result.ok:
      return SessionResult(result.errors, result.diagnostics, None, result.program)

    try:
      value = evaluate(result.program, self.env, self.debug)
    except RecursionError as e:
      raise KestrelRuntimeError("maximum recursion depth exceeded", source) from e
    return SessionResult([], [], value, result.program)

  def bindings(self) -> Dict[str, KObject]:
    return dict(self.env.local_bindings())

  def reset(self):
    self.env = Environment()
    self.history.clear()


# ============================================================================
# ACTOR WRAPPER (Using Pykka)
# ============================================================================

class SessionActor(pykka.ThreadingActor):
  """Actor owning a private session; messages are source strings"""

  def __init__(self, session_id: str, debug: bool = False):
    super().__init__()
    self.session_id = session_id
    self.session = Session(debug=debug)

  def on_receive(self, message):
    """Handle a raw source message by running it in this actor's session"""
    if not isinstance(message, str):
      raise TypeError(f"SessionActor {self.session_id} expects source text, got {type(message).__name__}")
    return self.session.run(message)

  def run(self, source: str) -> SessionResult:
    return self.session.run(source)

  def bindings(self) -> Dict[str, str]:
    return {name: value.inspect() for name, value in self.session.bindings().items()}


class SessionPool:
  """Registry of running session actors keyed by id"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.actors: Dict[str, pykka.ActorRef] = {}

  def open(self, session_id: str) -> pykka.ActorRef:
    if session_id not in self.actors:
      self.actors[session_id] = SessionActor.start(session_id, self.debug)
    return self.actors[session_id]

  def run(self, session_id: str, source: str, timeout: Optional[float] = 5.0) -> SessionResult:
    return self.open(session_id).ask(source, timeout=timeout)

  def close(self, session_id: str):
    actor_ref = self.actors.pop(session_id, None)
    if actor_ref is not None:
      actor_ref.stop()

  def close_all(self):
    for session_id in list(self.actors):
      self.close(session_id)
