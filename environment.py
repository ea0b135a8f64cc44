"""
Kestrel runtime environments
Chained name-to-value scopes implementing lexical scoping
"""

from typing import Dict, Iterator, Optional, Tuple


class Environment:
  """A local binding frame with an optional (shared, never mutated) outer frame"""

  def __init__(self, outer: Optional["Environment"] = None):
    self.store: Dict[str, object] = {}
    self.outer = outer

  @classmethod
  def enclosed(cls, outer: "Environment") -> "Environment":
    """Create a child scope, used once per function call"""
    return cls(outer)

  def get(self, name: str) -> Optional[object]:
    """Look up a name locally, then along the outer chain; None if unbound"""
    env = self
    while env is not None:
      if name in env.store:
        return env.store[name]
      env = env.outer
    return None

  def set(self, name: str, value: object) -> object:
    """Bind in this frame only; outer frames are never written"""
    self.store[name] = value
    return value

  def __contains__(self, name: str) -> bool:
    return self.get(name) is not None

  def local_bindings(self) -> Iterator[Tuple[str, object]]:
    return iter(self.store.items())

  def depth(self) -> int:
    """Number of frames from here to the global scope"""
    count, env = 0, self.outer
    while env is not None:
      count += 1
      env = env.outer
    return count
