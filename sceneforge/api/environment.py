from contextlib import contextmanager
from .errors import UndefinedVariable, Position

class Environment:
    """
    A scoped mapping from identifiers to values.

    The bottom frame holds file-level bindings (`assign`, `let`); loops push
    a frame for their variable, which disappears when the loop ends so an
    inner binding never leaks into the enclosing scope.
    """
    def __init__(self, variables: dict = None):
        self._frames = [dict(variables or {})]

    def lookup(self, name: str, position: Position = None):
        """Returns the innermost binding of `name`, or raises UndefinedVariable."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        raise UndefinedVariable(name, position)

    def __contains__(self, name: str) -> bool:
        return any(name in frame for frame in self._frames)

    def assign(self, name: str, value):
        """Binds `name` at file level, shadowing any earlier value."""
        self._frames[0][name] = value

    @contextmanager
    def scope(self, **bindings):
        """Pushes a frame holding `bindings` for the duration of the block."""
        self._frames.append(dict(bindings))
        try:
            yield self
        finally:
            self._frames.pop()

    def as_dict(self) -> dict:
        """Flattens the visible bindings, inner frames winning."""
        merged = {}
        for frame in self._frames:
            merged.update(frame)
        return merged

    def copy(self) -> 'Environment':
        return Environment(self.as_dict())

    def __repr__(self):
        return f"Environment({self.as_dict()!r})"
