"""
Uniform Random Sources
======================
The sampler never owns or creates a generator. It accepts any object with a
``random()`` method returning floats in ``[0, 1)``; both :class:`random.Random`
and :class:`numpy.random.Generator` qualify as-is.

Classes:
    UniformSource: Structural type for such objects.
    ScriptedSource: Replays a fixed list of values, for reproducible tests.
"""
from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from meshsample.errors import SourceExhaustedError


@runtime_checkable
class UniformSource(Protocol):
    def random(self) -> float:
        """Return the next uniform value in ``[0, 1)``."""
        ...


class ScriptedSource:
    """
    A uniform source that returns pre-recorded values in order.

    Values are not range-checked; feeding values outside ``[0, 1)`` is the
    caller's responsibility, as with any other source.
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._values = [float(v) for v in values]
        self._position = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(consumed={self._position}, remaining={self.remaining})"

    @property
    def consumed(self) -> int:
        """Number of values handed out so far."""
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position

    def random(self) -> float:
        if self._position >= len(self._values):
            raise SourceExhaustedError(
                f"Scripted source exhausted after {len(self._values)} values."
            )
        value = self._values[self._position]
        self._position += 1
        return value
