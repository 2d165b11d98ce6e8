"""
Lazy Sequences

Pull-based, restartable wrappers over arrays, collections, factories and
one-shot iterators. Every iteration asks the source for a fresh iterator.
"""

from collections.abc import Iterable, Iterator
from typing import Callable, Generic, List, Optional, TypeVar

from .exceptions import AlreadyConsumedError

T = TypeVar("T")
R = TypeVar("R")


class _OneShot:
    """Factory over a single-pass iterator; refuses a second pass."""

    def __init__(self, iterator: Iterator):
        self._iterator = iterator
        self._consumed = False

    def __call__(self) -> Iterator:
        if self._consumed:
            raise AlreadyConsumedError(
                "Lazy sequence is backed by a one-shot iterator that was already consumed"
            )
        self._consumed = True
        return self._iterator


class LazySequence(Generic[T]):
    """
    Restartable lazy sequence.

    Holds a zero-argument factory that is called once per iteration.
    Collection-backed and factory-backed sequences can be iterated any
    number of times; iterator-backed ones raise AlreadyConsumedError on
    the second pass.
    """

    def __init__(self, factory: Callable[[], Iterable[T]]):
        self._factory = factory

    @classmethod
    def of(cls, source) -> "LazySequence[T]":
        """
        Adapt a source into a LazySequence.

        Args:
            source: A collection, a zero-argument callable returning an
                iterable, an iterator/generator, or another LazySequence

        Returns:
            LazySequence over the source

        Raises:
            TypeError: If the source is not iterable nor callable
        """
        if isinstance(source, LazySequence):
            return source
        if isinstance(source, Iterator):
            return cls(_OneShot(source))
        if callable(source):
            return cls(source)
        if isinstance(source, Iterable):
            return cls(lambda: source)
        raise TypeError(f"Cannot build a lazy sequence from {type(source).__name__}")

    def __iter__(self) -> Iterator[T]:
        return iter(self._factory())

    def filter(self, predicate: Callable[[T], bool]) -> "LazySequence[T]":
        return LazySequence(lambda: (value for value in self if predicate(value)))

    def map(self, fn: Callable[[T], R]) -> "LazySequence[R]":
        return LazySequence(lambda: (fn(value) for value in self))

    def first(self) -> Optional[T]:
        """Return the first element, or None for an empty sequence."""
        return next(iter(self), None)

    def to_list(self) -> List[T]:
        return list(self)

    def count(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"LazySequence({self._factory!r})"


def lazy(source) -> LazySequence:
    """Shorthand for LazySequence.of(source)."""
    return LazySequence.of(source)
