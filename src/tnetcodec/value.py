"""
The value model is a tagged union of immutable classes, one for each kind of
value a TNetString can carry. Decoding produces a tree of these objects and
encoding consumes one.

Values of different kinds never compare equal, so ``Integer(1)``,
``Float(1.0)`` and ``Boolean(True)`` are all distinct even though the
underlying Python objects are not.
"""

import abc
import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Tuple, Union

from .framing import Tag


BytesLike = Union[bytes, bytearray, memoryview]


class Value(abc.ABC):
    """ Base class of every node in a TNetString value tree. """

    __slots__ = ()

    tag = None  # type: Tag


def _as_bytes(data: Union[BytesLike, str]) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(f"Expected bytes or str, got {type(data).__name__}")


@dataclass(frozen=True)
class Null(Value):
    tag = Tag.NULL


NULL = Null()


@dataclass(frozen=True)
class Boolean(Value):
    value: bool
    tag = Tag.BOOLEAN

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"Boolean requires a bool, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Integer(Value):
    value: int
    tag = Tag.INTEGER

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Integer requires an int, got {type(self.value).__name__}")


@dataclass(frozen=True, eq=False)
class Float(Value):
    """ A double precision float.

    Equality and hashing use the IEEE-754 bit pattern so that a decoded value
    only equals the exact value that was encoded (``-0.0`` differs from
    ``0.0``).
    """

    value: float
    tag = Tag.FLOAT

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Float requires a float, got {type(self.value).__name__}")
        try:
            object.__setattr__(self, "value", float(self.value))
        except OverflowError:
            raise TypeError("integer too large to convert to a Float") from None

    def _bits(self) -> bytes:
        return struct.pack("<d", self.value)

    def __eq__(self, other: Any) -> bool:
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._bits() == other._bits()

    def __hash__(self) -> int:
        return hash((Float, self._bits()))


@dataclass(frozen=True)
class String(Value):
    """ An opaque byte string. A ``str`` argument is stored UTF-8 encoded. """

    value: bytes
    tag = Tag.STRING

    def __post_init__(self):
        object.__setattr__(self, "value", _as_bytes(self.value))


@dataclass(frozen=True)
class List(Value):
    items: Tuple[Value, ...] = field(default=())
    tag = Tag.LIST

    def __post_init__(self):
        items = tuple(self.items)
        for item in items:
            if not isinstance(item, Value):
                raise TypeError(
                    f"List items must be Value instances, got {type(item).__name__}"
                )
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]


@dataclass(frozen=True)
class Dictionary(Value):
    """ An ordered sequence of ``(String, Value)`` pairs.

    Insertion order is preserved and duplicate keys are kept, exactly as they
    appeared on the wire. Keys may be supplied as :class:`String`, bytes or
    str.
    """

    items: Tuple[Tuple[String, Value], ...] = field(default=())
    tag = Tag.DICTIONARY

    def __post_init__(self):
        items = self.items
        if isinstance(items, Mapping):
            items = items.items()
        pairs = []
        for pair in items:
            key, value = pair
            if not isinstance(key, String):
                key = String(key)
            if not isinstance(value, Value):
                raise TypeError(
                    f"Dictionary values must be Value instances, "
                    f"got {type(value).__name__}"
                )
            pairs.append((key, value))
        object.__setattr__(self, "items", tuple(pairs))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Tuple[String, Value]]:
        return iter(self.items)

    def keys(self) -> Iterable[String]:
        return [key for key, _value in self.items]

    def values(self) -> Iterable[Value]:
        return [value for _key, value in self.items]

    def get(
        self, key: Union[String, BytesLike, str], default: Optional[Value] = None
    ) -> Optional[Value]:
        """ Return the value of the first pair whose key matches *key*. """
        if not isinstance(key, String):
            key = String(key)
        for item_key, value in self.items:
            if item_key == key:
                return value
        return default
