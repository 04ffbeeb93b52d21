"""
The encoder turns a tree of :mod:`tnetcodec.value` objects into bytes.

A frame's length prefix can only be written once its payload is known, so
aggregates are encoded bottom up: every child is fully encoded before the
parent frame is assembled around the concatenated children.
"""

import itertools
from typing import Iterator

from .errors import EncodeError
from .framing import AGGREGATE_TAGS, Tag
from .numeric import format_float, format_integer
from .value import Dictionary, Value


def _frame(payload: bytes, tag: Tag) -> bytes:
    return b"%d:%s%s" % (len(payload), payload, tag.value)


def _scalar_payload(value: Value) -> bytes:
    tag = value.tag
    if tag is Tag.STRING:
        return value.value
    if tag is Tag.INTEGER:
        return format_integer(value.value)
    if tag is Tag.FLOAT:
        return format_float(value.value)
    if tag is Tag.BOOLEAN:
        return b"true" if value.value else b"false"
    if tag is Tag.NULL:
        return b""
    raise EncodeError(f"Object type not supported: {type(value).__name__}")


def _children(value: Value) -> Iterator[Value]:
    if isinstance(value, Dictionary):
        return itertools.chain.from_iterable(value.items)
    return iter(value.items)


def encode(value: Value) -> bytes:
    """ Encode a value tree.

    :param value: A :class:`~tnetcodec.value.Value` instance.

    :returns: The TNetString encoding of *value* as a bytes object.

    :raises: EncodeError if the tree holds something that can not be
      represented, such as a non-finite float.
    """
    if not isinstance(value, Value):
        raise EncodeError(
            f"Expected a Value instance, got {type(value).__name__}. "
            f"Use tnetcodec.dumps to encode plain Python objects."
        )

    if value.tag not in AGGREGATE_TAGS:
        return _frame(_scalar_payload(value), value.tag)

    # Each entry holds an open aggregate's tag, an iterator over the children
    # still to encode and the encoded children so far.
    stack = [(value.tag, _children(value), [])]
    while True:
        tag, children, parts = stack[-1]
        for child in children:
            if child.tag in AGGREGATE_TAGS:
                stack.append((child.tag, _children(child), []))
                break
            parts.append(_frame(_scalar_payload(child), child.tag))
        else:
            stack.pop()
            encoded = _frame(b"".join(parts), tag)
            if not stack:
                return encoded
            stack[-1][2].append(encoded)
