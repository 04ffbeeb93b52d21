"""
Every TNetString value is carried in a frame. A frame consists of an ASCII
decimal length prefix, a colon, exactly that many payload bytes and a single
tag byte that identifies the kind of value held in the payload.

.. code-block:: console

    +-----------+-----+-------------------+-----+
    |  length   |  :  |  payload          | tag |
    +-----------+-----+-------------------+-----+
    |  "12"     | ":" |  12 raw bytes ... | "," |
    +-----------+-----+-------------------+-----+

The framer only locates the parts of a single frame. It does not look inside
the payload, that is the job of the decoder.
"""

import enum
from collections import namedtuple
from typing import Optional

from .errors import FramingError, StructuralError


class Tag(enum.Enum):
    STRING = b","
    INTEGER = b"#"
    FLOAT = b"^"
    BOOLEAN = b"!"
    NULL = b"~"
    LIST = b"]"
    DICTIONARY = b"}"


AGGREGATE_TAGS = frozenset((Tag.LIST, Tag.DICTIONARY))

COLON = ord(":")
ZERO = ord("0")
NINE = ord("9")


Frame = namedtuple(
    "Frame", ("length", "tag", "payload_start", "payload_end", "next_offset")
)

def parse_frame(buffer: bytes, offset: int = 0, limit: Optional[int] = None) -> Frame:
    """ Extract the frame that starts at *offset* in *buffer*.

    :param buffer: A bytes object holding one or more frames.

    :param offset: The index of the first byte of the length prefix.

    :param limit: The index just past the last byte the frame may occupy.
      The decoder passes the end of the enclosing aggregate's payload here
      so that a child reaching beyond its parent is reported as a
      StructuralError whatever bytes follow the parent. Defaults to the end
      of the buffer.

    :returns: A :class:`Frame` describing the payload location and the tag.
      The ``next_offset`` field is the index just past the tag byte.

    :raises: FramingError if the frame is malformed or truncated, or
      StructuralError if it would extend past *limit*. The buffer is never
      read past *limit* or its end.
    """
    end = len(buffer) if limit is None else min(limit, len(buffer))

    # A prefix with more digits than the available bytes can never describe
    # a payload that fits, so there is no need to scan or convert it.
    max_digits = len(str(end - offset))

    position = offset
    while position < end:
        byte = buffer[position]
        if byte == COLON:
            break
        if not ZERO <= byte <= NINE:
            raise FramingError(f"invalid byte {bytes([byte])!r} in length", offset)
        if position > offset and buffer[offset] == ZERO:
            raise FramingError("leading zero in length", offset)
        position += 1
        if position - offset > max_digits:
            if limit is not None:
                raise StructuralError("child frame overruns its parent", offset)
            raise FramingError("length exceeds buffer size", offset)
    else:
        if position == offset:
            raise FramingError("missing length", offset)
        if limit is not None:
            raise StructuralError("child frame overruns its parent", offset)
        raise FramingError("missing ':' after length", offset)

    digits = buffer[offset:position]
    if not digits:
        raise FramingError("missing length", offset)
    length = int(digits)
    payload_start = position + 1
    payload_end = payload_start + length

    if payload_end >= end and limit is not None:
        raise StructuralError("child frame overruns its parent", offset)
    if payload_end > end:
        raise FramingError(
            f"truncated payload, expected {length} bytes but only "
            f"{end - payload_start} remain",
            offset,
        )
    if payload_end == end:
        raise FramingError("truncated frame, missing tag", offset)

    try:
        tag = Tag(buffer[payload_end : payload_end + 1])
    except ValueError:
        raise FramingError(
            f"unknown tag {buffer[payload_end:payload_end + 1]!r}", offset
        ) from None

    return Frame(length, tag, payload_start, payload_end, payload_end + 1)
