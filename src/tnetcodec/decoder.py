"""
The decoder turns a complete TNetString buffer into a tree of
:mod:`tnetcodec.value` objects.

Aggregates are decoded with an explicit stack of open containers instead of
recursion. The input may come from an untrusted peer, so the nesting depth
and the total payload size are both checked as each frame is read and the
decode stops at the first problem.
"""

import logging
from collections import namedtuple
from typing import List as ListType, Optional, Tuple, Union

from .errors import (
    DecodeError,
    DepthExceededError,
    PayloadTypeError,
    SizeExceededError,
    StructuralError,
    TrailingDataError,
)
from .framing import AGGREGATE_TAGS, Frame, Tag, parse_frame
from .numeric import parse_float, parse_integer
from .value import NULL, Boolean, Dictionary, Float, Integer, List, String, Value


logger = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 512


DecoderConfig = namedtuple(
    "DecoderConfig", ("max_depth", "max_total_size"), defaults=(DEFAULT_MAX_DEPTH, None)
)
DecoderConfig.__doc__ = """ Limits applied while decoding.

:param max_depth: The maximum aggregate nesting depth. A top level list is
  at depth 1. Defaults to 512.

:param max_total_size: The maximum sum of the payload lengths of all frames,
  aggregates included. Defaults to None which means unbounded.
"""


def _decode_boolean(payload: bytes) -> Boolean:
    if payload == b"true":
        return Boolean(True)
    if payload == b"false":
        return Boolean(False)
    raise PayloadTypeError(f"invalid boolean {payload[:32]!r}")


def _decode_null(payload: bytes) -> Value:
    if payload:
        raise PayloadTypeError(
            f"null must have an empty payload, got {len(payload)} bytes"
        )
    return NULL


_SCALAR_DECODERS = {
    Tag.STRING: String,
    Tag.INTEGER: lambda payload: Integer(parse_integer(payload)),
    Tag.FLOAT: lambda payload: Float(parse_float(payload)),
    Tag.BOOLEAN: _decode_boolean,
    Tag.NULL: _decode_null,
}


class _OpenAggregate(object):
    """ A list or dictionary whose payload is still being decoded. """

    __slots__ = ("tag", "end", "items", "key")

    def __init__(self, frame: Frame) -> None:
        self.tag = frame.tag
        self.end = frame.payload_end
        self.items = []  # type: ListType
        self.key = None  # type: Optional[String]

    @property
    def expects_key(self) -> bool:
        return self.tag is Tag.DICTIONARY and self.key is None

    def add(self, value: Value) -> None:
        if self.tag is Tag.LIST:
            self.items.append(value)
        elif self.key is None:
            self.key = value
        else:
            self.items.append((self.key, value))
            self.key = None

    def close(self) -> Value:
        if self.tag is Tag.LIST:
            return List(self.items)
        if self.key is not None:
            raise StructuralError("dictionary key has no value", self.end)
        return Dictionary(self.items)


def _check_config(config: DecoderConfig) -> None:
    if not isinstance(config.max_depth, int) or config.max_depth < 0:
        raise ValueError(
            f"max_depth must be a non-negative int, got {config.max_depth!r}"
        )
    if config.max_total_size is not None and (
        not isinstance(config.max_total_size, int) or config.max_total_size < 0
    ):
        raise ValueError(
            f"max_total_size must be None or a non-negative int, "
            f"got {config.max_total_size!r}"
        )


def _decode(data: bytes, config: DecoderConfig) -> Tuple[Value, int]:
    """ Decode the frame at the start of *data*.

    :returns: The decoded value and the offset just past its frame.
    """
    stack = []  # type: ListType[_OpenAggregate]
    total_size = 0
    offset = 0

    while True:
        # Children are framed against their parent's payload end, so a child
        # that would overrun it is a StructuralError.
        limit = stack[-1].end if stack else None
        frame = parse_frame(data, offset, limit)

        if stack:
            parent = stack[-1]
            if parent.expects_key and frame.tag is not Tag.STRING:
                raise StructuralError(
                    f"dictionary key must be a string, got {frame.tag.name.lower()}",
                    offset,
                )

        total_size += frame.length
        if config.max_total_size is not None and total_size > config.max_total_size:
            raise SizeExceededError(
                f"decoded payload size exceeds {config.max_total_size} bytes", offset
            )

        if frame.tag in AGGREGATE_TAGS:
            if len(stack) >= config.max_depth:
                raise DepthExceededError(
                    f"nesting exceeds maximum depth of {config.max_depth}", offset
                )
            stack.append(_OpenAggregate(frame))
            offset = frame.payload_start
        else:
            payload = data[frame.payload_start : frame.payload_end]
            try:
                value = _SCALAR_DECODERS[frame.tag](payload)
            except PayloadTypeError as exc:
                exc.offset = offset
                raise
            offset = frame.next_offset
            if not stack:
                return value, offset
            stack[-1].add(value)

        # Close every aggregate whose payload has been fully consumed. An
        # empty aggregate closes as soon as it is opened.
        while offset == stack[-1].end:
            value = stack.pop().close()
            offset += 1  # step over the tag byte
            if not stack:
                return value, offset
            stack[-1].add(value)


def decode(
    buffer: Union[bytes, bytearray, memoryview, str],
    config: Optional[DecoderConfig] = None,
) -> Value:
    """ Decode a complete TNetString.

    :param buffer: The encoded data. A str is encoded as UTF-8 first. The
      buffer must contain exactly one top level frame.

    :param config: Optional :class:`DecoderConfig` limits.

    :returns: The decoded :class:`~tnetcodec.value.Value` tree.

    :raises: DecodeError (or one of its subclasses) describing the first
      problem found in the buffer.
    """
    if isinstance(buffer, str):
        data = buffer.encode("utf-8")
    elif isinstance(buffer, bytes):
        data = buffer
    elif isinstance(buffer, (bytearray, memoryview)):
        data = bytes(buffer)
    else:
        raise TypeError(f"Expected bytes, got {type(buffer).__name__}")

    config = config if config is not None else DecoderConfig()
    _check_config(config)

    try:
        value, offset = _decode(data, config)
        if offset != len(data):
            raise TrailingDataError(
                f"{len(data) - offset} bytes remain after the top level frame", offset
            )
    except DecodeError as exc:
        logger.debug(f"Rejected {len(data)} byte TNetString: {exc}")
        raise

    return value
