""" Conversions between TNetString numeric payloads and Python numbers. """

import math
import re

from .errors import EncodeError, PayloadTypeError


INTEGER_PATTERN = re.compile(rb"0|-?[1-9][0-9]*")
FLOAT_PATTERN = re.compile(rb"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


def parse_integer(payload: bytes) -> int:
    """ Convert an integer payload into an int.

    Integers are arbitrary precision. Payloads longer than the interpreter's
    integer string conversion limit are rejected rather than converted.

    :raises: PayloadTypeError if the payload is not a canonical decimal
      integer.
    """
    if INTEGER_PATTERN.fullmatch(payload) is None:
        raise PayloadTypeError(f"invalid integer {payload[:32]!r}")
    try:
        return int(payload)
    except ValueError:
        # Exceeds sys.get_int_max_str_digits()
        raise PayloadTypeError(
            f"integer with {len(payload)} digits is too large"
        ) from None


def parse_float(payload: bytes) -> float:
    """ Convert a float payload into a float.

    :raises: PayloadTypeError if the payload does not match the decimal
      float grammar or overflows to infinity.
    """
    if FLOAT_PATTERN.fullmatch(payload) is None:
        raise PayloadTypeError(f"invalid float {payload[:32]!r}")
    value = float(payload)
    if math.isinf(value):
        raise PayloadTypeError(f"float {payload[:32]!r} is out of range")
    return value


def format_integer(value: int) -> bytes:
    try:
        return b"%d" % value
    except ValueError:
        raise EncodeError("integer is too large to format") from None


def format_float(value: float) -> bytes:
    """ Return the shortest text that parses back to exactly *value*. """
    if not math.isfinite(value):
        raise EncodeError(f"can not encode non-finite float {value!r}")
    return repr(value).encode("ascii")
