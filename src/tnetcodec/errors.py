""" This module contains the exceptions raised by the codec. """

from typing import Optional


class TNetStringError(Exception):
    """ Base class for all errors raised by this library. """


class DecodeError(TNetStringError, ValueError):
    """ Raised when a buffer is not a valid TNetString.

    :param message: A description of the problem.

    :param offset: The byte offset of the frame that caused the problem,
      if known.
    """

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


class FramingError(DecodeError):
    """ A length prefix, colon or tag byte is missing or malformed, or the
    payload is truncated.
    """


class PayloadTypeError(DecodeError):
    """ A payload is inconsistent with its tag (e.g. ``3:abc#``). """


class StructuralError(DecodeError):
    """ An aggregate is malformed: a child overruns its parent, a dictionary
    key is not a string or a dictionary key has no value.
    """


class DepthExceededError(DecodeError):
    """ Aggregates are nested deeper than the configured maximum. """


class SizeExceededError(DecodeError):
    """ The cumulative payload size exceeds the configured maximum. """


class TrailingDataError(DecodeError):
    """ Bytes remain after the top-level frame. """


class EncodeError(TNetStringError, ValueError):
    """ Raised when a value can not be represented as a TNetString. """
