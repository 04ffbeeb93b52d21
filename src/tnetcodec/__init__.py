__version__ = "0.1.0"

from .decoder import DEFAULT_MAX_DEPTH, DecoderConfig, decode
from .encoder import encode
from .errors import (
    DecodeError,
    DepthExceededError,
    EncodeError,
    FramingError,
    PayloadTypeError,
    SizeExceededError,
    StructuralError,
    TNetStringError,
    TrailingDataError,
)
from .framing import Frame, Tag, parse_frame
from .native import dumps, from_value, loads, to_value
from .value import (
    NULL,
    Boolean,
    Dictionary,
    Float,
    Integer,
    List,
    Null,
    String,
    Value,
)
