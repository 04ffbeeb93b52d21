"""
Conversion between value trees and plain Python objects.

.. code-block:: python

    >>> tnetcodec.dumps({"hello": [1, 2.5, None]})
    b'25:5:hello,13:1:1#3:2.5^0:~]}'
    >>> tnetcodec.loads(b'25:5:hello,13:1:1#3:2.5^0:~]}')
    {'hello': [1, 2.5, None]}

Mappings and dataclass instances become dictionaries, lists and tuples
become lists and enum members become the string of their name. Strings are
returned as ``str`` unless ``encoding`` is None, in which case the raw bytes
are returned.

Passing ``cls`` to ``from_value`` or ``loads`` rebuilds dataclasses, enum
members and typed containers, the reverse of how ``to_value`` flattens them.

``to_value`` and untyped ``from_value`` walk the tree with an explicit stack,
so deeply nested input does not depend on the interpreter's recursion limit.
Typed conversion recurses once per level and stops at ``DEFAULT_MAX_DEPTH``.
"""

import dataclasses
import enum
import types
from collections.abc import Mapping
from typing import (
    Any,
    Iterator,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .decoder import DEFAULT_MAX_DEPTH, DecoderConfig, decode
from .encoder import encode
from .errors import DepthExceededError, EncodeError, PayloadTypeError
from .framing import Tag
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


def _encode_text(text: str, encoding: str) -> bytes:
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise EncodeError(f"can not encode str as {encoding}: {exc.reason}") from None


def _key_to_value(key: Any, encoding: str) -> String:
    if isinstance(key, String):
        return key
    if isinstance(key, str):
        return String(_encode_text(key, encoding))
    if isinstance(key, (bytes, bytearray, memoryview)):
        return String(key)
    raise EncodeError(f"dictionary keys must be strings, got {type(key).__name__}")


def _scalar_to_value(obj: Any, encoding: str) -> Optional[Value]:
    """ Return the value for a scalar object, or None for anything else. """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, enum.Enum):
        return String(_encode_text(obj.name, encoding))
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return String(_encode_text(obj, encoding))
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return String(obj)
    return None


class _Builder(object):
    """ Collects the converted children of a container object. """

    __slots__ = ("tag", "children", "items", "key")

    def __init__(self, tag: Tag, children: Iterator) -> None:
        self.tag = tag
        self.children = children
        self.items = []
        self.key = None

    def next_child(self) -> Any:
        if self.tag is Tag.DICTIONARY:
            self.key, child = next(self.children)
            return child
        return next(self.children)

    def add(self, value: Value) -> None:
        if self.tag is Tag.DICTIONARY:
            self.items.append((self.key, value))
        else:
            self.items.append(value)

    def build(self) -> Value:
        if self.tag is Tag.DICTIONARY:
            return Dictionary(self.items)
        return List(self.items)


def _open_container(obj: Any, encoding: str) -> Optional[_Builder]:
    if isinstance(obj, Mapping):
        pairs = ((_key_to_value(k, encoding), v) for k, v in obj.items())
        return _Builder(Tag.DICTIONARY, pairs)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        pairs = (
            (String(_encode_text(f.name, encoding)), getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        )
        return _Builder(Tag.DICTIONARY, pairs)
    if isinstance(obj, (list, tuple)):
        return _Builder(Tag.LIST, iter(obj))
    return None


def to_value(
    obj: Any, encoding: str = "utf-8", max_depth: int = DEFAULT_MAX_DEPTH
) -> Value:
    """ Convert a plain Python object into a value tree.

    :param obj: The object to convert.

    :param encoding: The character encoding applied to str objects.

    :param max_depth: The maximum container nesting depth. This also stops
      containers that refer to themselves.

    :raises: EncodeError if the object, or anything it contains, can not be
      represented.
    """
    stack = []
    while True:
        value = _scalar_to_value(obj, encoding)
        if value is None:
            builder = _open_container(obj, encoding)
            if builder is None:
                raise EncodeError(f"Object type not supported: {type(obj).__name__}")
            if len(stack) >= max_depth:
                raise EncodeError(f"nesting exceeds maximum depth of {max_depth}")
            stack.append(builder)
        elif not stack:
            return value
        else:
            stack[-1].add(value)

        # Move on to the next unconverted child, finishing every container
        # that has run out of children along the way.
        while True:
            builder = stack[-1]
            try:
                obj = builder.next_child()
                break
            except StopIteration:
                stack.pop()
                value = builder.build()
                if not stack:
                    return value
                stack[-1].add(value)


def _decode_text(data: bytes, encoding: Optional[str]) -> Union[str, bytes]:
    if encoding is None:
        return data
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise PayloadTypeError(
            f"string is not valid {encoding}: {exc.reason}"
        ) from None


class _Unpacker(object):
    """ Collects the native children of a list or dictionary value. """

    __slots__ = ("is_dict", "children", "result", "key", "encoding")

    def __init__(self, value: Value, encoding: Optional[str]) -> None:
        self.is_dict = isinstance(value, Dictionary)
        self.children = iter(value.items)
        self.result = {} if self.is_dict else []
        self.key = None
        self.encoding = encoding

    def next_child(self) -> Value:
        if self.is_dict:
            key, child = next(self.children)
            self.key = _decode_text(key.value, self.encoding)
            return child
        return next(self.children)

    def add(self, obj: Any) -> None:
        if self.is_dict:
            self.result[self.key] = obj
        else:
            self.result.append(obj)


def _scalar_from_value(value: Value, encoding: Optional[str]) -> Any:
    if isinstance(value, String):
        return _decode_text(value.value, encoding)
    if isinstance(value, (Integer, Float, Boolean)):
        return value.value
    if value.tag is Tag.NULL:
        return None
    raise TypeError(f"Expected a Value instance, got {type(value).__name__}")


def _untyped_from_value(value: Value, encoding: Optional[str]) -> Any:
    stack = []
    node = value
    while True:
        if isinstance(node, (List, Dictionary)):
            stack.append(_Unpacker(node, encoding))
        else:
            obj = _scalar_from_value(node, encoding)
            if not stack:
                return obj
            stack[-1].add(obj)

        while True:
            unpacker = stack[-1]
            try:
                node = unpacker.next_child()
                break
            except StopIteration:
                stack.pop()
                if not stack:
                    return unpacker.result
                stack[-1].add(unpacker.result)


_NONE_TYPE = type(None)
_UNION_TYPES = (Union, getattr(types, "UnionType", Union))


def _type_name(cls: Any) -> str:
    return getattr(cls, "__name__", None) or repr(cls)


def _mismatch(value: Value, expected: str) -> PayloadTypeError:
    return PayloadTypeError(f"expected {expected}, got {type(value).__name__}")


def _is_optional(cls: Any) -> bool:
    return get_origin(cls) in _UNION_TYPES and _NONE_TYPE in get_args(cls)


def _typed_from_value(
    value: Value, cls: Any, encoding: Optional[str], depth: int
) -> Any:
    """ Convert ``value`` into an instance of ``cls``.

    Containers call back into this function once per nesting level, so the
    recursion is bounded by ``DEFAULT_MAX_DEPTH``.
    """
    if cls is None or cls is Any or cls is object:
        return _untyped_from_value(value, encoding)
    text_encoding = encoding or "utf-8"
    origin = get_origin(cls)

    if origin in _UNION_TYPES:
        arms = [arm for arm in get_args(cls) if arm is not _NONE_TYPE]
        if isinstance(value, Null) and len(arms) < len(get_args(cls)):
            return None
        if len(arms) > 1:
            for arm in arms:
                try:
                    return _typed_from_value(value, arm, encoding, depth)
                except PayloadTypeError:
                    continue
            raise _mismatch(value, " or ".join(_type_name(arm) for arm in arms))
        cls = arms[0]
        if cls is Any or cls is object:
            return _untyped_from_value(value, encoding)
        origin = get_origin(cls)

    if origin is None and isinstance(cls, type):
        if issubclass(cls, Value):
            if not isinstance(value, cls):
                raise _mismatch(value, cls.__name__)
            return value
        if cls is _NONE_TYPE:
            if not isinstance(value, Null):
                raise _mismatch(value, "null")
            return None
        if issubclass(cls, enum.Enum):
            if not isinstance(value, String):
                raise _mismatch(value, f"{cls.__name__} variant name")
            name = _decode_text(value.value, text_encoding)
            try:
                return cls[name]
            except KeyError:
                raise PayloadTypeError(
                    f"unknown {cls.__name__} variant {name!r}"
                ) from None
        if cls is bool:
            if not isinstance(value, Boolean):
                raise _mismatch(value, "bool")
            return value.value
        if cls is int:
            if not isinstance(value, Integer):
                raise _mismatch(value, "int")
            return value.value
        if cls is float:
            if not isinstance(value, (Float, Integer)):
                raise _mismatch(value, "float")
            return float(value.value)
        if cls is str:
            if not isinstance(value, String):
                raise _mismatch(value, "str")
            return _decode_text(value.value, text_encoding)
        if cls is bytes:
            if not isinstance(value, String):
                raise _mismatch(value, "bytes")
            return value.value

    if depth >= DEFAULT_MAX_DEPTH:
        raise DepthExceededError(
            f"nesting exceeds maximum depth of {DEFAULT_MAX_DEPTH}"
        )
    args = get_args(cls)

    if dataclasses.is_dataclass(cls) and isinstance(cls, type):
        if not isinstance(value, Dictionary):
            raise _mismatch(value, cls.__name__)
        # Later duplicates win, as for untyped dictionaries.
        pairs = {}
        for key, item in value.items:
            pairs[_decode_text(key.value, text_encoding)] = item
        hints = get_type_hints(cls)
        kwargs = {}
        for field in dataclasses.fields(cls):
            if not field.init:
                continue
            field_cls = hints.get(field.name, Any)
            if field.name in pairs:
                kwargs[field.name] = _typed_from_value(
                    pairs[field.name], field_cls, encoding, depth + 1
                )
            elif (
                field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            ):
                if not _is_optional(field_cls):
                    raise PayloadTypeError(
                        f"missing field {field.name!r} for {cls.__name__}"
                    )
                kwargs[field.name] = None
        return cls(**kwargs)

    if cls is list or origin is list:
        if not isinstance(value, List):
            raise _mismatch(value, "list")
        item_cls = args[0] if args else None
        result = []
        for item in value:
            result.append(_typed_from_value(item, item_cls, encoding, depth + 1))
        return result

    if cls is tuple or origin is tuple:
        if not isinstance(value, List):
            raise _mismatch(value, "tuple")
        if len(args) == 2 and args[1] is Ellipsis:
            item_types = [args[0]] * len(value)
        elif args == ((),):
            item_types = []
        elif args:
            item_types = list(args)
        else:
            item_types = [None] * len(value)
        if len(item_types) != len(value):
            raise PayloadTypeError(
                f"expected a list of {len(item_types)} items, got {len(value)}"
            )
        result = []
        for item, item_cls in zip(value, item_types):
            result.append(_typed_from_value(item, item_cls, encoding, depth + 1))
        return tuple(result)

    if cls is dict or origin is dict:
        if not isinstance(value, Dictionary):
            raise _mismatch(value, "dict")
        key_cls, item_cls = args if args else (None, None)
        result = {}
        for key, item in value.items:
            result[_typed_from_value(key, key_cls, encoding, depth + 1)] = (
                _typed_from_value(item, item_cls, encoding, depth + 1)
            )
        return result

    raise TypeError(f"unsupported target type {cls!r}")


def from_value(
    value: Value, encoding: Optional[str] = "utf-8", cls: Any = None
) -> Any:
    """ Convert a value tree into plain Python objects.

    :param value: The value tree to convert.

    :param encoding: The character encoding used to turn strings and keys
      into str objects. If None then bytes are returned instead.

    :param cls: An optional target type. Dataclasses are built from
      dictionaries by field name, enum members are looked up by name and
      ``Optional`` fields accept null or may be left out. ``list``, ``tuple``
      and ``dict`` (and their ``typing`` forms), ``bool``, ``int``,
      ``float``, ``str`` and ``bytes`` are also accepted. When None the
      untyped objects are returned.

    :returns: A Python object. Dictionaries become dicts, so when a key is
      repeated the last pair wins.

    :raises: PayloadTypeError if a string can not be decoded or the value
      does not match ``cls``. TypeError if ``cls`` is not supported.
    """
    if not isinstance(value, Value):
        raise TypeError(f"Expected a Value instance, got {type(value).__name__}")
    if cls is None:
        return _untyped_from_value(value, encoding)
    return _typed_from_value(value, cls, encoding, 0)


def dumps(obj: Any, encoding: str = "utf-8") -> bytes:
    """ Encode a plain Python object as a TNetString. """
    return encode(to_value(obj, encoding=encoding))


def loads(
    data: Union[bytes, bytearray, memoryview, str],
    config: Optional[DecoderConfig] = None,
    encoding: Optional[str] = "utf-8",
    cls: Any = None,
) -> Any:
    """ Decode a TNetString into plain Python objects, or into ``cls``. """
    return from_value(decode(data, config), encoding=encoding, cls=cls)
