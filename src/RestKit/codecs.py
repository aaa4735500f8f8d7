# === NAVMAP v1 ===
# {
#   "module": "RestKit.codecs",
#   "purpose": "Content-type driven marshal/unmarshal dispatch (JSON, YAML, plain text).",
#   "sections": [
#     {"id": "target", "name": "Target", "anchor": "class-target", "kind": "class"},
#     {"id": "codec", "name": "Codec", "anchor": "class-codec", "kind": "class"},
#     {"id": "codecregistry", "name": "CodecRegistry", "anchor": "class-codecregistry", "kind": "class"},
#     {"id": "marshal", "name": "marshal", "anchor": "function-marshal", "kind": "function"},
#     {"id": "unmarshal", "name": "unmarshal", "anchor": "function-unmarshal", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Content codec registry.

A codec binds one content-type identifier to an encoder and a decoder.  The
client's default ``marshaler`` and ``unmarshaler`` are :func:`marshal` and
:func:`unmarshal`, both dispatching through :data:`default_registry`.

Decoding needs somewhere to put the result.  Callers pass a :class:`Target`
(optionally typed, validated through pydantic), any object with a
``write(bytes)`` method to receive the raw body verbatim, or ``None`` to
discard the body.

Example:
    >>> buf = io.BytesIO()
    >>> marshal(buf, {"title": "hello"}, CONTENT_TYPE_JSON)
    'application/json'
    >>> post = Target(Post)
    >>> unmarshal(io.BytesIO(buf.getvalue()), post, CONTENT_TYPE_JSON)
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

import yaml
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import DecodeFailure, PayloadTypeMismatchError, UnknownMediaTypeError

logger = logging.getLogger(__name__)

CONTENT_TYPE_TEXT = "text/plain"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_YAML = "application/yaml"

T = TypeVar("T")

MarshalerFunc = Callable[[BinaryIO, Any, str], str]
UnmarshalerFunc = Callable[[BinaryIO, Any, str], None]


class Target(Generic[T]):
    """Destination for a decoded response body.

    ``Target()`` keeps the decoded value as-is; ``Target(SomeType)`` validates
    it into ``SomeType`` (pydantic models, dataclasses, ``list[Model]``,
    ``str`` ...).  The result is available as :attr:`value`.
    """

    def __init__(self, type_: Any = None) -> None:
        self.type = type_
        self.value: Optional[T] = None
        self._adapter: Optional[TypeAdapter] = None

    def accepts_text(self) -> bool:
        return self.type is None or self.type is str

    def set(self, data: Any) -> None:
        """Store ``data``, validating it against :attr:`type` when one is set."""
        if self.type is None:
            self.value = data
            return
        if self._adapter is None:
            self._adapter = TypeAdapter(self.type)
        try:
            self.value = self._adapter.validate_python(data)
        except PydanticValidationError as exc:
            raise DecodeFailure(f"decoded body does not match {self.type!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"Target(type={self.type!r}, value={self.value!r})"


@dataclass(frozen=True)
class Codec:
    """A marshal/unmarshal pair bound to one content-type identifier."""

    media_type: str
    encode: Callable[[BinaryIO, Any], None]
    decode: Callable[[BinaryIO, Target], None]


def normalize_media_type(media_type: str) -> str:
    """Drop parameters (``; charset=...``) and case from a content-type identifier."""
    return media_type.split(";", 1)[0].strip().lower()


def _jsonable(payload: Any) -> Any:
    try:
        return to_jsonable_python(payload, by_alias=True)
    except PydanticSerializationError as exc:
        raise PayloadTypeMismatchError(
            f"payload of type {type(payload).__name__} is not serializable: {exc}"
        ) from exc


def _encode_json(writer: BinaryIO, payload: Any) -> None:
    text = json.dumps(_jsonable(payload), separators=(",", ":"), ensure_ascii=False)
    writer.write(text.encode("utf-8") + b"\n")


def _decode_json(reader: BinaryIO, target: Target) -> None:
    try:
        data = json.load(reader)
    except ValueError as exc:
        raise DecodeFailure(f"decode json: {exc}") from exc
    target.set(data)


def _encode_yaml(writer: BinaryIO, payload: Any) -> None:
    text = yaml.safe_dump(_jsonable(payload), sort_keys=False, allow_unicode=True)
    writer.write(text.encode("utf-8"))


def _decode_yaml(reader: BinaryIO, target: Target) -> None:
    try:
        data = yaml.safe_load(reader.read())
    except yaml.YAMLError as exc:
        raise DecodeFailure(f"decode yaml: {exc}") from exc
    target.set(data)


def _renders_as_text(value: Any) -> bool:
    cls = type(value)
    return cls.__str__ is not object.__str__ or cls.__repr__ is not object.__repr__


def _encode_text(writer: BinaryIO, payload: Any) -> None:
    if isinstance(payload, (bytes, bytearray)):
        writer.write(bytes(payload))
        return
    if not isinstance(payload, str) and not _renders_as_text(payload):
        raise PayloadTypeMismatchError(
            f"payload of type {type(payload).__name__} does not render as text"
        )
    writer.write(str(payload).encode("utf-8"))


def _decode_text(reader: BinaryIO, target: Target) -> None:
    if not target.accepts_text():
        raise PayloadTypeMismatchError("target type is not string")
    try:
        text = reader.read().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeFailure(f"decode text: {exc}") from exc
    target.set(text)


JSON_CODEC = Codec(CONTENT_TYPE_JSON, _encode_json, _decode_json)
YAML_CODEC = Codec(CONTENT_TYPE_YAML, _encode_yaml, _decode_yaml)
TEXT_CODEC = Codec(CONTENT_TYPE_TEXT, _encode_text, _decode_text)


def _is_byte_sink(target: Any) -> bool:
    return not isinstance(target, Target) and callable(getattr(target, "write", None))


class CodecRegistry:
    """Maps content-type identifiers to codecs.

    Identifiers are unique; registering a second codec for the same
    identifier raises :class:`ValueError`.
    """

    def __init__(self, codecs: Iterable[Codec] = ()) -> None:
        self._codecs: Dict[str, Codec] = {}
        for codec in codecs:
            self.register(codec)

    def register(self, codec: Codec) -> None:
        key = normalize_media_type(codec.media_type)
        if key in self._codecs:
            raise ValueError(f"codec already registered for {key!r}")
        self._codecs[key] = codec
        logger.debug("Codec registered", extra={"media_type": key})

    def get(self, media_type: str) -> Codec:
        try:
            return self._codecs[normalize_media_type(media_type)]
        except KeyError:
            raise UnknownMediaTypeError(media_type) from None

    def media_types(self) -> List[str]:
        return sorted(self._codecs)

    def marshal(self, writer: BinaryIO, payload: Any, content_type: str) -> str:
        """Encode ``payload`` into ``writer`` and return the resolved content type.

        ``None`` payloads produce an empty body and return ``content_type``
        unchanged.
        """
        if payload is None:
            return content_type
        codec = self.get(content_type)
        codec.encode(writer, payload)
        return codec.media_type

    def unmarshal(self, reader: BinaryIO, target: Any, content_type: str) -> None:
        """Decode ``reader`` into ``target`` according to ``content_type``.

        Byte sinks receive the raw body without content-type dispatch and a
        ``None`` target discards it.
        """
        if target is None:
            return
        if _is_byte_sink(target):
            shutil.copyfileobj(reader, target)
            return
        codec = self.get(content_type)
        if not isinstance(target, Target):
            raise PayloadTypeMismatchError(
                f"unsupported decode target of type {type(target).__name__}"
            )
        codec.decode(reader, target)


default_registry = CodecRegistry([JSON_CODEC, YAML_CODEC, TEXT_CODEC])


def marshal(writer: BinaryIO, payload: Any, content_type: str) -> str:
    """Default marshaler: encode through :data:`default_registry`."""
    return default_registry.marshal(writer, payload, content_type)


def unmarshal(reader: BinaryIO, target: Any, content_type: str) -> None:
    """Default unmarshaler: decode through :data:`default_registry`."""
    default_registry.unmarshal(reader, target, content_type)


__all__ = [
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_TEXT",
    "CONTENT_TYPE_YAML",
    "Codec",
    "CodecRegistry",
    "JSON_CODEC",
    "MarshalerFunc",
    "TEXT_CODEC",
    "Target",
    "UnmarshalerFunc",
    "YAML_CODEC",
    "default_registry",
    "marshal",
    "normalize_media_type",
    "unmarshal",
]
