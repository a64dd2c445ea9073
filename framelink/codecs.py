from __future__ import annotations
from typing import Any, Dict, Protocol as TypingProtocol

import json

import msgpack

class Codec(TypingProtocol):
    name: str
    def dumps(self, obj: Any) -> bytes: ...
    def loads(self, data: bytes) -> Any: ...

class JSONCodec:
    name = "json"
    def dumps(self, obj: Any) -> bytes:
        return json.dumps(obj, separators=(",", ":")).encode("utf-8")
    def loads(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))

class MsgPackCodec:
    name = "msgpack"
    def dumps(self, obj: Any) -> bytes:
        return msgpack.packb(obj, use_bin_type=True)
    def loads(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)

def clone(codec: Codec, obj: Any) -> Any:
    """Copy a payload across a context boundary, like a structured clone."""
    return codec.loads(codec.dumps(obj))

class Codecs:
    _registry: Dict[str, Codec] = {"json": JSONCodec(), "msgpack": MsgPackCodec()}

    @classmethod
    def get(cls, name: str) -> 'Codec':
        if name not in cls._registry:
            raise ValueError(f"Unknown codec: {name}")
        return cls._registry[name]

    @classmethod
    def resolve(cls, codec: Any) -> 'Codec':
        return cls.get(codec) if isinstance(codec, str) else codec
