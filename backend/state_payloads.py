"""Wire encodings for snapshots and error events."""

from __future__ import annotations

import gzip
from typing import Any, Dict

import orjson

from arena.snapshot import WorldSnapshot

ERROR_TYPE = "error"

# Favour speed: payloads are compressed every tick for slow observers
COMPRESSION_LEVEL = 5


def serialize_snapshot(snapshot: WorldSnapshot) -> bytes:
    """Encode a snapshot as UTF-8 JSON bytes."""
    return orjson.dumps(snapshot.to_dict())


def compress_payload(payload: bytes, level: int = COMPRESSION_LEVEL) -> bytes:
    """Gzip an encoded payload for observers on a slow link."""
    return gzip.compress(payload, compresslevel=level)


def decompress_payload(payload: bytes) -> bytes:
    return gzip.decompress(payload)


def error_payload(tick: int, error_type: str, message: str) -> bytes:
    """Encode a tick failure for observers."""
    data: Dict[str, Any] = {
        "type": ERROR_TYPE,
        "tick": tick,
        "errorType": error_type,
        "message": message,
    }
    return orjson.dumps(data)
