"""Length-prefixed UTF-8 frames.

Each frame is a 2-byte unsigned big-endian byte count followed by the UTF-8
payload, the shape written by Java's DataOutputStream.writeUTF.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from infixcalc.errors import ConnectionClosed, ProtocolError

# Ends a session; never forwarded to the engine.
STOP = "#"

MAX_FRAME_BYTES = 0xFFFF
_HEADER = struct.Struct(">H")


def encode_frame(text: str) -> bytes:
    payload = text.encode("utf-8")
    if len(payload) > MAX_FRAME_BYTES:
        raise ProtocolError(f"Frame too long: {len(payload)} bytes (max {MAX_FRAME_BYTES})")
    return _HEADER.pack(len(payload)) + payload


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_frame(stream: BinaryIO) -> str:
    """Read one frame from a binary stream.

    Raises:
        ConnectionClosed: EOF before the first header byte.
        ProtocolError: truncated header/payload or invalid UTF-8.
    """
    header = _read_exact(stream, _HEADER.size)
    if not header:
        raise ConnectionClosed("Peer closed the connection")
    if len(header) < _HEADER.size:
        raise ProtocolError("Truncated frame header")

    (length,) = _HEADER.unpack(header)
    payload = _read_exact(stream, length)
    if len(payload) < length:
        raise ProtocolError(f"Truncated frame: expected {length} bytes, got {len(payload)}")
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProtocolError(f"Invalid UTF-8 in frame: {e}") from e
