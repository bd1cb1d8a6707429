"""Byte decoding helpers for RPC payloads and length-checked hashes."""

import base64
import binascii
from typing import Any, Optional, Union

from hexbytes import HexBytes

from da_challenge_toolkit.shared.constants import CelestiaConstants
from da_challenge_toolkit.shared.exceptions import MalformedProofException

BytesLike = Union[bytes, bytearray, str]


def decode_hex(value: BytesLike) -> bytes:
    """Decode hex (with or without 0x, any case) into bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return bytes(HexBytes(value))
    except (TypeError, ValueError) as e:
        raise MalformedProofException(
            f"Invalid hex value {value!r}: {e}", stage="decode"
        )


def decode_base64(value: Optional[BytesLike]) -> bytes:
    """Decode a base64 string as emitted by Tendermint's JSON encoding."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedProofException(
            f"Invalid base64 value {value!r}: {e}", stage="decode"
        )


def to_bytes32(
    value: BytesLike, what: str = "hash", stage: Optional[str] = None
) -> bytes:
    """
    Convert ``value`` to exactly 32 bytes.

    Never truncates or pads: any other length raises MalformedProofException.
    """
    raw = decode_hex(value) if isinstance(value, str) else bytes(value)
    if len(raw) != CelestiaConstants.HASH_SIZE:
        raise MalformedProofException(
            f"{what} must be {CelestiaConstants.HASH_SIZE} bytes, got {len(raw)}",
            stage=stage,
            context={"field": what, "length": len(raw)},
        )
    return raw


def to_int(value: Any, what: str = "value") -> int:
    """Tendermint encodes 64-bit integers as JSON strings."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedProofException(
            f"{what} must be an integer, got {value!r}", stage="decode"
        )


def to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()
