from da_challenge_toolkit.utils.encoding import (
    decode_base64,
    decode_hex,
    to_bytes32,
    to_hex,
    to_int,
)

__all__ = [
    "decode_base64",
    "decode_hex",
    "to_bytes32",
    "to_hex",
    "to_int",
]
