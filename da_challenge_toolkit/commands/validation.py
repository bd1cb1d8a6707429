from eth_utils import is_address, to_checksum_address


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_non_negative(value: int, param_name: str) -> int:
    """Validate block heights, indexes and share offsets"""
    if value is None or value < 0:
        raise ValueError(f"Invalid {param_name}: must be >= 0, got {value}")
    return value


def validate_positive(value: int, param_name: str) -> int:
    """Validate block times, chunk sizes and share counts"""
    if value is None or value <= 0:
        raise ValueError(f"Invalid {param_name}: must be > 0, got {value}")
    return value
