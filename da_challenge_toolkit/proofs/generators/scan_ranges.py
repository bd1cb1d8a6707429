"""Challenge window -> settlement-chain block ranges to scan"""

from typing import List

from da_challenge_toolkit.proofs.types import BlockRange
from da_challenge_toolkit.shared.constants import ScanConstants
from da_challenge_toolkit.shared.exceptions import InvalidWindowException
from da_challenge_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


def derive_scan_ranges(
    window_seconds: int,
    avg_block_time_ms: int,
    current_block: int,
    chunk_size: int = ScanConstants.MAX_BLOCK_RANGE,
) -> List[BlockRange]:
    """
    Split the blocks produced during the challenge window into log-query ranges.

    The window is converted to a block count with the average block time,
    and ``[current_block - count, current_block]`` is cut into ranges of at
    most ``chunk_size + 1`` blocks. Consecutive ranges do not share their
    boundary block.

    Args:
        window_seconds: Challenge window duration in seconds
        avg_block_time_ms: Expected time between settlement blocks in ms
        current_block: Latest settlement block number
        chunk_size: Max width of one range (RPC providers cap eth_getLogs)

    Returns:
        List[BlockRange]: Non-empty, ascending ranges; the last one ends at
        ``current_block``.

    Raises:
        InvalidWindowException: Bad parameters or a scan start below genesis
    """
    context = {
        "window_seconds": window_seconds,
        "avg_block_time_ms": avg_block_time_ms,
        "current_block": current_block,
        "chunk_size": chunk_size,
    }
    if avg_block_time_ms <= 0:
        raise InvalidWindowException(
            f"Average block time must be positive, got {avg_block_time_ms}ms",
            stage="scan_window",
            context=context,
        )
    if chunk_size <= 0:
        raise InvalidWindowException(
            f"Scan chunk size must be positive, got {chunk_size}",
            stage="scan_window",
            context=context,
        )
    if window_seconds < 0:
        raise InvalidWindowException(
            f"Challenge window cannot be negative, got {window_seconds}s",
            stage="scan_window",
            context=context,
        )

    num_blocks_to_scan = window_seconds * 1000 // avg_block_time_ms
    context["num_blocks_to_scan"] = num_blocks_to_scan
    if num_blocks_to_scan >= current_block:
        raise InvalidWindowException(
            f"Challenge window spans {num_blocks_to_scan} blocks, "
            f"more than the {current_block} blocks on chain",
            stage="scan_window",
            context=context,
        )

    cursor = current_block - num_blocks_to_scan
    ranges = []
    while cursor + chunk_size < current_block:
        ranges.append(BlockRange(cursor, cursor + chunk_size))
        cursor += chunk_size + 1
    ranges.append(BlockRange(cursor, current_block))

    _logger.debug(
        f"Challenge window of {window_seconds}s covers {num_blocks_to_scan} "
        f"blocks -> {len(ranges)} ranges from {ranges[0].start} to {current_block}"
    )
    return ranges


def challenge_window_block_ranges(
    settlement,
    avg_block_time_ms: int,
    chunk_size: int = ScanConstants.MAX_BLOCK_RANGE,
) -> List[BlockRange]:
    """
    Read the challenge window and the chain head, then derive the ranges.

    Args:
        settlement: Service exposing ``challenge_window_seconds()`` and
            ``current_block_number()`` (see SettlementChainService)
        avg_block_time_ms: Expected time between settlement blocks in ms
        chunk_size: Max width of one range

    Returns:
        List[BlockRange]: Ranges to scan, oldest first
    """
    window_seconds = settlement.challenge_window_seconds()
    current_block = settlement.current_block_number()
    return derive_scan_ranges(
        window_seconds, avg_block_time_ms, current_block, chunk_size
    )
