"""Commitment locator: find the Blobstream commitment covering a height"""

from typing import Iterable

from da_challenge_toolkit.proofs.types import BlockRange, CommitmentEvent
from da_challenge_toolkit.shared.exceptions import CommitmentNotFoundException
from da_challenge_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


def find_commitment(
    settlement,
    ranges: Iterable[BlockRange],
    target_height: int,
) -> CommitmentEvent:
    """
    Scan block ranges oldest to newest for the commitment covering a height.

    Events are inspected in the order the node returns them and the first
    one with ``start_block <= target_height < end_block`` wins; later
    ranges are not queried once a match is found.

    Args:
        settlement: Service exposing ``filter_commitment_events(start, end)``
        ranges: Settlement-chain block ranges, ascending
        target_height: Celestia height to locate

    Returns:
        CommitmentEvent: The first commitment covering ``target_height``

    Raises:
        CommitmentNotFoundException: No scanned commitment covers the height;
            carries the highest end block seen
        ConnectivityException / QueryException: From the event query
    """
    last_seen_end = 0
    ranges_scanned = 0

    for block_range in ranges:
        events = settlement.filter_commitment_events(
            block_range.start, block_range.end
        )
        ranges_scanned += 1

        for event in events:
            if event.end_block > last_seen_end:
                last_seen_end = event.end_block

            if event.covers(target_height):
                _logger.info(
                    f"Height {target_height} is committed by nonce "
                    f"{event.proof_nonce} [{event.start_block}, {event.end_block})"
                )
                return event

        _logger.debug(
            f"No commitment for height {target_height} in blocks "
            f"{block_range.start}-{block_range.end}"
        )

    raise CommitmentNotFoundException(
        target_height,
        last_seen_end,
        context={"ranges_scanned": ranges_scanned},
    )
