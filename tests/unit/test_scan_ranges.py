"""
Unit tests for challenge window -> block range derivation.
"""

import pytest

from da_challenge_toolkit.proofs.generators.scan_ranges import (
    challenge_window_block_ranges,
    derive_scan_ranges,
)
from da_challenge_toolkit.proofs.types import BlockRange
from da_challenge_toolkit.shared.exceptions import (
    InvalidWindowException,
    NonRetryableException,
)


class TestDeriveScanRanges:
    """Tests for derive_scan_ranges."""

    def test_window_fits_in_one_range(self):
        """One day at 12s blocks from block 20000 is a single range."""
        ranges = derive_scan_ranges(86400, 12000, 20000, chunk_size=10000)
        assert ranges == [BlockRange(12800, 20000)]

    def test_window_split_into_chunks(self):
        """Ranges advance by chunk + 1 and the last one ends at the head."""
        ranges = derive_scan_ranges(86400, 12000, 20000, chunk_size=1000)

        assert len(ranges) == 8
        assert ranges[0] == BlockRange(12800, 13800)
        assert ranges[1] == BlockRange(13801, 14801)
        assert ranges[-2] == BlockRange(18806, 19806)
        assert ranges[-1] == BlockRange(19807, 20000)

    @pytest.mark.parametrize(
        "window,block_ms,current,chunk",
        [
            (86400, 12000, 20000, 1000),
            (3600, 2000, 5000, 7),
            (100, 1000, 101, 1),
            (604800, 12000, 21000000, 10000),
            (0, 12000, 50, 10),
        ],
    )
    def test_ranges_are_contiguous_and_bounded(
        self, window, block_ms, current, chunk
    ):
        """Ranges tile [current - n, current] without gaps or overlap."""
        ranges = derive_scan_ranges(window, block_ms, current, chunk)
        num_blocks = window * 1000 // block_ms

        assert ranges
        assert ranges[0].start == current - num_blocks
        assert ranges[-1].end == current
        for block_range in ranges:
            assert block_range.start <= block_range.end
            assert block_range.end - block_range.start <= chunk
        for prev, nxt in zip(ranges, ranges[1:]):
            assert nxt.start == prev.end + 1

    def test_empty_window_scans_head_only(self):
        """A zero-second window still yields the head block."""
        ranges = derive_scan_ranges(0, 12000, 500)
        assert ranges == [BlockRange(500, 500)]

    def test_integer_division_of_window(self):
        """Partial blocks are dropped: 25s at 12s blocks is 2 blocks."""
        ranges = derive_scan_ranges(25, 12000, 100)
        assert ranges == [BlockRange(98, 100)]

    def test_window_reaching_genesis_is_invalid(self):
        """A window as long as the chain is rejected."""
        with pytest.raises(InvalidWindowException) as exc_info:
            derive_scan_ranges(12000, 12000, 1000)

        assert exc_info.value.stage == "scan_window"
        assert exc_info.value.context["num_blocks_to_scan"] == 1000

    def test_window_one_block_short_of_genesis(self):
        """Scanning may start at block 1."""
        ranges = derive_scan_ranges(12000, 12000, 1001)
        assert ranges[0].start == 1

    def test_zero_head_is_invalid(self):
        with pytest.raises(InvalidWindowException):
            derive_scan_ranges(0, 12000, 0)

    @pytest.mark.parametrize("block_ms", [0, -12000])
    def test_non_positive_block_time_is_invalid(self, block_ms):
        with pytest.raises(InvalidWindowException):
            derive_scan_ranges(86400, block_ms, 20000)

    @pytest.mark.parametrize("chunk", [0, -1])
    def test_non_positive_chunk_is_invalid(self, chunk):
        with pytest.raises(InvalidWindowException):
            derive_scan_ranges(86400, 12000, 20000, chunk_size=chunk)

    def test_negative_window_is_invalid(self):
        with pytest.raises(InvalidWindowException):
            derive_scan_ranges(-1, 12000, 20000)

    def test_invalid_window_is_not_retryable(self):
        """Bad parameters never succeed on retry."""
        with pytest.raises(NonRetryableException):
            derive_scan_ranges(86400, 0, 20000)


class TestChallengeWindowBlockRanges:
    """Tests for reading the window from the settlement chain."""

    def test_reads_window_then_head(self, mock_settlement):
        ranges = challenge_window_block_ranges(mock_settlement, 12000, 10000)

        assert ranges == [BlockRange(12800, 20000)]
        mock_settlement.challenge_window_seconds.assert_called_once_with()
        mock_settlement.current_block_number.assert_called_once_with()

    def test_errors_propagate(self, mock_settlement):
        """Query failures are not caught by the scanner."""
        from da_challenge_toolkit.shared.exceptions import QueryException

        mock_settlement.challenge_window_seconds.side_effect = QueryException(
            "reverted", stage="challenge_window"
        )
        with pytest.raises(QueryException):
            challenge_window_block_ranges(mock_settlement, 12000, 10000)
        mock_settlement.current_block_number.assert_not_called()


class TestBlockRange:
    """Tests for the BlockRange value type."""

    def test_unpacks_as_pair(self):
        start, end = BlockRange(5, 9)
        assert (start, end) == (5, 9)

    def test_len_is_inclusive(self):
        assert len(BlockRange(5, 9)) == 5
        assert len(BlockRange(7, 7)) == 1

    def test_start_after_end_rejected(self):
        with pytest.raises(ValueError):
            BlockRange(10, 9)
