#!/usr/bin/env python3
"""
Unified CLI for the DA Challenge Toolkit.

Examples:
  - Connectivity
    da-challenge check

  - Challenge window
    da-challenge scan-ranges

  - Commitments
    da-challenge find-commitment --height 1520000

  - Rollup pointers
    da-challenge rollup-pointer --rollup-block 289 --pointer-index 0

  - DA proofs
    da-challenge da-proof --rollup-block 289
    da-challenge da-proof --height 1520000 --share-start 12 --share-len 4 --output proof.json
"""

import argparse
from typing import List, Optional

from da_challenge_toolkit.commands.helpers import (
    handle_command_error,
    unwrap_or_exit,
)
from da_challenge_toolkit.commands.validation import (
    validate_eth_address,
    validate_non_negative,
    validate_positive,
)
from da_challenge_toolkit.proofs import CelestiaPointer, DAChallengeProofs
from da_challenge_toolkit.shared.config import DAConfig
from da_challenge_toolkit.shared.exceptions import ConfigurationException
from da_challenge_toolkit.shared.retry import NO_RETRY_CONFIG
from da_challenge_toolkit.utils.formatters import (
    console,
    create_ranges_table,
    format_hash,
    save_json_output,
    to_json,
)


def _build_config(args: argparse.Namespace) -> DAConfig:
    config = DAConfig.from_env()
    return config.with_overrides(
        ethereum_rpc=args.ethereum_rpc,
        celestia_rpc=args.celestia_rpc,
        blobstreamx_address=(
            validate_eth_address(args.blobstreamx, "blobstreamx")
            if args.blobstreamx
            else None
        ),
        challenge_address=(
            validate_eth_address(args.challenge, "challenge")
            if args.challenge
            else None
        ),
        canonical_state_chain_address=(
            validate_eth_address(
                args.canonical_state_chain, "canonical_state_chain"
            )
            if args.canonical_state_chain
            else None
        ),
        block_time_ms=(
            validate_positive(args.block_time_ms, "block_time_ms")
            if args.block_time_ms is not None
            else None
        ),
        scan_chunk_size=(
            validate_positive(args.chunk_size, "chunk_size")
            if args.chunk_size is not None
            else None
        ),
    )


def _manager(args: argparse.Namespace) -> DAChallengeProofs:
    attempts = validate_positive(args.max_retries, "max_retries")
    return DAChallengeProofs(
        _build_config(args),
        retry_config=NO_RETRY_CONFIG.with_attempts(attempts),
    )


def _resolve_rollup_block(
    proofs: DAChallengeProofs, rollup_block: Optional[int]
) -> int:
    if rollup_block is not None:
        return validate_non_negative(rollup_block, "rollup_block")
    return unwrap_or_exit(proofs.latest_rollup_block())


def cmd_check(args: argparse.Namespace) -> None:
    with _manager(args) as proofs:
        status = unwrap_or_exit(proofs.check_connections())
    console.print(f"Settlement chain id: {status['chain_id']}")
    console.print(
        f"Celestia network: {status['network']} "
        f"(height {status['latest_height']})"
    )


def cmd_scan_ranges(args: argparse.Namespace) -> None:
    with _manager(args) as proofs:
        ranges = unwrap_or_exit(proofs.get_scan_ranges())

    if args.json:
        data = {"ranges": [[r.start, r.end] for r in ranges]}
        if args.output:
            save_json_output(data, args.output)
        else:
            console.print_json(to_json(data))
        return

    console.print(
        f"[bold]{len(ranges)} ranges[/bold] covering blocks "
        f"{ranges[0].start}-{ranges[-1].end}"
    )
    console.print(create_ranges_table(ranges))


def cmd_find_commitment(args: argparse.Namespace) -> None:
    height = validate_non_negative(args.height, "height")
    with _manager(args) as proofs:
        commitment = unwrap_or_exit(proofs.find_commitment(height))

    if args.json:
        data = commitment.to_dict()
        if args.output:
            save_json_output(data, args.output)
        else:
            console.print_json(to_json(data))
        return

    console.print(f"[bold]Commitment for height {height}[/bold]")
    console.print(f"Proof nonce: {commitment.proof_nonce}")
    console.print(
        f"Celestia blocks: [{commitment.start_block}, {commitment.end_block})"
    )
    if commitment.data_commitment is not None:
        console.print(
            f"Data commitment: {format_hash('0x' + commitment.data_commitment.hex())}"
        )
    if commitment.block_number is not None:
        console.print(f"Emitted in block: {commitment.block_number}")


def cmd_rollup_pointer(args: argparse.Namespace) -> None:
    pointer_index = validate_non_negative(args.pointer_index, "pointer_index")
    with _manager(args) as proofs:
        rollup_block = _resolve_rollup_block(proofs, args.rollup_block)
        pointer = unwrap_or_exit(
            proofs.get_pointer(rollup_block, pointer_index)
        )
    console.print(f"Rollup block {rollup_block}, pointer {pointer_index}:")
    console.print_json(to_json(pointer.to_dict()))


def cmd_da_proof(args: argparse.Namespace) -> None:
    pointer = None
    if args.height is not None:
        if args.share_start is None or args.share_len is None:
            raise ValueError(
                "--height requires --share-start and --share-len"
            )
        pointer = CelestiaPointer(
            height=validate_non_negative(args.height, "height"),
            share_start=validate_non_negative(args.share_start, "share_start"),
            share_len=validate_positive(args.share_len, "share_len"),
        )
    pointer_index = validate_non_negative(args.pointer_index, "pointer_index")

    with _manager(args) as proofs:
        if pointer is not None:
            commitment = unwrap_or_exit(proofs.find_commitment(pointer.height))
            result = proofs.get_da_proof(pointer, commitment)
        else:
            rollup_block = _resolve_rollup_block(proofs, args.rollup_block)
            result = proofs.get_rollup_da_proof(rollup_block, pointer_index)
        proof = unwrap_or_exit(result)

    data = proof.to_dict()
    if args.abi:
        data = {**data, "abiEncoded": "0x" + proof.abi_encode().hex()}

    if args.output:
        console.print(
            f"DA proof for height {proof.data_root_tuple.height} generated."
        )
        save_json_output(data, args.output)
    else:
        console.print_json(to_json(data))


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--ethereum-rpc", type=str, help="Settlement chain RPC URL")
    p.add_argument("--celestia-rpc", type=str, help="Celestia consensus RPC URL")
    p.add_argument("--blobstreamx", type=str, help="BlobstreamX address")
    p.add_argument("--challenge", type=str, help="Challenge contract address")
    p.add_argument(
        "--canonical-state-chain",
        type=str,
        help="CanonicalStateChain address",
    )
    p.add_argument(
        "--block-time-ms",
        type=int,
        help="Average settlement block time in ms",
    )
    p.add_argument(
        "--chunk-size", type=int, help="Max blocks per log query"
    )
    p.add_argument(
        "--max-retries",
        type=int,
        default=1,
        help="Attempts per RPC stage on connectivity errors (default: 1)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="da-challenge",
        description="Unified CLI for the DA Challenge Toolkit",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # check
    p_check = sub.add_parser("check", help="Check both RPC endpoints")
    _add_common(p_check)
    p_check.set_defaults(func=cmd_check)

    # scan-ranges
    p_sr = sub.add_parser(
        "scan-ranges", help="Block ranges covering the challenge window"
    )
    _add_common(p_sr)
    p_sr.add_argument("--json", action="store_true", help="Output JSON")
    p_sr.add_argument("--output", type=str, help="Output filename")
    p_sr.set_defaults(func=cmd_scan_ranges)

    # find-commitment
    p_fc = sub.add_parser(
        "find-commitment", help="Find the commitment covering a height"
    )
    _add_common(p_fc)
    p_fc.add_argument("--height", type=int, required=True)
    p_fc.add_argument("--json", action="store_true", help="Output JSON")
    p_fc.add_argument("--output", type=str, help="Output filename")
    p_fc.set_defaults(func=cmd_find_commitment)

    # rollup-pointer
    p_rp = sub.add_parser(
        "rollup-pointer", help="Read a Celestia pointer from a rollup header"
    )
    _add_common(p_rp)
    p_rp.add_argument(
        "--rollup-block", type=int, help="Header index (default: chain head)"
    )
    p_rp.add_argument("--pointer-index", type=int, default=0)
    p_rp.set_defaults(func=cmd_rollup_pointer)

    # da-proof
    p_dp = sub.add_parser("da-proof", help="Generate a DA proof")
    _add_common(p_dp)
    p_dp.add_argument(
        "--rollup-block", type=int, help="Header index (default: chain head)"
    )
    p_dp.add_argument("--pointer-index", type=int, default=0)
    p_dp.add_argument(
        "--height", type=int, help="Celestia height (skips the rollup header)"
    )
    p_dp.add_argument("--share-start", type=int)
    p_dp.add_argument("--share-len", type=int)
    p_dp.add_argument(
        "--abi", action="store_true", help="Include the ABI-encoded proof"
    )
    p_dp.add_argument("--output", type=str, help="Output filename")
    p_dp.set_defaults(func=cmd_da_proof)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (ValueError, ConfigurationException) as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
