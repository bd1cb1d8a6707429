"""
Celestia service module for the data-availability side of a DA challenge.

Talks JSON-RPC to a Celestia consensus node (celestia-core / Tendermint
RPC) over httpx and decodes the three payloads the proof pipeline needs:
block data roots, shares proofs and data root inclusion proofs.

Tendermint's JSON encoding is followed: 64-bit integers travel as strings,
byte slices as base64 and hashes (data roots, row roots) as hex.
"""

import itertools
from typing import Any, Dict, Optional

import httpx

from da_challenge_toolkit.proofs.types import (
    MerkleProof,
    NMTRangeProof,
    RowProof,
    SharesProof,
)
from da_challenge_toolkit.shared.config import DAConfig
from da_challenge_toolkit.shared.exceptions import (
    BlockNotFoundException,
    ConnectivityException,
    MalformedProofException,
    QueryException,
)
from da_challenge_toolkit.shared.logging import get_logger
from da_challenge_toolkit.shared.services.http_client import new_client
from da_challenge_toolkit.utils.encoding import (
    decode_base64,
    decode_hex,
    to_int,
)

_logger = get_logger(__name__)


class CelestiaService:
    """JSON-RPC client for a Celestia consensus node."""

    BLOCK_METHOD = "block"
    PROVE_SHARES_METHOD = "prove_shares"
    DATA_ROOT_INCLUSION_METHOD = "data_root_inclusion_proof"
    STATUS_METHOD = "status"

    def __init__(
        self, config: DAConfig, client: Optional[httpx.Client] = None
    ):
        self.url = config.celestia_rpc
        self.client = (
            client
            if client is not None
            else new_client(
                timeout=config.request_timeout,
                connect_timeout=config.connect_timeout,
                user_agent=config.user_agent,
            )
        )
        self._ids = itertools.count(1)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "CelestiaService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _rpc(
        self,
        method: str,
        params: Dict[str, Any],
        stage: str,
        not_found: bool = False,
    ) -> Any:
        """
        Issue one JSON-RPC call and return its ``result``.

        Transport failures raise ConnectivityException; an ``error`` object
        raises QueryException, or BlockNotFoundException when ``not_found``.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        context = {"method": method, **params}
        try:
            response = self.client.post(self.url, json=payload)
        except httpx.TransportError as e:
            raise ConnectivityException(
                f"{stage}: Celestia RPC unreachable: {e}",
                stage=stage,
                context={**context, "rpc": self.url},
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise ConnectivityException(
                f"{stage}: Celestia RPC returned HTTP {response.status_code} "
                "without a JSON-RPC body",
                stage=stage,
                context={**context, "status_code": response.status_code},
            )

        error = body.get("error")
        if error:
            message = error.get("data") or error.get("message") or str(error)
            exc_type = BlockNotFoundException if not_found else QueryException
            raise exc_type(
                f"{stage}: {method} failed: {message}",
                stage=stage,
                context=context,
            )

        if "result" not in body:
            raise QueryException(
                f"{stage}: {method} returned no result",
                stage=stage,
                context=context,
            )
        return body["result"]

    def status(self) -> Dict[str, Any]:
        """Network name and latest height of the node"""
        result = self._rpc(self.STATUS_METHOD, {}, stage="connect_celestia")
        try:
            return {
                "network": result["node_info"]["network"],
                "latest_height": to_int(
                    result["sync_info"]["latest_block_height"]
                ),
            }
        except (KeyError, TypeError) as e:
            raise QueryException(
                f"connect_celestia: unexpected status payload: {e}",
                stage="connect_celestia",
            ) from e

    def data_root(self, height: int) -> bytes:
        """Data root (header ``data_hash``) of the block at ``height``"""
        result = self._rpc(
            self.BLOCK_METHOD,
            {"height": str(height)},
            stage="fetch_block",
            not_found=True,
        )
        block = (result or {}).get("block")
        data_hash = None
        if block:
            data_hash = (block.get("header") or {}).get("data_hash")
        if not data_hash:
            raise BlockNotFoundException(
                f"fetch_block: no block with a data root at height {height}",
                stage="fetch_block",
                context={"height": height},
            )
        return decode_hex(data_hash)

    def shares_proof(
        self, height: int, share_start: int, share_end: int
    ) -> SharesProof:
        """Proof for shares ``[share_start, share_end)`` at ``height``"""
        result = self._rpc(
            self.PROVE_SHARES_METHOD,
            {
                "height": str(height),
                "startShare": str(share_start),
                "endShare": str(share_end),
            },
            stage="shares_proof",
        )
        try:
            return _parse_shares_proof(result)
        except (KeyError, TypeError) as e:
            raise MalformedProofException(
                f"shares_proof: unexpected payload, missing {e}",
                stage="shares_proof",
                context={
                    "height": height,
                    "share_start": share_start,
                    "share_end": share_end,
                },
            ) from e

    def data_root_inclusion_proof(
        self, height: int, start_block: int, end_block: int
    ) -> MerkleProof:
        """Proof of ``height``'s data root inside ``[start_block, end_block)``"""
        result = self._rpc(
            self.DATA_ROOT_INCLUSION_METHOD,
            {
                "height": str(height),
                "start": str(start_block),
                "end": str(end_block),
            },
            stage="inclusion_proof",
        )
        try:
            return _parse_merkle_proof(result["proof"])
        except (KeyError, TypeError) as e:
            raise MalformedProofException(
                f"inclusion_proof: unexpected payload, missing {e}",
                stage="inclusion_proof",
                context={
                    "height": height,
                    "start_block": start_block,
                    "end_block": end_block,
                },
            ) from e


def _parse_merkle_proof(raw: Dict[str, Any]) -> MerkleProof:
    return MerkleProof(
        total=to_int(raw["total"], "total"),
        index=to_int(raw.get("index", 0), "index"),
        leaf_hash=decode_base64(raw.get("leaf_hash")),
        aunts=tuple(decode_base64(a) for a in raw.get("aunts") or []),
    )


def _parse_shares_proof(raw: Dict[str, Any]) -> SharesProof:
    row = raw["row_proof"]
    return SharesProof(
        data=tuple(decode_base64(share) for share in raw.get("data") or []),
        share_proofs=tuple(
            NMTRangeProof(
                start=to_int(p.get("start", 0), "start"),
                end=to_int(p["end"], "end"),
                nodes=tuple(decode_base64(n) for n in p.get("nodes") or []),
            )
            for p in raw.get("share_proofs") or []
        ),
        namespace_id=decode_base64(raw["namespace_id"]),
        namespace_version=to_int(raw.get("namespace_version", 0)),
        row_proof=RowProof(
            row_roots=tuple(decode_hex(r) for r in row.get("row_roots") or []),
            proofs=tuple(
                _parse_merkle_proof(p) for p in row.get("proofs") or []
            ),
            start_row=to_int(row.get("start_row", 0), "start_row"),
            end_row=to_int(row.get("end_row", 0), "end_row"),
        ),
    )
