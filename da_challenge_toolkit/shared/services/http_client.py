"""
Shared HTTP client utilities.

Centralizes httpx client creation with connection pooling, timeouts and a
consistent User-Agent. Values come from DAConfig; the defaults below are
the same as DAConfig's.
"""

from __future__ import annotations

from typing import Optional

import httpx

from da_challenge_toolkit.shared.constants import NetworkConstants, ScanConstants


def _build_limits() -> httpx.Limits:
    return httpx.Limits(max_keepalive_connections=10, max_connections=20)


def build_timeout(
    timeout: Optional[float] = None, connect_timeout: Optional[float] = None
) -> httpx.Timeout:
    return httpx.Timeout(
        timeout if timeout is not None else ScanConstants.RPC_TIMEOUT,
        connect=(
            connect_timeout
            if connect_timeout is not None
            else NetworkConstants.CONNECT_TIMEOUT
        ),
    )


def _default_headers(user_agent: Optional[str] = None) -> dict:
    return {"User-Agent": user_agent or NetworkConstants.USER_AGENT}


def new_client(
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    user_agent: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create a dedicated synchronous client (tests pass a MockTransport)."""
    return httpx.Client(
        timeout=build_timeout(timeout, connect_timeout),
        limits=_build_limits(),
        headers=_default_headers(user_agent),
        transport=transport,
    )
