#===========================================================================
# variant_engine/sequences/sequence_client.py
# Client for the SKU counter service that hands out globally unique,
# monotonically increasing sequence numbers (GET /api/skus/next-sequences).
#===========================================================================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from variant_engine.config import settings

logger = logging.getLogger("variant_engine.sequences")

NEXT_SEQUENCES_PATH = "/api/skus/next-sequences"


class SequenceReservationError(RuntimeError):
    pass


class SequenceReserver(Protocol):
    """reserve(count) -> list of reserved numbers (sync or awaitable)."""

    def reserve(self, count: int) -> Any:
        ...


def _parse_sequences(payload: Any) -> List[int]:
    """
    Expected body: {"success": true, "data": {"sequences": [12, 13, ...]}}
    """
    if not isinstance(payload, dict) or payload.get("success") is False:
        raise SequenceReservationError(f"Counter service refused request: {payload!r}")
    data = payload.get("data") or {}
    seqs = data.get("sequences") if isinstance(data, dict) else None
    if not isinstance(seqs, list):
        raise SequenceReservationError("Counter service response has no 'sequences' list")
    try:
        return [int(s) for s in seqs]
    except (TypeError, ValueError) as e:
        raise SequenceReservationError(f"Non-numeric sequence in response: {seqs!r}") from e


class HttpSequenceReserver:
    """
    Reserves numbers from the counter service. Requests larger than the
    service's per-call limit are split into several calls.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        batch_limit: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.SEQUENCE_SERVICE_URL).rstrip("/")
        self.token = token if token is not None else settings.SEQUENCE_SERVICE_TOKEN
        self.timeout = timeout if timeout is not None else settings.SEQUENCE_SERVICE_TIMEOUT
        self.batch_limit = max(1, batch_limit or settings.SEQUENCE_BATCH_LIMIT)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def reserve(self, count: int) -> List[int]:
        if count <= 0:
            return []
        if not self.base_url:
            raise SequenceReservationError("SEQUENCE_SERVICE_URL is not configured")

        url = f"{self.base_url}{NEXT_SEQUENCES_PATH}"
        out: List[int] = []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            remaining = count
            while remaining > 0:
                batch = min(remaining, self.batch_limit)
                try:
                    resp = await client.get(url, headers=self._headers(), params={"count": batch})
                except httpx.HTTPError as e:
                    raise SequenceReservationError(f"Counter service unreachable: {e}") from e
                if resp.status_code != 200:
                    raise SequenceReservationError(
                        f"Counter service returned {resp.status_code}: {resp.text[:200]}"
                    )
                try:
                    payload = resp.json()
                except ValueError as e:
                    raise SequenceReservationError("Counter service returned invalid JSON") from e
                got = _parse_sequences(payload)
                if not got:
                    break
                out.extend(got)
                remaining -= len(got)
        logger.info(f"Reserved {len(out)} SKU sequence numbers")
        return out
